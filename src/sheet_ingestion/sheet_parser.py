"""
Sheet parser - grid → distribution rows

Pipeline per sheet:
1. Header locator: template title must appear in the first rows
2. Header total: optional "(N)" next to the commodity name
3. Column locator: marker sniffing with fixed fallbacks
4. Row extractor: carry-forward municipality fold

The parse is a pure function of the grid: no partial result is ever
returned, any failure aborts the whole sheet.
"""

import logging
from typing import Any, Sequence

from .cells import to_grid
from .exceptions import WorksheetNotFound
from .locators import find_header_total, require_template
from .extractors import extract_rows
from .models import ParseResult
from .templates import get_template

logger = logging.getLogger(__name__)


def parse_grid(grid: Sequence[Sequence[Any]], commodity: str, sheet_name: str = "") -> ParseResult:
    """
    Parse one sheet grid for a commodity

    Args:
        grid: Row-major cells (raw values or CellValues)
        commodity: 'rice', 'water' or 'lpg'
        sheet_name: Sheet name, recorded on the result

    Returns:
        ParseResult with at least one row

    Raises:
        UnknownCommodityError: If commodity has no template
        TemplateMismatch: If the template title is missing
        EmptyResult: If no distribution rows qualify
    """
    template = get_template(commodity)
    cells = to_grid(grid)

    require_template(cells, template.marker)

    header_total = find_header_total(
        cells, template.header_total_pattern, template.header_total_rows
    )
    if header_total is None:
        logger.warning(f"No {template.commodity} header total found, totals will be computed")

    layout = template.locate_columns(cells)
    rows = extract_rows(cells, layout, template.rules, template.row_type)

    return ParseResult(
        rows=rows,
        header_total=header_total,
        columns=layout,
        sheet_name=sheet_name,
    )


def parse_sheet(workbook, sheet_name: str, commodity: str) -> ParseResult:
    """
    Parse a named sheet of a workbook

    Args:
        workbook: Workbook from workbook_reader.read_workbook
        sheet_name: Sheet to parse
        commodity: 'rice', 'water' or 'lpg'

    Raises:
        WorksheetNotFound: If the sheet is not in the workbook
    """
    if sheet_name not in workbook.sheet_names:
        raise WorksheetNotFound()

    logger.info(f"Parsing sheet '{sheet_name}' as {commodity}")
    return parse_grid(workbook.grid(sheet_name), commodity, sheet_name=sheet_name)
