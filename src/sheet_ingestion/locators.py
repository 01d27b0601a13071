"""
Header and column locators

Spreadsheets are maintained by hand and drift in structure, so columns are
found by sniffing for marker labels before falling back to fixed positions.
Each logical column is resolved by an ordered list of strategies; every
strategy returns a column index or None and the first hit wins. Ambiguous
markers are not disambiguated: the first matching cell is used.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional

from .cells import Grid, display_text
from .config import (
    TEMPLATE_SCAN_ROWS,
    LGU_LABEL,
    KITCHEN_LABEL,
    GASUL_LABEL,
    RICE_LABEL_ROW_SCAN_ROWS,
    LPG_GASUL_SCAN_ROWS,
    LPG_KITCHEN_SCAN_ROWS,
    FALLBACK_MUNICIPALITY_COLUMN,
    FALLBACK_KITCHEN_COLUMN,
    FALLBACK_QUANTITY_COLUMN,
    WATER_COLUMNS,
)
from .exceptions import TemplateMismatch
from .models import ColumnLayout

logger = logging.getLogger(__name__)

Strategy = Callable[[Grid], Optional[int]]


# ---------------------------------------------------------------------------
# Header locator
# ---------------------------------------------------------------------------

def has_template_marker(grid: Grid, marker: str, window: int = TEMPLATE_SCAN_ROWS) -> bool:
    """
    Check whether any cell in the first rows contains the template marker

    Args:
        grid: Classified sheet grid
        marker: Marker text (matched case-insensitively as a substring)
        window: Number of leading rows to scan

    Returns:
        True if the marker is present
    """
    marker = marker.lower()
    return any(
        marker in display_text(cell).lower()
        for row in grid[:window]
        for cell in row
    )


def require_template(grid: Grid, marker: str, window: int = TEMPLATE_SCAN_ROWS) -> None:
    """
    Abort the parse unless the template marker is present

    Raises:
        TemplateMismatch: If no cell in the window carries the marker
    """
    if not has_template_marker(grid, marker, window):
        raise TemplateMismatch(f"Invalid template: missing '{marker.upper()}' header")


def find_header_total(grid: Grid, pattern: str, window: int) -> Optional[float]:
    """
    Extract a parenthesized total next to the commodity name, e.g. "Rice (1389)"

    Absence is not an error; callers fall back to a computed sum.

    Returns:
        The number, or None if no cell in the window matches
    """
    regex = re.compile(pattern, re.IGNORECASE)

    for row in grid[:window]:
        for cell in row:
            match = regex.search(display_text(cell))
            if match and match.group(1):
                number = float(match.group(1).replace(',', ''))
                return int(number) if number.is_integer() else number

    logger.debug(f"No header total matching {pattern!r} in first {window} rows")
    return None


# ---------------------------------------------------------------------------
# Column strategies
# ---------------------------------------------------------------------------

def _lower_labels(row) -> List[str]:
    return [display_text(cell).strip().lower() for cell in row]


def first_column_containing(needle: str, window: int) -> Strategy:
    """Strategy: column of the first cell (row-major) containing needle"""
    needle = needle.lower()

    def strategy(grid: Grid) -> Optional[int]:
        for row in grid[:window]:
            for idx, label in enumerate(_lower_labels(row)):
                if needle in label:
                    return idx
        return None

    return strategy


def fixed_column(index: int) -> Strategy:
    """Strategy: a hardcoded column position"""
    def strategy(grid: Grid) -> Optional[int]:
        return index

    return strategy


def resolve_column(grid: Grid, strategies: Iterable[Strategy]) -> Optional[int]:
    """Run strategies in order, first non-None result wins"""
    for strategy in strategies:
        index = strategy(grid)
        if index is not None:
            return index
    return None


def find_label_row(grid: Grid, window: int = RICE_LABEL_ROW_SCAN_ROWS) -> Optional[int]:
    """
    Find the row carrying both an "LGU" cell and a "BHSS Kitchen" cell

    Returns:
        Row index, or None if no such row in the window
    """
    for idx, row in enumerate(grid[:window]):
        labels = _lower_labels(row)
        has_lgu = any(label == LGU_LABEL for label in labels)
        has_kitchen = any(KITCHEN_LABEL in label for label in labels)
        if has_lgu and has_kitchen:
            return idx
    return None


def label_row_column(label_row: Optional[int], matches: Callable[[str], bool]) -> Strategy:
    """Strategy: first column of the label row whose text satisfies matches"""
    def strategy(grid: Grid) -> Optional[int]:
        if label_row is None:
            return None
        for idx, label in enumerate(_lower_labels(grid[label_row])):
            if matches(label):
                return idx
        return None

    return strategy


# ---------------------------------------------------------------------------
# Per-template layouts
# ---------------------------------------------------------------------------

def locate_rice_columns(grid: Grid) -> ColumnLayout:
    """
    Rice: LGU/kitchen columns come from the label row, quantity sits right
    of the kitchen column. Without a label row: fixed (0, 1, 2).
    """
    label_row = find_label_row(grid)

    municipality = resolve_column(grid, [
        label_row_column(label_row, lambda label: label == LGU_LABEL),
        fixed_column(FALLBACK_MUNICIPALITY_COLUMN),
    ])
    kitchen = resolve_column(grid, [
        label_row_column(label_row, lambda label: KITCHEN_LABEL in label),
        fixed_column(FALLBACK_KITCHEN_COLUMN),
    ])

    if label_row is None:
        logger.warning("No LGU/BHSS Kitchen label row found, using fixed rice columns")
        return ColumnLayout(
            municipality=municipality,
            school=kitchen,
            quantities={'rice': FALLBACK_QUANTITY_COLUMN},
            start_row=0,
            detected=False,
        )

    logger.info(f"Found rice label row at index {label_row}")
    return ColumnLayout(
        municipality=municipality,
        school=kitchen,
        quantities={'rice': kitchen + 1},
        start_row=label_row + 1,
        detected=True,
    )


def locate_water_columns(grid: Grid) -> ColumnLayout:
    """Water: fixed layout, no detection"""
    return ColumnLayout(
        municipality=FALLBACK_MUNICIPALITY_COLUMN,
        school=FALLBACK_KITCHEN_COLUMN,
        quantities=dict(WATER_COLUMNS),
        start_row=0,
        detected=False,
    )


def locate_lpg_columns(grid: Grid) -> ColumnLayout:
    """
    LPG: gasul and kitchen columns are searched independently, each with
    its own fallback. Municipality is always the first column.
    """
    gasul_found = first_column_containing(GASUL_LABEL, LPG_GASUL_SCAN_ROWS)(grid)
    kitchen_found = first_column_containing(KITCHEN_LABEL, LPG_KITCHEN_SCAN_ROWS)(grid)

    if gasul_found is None:
        logger.warning(f"No gasul column in first {LPG_GASUL_SCAN_ROWS} rows, using column {FALLBACK_QUANTITY_COLUMN}")
    if kitchen_found is None:
        logger.warning(f"No BHSS Kitchen column in first {LPG_KITCHEN_SCAN_ROWS} rows, using column {FALLBACK_KITCHEN_COLUMN}")

    gasul = gasul_found if gasul_found is not None else FALLBACK_QUANTITY_COLUMN
    kitchen = kitchen_found if kitchen_found is not None else FALLBACK_KITCHEN_COLUMN

    return ColumnLayout(
        municipality=FALLBACK_MUNICIPALITY_COLUMN,
        school=kitchen,
        quantities={'gasul': gasul},
        start_row=0,
        detected=gasul_found is not None and kitchen_found is not None,
    )
