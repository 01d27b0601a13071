"""
CLI entry point for distribution sheet ingestion

Usage:
    python -m src.sheet_ingestion <excel_file> <commodity> [sheet_name]

Examples:
    python -m src.sheet_ingestion data/rice_march.xlsx rice
    python -m src.sheet_ingestion data/water_q1.xlsx water "WATER"
"""
import json
import logging
import sys

from .exceptions import IngestionError, InvalidFileFormatError, TemplateMismatch
from .grouping import display_total, grand_totals, group_by_municipality
from .sheet_parser import parse_sheet
from .templates import get_template
from .workbook_reader import preferred_sheet, read_workbook

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def summarize(file_path: str, commodity: str, sheet_name: str = None) -> dict:
    """
    Parse a workbook and build the grouped summary

    Returns:
        JSON-serializable dict with groups, totals and header total
    """
    template = get_template(commodity)
    workbook = read_workbook(file_path)
    sheet = sheet_name or preferred_sheet(workbook.sheet_names, template.commodity)
    result = parse_sheet(workbook, sheet, template.commodity)

    return {
        "source_file": workbook.file_name,
        "commodity": template.commodity,
        "sheet_name": sheet,
        "sheet_names": workbook.sheet_names,
        "header_total": result.header_total,
        "display_total": display_total(result.header_total, result.rows, template.primary_field),
        "grand_totals": grand_totals(result.rows, template.quantity_fields),
        "groups": [
            {
                "municipality": group.municipality,
                "rows": [row.to_dict() for row in group.rows],
                "subtotals": group.subtotals,
            }
            for group in group_by_municipality(result.rows)
        ],
    }


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if len(argv) < 2:
        print(__doc__)
        return 1

    file_path, commodity = argv[0], argv[1]
    sheet_name = argv[2] if len(argv) > 2 else None

    try:
        summary = summarize(file_path, commodity, sheet_name)
    except InvalidFileFormatError as e:
        print(f"\nError: {e}")
        print("Supported formats: .xlsx, .xls, .xlsm")
        return 1
    except TemplateMismatch as e:
        print(f"\nError: {e}")
        print("The sheet does not look like a distribution template for this commodity.")
        return 1
    except IngestionError as e:
        print(f"\nIngestion Error: {e}")
        return 1

    print(json.dumps(summary, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
