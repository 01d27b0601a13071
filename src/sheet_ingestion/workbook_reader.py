"""
Workbook reader - Excel file → sheet grids

Decoding is delegated to pandas (openpyxl for .xlsx/.xlsm, xlrd for .xls).
Cells are read without header inference or dtype coercion so numbers stay
numbers and text stays text; classification happens in cells.classify.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Sequence, Union

import pandas as pd

from .cells import Grid, to_grid
from .config import ALLOWED_EXTENSIONS
from .exceptions import (
    InvalidFileFormatError,
    NoWorksheets,
    WorkbookReadError,
    WorksheetNotFound,
)
from .templates import get_template

logger = logging.getLogger(__name__)

WorkbookSource = Union[str, Path, bytes, BinaryIO]


class Workbook:
    """
    Sheets of a decoded workbook, in workbook order

    Grids are held in memory; a workbook is replaced wholesale on the next
    import, never merged.
    """

    def __init__(self, sheets: Dict[str, Sequence[Sequence]], file_name: str = ""):
        self.file_name = file_name
        self._sheets: Dict[str, Grid] = {
            str(name): to_grid(rows) for name, rows in sheets.items()
        }

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets.keys())

    def grid(self, sheet_name: str) -> Grid:
        if sheet_name not in self._sheets:
            raise WorksheetNotFound()
        return self._sheets[sheet_name]

    def __len__(self) -> int:
        return len(self._sheets)


def validate_extension(file_name: str) -> None:
    """
    Raises:
        InvalidFileFormatError: If file is not .xlsx/.xls/.xlsm
    """
    suffix = Path(file_name).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise InvalidFileFormatError(
            f"File must be Excel format ({', '.join(ALLOWED_EXTENSIONS)}): {file_name}"
        )


def _dataframe_to_rows(df: pd.DataFrame) -> List[list]:
    # NaN is kept here; classify() turns it into an empty cell
    return df.astype(object).values.tolist()


def read_workbook(source: WorkbookSource, file_name: Optional[str] = None) -> Workbook:
    """
    Decode an Excel workbook into sheet grids

    Args:
        source: Path, raw bytes or binary stream
        file_name: Original file name (used for the extension check when
            source is bytes or a stream)

    Returns:
        Workbook with one grid per sheet

    Raises:
        InvalidFileFormatError: If the extension is not supported
        WorkbookReadError: If the file cannot be decoded
        NoWorksheets: If the workbook has no sheets
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        file_name = file_name or path.name
        validate_extension(file_name)
        if not path.exists():
            raise WorkbookReadError(f"Excel file not found: {source}")
        handle = path
    else:
        if file_name:
            validate_extension(file_name)
        handle = io.BytesIO(source) if isinstance(source, bytes) else source

    try:
        frames = pd.read_excel(
            handle,
            sheet_name=None,  # all sheets, in workbook order
            header=None,  # Don't infer headers - the parser finds them
            dtype=object,
        )
    except Exception as e:
        raise WorkbookReadError(f"Failed to load Excel file: {str(e)}")

    if not frames:
        raise NoWorksheets()

    workbook = Workbook(
        {name: _dataframe_to_rows(df) for name, df in frames.items()},
        file_name=file_name or "",
    )
    logger.info(f"Loaded workbook '{file_name or '<stream>'}' with {len(workbook)} sheets: {workbook.sheet_names}")
    return workbook


def preferred_sheet(sheet_names: Sequence[str], commodity: str) -> str:
    """
    Pick the sheet to parse first

    Order: name equal to the commodity, name containing it, first sheet.

    Raises:
        NoWorksheets: If there are no sheets
    """
    if not sheet_names:
        raise NoWorksheets()

    keyword = get_template(commodity).commodity

    for name in sheet_names:
        if name.lower().strip() == keyword:
            return name
    for name in sheet_names:
        if keyword in name.lower():
            return name
    return sheet_names[0]
