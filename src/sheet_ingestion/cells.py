"""
Cell values - classification and normalization of raw spreadsheet cells

Workbook readers hand back loosely-typed values (str, int, float, NaN, None,
datetimes). Every raw value is classified once into a CellValue so the
parser never has to guess between 0, "" and a missing cell.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Union


class CellKind(str, Enum):
    """Kinds of spreadsheet cell"""
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class CellValue:
    """A classified spreadsheet cell"""
    kind: CellKind
    value: Union[str, float, None] = None

    @property
    def is_empty(self) -> bool:
        return self.kind == CellKind.EMPTY

    @property
    def is_text(self) -> bool:
        return self.kind == CellKind.TEXT

    @property
    def is_number(self) -> bool:
        return self.kind == CellKind.NUMBER


EMPTY = CellValue(CellKind.EMPTY)

Row = List[CellValue]
Grid = List[Row]


def Text(value: str) -> CellValue:
    return CellValue(CellKind.TEXT, value)


def Number(value: float) -> CellValue:
    return CellValue(CellKind.NUMBER, value)


def classify(raw: Any) -> CellValue:
    """
    Classify a raw workbook value

    Args:
        raw: Value as returned by the workbook reader

    Returns:
        CellValue (already-classified values pass through unchanged)
    """
    if isinstance(raw, CellValue):
        return raw
    if raw is None:
        return EMPTY
    # bool is an int subclass; a TRUE/FALSE cell is not a quantity
    if isinstance(raw, bool):
        return EMPTY
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return EMPTY
        return Number(raw)
    if isinstance(raw, str):
        if raw == '':
            return EMPTY
        return Text(raw)

    # numpy scalars and anything else number-like
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return Text(str(raw))
    if math.isnan(number):
        return EMPTY
    return Number(number)


def to_grid(rows: Sequence[Sequence[Any]]) -> Grid:
    """Classify every cell of a row-major grid"""
    return [[classify(cell) for cell in (row or [])] for row in rows]


def cell_at(row: Row, index: int) -> CellValue:
    """Cell at column index, EMPTY when the row is short"""
    if 0 <= index < len(row):
        return row[index]
    return EMPTY


def cell_text(cell: CellValue) -> str:
    """Trimmed label text. Only text cells can carry a label."""
    if cell.is_text:
        return cell.value.strip()
    return ''


def display_text(cell: CellValue) -> str:
    """Any cell rendered as text, for marker searches"""
    if cell.is_empty:
        return ''
    if cell.is_number:
        number = cell.value
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return str(number)
    return cell.value


def _parse_decimal(text: str) -> Optional[float]:
    cleaned = text.replace(',', '').strip()
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize(cell: Any) -> float:
    """
    Coerce a cell into a numeric amount

    Thousands separators are stripped and surrounding whitespace trimmed.
    Empty, non-numeric or non-finite input yields 0; this never raises.

    Args:
        cell: CellValue or raw workbook value

    Returns:
        Numeric amount
    """
    cell = classify(cell)

    if cell.is_number:
        number = cell.value
        if isinstance(number, float) and not math.isfinite(number):
            return 0
        return number

    if cell.is_text:
        number = _parse_decimal(cell.value)
        if number is None:
            return 0
        if number.is_integer():
            return int(number)
        return number

    return 0


def is_numeric_text(text: str) -> bool:
    """True if non-blank text reads as a finite number"""
    if not text or not text.strip():
        return False
    return _parse_decimal(text) is not None
