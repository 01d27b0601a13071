"""
Distribution row models

One frozen dataclass per commodity. The variants share municipality/school
labels and differ only in their quantity fields.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional, Tuple


LABEL_FIELDS = ('id', 'municipality', 'school')


def _as_number(value: Any) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        return 0
    return number if number == number else 0


@dataclass(frozen=True)
class DistributionRow:
    """Base row: a school under a municipality"""
    id: str
    municipality: str
    school: str

    @classmethod
    def quantity_fields(cls) -> Tuple[str, ...]:
        """Names of the numeric fields, in column order"""
        return tuple(f.name for f in fields(cls) if f.name not in LABEL_FIELDS)

    def quantities(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.quantity_fields()}

    def content(self) -> Tuple[Any, ...]:
        """Row content without the synthetic id"""
        return (self.municipality, self.school) + tuple(self.quantities().values())

    def with_value(self, field_name: str, value: float) -> 'DistributionRow':
        if field_name not in self.quantity_fields():
            raise ValueError(f"'{field_name}' is not an editable field")
        return replace(self, **{field_name: value})

    def to_item(self) -> Dict[str, Any]:
        """Batch item as sent to the persistence API"""
        item = {
            "municipality": self.municipality,
            "schoolName": self.school,
        }
        item.update(self.quantities())
        return item

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "id": self.id,
            "municipality": self.municipality,
            "school": self.school,
        }
        result.update(self.quantities())
        return result

    @classmethod
    def from_saved(cls, record: Dict[str, Any]) -> 'DistributionRow':
        """
        Build a row from a server-persisted record

        Server records use `schoolName` and may carry `_id` instead of `id`.
        Missing quantities default to 0.
        """
        row_id = record.get("id") or record.get("_id") or ""
        kwargs = {
            name: _as_number(record.get(name)) for name in cls.quantity_fields()
        }
        return cls(
            id=str(row_id),
            municipality=str(record.get("municipality") or ""),
            school=str(record.get("schoolName") or record.get("school") or ""),
            **kwargs
        )


@dataclass(frozen=True)
class RiceRow(DistributionRow):
    """Rice distribution in 25kg sacks"""
    rice: float = 0


@dataclass(frozen=True)
class LpgRow(DistributionRow):
    """LPG distribution (gasul tanks)"""
    gasul: float = 0


@dataclass(frozen=True)
class WaterRow(DistributionRow):
    """Water distribution with weekly breakdown"""
    beneficiaries: float = 0
    water: float = 0
    week1: float = 0
    week2: float = 0
    week3: float = 0
    week4: float = 0
    week5: float = 0
    total: float = 0


@dataclass(frozen=True)
class ColumnLayout:
    """Resolved column positions for a sheet"""
    municipality: int
    school: int
    quantities: Dict[str, int]
    start_row: int = 0
    detected: bool = False


@dataclass
class ParseResult:
    """Rows extracted from one sheet"""
    rows: List[DistributionRow]
    header_total: Optional[float] = None
    columns: Optional[ColumnLayout] = None
    sheet_name: str = ""
