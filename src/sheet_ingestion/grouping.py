"""
Grouping and totals for display

Rows are grouped by municipality in first-appearance order (not sorted).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .models import DistributionRow


@dataclass
class MunicipalityGroup:
    """Rows of one municipality with per-field subtotals"""
    municipality: str
    rows: List[DistributionRow] = field(default_factory=list)
    subtotals: Dict[str, float] = field(default_factory=dict)


def grand_totals(rows: Sequence[DistributionRow], fields: Sequence[str]) -> Dict[str, float]:
    """Sum each field over rows"""
    totals = {name: 0 for name in fields}
    for row in rows:
        for name in fields:
            totals[name] += getattr(row, name)
    return totals


def group_by_municipality(rows: Sequence[DistributionRow]) -> List[MunicipalityGroup]:
    """
    Group rows by municipality, keeping first-appearance order

    Args:
        rows: Distribution rows in sheet order

    Returns:
        One group per municipality, each with subtotals
    """
    groups: Dict[str, MunicipalityGroup] = {}
    for row in rows:
        if row.municipality not in groups:
            groups[row.municipality] = MunicipalityGroup(municipality=row.municipality)
        groups[row.municipality].rows.append(row)

    for group in groups.values():
        group.subtotals = grand_totals(group.rows, group.rows[0].quantity_fields())

    return list(groups.values())


def display_total(header_total: Optional[float], rows: Sequence[DistributionRow], field_name: str) -> float:
    """Header total when the sheet states one, otherwise the computed sum"""
    if header_total is not None:
        return header_total
    return grand_totals(rows, [field_name])[field_name]
