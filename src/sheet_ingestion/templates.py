"""
Distribution templates - one entry per importable commodity
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple, Type

from .cells import Grid
from .config import (
    COMMODITIES,
    TEMPLATE_MARKERS,
    HEADER_TOTAL_PATTERNS,
    HEADER_TOTAL_SCAN_ROWS,
    MUNICIPALITY_LABEL,
    TOTAL_LABEL,
)
from .exceptions import UnknownCommodityError
from .extractors import RowRules
from .locators import locate_lpg_columns, locate_rice_columns, locate_water_columns
from .models import ColumnLayout, DistributionRow, LpgRow, RiceRow, WaterRow


@dataclass(frozen=True)
class DistributionTemplate:
    """Everything needed to parse one commodity's sheet"""
    commodity: str
    marker: str
    header_total_pattern: str
    header_total_rows: int
    locate_columns: Callable[[Grid], ColumnLayout]
    rules: RowRules
    row_type: Type[DistributionRow]
    primary_field: str

    @property
    def quantity_fields(self) -> Tuple[str, ...]:
        return self.row_type.quantity_fields()


def _template(commodity, locate_columns, rules_kwargs, row_type, primary_field) -> DistributionTemplate:
    marker = TEMPLATE_MARKERS[commodity]
    return DistributionTemplate(
        commodity=commodity,
        marker=marker,
        header_total_pattern=HEADER_TOTAL_PATTERNS[commodity],
        header_total_rows=HEADER_TOTAL_SCAN_ROWS[commodity],
        locate_columns=locate_columns,
        rules=RowRules(
            municipality_exclusions=(MUNICIPALITY_LABEL, TOTAL_LABEL, marker),
            **rules_kwargs
        ),
        row_type=row_type,
        primary_field=primary_field,
    )


TEMPLATES: Dict[str, DistributionTemplate] = {
    'rice': _template(
        'rice',
        locate_rice_columns,
        {'reject_numeric_labels': True, 'skip_total_rows': True},
        RiceRow,
        'rice',
    ),
    'water': _template(
        'water',
        locate_water_columns,
        {'require_quantity': True},
        WaterRow,
        'water',
    ),
    'lpg': _template(
        'lpg',
        locate_lpg_columns,
        {'reject_numeric_labels': True},
        LpgRow,
        'gasul',
    ),
}


def get_template(commodity: str) -> DistributionTemplate:
    """
    Look up the template for a commodity

    Raises:
        UnknownCommodityError: If commodity has no template
    """
    key = (commodity or '').strip().lower()
    if key not in TEMPLATES:
        raise UnknownCommodityError(
            f"Unknown commodity '{commodity}'. Supported: {', '.join(COMMODITIES)}"
        )
    return TEMPLATES[key]
