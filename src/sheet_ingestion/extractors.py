"""
Row extractor - walks sheet rows top to bottom and emits one row per school

The scan is a fold over the grid. The accumulator carries the current
municipality (carried forward from the municipality column) and the rows
emitted so far. Rows seen before any municipality are never emitted.
"""

import logging
from dataclasses import dataclass
from functools import reduce
from typing import List, NamedTuple, Tuple, Type

from .cells import Grid, Row, cell_at, cell_text, is_numeric_text, normalize
from .config import KITCHEN_LABEL, LGU_LABEL, MUNICIPALITY_LABEL, TOTAL_LABEL
from .exceptions import EmptyResult
from .models import ColumnLayout, DistributionRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowRules:
    """
    Per-template exclusion rules

    Attributes:
        municipality_exclusions: Substrings that mark a municipality-column
            cell as a label rather than a municipality name
        reject_numeric_labels: Treat purely numeric label text as a stray
            artifact (never a municipality or school)
        skip_total_rows: Skip the whole row when either label cell mentions
            "total" (subtotal rows)
        require_quantity: Only emit rows with at least one non-zero quantity
    """
    municipality_exclusions: Tuple[str, ...] = (MUNICIPALITY_LABEL, TOTAL_LABEL)
    reject_numeric_labels: bool = False
    skip_total_rows: bool = False
    require_quantity: bool = False

    def is_municipality(self, text: str) -> bool:
        if not text:
            return False
        lower = text.lower()
        if lower == LGU_LABEL:
            return False
        if any(excluded in lower for excluded in self.municipality_exclusions):
            return False
        if self.reject_numeric_labels and is_numeric_text(text):
            return False
        return True

    def is_school(self, text: str) -> bool:
        if not text:
            return False
        lower = text.lower()
        if KITCHEN_LABEL in lower or lower == LGU_LABEL or TOTAL_LABEL in lower:
            return False
        if self.reject_numeric_labels and is_numeric_text(text):
            return False
        return True


class ScanState(NamedTuple):
    """Fold accumulator"""
    municipality: str
    rows: Tuple[DistributionRow, ...]


INITIAL_STATE = ScanState(municipality='', rows=())


def make_step(layout: ColumnLayout, rules: RowRules, row_type: Type[DistributionRow]):
    """
    Build the fold step for a layout and rule set

    Returns:
        Function (state, (index, row)) -> state
    """
    def step(state: ScanState, indexed_row: Tuple[int, Row]) -> ScanState:
        index, row = indexed_row
        municipality_text = cell_text(cell_at(row, layout.municipality))
        school_text = cell_text(cell_at(row, layout.school))

        if rules.skip_total_rows and (
            TOTAL_LABEL in municipality_text.lower() or TOTAL_LABEL in school_text.lower()
        ):
            return state

        municipality = state.municipality
        if rules.is_municipality(municipality_text):
            municipality = municipality_text

        if not municipality or not rules.is_school(school_text):
            return ScanState(municipality, state.rows)

        quantities = {
            name: normalize(cell_at(row, column))
            for name, column in layout.quantities.items()
        }
        if rules.require_quantity and not any(quantities.values()):
            return ScanState(municipality, state.rows)

        emitted = row_type(
            id=f"{municipality}-{school_text}-{index}",
            municipality=municipality,
            school=school_text,
            **quantities
        )
        return ScanState(municipality, state.rows + (emitted,))

    return step


def extract_rows(
    grid: Grid,
    layout: ColumnLayout,
    rules: RowRules,
    row_type: Type[DistributionRow]
) -> List[DistributionRow]:
    """
    Extract distribution rows from a classified grid

    Args:
        grid: Classified sheet grid
        layout: Resolved column positions
        rules: Template exclusion rules
        row_type: Row dataclass to emit

    Returns:
        Rows in sheet order

    Raises:
        EmptyResult: If no row qualifies
    """
    indexed = list(enumerate(grid))[layout.start_row:]
    final = reduce(make_step(layout, rules, row_type), indexed, INITIAL_STATE)

    if not final.rows:
        raise EmptyResult()

    logger.info(f"Extracted {len(final.rows)} {row_type.__name__} rows")
    return list(final.rows)
