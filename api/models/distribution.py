"""
Pydantic models for distribution import requests and responses
"""
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from src.sheet_ingestion import display_total, grand_totals, group_by_municipality


class MunicipalityGroupView(BaseModel):
    """Rows of one municipality with subtotals"""
    municipality: str = Field(..., description="Municipality (LGU) name")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="School rows in sheet order")
    subtotals: Dict[str, float] = Field(default_factory=dict, description="Per-field subtotals")


class ImportSessionView(BaseModel):
    """Everything the distribution table needs to render"""
    session_id: str = Field(..., description="Import session identifier (UUID)")
    commodity: str = Field(..., description="rice, water or lpg")
    file_name: str = Field("", description="Source file name")
    sheet_names: List[str] = Field(default_factory=list, description="Sheets of the imported workbook")
    active_sheet: str = Field("", description="Sheet currently shown")
    quantity_fields: List[str] = Field(default_factory=list, description="Editable numeric fields")
    row_count: int = Field(0, description="Number of school rows")
    groups: List[MunicipalityGroupView] = Field(default_factory=list, description="Rows grouped by municipality")
    grand_totals: Dict[str, float] = Field(default_factory=dict, description="Per-field grand totals")
    header_total: Optional[float] = Field(None, description="Total stated in the sheet header, if any")
    display_total: float = Field(0, description="Header total if stated, otherwise the computed sum")

    @classmethod
    def from_session(cls, session) -> "ImportSessionView":
        """Build the view from a consistent snapshot taken under the session lock"""
        with session.lock:
            return cls._build(session)

    @classmethod
    def _build(cls, session) -> "ImportSessionView":
        template = session.template
        fields = list(template.quantity_fields)
        rows = list(session.rows)
        return cls(
            session_id=session.session_id,
            commodity=session.commodity,
            file_name=session.file_name,
            sheet_names=session.sheet_names,
            active_sheet=session.active_sheet,
            quantity_fields=fields,
            row_count=len(rows),
            groups=[
                MunicipalityGroupView(
                    municipality=group.municipality,
                    rows=[row.to_dict() for row in group.rows],
                    subtotals=group.subtotals,
                )
                for group in group_by_municipality(rows)
            ],
            grand_totals=grand_totals(rows, fields),
            header_total=session.header_total,
            display_total=display_total(session.header_total, rows, template.primary_field),
        )


class SheetSelectRequest(BaseModel):
    """Switch the active sheet"""
    sheet_name: str = Field(..., description="Name of the sheet to parse")


class CellEditRequest(BaseModel):
    """Edit one quantity cell"""
    field: str = Field(..., description="Quantity field, e.g. 'rice' or 'week3'")
    value: Union[StrictInt, StrictFloat, StrictStr] = Field(..., description="New value (number or numeric text)")


class CellEditResponse(BaseModel):
    """Result of a cell edit"""
    row: Dict[str, Any] = Field(..., description="Updated row")
    persisted: bool = Field(..., description="Whether the edit was sent to the persistence API")
    message: str = Field("Updated", description="Status message")


class SaveResponse(BaseModel):
    """Result of saving a batch"""
    unchanged: bool = Field(False, description="Server reported nothing to change")
    item_count: int = Field(0, description="Number of items sent")
    message: str = Field(..., description="Status message")
    result: Dict[str, Any] = Field(default_factory=dict, description="Raw response from the persistence API")
