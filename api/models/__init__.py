"""Pydantic models for API requests and responses"""
from .distribution import (
    MunicipalityGroupView,
    ImportSessionView,
    SheetSelectRequest,
    CellEditRequest,
    CellEditResponse,
    SaveResponse
)

__all__ = [
    "MunicipalityGroupView",
    "ImportSessionView",
    "SheetSelectRequest",
    "CellEditRequest",
    "CellEditResponse",
    "SaveResponse"
]
