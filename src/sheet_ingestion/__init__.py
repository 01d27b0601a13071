"""
Distribution Sheet Ingestion
Turns uploaded Rice/Water/LPG distribution spreadsheets into structured rows
"""

from .cells import CellKind, CellValue, classify, normalize
from .grouping import MunicipalityGroup, display_total, grand_totals, group_by_municipality
from .models import DistributionRow, LpgRow, ParseResult, RiceRow, WaterRow
from .sheet_parser import parse_grid, parse_sheet
from .templates import get_template
from .workbook_reader import Workbook, preferred_sheet, read_workbook
from .exceptions import (
    IngestionError,
    TemplateMismatch,
    WorksheetNotFound,
    EmptyResult,
    NoWorksheets,
    InvalidFileFormatError,
    WorkbookReadError,
    UnknownCommodityError
)

__all__ = [
    'CellKind',
    'CellValue',
    'classify',
    'normalize',
    'MunicipalityGroup',
    'display_total',
    'grand_totals',
    'group_by_municipality',
    'DistributionRow',
    'LpgRow',
    'ParseResult',
    'RiceRow',
    'WaterRow',
    'parse_grid',
    'parse_sheet',
    'get_template',
    'Workbook',
    'preferred_sheet',
    'read_workbook',
    'IngestionError',
    'TemplateMismatch',
    'WorksheetNotFound',
    'EmptyResult',
    'NoWorksheets',
    'InvalidFileFormatError',
    'WorkbookReadError',
    'UnknownCommodityError'
]
