"""
Custom exceptions for distribution sheet ingestion
"""


class IngestionError(Exception):
    """Base exception for ingestion errors"""
    pass


class TemplateMismatch(IngestionError):
    """Raised when the sheet does not carry the expected template title"""
    pass


class WorksheetNotFound(IngestionError):
    """Raised when the requested sheet is not in the workbook"""

    def __init__(self, message: str = "Worksheet not found"):
        super().__init__(message)


class EmptyResult(IngestionError):
    """Raised when a sheet matches the template but yields no rows"""

    def __init__(self, message: str = "No distribution rows found in the file"):
        super().__init__(message)


class NoWorksheets(IngestionError):
    """Raised when the workbook contains no sheets at all"""

    def __init__(self, message: str = "No worksheet found"):
        super().__init__(message)


class InvalidFileFormatError(IngestionError):
    """Raised when file is not a supported Excel format"""
    pass


class WorkbookReadError(IngestionError):
    """Raised when the workbook cannot be decoded"""
    pass


class UnknownCommodityError(IngestionError):
    """Raised for a commodity without a distribution template"""
    pass
