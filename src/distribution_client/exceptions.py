"""
Custom exceptions for the distribution API client
"""
from typing import Optional


class DistributionApiError(Exception):
    """Raised when the persistence API rejects a request or cannot be reached"""

    def __init__(self, message: str = "Request failed", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotAuthenticatedError(DistributionApiError):
    """Raised when no bearer token is available"""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)
