"""
Client for the external distribution persistence API
"""

from .client import DistributionApiClient, is_persisted_id
from .exceptions import DistributionApiError, NotAuthenticatedError

__all__ = [
    'DistributionApiClient',
    'is_persisted_id',
    'DistributionApiError',
    'NotAuthenticatedError'
]
