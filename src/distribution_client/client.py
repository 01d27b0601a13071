"""
HTTP client for the distribution persistence API

Endpoints (all under /api/admin/distribution/{commodity}):
- GET   /latest           most recent saved batch with its rows
- POST  /batches          replace the batch with a freshly imported one
- PATCH /rows/{id}        update one quantity cell of a saved row

No retries: a failed call raises DistributionApiError and the caller
decides what to show the user.
"""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from src.sheet_ingestion.templates import get_template
from .exceptions import DistributionApiError, NotAuthenticatedError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Rows saved server-side carry a 24-hex ObjectId; freshly parsed rows don't
_PERSISTED_ID = re.compile(r'^[a-f\d]{24}$', re.IGNORECASE)


def is_persisted_id(row_id: str) -> bool:
    """True if the row id looks like a server-assigned id"""
    return bool(_PERSISTED_ID.match(str(row_id or "")))


class DistributionApiClient:
    """Client for the BHSS distribution endpoints"""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize client

        Args:
            base_url: API root, e.g. "http://localhost:8000"
            token: Bearer token forwarded from the signed-in user
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "DistributionApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _path(self, commodity: str, suffix: str) -> str:
        commodity = get_template(commodity).commodity
        return f"/api/admin/distribution/{commodity}/{suffix}"

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.token:
            raise NotAuthenticatedError()

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

        try:
            response = self._client.request(method, path, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise DistributionApiError(f"Request failed: {str(e)}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        if not response.is_success:
            message = data.get("message") or "Request failed"
            logger.error(f"{method} {path} returned {response.status_code}: {message}")
            raise DistributionApiError(message, status_code=response.status_code)

        return data

    def latest(self, commodity: str) -> Dict[str, Any]:
        """
        Fetch the latest saved batch

        Returns:
            Response body, typically {"batch": {...}, "rows": [...]}
        """
        return self._request("GET", self._path(commodity, "latest"))

    def save_batch(self, commodity: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Save a parsed batch (replaces the previous one server-side)

        Args:
            commodity: 'rice', 'water' or 'lpg'
            payload: {bhssKitchenName, sheetName, sourceFileName, items}

        Returns:
            Response body; may carry "unchanged": true
        """
        result = self._request("POST", self._path(commodity, "batches"), payload)
        logger.info(f"Saved {commodity} batch with {len(payload.get('items', []))} items")
        return result

    def patch_row(self, commodity: str, row_id: str, field: str, value: float) -> Dict[str, Any]:
        """Update a single quantity cell of a saved row"""
        return self._request(
            "PATCH",
            self._path(commodity, f"rows/{row_id}"),
            {"field": field, "value": value},
        )
