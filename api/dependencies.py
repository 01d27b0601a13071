"""
FastAPI dependencies shared by the routes
"""
from typing import Generator, Optional

from fastapi import Header

from src.distribution_client import DistributionApiClient

from .config import settings
from .services.import_session import ImportSessionStore, session_store


def get_session_store() -> ImportSessionStore:
    """Process-wide import session store"""
    return session_store


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_api_client(
    authorization: Optional[str] = Header(None)
) -> Generator[DistributionApiClient, None, None]:
    """
    Persistence API client for the current request

    The caller's bearer token is forwarded; BACKEND_API_TOKEN is used when
    the request carries none.
    """
    token = _bearer_token(authorization) or settings.BACKEND_API_TOKEN
    client = DistributionApiClient(
        base_url=settings.BACKEND_API_URL,
        token=token,
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
    )
    try:
        yield client
    finally:
        client.close()
