"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
import time

from ..config import settings
from ..dependencies import get_session_store
from ..services.import_session import ImportSessionStore

router = APIRouter()

# Track startup time
_startup_time = time.time()


@router.get("/health")
async def health_check(store: ImportSessionStore = Depends(get_session_store)):
    """
    Basic health check endpoint.
    Returns service status, uptime and open import sessions.
    """
    return {
        "status": "healthy",
        "version": "1.0.0",
        "uptime_seconds": round(time.time() - _startup_time, 2),
        "open_sessions": len(store),
        "backend_api_url": settings.BACKEND_API_URL,
    }


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check - simple ping to verify service is running.
    """
    return {"alive": True}
