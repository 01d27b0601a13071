"""
BHSS Distribution Import API - Main FastAPI Application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .routes import distribution, health


# API Description for Swagger UI
API_DESCRIPTION = """
## BHSS Distribution Import API

Turns the hand-maintained Rice, Water and LPG distribution spreadsheets into
structured rows grouped by municipality, and forwards reviewed batches to the
BHSS persistence API.

---

### Supported Templates

| Commodity | Title marker | Quantity columns |
|-----------|--------------|------------------|
| **rice** | `RICE DISTRIBUTION` | rice (25kg sacks), located right of the `BHSS Kitchen` column |
| **water** | `WATER DISTRIBUTION` | beneficiaries, water, week1-week5, total (fixed layout) |
| **lpg** | `LPG DISTRIBUTION` | gasul, located by its `Gasul` label |

Accepted files: `.xlsx`, `.xls`, `.xlsm`.

---

### Quick Start

1. **Import:** `POST /api/v1/distribution/{commodity}/imports` with the workbook
2. **Review:** `GET /api/v1/distribution/imports/{session_id}`, switch sheets with `PUT .../sheet`
3. **Fix cells:** `PATCH /api/v1/distribution/imports/{session_id}/rows/{row_id}`
4. **Save:** `POST /api/v1/distribution/imports/{session_id}/save`

---

### Errors

| Status | Meaning |
|--------|---------|
| `400` | Upload rejected (type, size) or nothing to save |
| `401` | No bearer token to forward to the persistence API |
| `404` | Unknown commodity, session or row |
| `422` | Template mismatch, missing sheet, no rows found, invalid cell value |
| `502` | Persistence API error (message passed through) |
"""

# Tags for organizing endpoints in Swagger UI
TAGS_METADATA = [
    {
        "name": "Distribution",
        "description": "Import distribution workbooks, review grouped rows, edit cells and save batches.",
    },
    {
        "name": "Health",
        "description": "Service health and liveness checks.",
    },
]

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    # Startup
    logger.info("Starting BHSS Distribution Import API...")
    logger.info(f"Persistence API: {settings.BACKEND_API_URL}")

    if not settings.BACKEND_API_TOKEN:
        logger.info("BACKEND_API_TOKEN not set - requests must carry their own bearer token")

    yield

    # Shutdown
    logger.info("Shutting down BHSS Distribution Import API...")


app = FastAPI(
    title="BHSS Distribution Import API",
    description=API_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(distribution.router, prefix="/api/v1", tags=["Distribution"])


@app.get("/")
async def root():
    """Root endpoint with API info"""
    return {
        "name": "BHSS Distribution Import API",
        "version": "1.0.0",
        "description": "Import and review Rice, Water and LPG distribution sheets",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
