"""
Distribution import API endpoints
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from src.distribution_client import (
    DistributionApiClient,
    DistributionApiError,
    NotAuthenticatedError,
    is_persisted_id,
)
from src.sheet_ingestion import IngestionError, UnknownCommodityError, get_template

from ..config import settings
from ..dependencies import get_api_client, get_session_store
from ..models.distribution import (
    CellEditRequest,
    CellEditResponse,
    ImportSessionView,
    SaveResponse,
    SheetSelectRequest,
)
from ..services.import_session import (
    ImportSession,
    ImportSessionStore,
    InvalidCellEditError,
    NothingToSaveError,
    RowNotFoundError,
)
from ..services.input_handlers import UploadRejected, read_upload

logger = logging.getLogger(__name__)

router = APIRouter()


def _template_or_404(commodity: str):
    try:
        return get_template(commodity)
    except UnknownCommodityError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _session_or_404(store: ImportSessionStore, session_id: str) -> ImportSession:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Import session not found: {session_id}")


def _upstream_error(e: DistributionApiError) -> HTTPException:
    if isinstance(e, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=e.message)
    return HTTPException(status_code=502, detail=e.message)


@router.post("/distribution/{commodity}/imports", response_model=ImportSessionView)
def import_workbook(
    commodity: str,
    file: UploadFile = File(...),
    store: ImportSessionStore = Depends(get_session_store)
):
    """
    Import a distribution workbook.

    The preferred sheet (named after the commodity, else the first sheet)
    is parsed and a new import session is returned with grouped rows.
    Any template or parse error rejects the whole import.
    """
    template = _template_or_404(commodity)

    try:
        data = read_upload(file.file, file.filename, settings.max_file_size_bytes)
    except UploadRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    session = store.create(template.commodity)
    try:
        session.load_file(file.filename, data)
    except IngestionError as e:
        store.discard(session.session_id)
        raise HTTPException(status_code=422, detail=str(e))

    return ImportSessionView.from_session(session)


@router.post("/distribution/{commodity}/latest", response_model=ImportSessionView)
def load_latest(
    commodity: str,
    store: ImportSessionStore = Depends(get_session_store),
    client: DistributionApiClient = Depends(get_api_client)
):
    """
    Open a session on the latest batch saved on the server.

    Returns an empty session when nothing has been saved yet.
    """
    template = _template_or_404(commodity)

    try:
        payload = client.latest(template.commodity)
    except DistributionApiError as e:
        raise _upstream_error(e)

    session = store.create(template.commodity)
    session.apply_latest(payload)
    return ImportSessionView.from_session(session)


@router.get("/distribution/imports/{session_id}", response_model=ImportSessionView)
def get_import(
    session_id: str,
    store: ImportSessionStore = Depends(get_session_store)
):
    """Current state of an import session"""
    session = _session_or_404(store, session_id)
    return ImportSessionView.from_session(session)


@router.put("/distribution/imports/{session_id}/sheet", response_model=ImportSessionView)
def select_sheet(
    session_id: str,
    request: SheetSelectRequest,
    store: ImportSessionStore = Depends(get_session_store)
):
    """
    Switch the active sheet of the imported workbook.

    On a parse error the table is emptied and the error returned; the
    workbook stays so another sheet can be selected.
    """
    session = _session_or_404(store, session_id)

    try:
        session.switch_sheet(request.sheet_name)
    except IngestionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ImportSessionView.from_session(session)


@router.delete("/distribution/imports/{session_id}")
def clear_import(
    session_id: str,
    store: ImportSessionStore = Depends(get_session_store)
):
    """Clear the table and forget the session"""
    session = _session_or_404(store, session_id)
    session.clear()
    store.discard(session_id)
    return {"cleared": True, "session_id": session_id}


@router.post("/distribution/imports/{session_id}/save", response_model=SaveResponse)
def save_import(
    session_id: str,
    store: ImportSessionStore = Depends(get_session_store),
    client: DistributionApiClient = Depends(get_api_client)
):
    """
    Save the session's rows as the new batch on the persistence API.

    Saving replaces the whole batch server-side. A failed save leaves the
    session untouched; retry is up to the user.
    """
    session = _session_or_404(store, session_id)

    try:
        payload = session.batch_payload(settings.BHSS_KITCHEN_NAME)
    except NothingToSaveError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = client.save_batch(session.commodity, payload)
    except DistributionApiError as e:
        logger.error(f"Saving {session.commodity} batch failed: {e.message}")
        raise _upstream_error(e)

    unchanged = bool(result.get("unchanged"))
    label = session.commodity.upper() if session.commodity == "lpg" else session.commodity.title()
    return SaveResponse(
        unchanged=unchanged,
        item_count=len(payload["items"]),
        message="Nothing to be changed" if unchanged else f"{label} distribution saved",
        result=result,
    )


@router.patch("/distribution/imports/{session_id}/rows/{row_id:path}", response_model=CellEditResponse)
def edit_cell(
    session_id: str,
    row_id: str,
    request: CellEditRequest,
    store: ImportSessionStore = Depends(get_session_store),
    client: DistributionApiClient = Depends(get_api_client)
):
    """
    Edit one quantity cell.

    Rows saved on the server are patched remotely; if the patch fails the
    local value is restored.
    """
    session = _session_or_404(store, session_id)

    try:
        row = session.edit_cell(row_id, request.field, request.value, client=client)
    except InvalidCellEditError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except RowNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DistributionApiError as e:
        logger.error(f"Updating {session.commodity} row {row_id} failed: {e.message}")
        raise _upstream_error(e)

    return CellEditResponse(row=row.to_dict(), persisted=is_persisted_id(row_id))
