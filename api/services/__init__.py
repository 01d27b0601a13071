"""Business logic services"""
from .import_session import ImportSession, ImportSessionStore, CellEdit, session_store
from .input_handlers import read_upload, UploadRejected

__all__ = [
    "ImportSession",
    "ImportSessionStore",
    "CellEdit",
    "session_store",
    "read_upload",
    "UploadRejected"
]
