"""
Import sessions - transient state behind one distribution table

A session holds what the admin page shows for a commodity: the parsed rows,
the decoded workbook, its sheet list, the active sheet, the sheet's header
total and the source file name. State is replaced wholesale by each
successful import, sheet switch or latest-batch load.

Failure policy is "fail clean": any ingestion error clears the derived
state instead of leaving stale rows on screen.
"""
import logging
import math
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from src.distribution_client import DistributionApiClient, DistributionApiError, is_persisted_id
from src.sheet_ingestion import (
    DistributionRow,
    IngestionError,
    Workbook,
    get_template,
    parse_sheet,
    preferred_sheet,
    read_workbook,
)
from src.sheet_ingestion.config import DEFAULT_KITCHEN_NAME

from ..config import settings

logger = logging.getLogger(__name__)


class RowNotFoundError(LookupError):
    """Raised when an edit targets a row that is not in the session"""
    pass


class InvalidCellEditError(ValueError):
    """Raised for edits with a bad field or value"""
    pass


class NothingToSaveError(ValueError):
    """Raised when saving a session without rows"""
    pass


def parse_edit_value(value: Any) -> float:
    """
    Parse a user-entered cell value

    Raises:
        InvalidCellEditError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidCellEditError("Please enter a valid number")
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidCellEditError("Please enter a valid number")
    if not math.isfinite(number):
        raise InvalidCellEditError("Please enter a valid number")
    return int(number) if number.is_integer() else number


@dataclass
class CellEdit:
    """
    One cell edit with its compensating inverse

    apply() updates the session locally; revert() restores the previous
    value if the server does not acknowledge the change.
    """
    row_id: str
    field: str
    value: float
    previous: Optional[float] = None

    def apply(self, session: "ImportSession") -> DistributionRow:
        index = session.row_index(self.row_id)
        row = session.rows[index]
        self.previous = getattr(row, self.field)
        updated = row.with_value(self.field, self.value)
        session.rows[index] = updated
        return updated

    def revert(self, session: "ImportSession") -> None:
        index = session.row_index(self.row_id)
        session.rows[index] = session.rows[index].with_value(self.field, self.previous)


@dataclass
class ImportSession:
    """Transient import state for one commodity table"""
    commodity: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    rows: List[DistributionRow] = field(default_factory=list)
    workbook: Optional[Workbook] = None
    sheet_names: List[str] = field(default_factory=list)
    active_sheet: str = ""
    header_total: Optional[float] = None
    file_name: str = ""
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def __post_init__(self):
        self.commodity = get_template(self.commodity).commodity

    @property
    def template(self):
        return get_template(self.commodity)

    def clear(self) -> None:
        """Reset to an empty table"""
        self.rows = []
        self.workbook = None
        self.sheet_names = []
        self.active_sheet = ""
        self.header_total = None
        self.file_name = ""

    def load_file(self, file_name: str, data: bytes) -> None:
        """
        Import a workbook: decode, pick the preferred sheet and parse it

        Raises:
            IngestionError: Any ingestion failure; state is cleared first
        """
        with self.lock:
            try:
                workbook = read_workbook(data, file_name=file_name)
                sheet = preferred_sheet(workbook.sheet_names, self.commodity)
                result = parse_sheet(workbook, sheet, self.commodity)
            except IngestionError as e:
                logger.warning(f"Import of '{file_name}' as {self.commodity} failed: {e}")
                self.clear()
                raise

            self.workbook = workbook
            self.sheet_names = workbook.sheet_names
            self.active_sheet = sheet
            self.rows = list(result.rows)
            self.header_total = result.header_total
            self.file_name = file_name

            logger.info(
                f"Imported {len(self.rows)} {self.commodity} rows from '{file_name}' sheet '{sheet}'"
            )

    def switch_sheet(self, sheet_name: str) -> None:
        """
        Parse another sheet of the held workbook

        On failure the rows and header total are cleared; the workbook and
        sheet list stay so another sheet can be picked.

        Raises:
            IngestionError: Parse failure
        """
        with self.lock:
            self.active_sheet = sheet_name
            if self.workbook is None:
                return

            try:
                result = parse_sheet(self.workbook, sheet_name, self.commodity)
            except IngestionError:
                self.rows = []
                self.header_total = None
                raise

            self.rows = list(result.rows)
            self.header_total = result.header_total

    def apply_latest(self, payload: Dict[str, Any]) -> bool:
        """
        Replace the table with the server's latest saved batch

        Returns:
            False if the server has no saved rows (state untouched)
        """
        saved = payload.get("rows") if isinstance(payload, dict) else None
        if not isinstance(saved, list) or not saved:
            return False

        batch = payload.get("batch") or {}
        row_type = self.template.row_type

        with self.lock:
            self.rows = [row_type.from_saved(record) for record in saved]
            self.file_name = str(batch.get("sourceFileName") or "Saved data")
            self.active_sheet = str(batch.get("sheetName") or "")
            self.header_total = None
            self.workbook = None
            self.sheet_names = []

        logger.info(f"Loaded {len(self.rows)} saved {self.commodity} rows")
        return True

    def row_index(self, row_id: str) -> int:
        for index, row in enumerate(self.rows):
            if row.id == row_id:
                return index
        raise RowNotFoundError(f"Row not found: {row_id}")

    def edit_cell(
        self,
        row_id: str,
        field_name: str,
        value: Any,
        client: Optional[DistributionApiClient] = None
    ) -> DistributionRow:
        """
        Edit one quantity cell

        The edit is applied locally first. Rows that already exist on the
        server are patched remotely; if that fails the local edit is undone
        and the error propagates.

        Raises:
            InvalidCellEditError: Unknown field or non-numeric value
            RowNotFoundError: No such row
            DistributionApiError: Remote patch failed (edit reverted)
        """
        if field_name not in self.template.quantity_fields:
            raise InvalidCellEditError(
                f"'{field_name}' is not editable. Editable: {', '.join(self.template.quantity_fields)}"
            )
        number = parse_edit_value(value)

        with self.lock:
            edit = CellEdit(row_id=row_id, field=field_name, value=number)
            updated = edit.apply(self)

            if client is not None and is_persisted_id(row_id):
                try:
                    client.patch_row(self.commodity, row_id, field_name, number)
                except DistributionApiError:
                    edit.revert(self)
                    raise

            return updated

    def batch_payload(self, kitchen_name: str = DEFAULT_KITCHEN_NAME) -> Dict[str, Any]:
        """
        Build the batch body for the persistence API

        Raises:
            NothingToSaveError: If there are no rows
        """
        if not self.rows:
            raise NothingToSaveError("No distribution rows to save")

        return {
            "bhssKitchenName": kitchen_name,
            "sheetName": self.active_sheet,
            "sourceFileName": self.file_name,
            "items": [row.to_item() for row in self.rows],
        }


class ImportSessionStore:
    """
    In-memory, thread-safe registry of import sessions

    Sessions idle for longer than ttl_minutes are evicted. When max_sessions
    is reached, the least recently used session makes room for a new one.
    """

    def __init__(
        self,
        ttl_minutes: float = 60,
        max_sessions: int = 100,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_minutes * 60
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, ImportSession] = {}
        self._last_access: Dict[str, float] = {}
        self._lock = threading.Lock()

    def _forget(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_access.pop(session_id, None)

    def _purge(self, now: float) -> None:
        """Drop expired sessions, then the oldest until there is room for one more"""
        expired = [
            session_id for session_id, seen in self._last_access.items()
            if now - seen > self.ttl_seconds
        ]
        for session_id in expired:
            self._forget(session_id)

        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = min(self._last_access, key=self._last_access.get)
            self._forget(oldest)
            expired.append(oldest)

        if expired:
            logger.info(f"Evicted {len(expired)} import sessions")

    def create(self, commodity: str) -> ImportSession:
        session = ImportSession(commodity=commodity)
        with self._lock:
            now = self._clock()
            self._purge(now)
            self._sessions[session.session_id] = session
            self._last_access[session.session_id] = now
        return session

    def get(self, session_id: str) -> ImportSession:
        """
        Raises:
            KeyError: If the session does not exist or has expired
        """
        with self._lock:
            now = self._clock()
            seen = self._last_access.get(session_id)
            if seen is not None and now - seen > self.ttl_seconds:
                self._forget(session_id)
            if session_id not in self._sessions:
                raise KeyError(f"Import session not found: {session_id}")
            self._last_access[session_id] = now
            return self._sessions[session_id]

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._forget(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Global session store
session_store = ImportSessionStore(
    ttl_minutes=settings.SESSION_TTL_MINUTES,
    max_sessions=settings.MAX_SESSIONS,
)
