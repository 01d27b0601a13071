"""
Unit Tests for import sessions (load, sheet switch, edits, batch payload)
"""
import threading

import pytest

from api.models.distribution import ImportSessionView
from api.services.import_session import (
    ImportSession,
    ImportSessionStore,
    InvalidCellEditError,
    NothingToSaveError,
    RowNotFoundError,
    parse_edit_value,
)
from src.distribution_client import DistributionApiError
from src.sheet_ingestion import EmptyResult, RiceRow, TemplateMismatch

SAVED_ID = "65f0c0ffee65f0c0ffee1234"


class FakeClient:
    """Records patches; optionally fails them"""

    def __init__(self, fail=False):
        self.fail = fail
        self.patches = []

    def patch_row(self, commodity, row_id, field, value):
        self.patches.append((commodity, row_id, field, value))
        if self.fail:
            raise DistributionApiError("Row locked", status_code=409)
        return {"ok": True}


@pytest.fixture
def loaded_session(rice_xlsx):
    session = ImportSession(commodity="rice")
    session.load_file("march.xlsx", rice_xlsx)
    return session


@pytest.fixture
def saved_session():
    session = ImportSession(commodity="rice")
    session.apply_latest({
        "batch": {"sheetName": "RICE", "sourceFileName": "feb.xlsx"},
        "rows": [
            {"_id": SAVED_ID, "municipality": "Abucay", "schoolName": "School A", "rice": 12},
        ],
    })
    return session


class TestLoadFile:
    """Importing a workbook"""

    def test_preferred_sheet_is_parsed(self, loaded_session):
        assert loaded_session.active_sheet == "RICE"
        assert loaded_session.sheet_names == ["Summary", "RICE"]
        assert loaded_session.file_name == "march.xlsx"
        assert loaded_session.header_total == 60
        assert len(loaded_session.rows) == 5

    def test_commodity_is_normalized(self):
        assert ImportSession(commodity=" LPG ").commodity == "lpg"

    def test_failed_import_clears_state(self, loaded_session, make_xlsx, lpg_grid):
        data = make_xlsx({"LPG": lpg_grid})

        with pytest.raises(TemplateMismatch):
            loaded_session.load_file("lpg.xlsx", data)

        assert loaded_session.rows == []
        assert loaded_session.workbook is None
        assert loaded_session.sheet_names == []
        assert loaded_session.header_total is None
        assert loaded_session.file_name == ""


class TestSwitchSheet:
    """Selecting another sheet of the held workbook"""

    def test_switch_to_valid_sheet(self, make_xlsx, rice_grid):
        data = make_xlsx({"Summary": [["Cover sheet"]], "RICE": rice_grid, "RICE Feb": rice_grid[:7]})
        session = ImportSession(commodity="rice")
        session.load_file("q1.xlsx", data)

        session.switch_sheet("RICE Feb")

        assert session.active_sheet == "RICE Feb"
        assert [row.school for row in session.rows] == [
            "Abucay Central School",
            "Bangkal Elementary",
        ]

    def test_failed_switch_keeps_workbook(self, loaded_session):
        with pytest.raises(TemplateMismatch):
            loaded_session.switch_sheet("Summary")

        assert loaded_session.rows == []
        assert loaded_session.header_total is None
        assert loaded_session.workbook is not None
        assert loaded_session.sheet_names == ["Summary", "RICE"]

    def test_switch_without_workbook(self):
        session = ImportSession(commodity="rice")
        session.switch_sheet("RICE")
        assert session.active_sheet == "RICE"
        assert session.rows == []

    def test_sheet_without_rows(self, make_xlsx, rice_grid):
        data = make_xlsx({"RICE": rice_grid, "Blank": [["RICE DISTRIBUTION"]]})
        session = ImportSession(commodity="rice")
        session.load_file("q1.xlsx", data)

        with pytest.raises(EmptyResult):
            session.switch_sheet("Blank")


class TestApplyLatest:
    """Loading the latest saved batch"""

    def test_saved_rows(self, saved_session):
        row = saved_session.rows[0]
        assert row == RiceRow(id=SAVED_ID, municipality="Abucay", school="School A", rice=12)
        assert saved_session.file_name == "feb.xlsx"
        assert saved_session.active_sheet == "RICE"
        assert saved_session.header_total is None

    def test_default_file_name(self):
        session = ImportSession(commodity="water")
        session.apply_latest({"rows": [{"id": "1", "municipality": "Hermosa", "school": "Mabiga"}]})
        assert session.file_name == "Saved data"
        assert session.rows[0].week1 == 0

    def test_nothing_saved(self, loaded_session):
        assert loaded_session.apply_latest({"batch": None, "rows": []}) is False
        assert len(loaded_session.rows) == 5


class TestEditCell:
    """Editing quantities"""

    def test_local_edit_of_imported_row(self, loaded_session):
        client = FakeClient()
        row_id = loaded_session.rows[0].id

        updated = loaded_session.edit_cell(row_id, "rice", "15", client=client)

        assert updated.rice == 15
        assert loaded_session.rows[0].rice == 15
        assert client.patches == []

    def test_persisted_row_is_patched(self, saved_session):
        client = FakeClient()
        saved_session.edit_cell(SAVED_ID, "rice", 20, client=client)

        assert client.patches == [("rice", SAVED_ID, "rice", 20)]
        assert saved_session.rows[0].rice == 20

    def test_failed_patch_is_reverted(self, saved_session):
        client = FakeClient(fail=True)

        with pytest.raises(DistributionApiError):
            saved_session.edit_cell(SAVED_ID, "rice", 20, client=client)

        assert saved_session.rows[0].rice == 12

    def test_invalid_value(self, loaded_session):
        row_id = loaded_session.rows[0].id
        with pytest.raises(InvalidCellEditError) as exc_info:
            loaded_session.edit_cell(row_id, "rice", "abc")
        assert str(exc_info.value) == "Please enter a valid number"
        assert loaded_session.rows[0].rice == 12

    def test_label_field_is_not_editable(self, loaded_session):
        with pytest.raises(InvalidCellEditError):
            loaded_session.edit_cell(loaded_session.rows[0].id, "school", "X")

    def test_unknown_row(self, loaded_session):
        with pytest.raises(RowNotFoundError):
            loaded_session.edit_cell("nope", "rice", 1)

    @pytest.mark.parametrize("value,expected", [("7", 7), (" 2.5 ", 2.5), (3, 3)])
    def test_parse_edit_value(self, value, expected):
        assert parse_edit_value(value) == expected

    @pytest.mark.parametrize("value", ["", "nan", "inf", None, True])
    def test_parse_edit_value_rejects(self, value):
        with pytest.raises(InvalidCellEditError):
            parse_edit_value(value)


class TestBatchPayload:
    """Batch body sent on save"""

    def test_payload(self, loaded_session):
        payload = loaded_session.batch_payload("BHSS Kitchen")

        assert payload["bhssKitchenName"] == "BHSS Kitchen"
        assert payload["sheetName"] == "RICE"
        assert payload["sourceFileName"] == "march.xlsx"
        assert payload["items"][0] == {
            "municipality": "Abucay",
            "schoolName": "Abucay Central School",
            "rice": 12,
        }
        assert len(payload["items"]) == 5

    def test_empty_session(self):
        with pytest.raises(NothingToSaveError):
            ImportSession(commodity="lpg").batch_payload()


class TestImportSessionStore:
    """Session registry"""

    def test_create_get_discard(self):
        store = ImportSessionStore()
        session = store.create("water")

        assert store.get(session.session_id) is session
        assert len(store) == 1

        store.discard(session.session_id)
        with pytest.raises(KeyError):
            store.get(session.session_id)

    def test_idle_sessions_expire(self, rice_xlsx):
        now = [0.0]
        store = ImportSessionStore(ttl_minutes=30, max_sessions=10, clock=lambda: now[0])
        old = store.create("rice")
        old.load_file("march.xlsx", rice_xlsx)

        now[0] += 31 * 60
        fresh = store.create("rice")

        assert len(store) == 1
        assert store.get(fresh.session_id) is fresh
        with pytest.raises(KeyError):
            store.get(old.session_id)

    def test_expired_session_is_not_returned(self):
        now = [0.0]
        store = ImportSessionStore(ttl_minutes=30, clock=lambda: now[0])
        session = store.create("lpg")

        now[0] += 31 * 60

        with pytest.raises(KeyError):
            store.get(session.session_id)
        assert len(store) == 0

    def test_access_keeps_session_alive(self):
        now = [0.0]
        store = ImportSessionStore(ttl_minutes=30, clock=lambda: now[0])
        session = store.create("rice")

        now[0] += 20 * 60
        store.get(session.session_id)
        now[0] += 20 * 60

        assert store.get(session.session_id) is session

    def test_store_stays_bounded(self, rice_xlsx):
        now = [0.0]
        store = ImportSessionStore(max_sessions=3, clock=lambda: now[0])
        sessions = []
        for _ in range(50):
            now[0] += 1
            session = store.create("rice")
            session.load_file("march.xlsx", rice_xlsx)
            sessions.append(session)

        assert len(store) == 3
        assert store.get(sessions[-1].session_id) is sessions[-1]
        with pytest.raises(KeyError):
            store.get(sessions[0].session_id)

    def test_least_recently_used_is_evicted(self):
        now = [0.0]
        store = ImportSessionStore(max_sessions=2, clock=lambda: now[0])
        first = store.create("rice")
        now[0] += 1
        second = store.create("rice")
        now[0] += 1
        store.get(first.session_id)
        now[0] += 1

        store.create("rice")

        assert store.get(first.session_id) is first
        with pytest.raises(KeyError):
            store.get(second.session_id)


class TestSessionView:
    """View built from a session"""

    def test_view_waits_for_writer(self, loaded_session):
        views = []
        reader = threading.Thread(
            target=lambda: views.append(ImportSessionView.from_session(loaded_session))
        )

        loaded_session.lock.acquire()
        try:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert views == []
        finally:
            loaded_session.lock.release()

        reader.join(timeout=5)
        assert views[0].row_count == 5
        assert views[0].header_total == 60
