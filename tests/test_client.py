"""
Unit Tests for the distribution persistence API client
"""
import json

import httpx
import pytest

from src.distribution_client import (
    DistributionApiClient,
    DistributionApiError,
    NotAuthenticatedError,
    is_persisted_id,
)
from src.sheet_ingestion import UnknownCommodityError


def make_client(handler, token="secret-token"):
    return DistributionApiClient(
        base_url="http://backend.test/",
        token=token,
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    """Request shapes"""

    def test_latest(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"batch": {"sheetName": "RICE"}, "rows": []})

        with make_client(handler) as client:
            data = client.latest("rice")

        assert seen == {
            "method": "GET",
            "path": "/api/admin/distribution/rice/latest",
            "auth": "Bearer secret-token",
        }
        assert data["batch"]["sheetName"] == "RICE"

    def test_save_batch(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"unchanged": True})

        payload = {
            "bhssKitchenName": "BHSS Kitchen",
            "sheetName": "LPG",
            "sourceFileName": "lpg.xlsx",
            "items": [{"municipality": "Limay", "schoolName": "Limay Central", "gasul": 3}],
        }
        with make_client(handler) as client:
            result = client.save_batch("LPG", payload)

        assert seen["path"] == "/api/admin/distribution/lpg/batches"
        assert seen["body"] == payload
        assert result["unchanged"] is True

    def test_patch_row(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True})

        with make_client(handler) as client:
            client.patch_row("water", "65f0c0ffee65f0c0ffee1234", "week3", 6)

        assert seen["method"] == "PATCH"
        assert seen["path"] == "/api/admin/distribution/water/rows/65f0c0ffee65f0c0ffee1234"
        assert seen["body"] == {"field": "week3", "value": 6}


class TestErrors:
    """Failures are surfaced, never retried"""

    def test_missing_token_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with make_client(handler, token=None) as client:
            with pytest.raises(NotAuthenticatedError) as exc_info:
                client.latest("rice")

        assert calls == []
        assert str(exc_info.value) == "Not authenticated"

    def test_server_message_is_used(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"message": "Invalid batch"})

        with make_client(handler) as client:
            with pytest.raises(DistributionApiError) as exc_info:
                client.save_batch("rice", {"items": []})

        assert exc_info.value.message == "Invalid batch"
        assert exc_info.value.status_code == 400
        assert len(calls) == 1

    def test_generic_message_without_body(self):
        def handler(request):
            return httpx.Response(500, text="<html>oops</html>")

        with make_client(handler) as client:
            with pytest.raises(DistributionApiError) as exc_info:
                client.latest("rice")

        assert exc_info.value.message == "Request failed"

    def test_transport_error_is_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            with pytest.raises(DistributionApiError):
                client.latest("rice")

    def test_unknown_commodity(self):
        with make_client(lambda request: httpx.Response(200, json={})) as client:
            with pytest.raises(UnknownCommodityError):
                client.latest("meat")


class TestPersistedIds:
    """Server ids vs synthetic import ids"""

    def test_object_id(self):
        assert is_persisted_id("65F0C0FFEE65F0C0FFEE1234")

    def test_synthetic_id(self):
        assert not is_persisted_id("Abucay-School A-2")
        assert not is_persisted_id("")
