#!/usr/bin/env python3
"""
HTTP tests for the registry API using FastAPI's TestClient.
Each test gets a fresh app with its own SQLite file (or in-memory store).
"""

import datetime as dt
from unittest import mock

import pytest
from fastapi.testclient import TestClient

from specver.core.config import load_settings
from specver.main import create_app
from specver.services.entry_store import InMemoryEntryStore
from specver.services.registry import backup_filename
from specver.services.store_sqlite import SqliteEntryStore
from specver.services.store_firestore import FirestoreEntryStore


def _settings(**kw):
    base = dict(storage_backend="sqlite", endpoint=None, api_key=None, suggest_model=None)
    base.update(kw)
    return load_settings(**base)


@pytest.fixture
def client(tmp_path):
    s = _settings(db_path=str(tmp_path / "api.db"))
    with TestClient(create_app(s)) as c:
        yield c


def _payload(**kw):
    body = {
        "RICEFWID": "R-100",
        "FSNAME": "Pricing Interface",
        "TransactionID": "VK11",
        "Region": "EMEA",
        "Status": False,
        "version": "1.0.0",
        "releaseReference": "Wave 1",
        "author": "A. Analyst",
        "changeDescription": "Initial version",
    }
    body.update(kw)
    return body


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "backend": "sqlite", "suggestions": False}


def test_empty_registry(client):
    assert client.get("/api/history").json() == []
    assert client.get("/api/summaries").json() == []


def test_end_to_end_over_http(client):
    r = client.post("/api/history", json=_payload(id="e1", timestamp=1000))
    assert r.status_code == 201
    assert r.json()["id"] == "e1"
    client.post("/api/history", json=_payload(id="e2", timestamp=2000, version="1.1.0"))

    (s,) = client.get("/api/summaries").json()
    assert s["RICEFWID"] == "R-100"
    assert s["currentVersion"] == "1.1.0"
    assert s["historyCount"] == 2
    assert s["Status"] is False
    assert s["latestEntryId"] == "e2"

    r = client.patch("/api/history", json={"id": "e2", "status": True})
    assert r.status_code == 200
    assert r.json() == {"message": "Status updated successfully"}
    assert client.get("/api/summaries").json()[0]["Status"] is True


def test_post_fills_id_timestamp_and_document_date(client):
    r = client.post("/api/history", json=_payload())
    assert r.status_code == 201
    (e,) = client.get("/api/history").json()
    assert e["id"] == r.json()["id"]
    assert e["timestamp"] > 0
    assert e["documentDate"] == e["timestamp"]
    assert e["author"] == "A. Analyst"


def test_post_defaults_author_and_keeps_document_date(client):
    body = _payload(timestamp=5000, documentDate=1234)
    del body["author"]
    client.post("/api/history", json=body)
    (e,) = client.get("/api/history").json()
    assert e["author"] == "Unknown"
    assert e["documentDate"] == 1234


def test_new_object_id_is_normalised(client):
    r = client.post("/api/history", json=_payload(RICEFWID="  r 200  ext ", isNewDoc=True))
    assert r.json()["RICEFWID"] == "R_200_EXT"


def test_duplicate_id_is_409_and_store_unchanged(client):
    client.post("/api/history", json=_payload(id="dup", timestamp=1))
    r = client.post("/api/history", json=_payload(id="dup", timestamp=2, version="2.0"))
    assert r.status_code == 409
    assert "dup" in r.json()["error"]
    (e,) = client.get("/api/history").json()
    assert e["version"] == "1.0.0"


def test_blank_required_field_is_400(client):
    r = client.post("/api/history", json=_payload(version="   "))
    assert r.status_code == 400
    assert "version" in r.json()["error"]
    assert client.get("/api/history").json() == []


def test_patch_unknown_id_is_404(client):
    r = client.patch("/api/history", json={"id": "ghost", "status": True})
    assert r.status_code == 404
    r = client.patch("/api/history/ghost/status", json={"status": True})
    assert r.status_code == 404


def test_patch_by_path(client):
    client.post("/api/history", json=_payload(id="e1", timestamp=1))
    r = client.patch("/api/history/e1/status", json={"status": True})
    assert r.status_code == 200
    assert client.get("/api/history").json()[0]["Status"] is True


def test_history_filter_and_order(client):
    client.post("/api/history", json=_payload(id="a1", timestamp=1))
    client.post("/api/history", json=_payload(id="b1", RICEFWID="E-7", timestamp=3))
    client.post("/api/history", json=_payload(id="a2", timestamp=2, version="1.1"))
    assert [e["id"] for e in client.get("/api/history").json()] == ["b1", "a2", "a1"]
    assert [e["id"] for e in client.get("/api/history", params={"objectId": "R-100"}).json()] == ["a2", "a1"]


def test_summary_search_and_lookup(client):
    client.post("/api/history", json=_payload(id="a", timestamp=1))
    client.post("/api/history", json=_payload(id="b", RICEFWID="E-7", FSNAME="Invoice Form",
                                              TransactionID="VF03", timestamp=2))
    hits = client.get("/api/summaries", params={"q": "invoice"}).json()
    assert [s["RICEFWID"] for s in hits] == ["E-7"]
    assert client.get("/api/summaries/R-100").json()["FSNAME"] == "Pricing Interface"
    assert client.get("/api/summaries/NOPE").status_code == 404


def test_export_is_an_attachment(client):
    client.post("/api/history", json=_payload(id="e1", timestamp=1))
    r = client.get("/api/export")
    assert r.status_code == 200
    assert backup_filename(dt.date.today()) in r.headers["content-disposition"]
    assert [e["id"] for e in r.json()] == ["e1"]


def test_reports_stub(client):
    client.post("/api/history", json=_payload(id="e1", timestamp=1, Status=True))
    body = client.get("/api/reports").json()
    assert body["totalObjects"] == 1
    assert body["totalEntries"] == 1
    assert body["uploadedObjects"] == 1


def test_uninitialised_store_reads_empty_and_rejects_writes(tmp_path):
    s = _settings(db_path=str(tmp_path / "fresh.db"), auto_init=False)
    with TestClient(create_app(s)) as c:
        assert c.get("/api/history").json() == []
        assert c.get("/api/summaries").json() == []
        r = c.post("/api/history", json=_payload())
        assert r.status_code == 503
        assert "detail" in r.json()


def test_store_outage_is_503(tmp_path):
    store = InMemoryEntryStore()
    app = create_app(_settings(storage_backend="memory"), store=store)

    def _down():
        from specver.services.errors import StoreUnavailable
        raise StoreUnavailable("connection refused")

    store.scan_all = _down
    with TestClient(app) as c:
        r = c.get("/api/summaries")
        assert r.status_code == 503
        assert r.json()["error"] == "connection refused"


def test_malformed_firestore_document_is_503():
    client = mock.MagicMock()
    snap = mock.MagicMock()
    snap.id = "broken"
    snap.to_dict.return_value = {"RICEFWID": "R-1", "FSNAME": "FS", "timestamp": 2}
    client.collection.return_value.stream.return_value = [snap]
    store = FirestoreEntryStore(client=client)
    with TestClient(create_app(_settings(storage_backend="memory"), store=store)) as c:
        for path in ("/api/history", "/api/summaries", "/api/reports", "/api/export"):
            r = c.get(path)
            assert r.status_code == 503
            assert "broken" in r.json()["error"]


def test_store_lifecycle_is_tied_to_app(tmp_path):
    store = SqliteEntryStore(tmp_path / "life.db")
    app = create_app(_settings(), store=store)
    with TestClient(app):
        assert store._conn is not None
    assert store._conn is None


def test_suggest_without_credentials_returns_null(client):
    r = client.post("/api/suggest", json={"currentVersion": "1.0.0", "changeDescription": "fixed typo"})
    assert r.status_code == 200
    assert r.json() == {"suggestion": None}


if __name__ == "__main__":
    import sys
    sys.exit(pytest.main([__file__, "-v"]))
