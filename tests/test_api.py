"""
Integration tests for the HTTP endpoints (ingest, metrics, generate, clear)
"""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.services.event_store import BulkInsertResult, EventStore


def event_payload(minutes=0, **overrides):
    payload = {
        "timestamp": (datetime(2024, 5, 1, 8, 0) + timedelta(minutes=minutes)).isoformat() + "Z",
        "worker_id": "W1",
        "workstation_id": "S1",
        "event_type": "working",
        "confidence": 0.92,
    }
    payload.update(overrides)
    return payload


def test_health(client) -> None:
    assert client.get("/health").json()["status"] == "healthy"


def test_ingest_creates_event(client) -> None:
    resp = client.post("/api/events", json=event_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Event ingested"
    assert isinstance(body["id"], int)


def test_duplicate_ingest_returns_existing_id(client) -> None:
    first = client.post("/api/events", json=event_payload())
    second = client.post("/api/events", json=event_payload(confidence=0.5))
    assert second.status_code == 200
    assert second.json() == {"message": "Duplicate event ignored", "id": first.json()["id"]}
    assert len(client.get("/api/events").json()) == 1


def test_duplicate_detection_normalizes_timestamps(client) -> None:
    first = client.post("/api/events", json=event_payload(timestamp="2024-05-01T08:00:00Z"))
    second = client.post("/api/events", json=event_payload(timestamp="2024-05-01T10:00:00.000+02:00"))
    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]


def test_ingest_applies_defaults(client) -> None:
    payload = event_payload(event_type="product_count")
    del payload["confidence"]
    payload["count"] = 0
    assert client.post("/api/events", json=payload).status_code == 201
    stored = client.get("/api/events").json()[0]
    assert stored["confidence"] == 0.95
    assert stored["count"] == 1
    assert stored["event_hash"] == "2024-05-01T08:00:00.000Z|W1|S1|product_count"


@pytest.mark.parametrize("field", ["timestamp", "worker_id", "workstation_id", "event_type"])
def test_missing_required_field_is_rejected(client, field) -> None:
    payload = event_payload()
    del payload[field]
    resp = client.post("/api/events", json=payload)
    assert resp.status_code == 400
    assert field in resp.json()["error"]
    assert "Missing required fields" in resp.json()["error"]


def test_empty_identifier_counts_as_missing(client) -> None:
    resp = client.post("/api/events", json=event_payload(worker_id=""))
    assert resp.status_code == 400
    assert "worker_id" in resp.json()["error"]


def test_unknown_event_type_is_rejected(client) -> None:
    resp = client.post("/api/events", json=event_payload(event_type="sleeping"))
    assert resp.status_code == 400
    assert "event_type" in resp.json()["error"]


def test_storage_failure_surfaces_as_500(client, monkeypatch) -> None:
    def broken_insert(self, row):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(EventStore, "insert_event", broken_insert)
    resp = client.post("/api/events", json=event_payload())
    assert resp.status_code == 500
    assert "database is locked" in resp.json()["error"]


def test_unknown_route_uses_error_payload(client) -> None:
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_registry_listings(seeded_client) -> None:
    workers = seeded_client.get("/api/workers").json()
    stations = seeded_client.get("/api/workstations").json()
    assert [w["worker_id"] for w in workers] == ["W1", "W2", "W3", "W4", "W5", "W6"]
    assert [s["station_id"] for s in stations] == ["S1", "S2", "S3", "S4", "S5", "S6"]
    assert stations[4]["type"] == "welding"


def test_metrics_from_ingested_events(seeded_client) -> None:
    for i in range(6):
        seeded_client.post("/api/events", json=event_payload(minutes=5 * i))
    for i in range(6, 10):
        seeded_client.post("/api/events", json=event_payload(minutes=5 * i, event_type="idle"))

    body = seeded_client.get("/api/metrics").json()
    w1 = next(w for w in body["workers"] if w["worker_id"] == "W1")
    assert w1["total_active_minutes"] == 30
    assert w1["total_idle_minutes"] == 20
    assert w1["utilization_percentage"] == 60
    assert w1["last_event_type"] == "idle"
    assert w1["last_seen"] == "2024-05-01T08:45:00.000Z"

    w2 = next(w for w in body["workers"] if w["worker_id"] == "W2")
    assert w2["last_event_type"] == "absent"
    assert w2["last_seen"] is None

    s1 = next(s for s in body["workstations"] if s["station_id"] == "S1")
    assert s1["unique_workers"] == 1
    assert s1["utilization_percentage"] == 60

    factory = body["factory"]
    assert factory["total_workers"] == 6
    assert factory["total_workstations"] == 6
    assert factory["total_events"] == 10
    assert factory["active_workstations"] == 1
    assert factory["overall_utilization"] == 10
    assert factory["avg_confidence"] == 92


def test_metrics_filters(seeded_client) -> None:
    seeded_client.post("/api/events", json=event_payload())
    seeded_client.post("/api/events", json=event_payload(worker_id="W2", workstation_id="S2"))
    body = seeded_client.get("/api/metrics", params={"station_id": "S2"}).json()
    assert body["factory"]["total_events"] == 1
    assert len(body["workers"]) == 6


def test_metrics_empty_store(client) -> None:
    body = client.get("/api/metrics").json()
    assert body["workers"] == []
    assert body["workstations"] == []
    assert body["factory"]["total_events"] == 0
    assert body["factory"]["avg_confidence"] == 0


def test_generate_replaces_events(seeded_client) -> None:
    seeded_client.post("/api/events", json=event_payload(timestamp="2001-01-01T00:00:00Z"))
    resp = seeded_client.post("/api/events/generate", params={"seed": 11})
    assert resp.status_code == 200
    assert resp.json()["events_created"] == 576

    events = seeded_client.get("/api/events", params={"limit": 500}).json()
    assert len(events) == 500
    assert all(e["timestamp"] > "2001-01-01T00:00:00" for e in events)

    factory = seeded_client.get("/api/metrics").json()["factory"]
    assert factory["total_events"] == 576
    assert 85 <= factory["avg_confidence"] <= 99


def test_generate_reports_partial_failure(seeded_client, monkeypatch) -> None:
    def flaky_bulk_insert(self, rows, batch_size=100):
        return BulkInsertResult(inserted=500, total_batches=6, failed_batches=1, errors=["disk full"])

    monkeypatch.setattr(EventStore, "bulk_insert", flaky_bulk_insert)
    resp = seeded_client.post("/api/events/generate")
    assert resp.status_code == 500
    body = resp.json()
    assert "disk full" in body["error"]
    assert body["events_created"] == 500
    assert body["failed_batches"] == 1


def test_clear_events(client) -> None:
    client.post("/api/events", json=event_payload())
    client.post("/api/events", json=event_payload(minutes=5))
    resp = client.delete("/api/events")
    assert resp.json() == {"message": "All events deleted", "events_deleted": 2}
    assert client.get("/api/events").json() == []


def test_list_events_filters(client) -> None:
    client.post("/api/events", json=event_payload())
    client.post("/api/events", json=event_payload(minutes=5, worker_id="W2"))
    events = client.get("/api/events", params={"worker_id": "W2"}).json()
    assert [e["worker_id"] for e in events] == ["W2"]


def test_events_websocket_ping(client) -> None:
    with client.websocket_connect("/ws/events") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"type": "pong"}


def test_ingest_store_work_runs_off_the_event_loop(client, monkeypatch) -> None:
    calls = []
    original_insert = EventStore.insert_event

    def recording_insert(self, row):
        try:
            asyncio.get_running_loop()
            calls.append("event_loop")
        except RuntimeError:
            calls.append("worker_thread")
        return original_insert(self, row)

    monkeypatch.setattr(EventStore, "insert_event", recording_insert)
    assert client.post("/api/events", json=event_payload()).status_code == 201
    assert calls == ["worker_thread"]


def test_zero_confidence_falls_back_to_default(client) -> None:
    assert client.post("/api/events", json=event_payload(confidence=0)).status_code == 201
    assert client.get("/api/events").json()[0]["confidence"] == 0.95


@pytest.mark.parametrize("raw_value", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_confidence_is_rejected(client, raw_value) -> None:
    body = (
        '{"timestamp": "2024-05-01T08:00:00Z", "worker_id": "W1", '
        '"workstation_id": "S1", "event_type": "working", '
        f'"confidence": {raw_value}}}'
    )
    resp = client.post("/api/events", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert "confidence" in resp.json()["error"]
    assert client.get("/api/events").json() == []
