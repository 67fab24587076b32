from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from simonsays.app.main import create_app
from simonsays.core.config.settings import settings


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def _create(client: TestClient, script: list[str], **spec_fields) -> str:
    resp = client.post(
        "/api/sessions",
        json={"session_spec": {"source": {"kind": "scripted", "script": script}, **spec_fields}},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert len(body["spec_hash"]) == 64
    return body["session_id"]


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_full_game_over_http(client: TestClient) -> None:
    sid = _create(client, ["A", "B"])

    # --- start: one round announced + one replayed signal ---
    resp = client.post(f"/api/sessions/{sid}/start")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["state"]["status"] == "awaiting_input"
    assert body["state"]["round"] == 1
    assert [e["event_type"] for e in body["events"]] == [
        "game.total_rounds_changed",
        "game.progress_changed",
        "game.round_started",
        "game.signal_to_display",
    ]
    assert body["events"][3]["signal"] == "A"

    # --- correct action completes the round ---
    resp = client.post(f"/api/sessions/{sid}/actions", json={"signal": "A"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["matched"] is True
    assert body["state"]["round"] == 2
    assert body["state"]["sequence_length"] == 2
    assert len(body["events"]) == 6
    shown = [e for e in body["events"] if e["event_type"] == "game.signal_to_display"]
    assert [e["signal"] for e in shown] == ["A", "B"]

    # --- wrong action loses ---
    resp = client.post(f"/api/sessions/{sid}/actions", json={"signal": "B"})
    body = resp.json()
    assert body["matched"] is False
    assert body["state"]["status"] == "lost"
    assert [e["event_type"] for e in body["events"]] == ["game.player_lost"]

    details = client.get(f"/api/sessions/{sid}").json()
    assert details["status"] == "lost"
    assert details["best_round"] == 2
    assert details["games_played"] == 1

    # --- script is used up: restart cannot draw a signal ---
    resp = client.post(f"/api/sessions/{sid}/start")
    assert resp.status_code == 409

    details = client.get(f"/api/sessions/{sid}").json()
    assert details["status"] == "error"
    assert details["error_type"] == "SignalSourceExhausted"


def test_events_can_be_polled_by_ordinal(client: TestClient) -> None:
    sid = _create(client, ["B"])
    client.post(f"/api/sessions/{sid}/start")

    resp = client.get(f"/api/sessions/{sid}/events", params={"after": 2})
    body = resp.json()

    assert body["last_ordinal"] == 4
    assert [e["ordinal"] for e in body["events"]] == [3, 4]


def test_input_lockout_requires_ready(client: TestClient) -> None:
    sid = _create(client, ["A", "A"], input_lockout=True)

    state = client.post(f"/api/sessions/{sid}/start").json()["state"]
    assert state["input_locked"] is True

    resp = client.post(f"/api/sessions/{sid}/actions", json={"signal": "A"})
    assert resp.status_code == 409

    state = client.post(f"/api/sessions/{sid}/ready").json()
    assert state["input_locked"] is False

    resp = client.post(f"/api/sessions/{sid}/actions", json={"signal": "A"})
    assert resp.status_code == 200
    assert resp.json()["state"]["input_locked"] is True


def test_random_session_with_seed(client: TestClient) -> None:
    resp = client.post("/api/sessions", json={"seed": 123})
    sid = resp.json()["session_id"]

    body = client.post(f"/api/sessions/{sid}/start").json()
    assert body["state"]["sequence_length"] == 1

    listed = client.get("/api/sessions").json()["sessions"]
    assert sid in {s["session_id"] for s in listed}


def test_unknown_session_and_bad_signal(client: TestClient) -> None:
    assert client.post("/api/sessions/nope/start").status_code == 404
    assert client.get("/api/sessions/nope/events").status_code == 404

    sid = _create(client, ["A"])
    resp = client.post(f"/api/sessions/{sid}/actions", json={"signal": "C"})
    assert resp.status_code == 422


def test_delete_session_frees_it(client: TestClient) -> None:
    sid = _create(client, ["A"])
    client.post(f"/api/sessions/{sid}/start")

    resp = client.delete(f"/api/sessions/{sid}")
    assert resp.status_code == 204

    assert client.get(f"/api/sessions/{sid}").status_code == 404
    assert client.post(f"/api/sessions/{sid}/actions", json={"signal": "A"}).status_code == 404
    listed = client.get("/api/sessions").json()["sessions"]
    assert sid not in {s["session_id"] for s in listed}

    assert client.delete(f"/api/sessions/{sid}").status_code == 404


def test_live_session_cap(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    live = len(client.get("/api/sessions").json()["sessions"])
    monkeypatch.setattr(settings, "max_sessions", live + 1)

    sid = _create(client, ["A"])
    resp = client.post("/api/sessions", json={})
    assert resp.status_code == 409

    client.delete(f"/api/sessions/{sid}")
    assert client.post("/api/sessions", json={}).status_code == 200


def test_server_lockout_default_applies_to_custom_specs(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "input_lockout", True)

    inherited = _create(client, ["A"])
    state = client.post(f"/api/sessions/{inherited}/start").json()["state"]
    assert state["input_locked"] is True

    explicit = _create(client, ["A"], input_lockout=False)
    state = client.post(f"/api/sessions/{explicit}/start").json()["state"]
    assert state["input_locked"] is False
