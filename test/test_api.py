"""
HTTP API tests using FastAPI's TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from snubwar.api.main import app, games


@pytest.fixture
def client():
    games.clear()
    yield TestClient(app)
    games.clear()


def _create(client, game_id="g1", **body):
    response = client.post("/games", json={"game_id": game_id, "seed": 42, **body})
    assert response.status_code == 200, response.text
    return response.json()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Snub War API"


def test_topology(client):
    data = client.get("/topology").json()
    assert len(data["faces"]) == 92
    assert data["adjacency"]["0"] == [1, 6, 80]
    assert data["hq_faces"] == list(range(80, 92))


def test_create_and_get(client):
    created = _create(client)
    assert created["game_id"] == "g1"
    assert created["selection"]["mode"] == "idle"
    assert len(created["state"]["rovers"]) == 2
    assert created["state"]["current_player"] == "red"

    fetched = client.get("/games/g1").json()
    assert fetched["state"] == created["state"]
    assert client.get("/games").json()["games"][0]["game_id"] == "g1"


def test_duplicate_and_missing_games(client):
    _create(client)
    assert client.post("/games", json={"game_id": "g1"}).status_code == 400
    assert client.get("/games/nope").status_code == 404
    assert client.post("/games/nope/select", json={"unit_id": "x"}).status_code == 404


def test_rejections_are_400_with_code(client):
    _create(client)
    response = client.post("/games/g1/select", json={"unit_id": "green_rover_001"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "not_your_unit"

    response = client.post("/games/g1/target", json={"face_id": 3})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "no_unit_selected"


def test_request_validation(client):
    _create(client)
    assert client.post("/games/g1/target", json={"face_id": "north"}).status_code == 422


def test_move_flow(client):
    _create(client)
    targets = client.get("/games/g1/units/red_rover_001/targets").json()
    assert targets["actions"] == ["move", "shoot", "fortify"]
    assert targets["shooting_range"] == 5
    assert len(targets["move"]) == 5

    assert client.post("/games/g1/select", json={"unit_id": "red_rover_001"}).status_code == 200
    chosen = client.post("/games/g1/action", json={"action": "move"}).json()
    assert chosen["selection"]["mode"] == "move"
    assert chosen["available_actions"] == ["move", "shoot", "fortify"]

    to_face = targets["move"][0]
    moved = client.post("/games/g1/target", json={"face_id": to_face}).json()
    assert moved["result"]["success"]
    assert moved["state"]["current_player"] == "green"
    assert moved["state"]["rovers"][0]["face_id"] == to_face

    history = client.get("/games/g1/history").json()["history"]
    assert history == [f"red moved rover to {to_face}"]


def test_move_confirmation_flag(client):
    _create(client, require_move_confirmation=True)
    to_face = client.get("/games/g1/units/red_rover_001/targets").json()["move"][0]
    client.post("/games/g1/select", json={"unit_id": "red_rover_001"})
    client.post("/games/g1/action", json={"action": "move"})

    armed = client.post("/games/g1/target", json={"face_id": to_face}).json()
    assert armed["result"]["code"] == "confirm_required"
    assert armed["selection"]["pending_move_face"] == to_face
    assert armed["state"]["current_player"] == "red"

    done = client.post("/games/g1/target", json={"face_id": to_face}).json()
    assert done["state"]["current_player"] == "green"


def test_cancel(client):
    _create(client)
    client.post("/games/g1/select", json={"unit_id": "red_rover_001"})
    response = client.post("/games/g1/cancel")
    assert response.status_code == 200
    assert response.json()["selection"]["mode"] == "idle"


def test_unknown_unit_targets(client):
    _create(client)
    response = client.get("/games/g1/units/red_rover_999/targets")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "unknown_unit"


def test_export_import(client):
    _create(client, "a")
    _create(client, "b")
    snapshot = client.get("/games/a/export").json()
    assert snapshot["version"] == "1.0.0"

    response = client.post("/games/b/import", json=snapshot)
    assert response.status_code == 200
    assert response.json()["state"] == snapshot["state"]

    snapshot["state"]["rovers"][0]["face_id"] = 500
    response = client.post("/games/b/import", json=snapshot)
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "invalid_snapshot"


def test_delete(client):
    _create(client)
    assert client.delete("/games/g1").status_code == 200
    assert client.get("/games/g1").status_code == 404
    assert client.delete("/games/g1").status_code == 404


def test_server_error_without_cors_origins(monkeypatch):
    def broken_topology():
        raise RuntimeError("board unavailable")

    monkeypatch.setattr("snubwar.api.main.CORS_ORIGINS", [])
    monkeypatch.setattr("snubwar.api.main.get_topology", broken_topology)
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/topology")
    assert response.status_code == 500
    assert response.json()["detail"] == "board unavailable"
    assert response.headers["access-control-allow-origin"] == "*"
