import pytest
from fastapi.testclient import TestClient

from euclidcad_api.main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def board_id(client):
    response = client.post("/boards/", json={"name": "Test board"})
    assert response.status_code == 201
    return response.json()["id"]


def _click(client, board_id, x, y, modifiers=None):
    response = client.post(f"/boards/{board_id}/pointer", json={"x": x, "y": y, "modifiers": modifiers or []})
    assert response.status_code == 200
    return response.json()["state"]


def test_index_lists_routes(client):
    body = client.get("/").json()
    assert body["name"] == "euclidcad-api"
    assert any(route["path"] == "/boards" for route in body["routes"])


def test_constructions_catalogue(client):
    items = client.get("/constructions").json()
    assert {item["id"] for item in items} >= {"equilateral-triangle", "golden-rectangle"}


def test_create_get_delete_board(client, board_id):
    data = client.get(f"/boards/{board_id}").json()
    assert data["name"] == "Test board"
    assert data["state"]["elements"] == []
    assert board_id in {item["id"] for item in client.get("/boards/").json()}
    assert client.delete(f"/boards/{board_id}").status_code == 204
    assert client.get(f"/boards/{board_id}").status_code == 404


def test_create_board_rejects_bad_settings(client):
    response = client.post("/boards/", json={"settings": {"tolerance": -5}})
    assert response.status_code == 422


def test_draw_line_and_undo(client, board_id):
    client.post(f"/boards/{board_id}/tool", json={"tool": "line"})
    state = _click(client, board_id, 0, 0)
    assert state["pending_points"] == [{"x": 0.0, "y": 0.0}]
    state = _click(client, board_id, 200, 0)
    assert [item["type"] for item in state["elements"]] == ["line", "point", "point"]
    assert state["can_undo"]
    state = client.post(f"/boards/{board_id}/undo").json()["state"]
    assert state["elements"] == []
    assert state["can_redo"]


def test_select_marks_elements(client, board_id):
    client.post(f"/boards/{board_id}/tool", json={"tool": "line"})
    _click(client, board_id, 0, 0)
    _click(client, board_id, 200, 0)
    client.post(f"/boards/{board_id}/tool", json={"tool": "select"})
    state = _click(client, board_id, 100, 3)
    flagged = [item for item in state["elements"] if item["selected"]]
    assert len(flagged) == 1 and flagged[0]["type"] == "line"
    assert state["selection"] == [flagged[0]["id"]]


def test_tool_errors(client, board_id):
    assert client.post(f"/boards/{board_id}/tool", json={"tool": "array"}).status_code == 501
    assert client.post(f"/boards/{board_id}/tool", json={"tool": "nope"}).status_code == 400


def test_unknown_action_and_board(client, board_id):
    assert client.post(f"/boards/{board_id}/explode").status_code == 400
    assert client.post("/boards/missing/undo").status_code == 404


def test_settings_patch(client, board_id):
    response = client.patch(f"/boards/{board_id}/settings", json={"snap_to_grid": True})
    assert response.json()["state"]["settings"]["snap_to_grid"] is True
    bad = client.patch(f"/boards/{board_id}/settings", json={"grid_size": 0})
    assert bad.status_code == 422


def test_dynamic_input_single_click_circle(client, board_id):
    client.patch(f"/boards/{board_id}/dynamic-input", json={"show_dynamic_input": True, "dynamic_distance": 40})
    client.post(f"/boards/{board_id}/tool", json={"tool": "circle"})
    state = _click(client, board_id, 100, 100)
    [circle] = [item for item in state["elements"] if item["type"] == "circle"]
    assert circle["data"]["radius"] == 40


def test_load_construction_route(client, board_id):
    response = client.post(f"/boards/{board_id}/constructions/regular-hexagon", json={"width": 400, "height": 400})
    assert response.status_code == 200
    assert len(response.json()["state"]["elements"]) == 14
    assert client.post(f"/boards/{board_id}/constructions/nope").status_code == 404


def test_drag_route(client, board_id):
    client.post(f"/boards/{board_id}/tool", json={"tool": "point"})
    _click(client, board_id, 50, 50)
    client.post(f"/boards/{board_id}/tool", json={"tool": "select"})
    _click(client, board_id, 50, 50)
    client.post(f"/boards/{board_id}/drag", json={"phase": "start", "x": 50, "y": 50})
    state = client.post(f"/boards/{board_id}/drag", json={"phase": "end", "x": 80, "y": 90}).json()["state"]
    assert state["elements"][0]["data"] == {"x": 80.0, "y": 90.0}
    bad = client.post(f"/boards/{board_id}/drag", json={"phase": "hover", "x": 0, "y": 0})
    assert bad.status_code == 400
