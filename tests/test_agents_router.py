"""Tests for the /agents endpoints and the agent WebSocket."""

import json
import time

import pytest
from starlette.websockets import WebSocketDisconnect

from adjutant.backends.mock import CANNED_BLUEPRINT_JSON


@pytest.fixture
def project_path(client, tmp_path) -> str:
    response = client.post("/scaffold", json={
        "targetPath": str(tmp_path),
        "blueprint": json.loads(CANNED_BLUEPRINT_JSON),
    })
    return response.json()["projectPath"]


def _wait_for_finish(client, agent_id: str, attempts: int = 200) -> dict:
    for _ in range(attempts):
        state = client.get(f"/agents/{agent_id}").json()["state"]
        if not state["isRunning"] and not state["pendingTasks"]:
            return state
        time.sleep(0.01)
    raise AssertionError("agent did not finish")


def test_create_and_get(client, project_path):
    response = client.post("/agents", json={"projectPath": project_path})
    assert response.status_code == 201
    created = response.json()
    assert created["projectName"] == "FocusList"
    assert len(created["state"]["pendingTasks"]) == 7

    fetched = client.get(f"/agents/{created['id']}").json()
    assert fetched["id"] == created["id"]

    listing = client.get("/agents").json()["items"]
    assert [s["id"] for s in listing] == [created["id"]]


def test_create_unknown_project_is_404(client, tmp_path):
    response = client.post("/agents", json={"projectPath": str(tmp_path / "missing")})
    assert response.status_code == 404


def test_full_run(client, project_path):
    agent_id = client.post("/agents", json={"projectPath": project_path}).json()["id"]

    response = client.post(f"/agents/{agent_id}/start")
    assert response.status_code == 200

    state = _wait_for_finish(client, agent_id)
    assert len(state["completedTasks"]) == 7
    assert {t["status"] for t in state["completedTasks"]} == {"completed"}
    page = open(f"{project_path}/app/page.tsx").read()
    assert "// File: /app/page.tsx" in page


def test_stop_and_delete(client, project_path):
    agent_id = client.post("/agents", json={"projectPath": project_path}).json()["id"]

    stopped = client.post(f"/agents/{agent_id}/stop")
    assert stopped.status_code == 200
    assert stopped.json()["state"]["isRunning"] is False

    assert client.delete(f"/agents/{agent_id}").json() == {"deleted": agent_id}
    assert client.get(f"/agents/{agent_id}").status_code == 404


def test_start_unknown_agent_is_404(client):
    assert client.post("/agents/nope/start").status_code == 404


def test_websocket_streams_state(client, project_path):
    agent_id = client.post("/agents", json={"projectPath": project_path}).json()["id"]

    with client.websocket_connect(f"/ws/agents/{agent_id}") as ws:
        first = ws.receive_json()
        assert first["type"] == "agent_state"
        assert first["payload"]["isRunning"] is False
        assert len(first["payload"]["pendingTasks"]) == 7

        client.post(f"/agents/{agent_id}/start")

        for _ in range(100):
            message = ws.receive_json()
            payload = message["payload"]
            if not payload["isRunning"] and len(payload["completedTasks"]) == 7:
                break
        else:
            pytest.fail("no final agent_state received")


def test_websocket_unknown_agent_closes_4004(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws/agents/nope") as ws:
            ws.receive_json()
    assert exc_info.value.code == 4004
