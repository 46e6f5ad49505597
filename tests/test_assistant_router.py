"""Tests for the /assistant endpoints (mock provider)."""

from unittest.mock import AsyncMock, patch

from adjutant.errors import TransportError


def test_chat(client):
    response = client.post("/assistant/chat", json={
        "messages": [{"role": "user", "content": "a recipe app"}],
    })
    assert response.status_code == 200
    message = response.json()["message"]
    assert message["role"] == "assistant"
    assert '"a recipe app"' in message["content"]


def test_chat_empty_history(client):
    response = client.post("/assistant/chat", json={"messages": []})
    assert response.status_code == 200
    assert "unknown" in response.json()["message"]["content"]


def test_blueprint(client):
    response = client.post("/assistant/blueprint", json={"requirements": "a todo app"})
    assert response.status_code == 200
    blueprint = response.json()["blueprint"]
    assert blueprint["meta"]["name"] == "FocusList"
    assert blueprint["meta"]["techStack"]["language"] == "TypeScript"
    assert blueprint["folderStructure"][0]["children"][1]["name"] == "page.tsx"


def test_blueprint_requires_text(client):
    response = client.post("/assistant/blueprint", json={"requirements": ""})
    assert response.status_code == 422


def test_requirements_and_design(client):
    prd = client.post("/assistant/requirements", json={"context": "todo app"})
    assert prd.status_code == 200
    design = client.post("/assistant/design", json={"context": prd.json()["document"]})
    assert design.status_code == 200
    assert design.json()["document"].startswith("# Design")


def test_cloud_provider_without_key_is_400(client):
    client.put("/settings", json={"activeProvider": "openai"})
    response = client.post("/assistant/chat", json={"messages": []})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_backend_failure_is_502(client):
    client.put("/settings", json={
        "activeProvider": "ollama",
        "ollama": {"baseUrl": "http://127.0.0.1:9", "model": "llama3"},
    })
    with patch(
        "adjutant.clients.llm_client.chat_ollama",
        new_callable=AsyncMock,
        side_effect=TransportError("Ollama unreachable: ConnectError"),
    ):
        response = client.post("/assistant/chat", json={"messages": []})

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "TransportError"
    assert "unreachable" in body["detail"]
