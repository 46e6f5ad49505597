"""Tests for POST /scaffold and POST /agent/file."""

import json
from pathlib import Path

from adjutant.backends.mock import CANNED_BLUEPRINT_JSON


def test_scaffold(client, tmp_path):
    response = client.post("/scaffold", json={
        "targetPath": str(tmp_path),
        "blueprint": json.loads(CANNED_BLUEPRINT_JSON),
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    root = Path(body["projectPath"])
    assert root.name == "FocusList"
    assert (root / "app" / "page.tsx").is_file()


def test_scaffold_missing_target_is_400(client):
    response = client.post("/scaffold", json={"blueprint": json.loads(CANNED_BLUEPRINT_JSON)})
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing targetPath or blueprint"


def test_scaffold_missing_blueprint_is_400(client, tmp_path):
    response = client.post("/scaffold", json={"targetPath": str(tmp_path)})
    assert response.status_code == 400


def test_scaffold_escaping_name_is_400(client, tmp_path):
    blueprint = json.loads(CANNED_BLUEPRINT_JSON)
    blueprint["meta"]["name"] = "../../elsewhere"
    response = client.post("/scaffold", json={"targetPath": str(tmp_path / "t"), "blueprint": blueprint})
    assert response.status_code == 400
    assert "escapes the project folder" in response.json()["detail"]


def test_scaffold_malformed_blueprint_is_422(client, tmp_path):
    response = client.post("/scaffold", json={"targetPath": str(tmp_path), "blueprint": {"meta": {}}})
    assert response.status_code == 422


def test_scaffold_unwritable_target_is_500(client, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file")
    response = client.post("/scaffold", json={
        "targetPath": str(blocker),
        "blueprint": json.loads(CANNED_BLUEPRINT_JSON),
    })
    assert response.status_code == 500
    assert response.json()["error"] == "PersistenceError"


def test_write_file(client, tmp_path):
    target = tmp_path / "out" / "index.ts"
    response = client.post("/agent/file", json={"filePath": str(target), "content": "export {};"})
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert target.read_text() == "export {};"


def test_write_file_missing_content_is_400(client, tmp_path):
    response = client.post("/agent/file", json={"filePath": str(tmp_path / "x.ts")})
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing filePath or content"


def test_write_file_missing_path_is_400(client):
    response = client.post("/agent/file", json={"content": "x"})
    assert response.status_code == 400
