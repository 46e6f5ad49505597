"""Shared test fixtures.

Provides:
- ``set_test_config`` -- autouse fixture that points settings at temp paths
  and zeroes every artificial delay
- ``make_blueprint`` -- builds a small ``ProjectBlueprint`` from a tree
- ``canned_blueprint`` -- the mock backend's FocusList blueprint
- ``mock_store`` -- a ``SettingsStore`` with the mock provider active
- ``client`` -- a ``TestClient`` (lifespan running) against a fresh app
"""

import pytest
from fastapi.testclient import TestClient

from adjutant.backends.mock import CANNED_BLUEPRINT_JSON
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.models.settings import AiProvider, AppSettings
from adjutant.services import agent_service
from adjutant.services.settings_store import SettingsStore


# ---------------------------------------------------------------------------
# Environment patching
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def set_test_config(monkeypatch, tmp_path):
    """Deterministic, instant, disk-isolated configuration for every test."""
    monkeypatch.setattr("adjutant.config.settings.MOCK_LATENCY_SECONDS", 0.0)
    monkeypatch.setattr("adjutant.config.settings.AGENT_STEP_DELAY_SECONDS", 0.0)
    monkeypatch.setattr("adjutant.config.settings.SETTINGS_FILE", str(tmp_path / "settings.json"))
    monkeypatch.setattr("adjutant.config.settings.PROJECTS_DIR", str(tmp_path / "projects"))
    monkeypatch.setattr("adjutant.config.settings.FRONTEND_URL", "http://localhost:5173")
    yield
    agent_service._sessions.clear()


# ---------------------------------------------------------------------------
# Blueprints
# ---------------------------------------------------------------------------

_META = {
    "name": "Demo",
    "description": "Test project",
    "techStack": {
        "framework": "Next.js",
        "language": "TypeScript",
        "database": "SQLite",
        "styling": "CSS",
        "deployment": "Local",
    },
}


@pytest.fixture
def make_blueprint():
    """Return a factory: ``make_blueprint(tree, name="Demo")`` -> ``ProjectBlueprint``.

    *tree* is a list of camelCase ``FileNode`` dicts.
    """

    def _make(tree: list[dict], name: str = "Demo") -> ProjectBlueprint:
        meta = {**_META, "name": name}
        return ProjectBlueprint.model_validate({"meta": meta, "folderStructure": tree})

    return _make


@pytest.fixture
def canned_blueprint() -> ProjectBlueprint:
    return ProjectBlueprint.model_validate_json(CANNED_BLUEPRINT_JSON)


@pytest.fixture
def mock_store(tmp_path) -> SettingsStore:
    store = SettingsStore(tmp_path / "store" / "settings.json")
    store.save(AppSettings(active_provider=AiProvider.mock))
    return store


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """TestClient over a fresh app with the mock provider active.

    Used as a context manager so background agent runs share one event loop.
    """
    from adjutant.main import create_app

    app = create_app()
    app.state.settings_store.save(AppSettings(active_provider=AiProvider.mock))
    with TestClient(app) as test_client:
        yield test_client
