"""Tests for process configuration."""

from adjutant.config import VERSION, Settings


def test_defaults(monkeypatch):
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    cfg = Settings(_env_file=None)
    assert cfg.LOG_LEVEL == "INFO"
    assert cfg.MOCK_LATENCY_SECONDS == 1.0
    assert cfg.AGENT_STEP_DELAY_SECONDS == 0.5
    assert cfg.SETTINGS_FILE.endswith("settings.json")
    assert cfg.LLM_MAX_RETRIES == 2


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MOCK_LATENCY_SECONDS", "0.1")
    monkeypatch.setenv("LOG_FILE", "logs/adjutant.log")
    cfg = Settings(_env_file=None)
    assert cfg.MOCK_LATENCY_SECONDS == 0.1
    assert cfg.LOG_FILE == "logs/adjutant.log"


def test_version():
    assert VERSION == "0.1.0"
