"""Settings store -- provider choice and per-provider config, persisted as JSON.

The file holds a single document under a fixed key::

    {"adjutant-settings": {"activeProvider": "ollama", "ollama": {...}, ...}}

It is read once, when the store is constructed, and rewritten wholesale on
every ``save``.  Components that need a backend take the store (or its
``create_backend`` accessor) explicitly -- there is no module-level store.
"""

import json
import logging
import threading
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from adjutant.backends import ModelBackend, create_backend
from adjutant.errors import PersistenceError
from adjutant.models.settings import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_KEY = "adjutant-settings"


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SettingsStore:
    """Load-at-init / save-on-update holder for ``AppSettings``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()
        self._settings = self._load()

    @property
    def settings(self) -> AppSettings:
        return self._settings.model_copy(deep=True)

    def _load(self) -> AppSettings:
        defaults = AppSettings()
        if not self.path.is_file():
            logger.info("No settings file at %s -- using defaults", self.path)
            return defaults
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
            saved = document.get(SETTINGS_KEY) or {}
            merged = _deep_merge(defaults.model_dump(mode="json", by_alias=True), saved)
            loaded = AppSettings.model_validate(merged)
        except (OSError, ValueError, AttributeError, PydanticValidationError) as exc:
            logger.error("Failed to parse settings at %s (%s) -- using defaults", self.path, exc)
            return defaults
        logger.info("Settings loaded  provider=%s", loaded.active_provider.value)
        return loaded

    def save(self, new_settings: AppSettings) -> AppSettings:
        """Replace the settings and rewrite the whole file."""
        document = {SETTINGS_KEY: new_settings.model_dump(mode="json", by_alias=True)}
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp.write_text(json.dumps(document, indent=2), encoding="utf-8")
                tmp.replace(self.path)
            except OSError as exc:
                raise PersistenceError(f"Failed to save settings: {exc}", path=str(self.path)) from exc
            self._settings = new_settings.model_copy(deep=True)
        logger.info("Settings saved  provider=%s", new_settings.active_provider.value)
        return self.settings

    def create_backend(self) -> ModelBackend:
        """Backend for the currently active provider."""
        return create_backend(self._settings)
