"""Settings router -- read and replace the provider settings."""

from fastapi import APIRouter, Depends

from adjutant.api.deps import get_settings_store
from adjutant.models.settings import AppSettings
from adjutant.services.settings_store import SettingsStore

router = APIRouter(prefix="/settings", tags=["settings"])


def _is_masked(key: str) -> bool:
    return key == "set" or key.startswith("...")


def _restore_masked_keys(incoming: AppSettings, current: AppSettings) -> AppSettings:
    """Keep the stored key when the client echoes back the masked value from GET."""
    updates = {}
    for provider in ("openai", "anthropic"):
        cfg = getattr(incoming, provider)
        if _is_masked(cfg.api_key):
            updates[provider] = cfg.model_copy(update={"api_key": getattr(current, provider).api_key})
    return incoming.model_copy(update=updates) if updates else incoming


@router.get("")
async def read_settings(store: SettingsStore = Depends(get_settings_store)) -> dict:
    """Current settings; API keys are masked."""
    return store.settings.redacted()


@router.put("")
async def replace_settings(
    body: AppSettings,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Replace the settings wholesale and persist them.

    Affects sessions created afterwards; running agents keep their backend.
    """
    return store.save(_restore_masked_keys(body, store.settings)).redacted()
