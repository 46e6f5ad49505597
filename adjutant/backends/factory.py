"""Backend selection -- one pure factory keyed by ``AiProvider``."""

import logging

from adjutant.backends.base import ModelBackend
from adjutant.backends.mock import MockBackend
from adjutant.backends.providers import AnthropicBackend, OllamaBackend, OpenAIBackend
from adjutant.config import settings as process_settings
from adjutant.errors import ValidationError
from adjutant.models.settings import AiProvider, AppSettings

logger = logging.getLogger(__name__)


def create_backend(app_settings: AppSettings) -> ModelBackend:
    """Build the backend for ``app_settings.active_provider``.

    Called once per session; the returned instance is never reconfigured.
    Cloud providers without an API key are rejected with ``ValidationError``.
    """
    provider = app_settings.active_provider
    if provider is AiProvider.ollama:
        cfg = app_settings.ollama
        backend: ModelBackend = OllamaBackend(cfg.base_url, cfg.model)
    elif provider is AiProvider.openai:
        if not app_settings.openai.api_key:
            raise ValidationError("OpenAI provider selected but no API key is configured")
        backend = OpenAIBackend(app_settings.openai.api_key, app_settings.openai.model)
    elif provider is AiProvider.anthropic:
        if not app_settings.anthropic.api_key:
            raise ValidationError("Anthropic provider selected but no API key is configured")
        backend = AnthropicBackend(app_settings.anthropic.api_key, app_settings.anthropic.model)
    else:
        backend = MockBackend(latency=process_settings.MOCK_LATENCY_SECONDS)
    logger.info("Backend selected  provider=%s", backend.name)
    return backend
