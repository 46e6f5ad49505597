"""Concrete HTTP backends -- one class per provider."""

from adjutant.backends.prompted import PromptedBackend
from adjutant.clients import llm_client
from adjutant.config import settings


class OllamaBackend(PromptedBackend):
    """Locally hosted Ollama server (``/api/chat``)."""

    name = "ollama"

    def __init__(self, base_url: str, model: str) -> None:
        self.base_url = base_url
        self.model = model

    async def _complete(self, system_prompt, messages, *, json_mode=False):
        return await llm_client.chat_ollama(
            self.base_url,
            self.model,
            [{"role": "system", "content": system_prompt}, *messages],
            json_mode=json_mode,
        )


class OpenAIBackend(PromptedBackend):
    name = "openai"

    def __init__(self, api_key: str, model: str) -> None:
        self.api_key = api_key
        self.model = model

    async def _complete(self, system_prompt, messages, *, json_mode=False):
        return await llm_client.chat_openai(
            self.api_key, self.model, system_prompt, messages,
            max_tokens=settings.LLM_MAX_TOKENS, json_mode=json_mode,
        )


class AnthropicBackend(PromptedBackend):
    name = "anthropic"

    def __init__(self, api_key: str, model: str) -> None:
        self.api_key = api_key
        self.model = model

    async def _complete(self, system_prompt, messages, *, json_mode=False):
        # No native JSON mode; the blueprint prompt already demands raw JSON
        # and parse_blueprint strips anything around it.
        return await llm_client.chat_anthropic(
            self.api_key, self.model, system_prompt, messages,
            max_tokens=settings.LLM_MAX_TOKENS,
        )
