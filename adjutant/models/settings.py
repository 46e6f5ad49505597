"""User-editable provider settings (persisted by ``SettingsStore``)."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AiProvider(str, Enum):
    mock = "mock"
    ollama = "ollama"
    openai = "openai"
    anthropic = "anthropic"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OllamaConfig(_CamelModel):
    base_url: str = "http://localhost:11434"
    model: str = "llama3"


class OpenAIConfig(_CamelModel):
    api_key: str = ""
    model: str = "gpt-4o"


class AnthropicConfig(_CamelModel):
    api_key: str = ""
    model: str = "claude-3-5-sonnet-20240620"


class AppSettings(_CamelModel):
    active_provider: AiProvider = AiProvider.ollama
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)

    def redacted(self) -> dict:
        """camelCase dict with API keys masked -- safe to return over HTTP or log."""
        data = self.model_dump(mode="json", by_alias=True)
        for provider in ("openai", "anthropic"):
            key = data[provider].get("apiKey", "")
            data[provider]["apiKey"] = f"...{key[-4:]}" if len(key) > 4 else ("set" if key else "")
        return data
