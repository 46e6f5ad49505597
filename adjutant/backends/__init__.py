"""Model backends -- the contract, its implementations and the factory."""

from adjutant.backends.base import ChatMessage, CodeGenerationParams, ModelBackend
from adjutant.backends.factory import create_backend
from adjutant.backends.mock import MockBackend
from adjutant.backends.providers import AnthropicBackend, OllamaBackend, OpenAIBackend

__all__ = [
    "AnthropicBackend",
    "ChatMessage",
    "CodeGenerationParams",
    "MockBackend",
    "ModelBackend",
    "OllamaBackend",
    "OpenAIBackend",
    "create_backend",
]
