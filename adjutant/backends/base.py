"""The model-backend contract.

Every provider implements the same five operations.  Each returns one
complete result per request -- no streaming, no partial output.  Failures
are raised (``TransportError`` / ``ParseError``); turning them into a failed
task is the build agent's job, not the backend's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from adjutant.models.blueprint import ProjectBlueprint


class ChatMessage(BaseModel):
    role: Literal["user", "system", "assistant"]
    content: str


class CodeGenerationParams(BaseModel):
    """Everything a backend needs to write one file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_path: str
    description: str
    blueprint: ProjectBlueprint


class ModelBackend(ABC):
    """Pluggable text-generation backend."""

    #: Provider key, used in log lines.
    name: str = "backend"

    @abstractmethod
    async def chat(self, history: list[ChatMessage]) -> str:
        """Return the next assistant message for *history* (may be empty)."""

    @abstractmethod
    async def generate_blueprint(self, requirements: str) -> ProjectBlueprint:
        """Return a validated blueprint; raise ``ParseError`` on bad output."""

    @abstractmethod
    async def generate_requirements_doc(self, context: str) -> str:
        """Return a Markdown product requirements document."""

    @abstractmethod
    async def generate_design_specs(self, context: str) -> str:
        """Return a Markdown design specification built from a PRD."""

    @abstractmethod
    async def generate_code(self, params: CodeGenerationParams) -> str:
        """Return the raw contents of ``params.file_path``."""

    async def aclose(self) -> None:
        """Release provider resources.  Most backends hold none."""
