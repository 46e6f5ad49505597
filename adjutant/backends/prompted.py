"""Shared implementation for backends that speak a chat-completion API.

Subclasses supply a single ``_complete`` primitive; the five contract
operations are expressed as prompts on top of it.
"""

import logging
import time
from abc import abstractmethod

from adjutant.backends import prompts
from adjutant.backends.base import ChatMessage, CodeGenerationParams, ModelBackend
from adjutant.backends.parsing import parse_blueprint, strip_code_fences
from adjutant.models.blueprint import ProjectBlueprint

logger = logging.getLogger(__name__)


class PromptedBackend(ModelBackend):
    """A ``ModelBackend`` built from one ``system + messages -> text`` call."""

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        messages: list[dict],
        *,
        json_mode: bool = False,
    ) -> str:
        """Return the assistant text for one request."""

    async def _timed(self, label: str, system_prompt: str, messages: list[dict], **kw) -> str:
        start = time.time()
        text = await self._complete(system_prompt, messages, **kw)
        duration_ms = (time.time() - start) * 1000
        logger.info("%s  %s done  chars=%d  duration=%.0fms", self.name, label, len(text), duration_ms)
        return text

    async def chat(self, history: list[ChatMessage]) -> str:
        # System turns from the caller are folded into the system prompt so
        # providers that reject in-band system messages still see them.
        system_parts = [prompts.CHAT_SYSTEM_PROMPT]
        turns: list[dict] = []
        for msg in history:
            if msg.role == "system":
                system_parts.append(msg.content)
            else:
                turns.append({"role": msg.role, "content": msg.content})
        if not turns:
            turns = [{"role": "user", "content": "Hello."}]
        return await self._timed("chat", "\n\n".join(system_parts), turns)

    async def generate_blueprint(self, requirements: str) -> ProjectBlueprint:
        logger.info("%s  blueprint  requirements=%.80s", self.name, requirements)
        raw = await self._timed(
            "blueprint",
            prompts.BLUEPRINT_SYSTEM_PROMPT,
            [{"role": "user", "content": f"Requirements: {requirements}"}],
            json_mode=True,
        )
        return parse_blueprint(raw)

    async def generate_requirements_doc(self, context: str) -> str:
        return await self._timed(
            "requirements",
            prompts.REQUIREMENTS_SYSTEM_PROMPT,
            [{"role": "user", "content": f"Context:\n{context}"}],
        )

    async def generate_design_specs(self, context: str) -> str:
        return await self._timed(
            "design",
            prompts.DESIGN_SYSTEM_PROMPT,
            [{"role": "user", "content": f"Requirements Document:\n{context}"}],
        )

    async def generate_code(self, params: CodeGenerationParams) -> str:
        raw = await self._timed(
            f"code {params.file_path}",
            prompts.code_system_prompt(params),
            [{"role": "user", "content": prompts.code_user_prompt(params)}],
        )
        return strip_code_fences(raw)
