"""Assistant router -- discovery chat and document drafting.

Each request builds a backend from the current settings, makes exactly one
call and releases it.  Backend failures surface as 502 via the global
``AdjutantError`` handler.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from adjutant.api.deps import get_settings_store
from adjutant.backends.base import ChatMessage
from adjutant.services.settings_store import SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["assistant"])


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)


class BlueprintRequest(BaseModel):
    requirements: str = Field(..., min_length=1)


class DocumentRequest(BaseModel):
    context: str = Field(..., min_length=1)


@router.post("/chat")
async def chat(body: ChatRequest, store: SettingsStore = Depends(get_settings_store)) -> dict:
    """Next assistant message for the conversation so far."""
    logger.info("Chat request  history_len=%d", len(body.messages))
    backend = store.create_backend()
    try:
        reply = await backend.chat(body.messages)
    finally:
        await backend.aclose()
    return {"message": {"role": "assistant", "content": reply}}


@router.post("/blueprint")
async def generate_blueprint(
    body: BlueprintRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Generate a validated project blueprint from requirements text."""
    backend = store.create_backend()
    try:
        blueprint = await backend.generate_blueprint(body.requirements)
    finally:
        await backend.aclose()
    files, folders = blueprint.count_nodes()
    logger.info("Blueprint generated  name=%s  files=%d  folders=%d", blueprint.meta.name, files, folders)
    return {"blueprint": blueprint.model_dump(mode="json", by_alias=True, exclude_none=True)}


@router.post("/requirements")
async def generate_requirements(
    body: DocumentRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Draft a product requirements document (Markdown)."""
    backend = store.create_backend()
    try:
        document = await backend.generate_requirements_doc(body.context)
    finally:
        await backend.aclose()
    return {"document": document}


@router.post("/design")
async def generate_design(
    body: DocumentRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Draft design and UX specifications from a PRD (Markdown)."""
    backend = store.create_backend()
    try:
        document = await backend.generate_design_specs(body.context)
    finally:
        await backend.aclose()
    return {"document": document}
