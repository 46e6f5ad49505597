"""Agents router -- build-agent session lifecycle."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from adjutant.api.deps import get_settings_store
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.services import agent_service
from adjutant.services.settings_store import SettingsStore

router = APIRouter(prefix="/agents", tags=["agents"])


class CreateAgentRequest(BaseModel):
    """Body for creating a session.  ``blueprint`` defaults to the project's sidecar."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_path: str
    blueprint: Optional[ProjectBlueprint] = None


# ── POST /agents ──────────────────────────────────────────────────────────


@router.post("", status_code=201)
async def create_agent(
    body: CreateAgentRequest,
    store: SettingsStore = Depends(get_settings_store),
) -> dict:
    """Plan a build agent for a scaffolded project (does not start it)."""
    session = agent_service.create_session(body.project_path, store, body.blueprint)
    return session.summary()


@router.get("")
async def list_agents() -> dict:
    return {"items": [s.summary() for s in agent_service.list_sessions()]}


# ── GET /agents/{agent_id} ────────────────────────────────────────────────


@router.get("/{agent_id}")
async def get_agent(agent_id: str) -> dict:
    return agent_service.get_session(agent_id).summary()


@router.post("/{agent_id}/start")
async def start_agent(agent_id: str) -> dict:
    """Start the run in the background; a no-op while already running."""
    state = await agent_service.start_session(agent_id)
    return {"id": agent_id, "state": state.to_payload()}


@router.post("/{agent_id}/stop")
async def stop_agent(agent_id: str) -> dict:
    """Stop after the in-flight task (if any) finishes."""
    state = agent_service.stop_session(agent_id)
    return {"id": agent_id, "state": state.to_payload()}


@router.delete("/{agent_id}")
async def delete_agent(agent_id: str) -> dict:
    await agent_service.delete_session(agent_id)
    return {"deleted": agent_id}
