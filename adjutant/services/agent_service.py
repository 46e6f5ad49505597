"""Agent sessions -- one ``CodingAgent`` per scaffolded project.

Sessions live in process memory only; a restart forgets them (the files the
agent wrote stay on disk, and the blueprint can be reloaded from the
project's sidecar).  Each session's snapshots are pushed to the WebSocket
channel named after the session id.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from adjutant.backends.base import ModelBackend
from adjutant.config import settings
from adjutant.errors import NotFoundError
from adjutant.models.agent import AgentState
from adjutant.models.blueprint import ProjectBlueprint
from adjutant.services.coding_agent import CodingAgent
from adjutant.services.scaffold_service import load_blueprint
from adjutant.services.settings_store import SettingsStore
from adjutant.ws_manager import manager

logger = logging.getLogger(__name__)


@dataclass
class AgentSession:
    id: str
    project_path: str
    agent: CodingAgent
    backend: ModelBackend
    run_task: asyncio.Task | None = None
    unsubscribe: Callable[[], None] | None = None
    # Strong refs to in-flight broadcast tasks so they aren't GC'd mid-send.
    pending_sends: set = field(default_factory=set)

    def summary(self) -> dict:
        state = self.agent.state
        return {
            "id": self.id,
            "projectPath": self.project_path,
            "projectName": self.agent.blueprint.meta.name,
            "state": state.to_payload(),
        }


_sessions: dict[str, AgentSession] = {}


def _publisher(session: AgentSession) -> Callable[[AgentState], None]:
    """Observer that forwards snapshots to the session's WebSocket channel."""

    def _publish(snapshot: AgentState) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return  # no event loop (e.g. constructed from sync code) -- nobody to send to
        task = loop.create_task(manager.broadcast_agent_state(session.id, snapshot.to_payload()))
        session.pending_sends.add(task)
        task.add_done_callback(session.pending_sends.discard)

    return _publish


def create_session(
    project_path: str,
    store: SettingsStore,
    blueprint: ProjectBlueprint | None = None,
) -> AgentSession:
    """Plan a new agent for a scaffolded project.

    When *blueprint* is omitted it is read from the project's sidecar file.
    The backend is chosen from *store* now and kept for the session's life.
    """
    root = Path(project_path).expanduser().resolve()
    if not root.is_dir():
        raise NotFoundError(f"Project directory not found: {project_path}")
    if blueprint is None:
        blueprint = load_blueprint(root)

    backend = store.create_backend()
    agent = CodingAgent(
        backend, root, blueprint, step_delay=settings.AGENT_STEP_DELAY_SECONDS,
    )
    session = AgentSession(
        id=uuid.uuid4().hex, project_path=str(root), agent=agent, backend=backend,
    )
    session.unsubscribe = agent.subscribe(_publisher(session))
    _sessions[session.id] = session
    logger.info(
        "Agent session created  id=%s  project=%s  tasks=%d  backend=%s",
        session.id[:8], blueprint.meta.name,
        len(agent.state.pending_tasks), backend.name,
    )
    return session


def get_session(session_id: str) -> AgentSession:
    session = _sessions.get(session_id)
    if session is None:
        raise NotFoundError(f"Agent session {session_id} not found")
    return session


def list_sessions() -> list[AgentSession]:
    return list(_sessions.values())


async def start_session(session_id: str) -> AgentState:
    """Start (or re-arm) the session's run in the background."""
    session = get_session(session_id)
    if session.run_task is None or session.run_task.done():
        session.run_task = asyncio.create_task(
            session.agent.start(), name=f"agent-{session.id[:8]}",
        )
        # Let the loop take its first step so the returned state reflects it.
        await asyncio.sleep(0)
    else:
        await session.agent.start()
    return session.agent.state


def stop_session(session_id: str) -> AgentState:
    session = get_session(session_id)
    session.agent.stop()
    return session.agent.state


async def delete_session(session_id: str) -> None:
    """Stop and forget a session, cancelling any in-flight task."""
    session = _sessions.pop(session_id, None)
    if session is None:
        raise NotFoundError(f"Agent session {session_id} not found")
    await _teardown(session)


async def _teardown(session: AgentSession) -> None:
    session.agent.stop()
    if session.run_task is not None and not session.run_task.done():
        session.run_task.cancel()
        try:
            await session.run_task
        except asyncio.CancelledError:
            pass
    if session.unsubscribe is not None:
        session.unsubscribe()
    await session.backend.aclose()
    await manager.close_channel(session.id)
    logger.info("Agent session closed  id=%s", session.id[:8])


async def shutdown_all() -> None:
    """Tear down every session (app shutdown)."""
    while _sessions:
        _, session = _sessions.popitem()
        await _teardown(session)
