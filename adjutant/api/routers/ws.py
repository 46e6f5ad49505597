"""WebSocket router -- live agent-state snapshots."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from adjutant.errors import NotFoundError
from adjutant.services import agent_service
from adjutant.ws_manager import MAX_MESSAGE_SIZE, manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/agents/{agent_id}")
async def agent_socket(websocket: WebSocket, agent_id: str) -> None:
    """Stream ``agent_state`` events for one session.

    The current state is sent right after the handshake; after that one
    message per state change, plus periodic ``ping`` frames.
    """
    try:
        session = agent_service.get_session(agent_id)
    except NotFoundError:
        await websocket.close(code=4004, reason="Unknown agent session")
        return

    await websocket.accept()
    await manager.connect(agent_id, websocket)
    logger.info("WS open  agent=%s conns=%d", agent_id[:8], manager.connection_count(agent_id))
    await websocket.send_json({"type": "agent_state", "payload": session.agent.state.to_payload()})

    try:
        while True:
            # Keep connection alive; ignore client messages
            data = await websocket.receive_text()
            if len(data) > MAX_MESSAGE_SIZE:
                await websocket.close(code=1009, reason="Message too large")
                return
    except WebSocketDisconnect:
        logger.info("WS close agent=%s (client disconnect)", agent_id[:8])
    finally:
        await manager.disconnect(agent_id, websocket)
