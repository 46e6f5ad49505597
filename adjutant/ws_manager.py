"""WebSocket connection manager for live agent-state updates.

Connections are grouped by channel -- one channel per agent session -- so
every browser tab watching a build receives the same snapshot stream.
"""

import asyncio
import json
import logging

logger = logging.getLogger(__name__)

# Heartbeat interval (seconds) -- ping all connections periodically
HEARTBEAT_INTERVAL = 30

# Maximum connections per channel before oldest is evicted
MAX_CONNECTIONS_PER_CHANNEL = 5

# Maximum inbound message size (bytes)
MAX_MESSAGE_SIZE = 4096


class ConnectionManager:
    """Manages active WebSocket connections keyed by channel id."""

    def __init__(self) -> None:
        self._connections: dict[str, list] = {}  # channel -> list of websockets
        self._lock = asyncio.Lock()
        self._heartbeat_task: asyncio.Task | None = None

    # ── lifecycle ─────────────────────────────────────────────

    async def start_heartbeat(self) -> None:
        """Start the background heartbeat loop (call from lifespan startup)."""
        if self._heartbeat_task is None:
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def stop_heartbeat(self) -> None:
        """Cancel the heartbeat task (call from lifespan shutdown)."""
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass
            self._heartbeat_task = None

    # ── connection management ─────────────────────────────────

    async def connect(self, channel: str, websocket) -> None:  # noqa: ANN001
        """Register a WebSocket on *channel*, evicting the oldest at capacity."""
        async with self._lock:
            conns = self._connections.setdefault(channel, [])
            while len(conns) >= MAX_CONNECTIONS_PER_CHANNEL:
                oldest = conns.pop(0)
                try:
                    await oldest.close(code=1008, reason="Connection limit reached")
                except Exception:
                    logger.debug("Close of evicted socket failed  channel=%s", channel)
            conns.append(websocket)

    def connection_count(self, channel: str) -> int:
        """Return the number of active connections on a channel (lock-free)."""
        return len(self._connections.get(channel, []))

    async def disconnect(self, channel: str, websocket) -> None:  # noqa: ANN001
        async with self._lock:
            conns = self._connections.get(channel, [])
            if websocket in conns:
                conns.remove(websocket)
            if not conns:
                self._connections.pop(channel, None)

    async def send(self, channel: str, data: dict) -> None:
        """Send a JSON message to every connection on *channel*; prune dead ones."""
        async with self._lock:
            conns = list(self._connections.get(channel, []))
        if not conns:
            return
        message = json.dumps(data, default=str)
        dead = []
        for ws in conns:
            try:
                await asyncio.wait_for(ws.send_text(message), timeout=5.0)
            except Exception:
                dead.append(ws)
        if dead:
            await self._prune(channel, dead)

    async def broadcast_agent_state(self, agent_id: str, payload: dict) -> None:
        """Broadcast an ``agent_state`` event for one agent session."""
        await self.send(agent_id, {"type": "agent_state", "payload": payload})

    async def close_channel(self, channel: str, reason: str = "Session closed") -> None:
        async with self._lock:
            conns = self._connections.pop(channel, [])
        for ws in conns:
            try:
                await ws.close(code=1000, reason=reason)
            except Exception:
                logger.debug("Close failed  channel=%s", channel)

    async def _prune(self, channel: str, dead: list) -> None:
        async with self._lock:
            conns = self._connections.get(channel, [])
            for ws in dead:
                if ws in conns:
                    conns.remove(ws)
            if not conns:
                self._connections.pop(channel, None)

    # ── heartbeat ─────────────────────────────────────────────

    async def _heartbeat_loop(self) -> None:
        """Ping every connection periodically and prune dead ones."""
        while True:
            await asyncio.sleep(HEARTBEAT_INTERVAL)
            try:
                await self._ping_all()
            except Exception:
                logger.exception("Heartbeat sweep error")

    async def _ping_all(self) -> None:
        async with self._lock:
            snapshot = {ch: list(conns) for ch, conns in self._connections.items()}

        for channel, conns in snapshot.items():
            dead: list = []
            for ws in conns:
                try:
                    await ws.send_json({"type": "ping"})
                except Exception:
                    dead.append(ws)
            if dead:
                await self._prune(channel, dead)


manager = ConnectionManager()
