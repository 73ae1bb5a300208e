"""WebSocket connection manager with per-user channels.

Holds active connections keyed by ``user:{id}`` and remembers each socket's
tenant. Use via app.state.ws_manager (set in lifespan). Implements
IRealtimeDispatcher for the in-process ("local") real-time backend.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import WebSocket


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


class ConnectionManager:
    """Manages WebSocket connections per user with tenant isolation.

    - A user may hold several connections (tabs, devices); each receives the event.
    - emit_to_channel can be pinned to a tenant so a relayed message never
      reaches a socket authenticated for another tenant.
    - Dead sockets found while sending are removed under the lock.
    """

    def __init__(self) -> None:
        """Initialize with empty per-channel connection sets."""
        self._connections: dict[str, set[WebSocket]] = {}
        self._socket_meta: dict[WebSocket, tuple[str, str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket, user_id: str, tenant_id: str) -> None:
        """Accept and register a connection on the user's channel.

        Args:
            websocket: The WebSocket instance to accept and track.
            user_id: Principal id from JWT (channel owner).
            tenant_id: Tenant id from JWT.
        """
        await websocket.accept()
        channel = user_channel(user_id)
        async with self._lock:
            self._connections.setdefault(channel, set()).add(websocket)
            self._socket_meta[websocket] = (channel, tenant_id)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._forget(websocket)

    def _forget(self, websocket: WebSocket) -> None:
        meta = self._socket_meta.pop(websocket, None)
        if meta is None:
            return
        channel = meta[0]
        conns = self._connections.get(channel)
        if conns is not None:
            conns.discard(websocket)
            if not conns:
                del self._connections[channel]

    async def emit_to_channel(
        self,
        principal_id: str,
        event_name: str,
        payload: dict[str, Any],
        *,
        tenant_id: str | None = None,
    ) -> int:
        """Send {"event", "data"} to every connection of the principal.

        Returns the number of connections reached (0 when the user is offline).
        """
        channel = user_channel(principal_id)
        async with self._lock:
            snapshot = [
                ws
                for ws in self._connections.get(channel, set())
                if tenant_id is None or self._socket_meta.get(ws, ("", ""))[1] == tenant_id
            ]
        message = {"event": event_name, "data": payload}
        dead: list[WebSocket] = []
        for ws in snapshot:
            try:
                await ws.send_json(message)
            except Exception:
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    self._forget(ws)
        return len(snapshot) - len(dead)

    async def get_connection_count(self) -> int:
        """Return the total number of active connections (lock-safe)."""
        async with self._lock:
            return sum(len(c) for c in self._connections.values())
