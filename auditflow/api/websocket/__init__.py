"""WebSocket support: per-user connection manager."""

from auditflow.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
