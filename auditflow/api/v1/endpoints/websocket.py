"""WebSocket endpoint: per-user real-time notification channel.

Requires a valid JWT via query param ?token=... before registering the
connection on the user's channel in app.state.ws_manager.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from auditflow.infrastructure.security.jwt import verify_token

router = APIRouter()


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Register the socket on user:{sub}; the client only receives (pings are answered)."""
    manager = websocket.app.state.ws_manager
    token = websocket.query_params.get("token")
    if not token:
        await _reject_websocket(websocket, "Missing token")
        return
    try:
        payload = verify_token(token)
    except ValueError:
        await _reject_websocket(websocket, "Invalid token")
        return
    user_id = payload.get("sub")
    tenant_id = payload.get("tenant_id")
    if not user_id or not tenant_id:
        await _reject_websocket(websocket, "Invalid token")
        return

    await manager.connect(websocket, user_id, tenant_id)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
