"""
WebSocket endpoint: /ws?user_id=... joins the user's realtime channel.

Server -> client frames are {"event", "data"} (match:new, message:new, notification).
Client frames are ignored apart from "ping", answered with "pong".
"""
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from swapshop.services.user_service import user_exists

router = APIRouter()
logger = logging.getLogger(__name__)

# RFC 6455 policy violation
WS_POLICY_VIOLATION = 1008


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, user_id: str = Query("")):
    user_id = user_id.strip()
    session_factory = websocket.app.state.session_factory
    db = session_factory()
    try:
        known = bool(user_id) and user_exists(db, user_id)
    finally:
        db.close()
    if not known:
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    hub = websocket.app.state.hub
    await hub.connect(user_id, websocket)
    try:
        while True:
            text = await websocket.receive_text()
            if text.strip() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(user_id, websocket)
