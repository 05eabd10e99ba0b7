"""WebSocket endpoint for real-time analysis progress."""

import json
import logging
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query

from app.core.security import decode_token
from app.db.session import session_scope
from app.schemas.brand import AnalysisRunResponse
from app.services.analysis_runs import get_analysis_status
from app.services.brand_service import get_brand

logger = logging.getLogger(__name__)

router = APIRouter()


class ConnectionManager:
    """Manages WebSocket connections per user."""

    def __init__(self):
        self.active_connections: dict[str, list[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: str):
        await websocket.accept()
        self.active_connections.setdefault(user_id, []).append(websocket)

    def disconnect(self, websocket: WebSocket, user_id: str):
        if user_id in self.active_connections:
            self.active_connections[user_id] = [
                ws for ws in self.active_connections[user_id] if ws != websocket
            ]
            if not self.active_connections[user_id]:
                del self.active_connections[user_id]

    async def send_to_user(self, user_id: str, message: dict):
        if user_id not in self.active_connections:
            return
        data = json.dumps(message, default=str)
        dead: list[WebSocket] = []
        for ws in self.active_connections[user_id]:
            try:
                await ws.send_text(data)
            except Exception as e:
                logger.warning("WS send failed for user %s: %s", user_id, e)
                dead.append(ws)
        for ws in dead:
            self.disconnect(ws, user_id)


manager = ConnectionManager()


def _authenticate_ws(token: str) -> str | None:
    """Validate token and return user_id."""
    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None
    return payload.get("sub")


async def build_snapshot(user_id: str, brand_id: str) -> dict:
    """Same read model as the polling endpoint, or an error message."""
    try:
        brand_uuid = uuid.UUID(str(brand_id))
        owner_uuid = uuid.UUID(user_id)
    except ValueError:
        return {"type": "error", "error": "Brand not found"}

    async with session_scope() as session:
        if await get_brand(session, owner_uuid, brand_uuid) is None:
            return {"type": "error", "error": "Brand not found"}
        status = await get_analysis_status(session, brand_uuid)

    return {
        "type": "snapshot",
        "brand_id": str(brand_uuid),
        "runs": [AnalysisRunResponse.model_validate(r).model_dump(mode="json") for r in status.runs],
        "is_analyzing": status.is_analyzing,
    }


@router.websocket("/analysis")
async def analysis_websocket(websocket: WebSocket, token: str = Query(...)):
    user_id = _authenticate_ws(token)
    if not user_id:
        await websocket.close(code=4001, reason="Unauthorized")
        return

    await manager.connect(websocket, user_id)
    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except ValueError:
                continue
            if not isinstance(msg, dict):
                continue
            if msg.get("type") == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
            elif msg.get("type") == "snapshot":
                snapshot = await build_snapshot(user_id, msg.get("brand_id", ""))
                await websocket.send_text(json.dumps(snapshot, default=str))
    except WebSocketDisconnect:
        manager.disconnect(websocket, user_id)
    except Exception:
        logger.warning("Analysis websocket closed with error for user %s", user_id, exc_info=True)
        manager.disconnect(websocket, user_id)
