"""
WebSocket Router
Change notifications for dashboards watching the event set.
"""

import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from app.services.websocket_manager import ws_manager

logger = logging.getLogger("linewatch.ws")

router = APIRouter(tags=["WebSocket"])


@router.websocket("/ws/events")
async def websocket_events(websocket: WebSocket):
    """
    Pushes ``{"type": "events_changed", "data": {"reason": ...}}`` after
    every ingest, sample generation or clear. Clients may send "ping".
    """
    await ws_manager.connect(websocket, "events")
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.info("Events client disconnected")
    finally:
        ws_manager.disconnect(websocket, "events")
