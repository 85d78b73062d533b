"""
LineWatch WebSocket Manager
Pushes change notifications so dashboards know when to refetch metrics.
"""

import logging
from typing import Dict, Set
from fastapi import WebSocket

logger = logging.getLogger("linewatch.websocket")


class ConnectionManager:
    """Manages WebSocket connections for change notifications"""

    def __init__(self):
        # Channel-based connections
        self.active_connections: Dict[str, Set[WebSocket]] = {
            "events": set(),
        }

    async def connect(self, websocket: WebSocket, channel: str = "events"):
        await websocket.accept()
        if channel not in self.active_connections:
            self.active_connections[channel] = set()
        self.active_connections[channel].add(websocket)
        logger.info(f"Client connected to channel: {channel} (total: {len(self.active_connections[channel])})")

    def disconnect(self, websocket: WebSocket, channel: str = "events"):
        if channel in self.active_connections:
            self.active_connections[channel].discard(websocket)
        logger.info(f"Client disconnected from channel: {channel}")

    async def broadcast_to_channel(self, channel: str, message: dict):
        """Send message to all clients on a channel"""
        if channel not in self.active_connections:
            return

        dead = set()
        for ws in list(self.active_connections[channel]):
            try:
                await ws.send_json(message)
            except Exception:
                dead.add(ws)

        for ws in dead:
            self.active_connections[channel].discard(ws)

    async def send_events_changed(self, reason: str, details: dict = None):
        """Tell subscribers the event set changed (ingest / generate / clear)"""
        await self.broadcast_to_channel("events", {
            "type": "events_changed",
            "data": {
                "reason": reason,
                **(details or {})
            }
        })

    @property
    def total_connections(self) -> int:
        return sum(len(conns) for conns in self.active_connections.values())


# Global instance
ws_manager = ConnectionManager()
