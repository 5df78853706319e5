"""Push of view events to connected WebSocket clients."""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks connected clients and publishes view events to all of them.

    Events are small JSON objects: {"type": "changed"}, {"type": "celebrate",
    "task_id": 1} or {"type": "languageChanged", "language": "de"}. Clients
    re-query the API when they receive one.
    """

    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients.add(websocket)
        logger.info(f"[ConnectionManager] Client connected ({self.client_count} connected)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._clients.discard(websocket)
            logger.info(f"[ConnectionManager] Client left ({self.client_count} connected)")

    async def publish(self, event_type: str, **fields: Any) -> None:
        """Send {"type": event_type, **fields} to every client."""
        await self.broadcast({"type": event_type, **fields})

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send message to every client at once; clients that fail are dropped."""
        if not self._clients:
            return

        clients = list(self._clients)
        results = await asyncio.gather(
            *(client.send_json(message) for client in clients), return_exceptions=True
        )
        for client, result in zip(clients, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(f"[ConnectionManager] Dropping client after send error: {result}")
                self.disconnect(client)
        logger.debug(f"[ConnectionManager] Sent {message.get('type')} to {self.client_count}")
