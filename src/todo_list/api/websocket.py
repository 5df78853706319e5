"""WebSocket API endpoints for real-time updates."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from todo_list.factory import get_connection_manager, get_registry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint for view invalidation events.

    Each connection counts as a client of the offline cache controller.
    """
    manager = get_connection_manager()
    registry = get_registry()

    await manager.connect(websocket)
    registry.attach_client()
    try:
        while True:
            data = await websocket.receive_text()
            logger.debug(f"[WebSocket] Received from client: {data}")

            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        logger.info("[WebSocket] Client disconnected normally")
    except Exception as e:
        logger.error(f"[WebSocket] Error: {e}", exc_info=True)
    finally:
        manager.disconnect(websocket)
        await registry.detach_client()
