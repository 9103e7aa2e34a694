"""
Change Events Route
WebSocket endpoint streaming {type, data} change events to the browser
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["events"])


@router.websocket("/ws")
async def change_events(websocket: WebSocket):
    """
    Subscribe to change events

    Incoming messages are read and ignored; the socket stays registered until
    the client disconnects.
    """
    notifier = websocket.app.state.notifier
    await notifier.connect(websocket)

    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("Client closed the event stream")
    finally:
        notifier.disconnect(websocket)
