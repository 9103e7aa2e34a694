"""
Change notifier - pushes {type, data} events to every connected WebSocket

Delivery is at-most-once and best-effort: no persistence, no replay for
listeners that connect later, no acknowledgement. A listener whose send fails
is dropped. Clients must also read state through the REST routes.
"""
from enum import Enum
from typing import Any, Set
import logging

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event kinds broadcast to listeners"""
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    FILE_CREATED = "file_created"
    FILE_UPDATED = "file_updated"
    FILE_DELETED = "file_deleted"
    ANALYSIS_CREATED = "analysis_created"
    MIGRATION_COMPLETED = "migration_completed"
    TESTS_GENERATED = "tests_generated"


class ChangeNotifier:
    """Process-wide fan-out of change events"""

    def __init__(self):
        # Anything with an async ``send_json`` (starlette WebSocket in production)
        self._listeners: Set[Any] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def connect(self, websocket) -> None:
        """Accept a WebSocket and register it as a listener"""
        await websocket.accept()
        self.register(websocket)

    def register(self, listener) -> None:
        self._listeners.add(listener)
        logger.info(f"Client connected ({self.listener_count} listening)")

    def disconnect(self, listener) -> None:
        if listener in self._listeners:
            self._listeners.discard(listener)
            logger.info(f"Client disconnected ({self.listener_count} listening)")

    async def broadcast(self, event_type: EventType, data: Any) -> int:
        """
        Send an event to all current listeners

        Args:
            event_type: Event kind
            data: JSON-serializable payload (datetimes are encoded)

        Returns:
            Number of listeners the event was delivered to
        """
        message = {"type": EventType(event_type).value, "data": jsonable_encoder(data)}
        delivered = 0

        for listener in list(self._listeners):
            try:
                await listener.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping listener after failed send: {e}")
                self._listeners.discard(listener)

        logger.debug(f"Broadcast {message['type']} to {delivered} listeners")
        return delivered
