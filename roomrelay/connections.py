"""Live websocket bookkeeping and notification delivery."""
from __future__ import annotations

import uuid
from typing import Dict, Iterable, Optional

from fastapi import WebSocket

from .events import Notification
from .logging_config import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    """Maps connection ids to their websockets and delivers notifications.

    Delivery is best-effort: a failed send is logged and skipped, and never
    stops the remaining recipients from being served.
    """

    def __init__(self):
        self.active: Dict[str, WebSocket] = {}

    def connect(self, ws: WebSocket, connection_id: Optional[str] = None) -> str:
        connection_id = connection_id or uuid.uuid4().hex
        self.active[connection_id] = ws
        logger.debug(f"Registered connection {connection_id} ({len(self.active)} live)")
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self.active.pop(connection_id, None)
        logger.debug(f"Unregistered connection {connection_id} ({len(self.active)} live)")

    async def dispatch(self, notifications: Iterable[Notification]) -> None:
        for note in notifications:
            message = note.to_message()
            for connection_id in note.recipients:
                ws = self.active.get(connection_id)
                if ws is None:
                    logger.debug(f"Dropping {note.event.value} for unknown connection {connection_id}")
                    continue
                try:
                    await ws.send_json(message)
                except Exception as e:
                    # Peer went away mid-send; its own disconnect path cleans up.
                    logger.warning(f"Error sending {note.event.value} to {connection_id}: {e}")


__all__ = ["ConnectionManager"]
