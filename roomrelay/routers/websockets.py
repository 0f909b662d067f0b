from __future__ import annotations

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..connections import ConnectionManager
from ..events import EventType, Notification
from ..logging_config import get_logger
from ..schemas import EventEnvelope
from ..signaling import Session, SignalingHandler
from ..state import get_connections, get_handler

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["ws"])


@router.websocket("/ws")
async def websocket_endpoint(
    ws: WebSocket,
    connections: ConnectionManager = Depends(get_connections),
    handler: SignalingHandler = Depends(get_handler),
):
    await ws.accept()
    connection_id = connections.connect(ws)
    session = Session(connection_id)
    await connections.dispatch(handler.connect(session))

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            envelope = None
            raw = message.get("text")
            if raw is not None:
                try:
                    envelope = EventEnvelope.model_validate_json(raw)
                except ValidationError:
                    pass
            if envelope is None:
                # Binary frames and anything that is not a JSON envelope.
                logger.warning(f"Malformed message from {connection_id}")
                await connections.dispatch(
                    [Notification((connection_id,), EventType.ERROR, "Malformed message")]
                )
                continue
            await connections.dispatch(handler.handle(session, envelope.type, envelope.data))
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection_id}: {e}", exc_info=True)
    finally:
        connections.disconnect(connection_id)
        await connections.dispatch(handler.disconnect(session))
