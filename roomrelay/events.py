"""Event names and the outbound notification record."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, NamedTuple, Tuple


class EventType(str, Enum):
    # server -> client
    IDENTITY_ASSIGNED = "identity-assigned"
    ERROR = "error"
    PARTICIPANT_JOINED = "participant-joined"
    PARTICIPANT_LEFT = "participant-left"

    # client -> server
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"

    # both directions (forwarded)
    DIRECT_CALL_INVITE = "direct-call-invite"
    CALL_OFFER = "call-offer"
    CALL_ANSWER = "call-answer"
    ICE_CANDIDATE = "ice-candidate"


class Notification(NamedTuple):
    """One event to deliver to each of ``recipients``."""

    recipients: Tuple[str, ...]
    event: EventType
    data: Any = None

    def to_message(self) -> Dict[str, Any]:
        return {"type": self.event.value, "data": self.data}


__all__ = ["EventType", "Notification"]
