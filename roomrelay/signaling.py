"""Connection lifecycle and signaling relay.

This module is transport-agnostic: every handler takes the caller's
``Session`` plus the raw event payload, works against the shared
``Registry`` and returns the ``Notification`` list the transport should
deliver. Nothing here sends on a socket, so tests assert on return values.

Signaling payloads are opaque. Handlers read only the routing keys
(``roomId``, ``targetConnectionId``) and copy the rest through untouched.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import RelayError, RoomNotFound
from .events import EventType, Notification
from .logging_config import get_logger
from .registry import LeaveResult, Registry


class Session:
    """Per-connection state: no room, in a room, or closed (terminal)."""

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        self.room_id: Optional[str] = None
        self.closed = False

    @property
    def in_room(self) -> bool:
        return self.room_id is not None

    def __repr__(self) -> str:
        return f"Session({self.connection_id!r}, room_id={self.room_id!r}, closed={self.closed})"


Handler = Callable[[Session, Any], List[Notification]]


def _room_id_from(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        payload = payload.get("roomId")
    return payload if isinstance(payload, str) and payload else None


def _pick(payload: Any, *keys: str) -> Dict[str, Any]:
    source = payload if isinstance(payload, dict) else {}
    return {key: source.get(key) for key in keys}


class SignalingHandler:
    def __init__(self, registry: Registry, logger: Optional[logging.Logger] = None):
        self.registry = registry
        self._log = logger or get_logger(__name__)
        self._handlers: Dict[EventType, Handler] = {
            EventType.JOIN_ROOM: self.join_room,
            EventType.LEAVE_ROOM: self.leave_room,
            EventType.DIRECT_CALL_INVITE: self.direct_call_invite,
            EventType.CALL_OFFER: self.call_offer,
            EventType.CALL_ANSWER: self.call_answer,
            EventType.ICE_CANDIDATE: self.ice_candidate,
        }

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    def connect(self, session: Session) -> List[Notification]:
        """Tell the new connection its own identity."""
        self._log.info(f"Client connected: {session.connection_id}")
        return [self._to_self(session, EventType.IDENTITY_ASSIGNED, session.connection_id)]

    def handle(self, session: Session, event: str, payload: Any = None) -> List[Notification]:
        if session.closed:
            self._log.debug(f"Ignoring {event!r} from closed connection {session.connection_id}")
            return []
        try:
            handler = self._handlers[EventType(event)]
        except (ValueError, KeyError):
            self._log.warning(f"Unknown event {event!r} from {session.connection_id}")
            return [self._error(session, f"Unknown event: {event}")]
        return handler(session, payload)

    def disconnect(self, session: Session) -> List[Notification]:
        """Remove the connection from every room. Safe to call twice."""
        if session.closed:
            return []
        session.closed = True
        session.room_id = None
        self._log.info(f"Client disconnected: {session.connection_id}")
        results = self.registry.remove_connection_everywhere(session.connection_id)
        return self._left_notices(session, results)

    # ---------------------------------------------------------------------
    # Room membership
    # ---------------------------------------------------------------------

    def join_room(self, session: Session, payload: Any) -> List[Notification]:
        room_id = _room_id_from(payload)
        if room_id is None:
            self._log.warning(f"Join by {session.connection_id} carried no room id: {payload!r}")
            return [self._error(session, RoomNotFound.reason)]

        previous = session.room_id
        try:
            room, departed = self.registry.move(room_id, session.connection_id)
        except RelayError as exc:
            self._log.warning(f"Join of room {room_id} by {session.connection_id} rejected: {exc}")
            return [self._error(session, str(exc))]

        session.room_id = room_id
        notes = self._left_notices(session, departed)
        if previous == room_id:
            return notes
        others = tuple(room.others(session.connection_id))
        if others:
            notes.append(
                Notification(others, EventType.PARTICIPANT_JOINED, {"connectionId": session.connection_id})
            )
        return notes

    def leave_room(self, session: Session, payload: Any) -> List[Notification]:
        room_id = _room_id_from(payload)
        if session.room_id is not None and session.room_id == room_id:
            session.room_id = None
        result = self.registry.leave(room_id, session.connection_id) if room_id else None
        if result is None or not result.was_member:
            self._log.debug(f"Leave of room {room_id} by {session.connection_id} was a no-op")
            return []
        return self._left_notices(session, [result])

    # ---------------------------------------------------------------------
    # Signaling relay
    # ---------------------------------------------------------------------

    def direct_call_invite(self, session: Session, payload: Any) -> List[Notification]:
        """Ring a specific connection before either side is in a room.

        Unlike the room-scoped events this bypasses room membership entirely;
        any connection may ring any identity it knows.
        """
        target = payload.get("targetConnectionId") if isinstance(payload, dict) else None
        if not isinstance(target, str) or not target:
            self._log.debug(f"direct-call-invite from {session.connection_id} has no target")
            return []
        self._log.debug(f"Forwarding direct-call-invite from {session.connection_id} to {target}")
        data = _pick(payload, "signalData", "from", "name")
        return [Notification((target,), EventType.DIRECT_CALL_INVITE, data)]

    def call_offer(self, session: Session, payload: Any) -> List[Notification]:
        return self._relay(session, EventType.CALL_OFFER, payload, ("signalData", "from", "name"))

    def call_answer(self, session: Session, payload: Any) -> List[Notification]:
        return self._relay(session, EventType.CALL_ANSWER, payload, ("signalData", "to"))

    def ice_candidate(self, session: Session, payload: Any) -> List[Notification]:
        return self._relay(session, EventType.ICE_CANDIDATE, payload, ("candidate",))

    def _relay(
        self, session: Session, event: EventType, payload: Any, keys: Sequence[str]
    ) -> List[Notification]:
        # No check that the sender belongs to the room: delivery is "everyone
        # else in roomId", whoever asks.
        room_id = _room_id_from(payload) if isinstance(payload, dict) else None
        if room_id is None:
            return []
        recipients = tuple(cid for cid in self.registry.members(room_id) if cid != session.connection_id)
        self._log.debug(
            f"{event.value} in room {room_id} from {session.connection_id} -> {len(recipients)} recipient(s)"
        )
        if not recipients:
            return []
        return [Notification(recipients, event, _pick(payload, *keys))]

    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------

    def _left_notices(self, session: Session, results: Sequence[LeaveResult]) -> List[Notification]:
        notes: List[Notification] = []
        for result in results:
            if result.was_member and result.remaining:
                notes.append(
                    Notification(
                        result.remaining,
                        EventType.PARTICIPANT_LEFT,
                        {"connectionId": session.connection_id},
                    )
                )
        return notes

    @staticmethod
    def _to_self(session: Session, event: EventType, data: Any) -> Notification:
        return Notification((session.connection_id,), event, data)

    def _error(self, session: Session, reason: str) -> Notification:
        return self._to_self(session, EventType.ERROR, reason)


__all__ = ["Session", "SignalingHandler"]
