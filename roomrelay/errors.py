"""Error kinds raised by the room registry.

All of them are scoped to the request that triggered them: the lifecycle
handler turns them into an ``error`` event for the requester only.
"""
from __future__ import annotations


class RelayError(Exception):
    """Base class; ``str(exc)`` is the human-readable reason sent to clients."""

    reason = "Relay error"

    def __init__(self, room_id: str | None = None, reason: str | None = None):
        self.room_id = room_id
        super().__init__(reason or self.reason)


class RoomNotFound(RelayError):
    reason = "Room does not exist"


class RoomFull(RelayError):
    reason = "Room is full"


class AlreadyInRoom(RelayError):
    """The connection already occupies a different room."""

    reason = "Already in another room"


class RoomIdCollision(RelayError):
    """The id generator kept producing ids that are already live."""

    reason = "Could not allocate a unique room id"


__all__ = ["RelayError", "RoomNotFound", "RoomFull", "AlreadyInRoom", "RoomIdCollision"]
