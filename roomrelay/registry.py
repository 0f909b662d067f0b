"""In-memory room/community registry.

The registry is the only shared mutable state in the relay. Every public
method runs under one re-entrant lock, so a capacity check and the append
that follows it can never interleave with another writer. Rooms handed out
are snapshots; the live records never leave this module.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .constants import MAX_ID_ATTEMPTS, ROOM_CAPACITY
from .errors import AlreadyInRoom, RoomFull, RoomIdCollision, RoomNotFound
from .ids import generate_room_id
from .logging_config import get_logger
from .room import Room
from .schemas import RoomSummary


class LeaveResult(NamedTuple):
    """Outcome of removing one connection from one room."""

    room_id: str
    community_id: str
    was_member: bool
    room_deleted: bool  # the departing connection was the last participant
    remaining: Tuple[str, ...]


class Registry:
    def __init__(
        self,
        id_factory: Callable[[], str] = generate_room_id,
        capacity: int = ROOM_CAPACITY,
        logger: Optional[logging.Logger] = None,
    ):
        self._id_factory = id_factory
        self._capacity = capacity
        self._log = logger or get_logger(__name__)
        self._lock = threading.RLock()
        # community_id -> room ids; dict keys keep insertion order
        self._communities: Dict[str, Dict[str, None]] = {}
        self._rooms: Dict[str, Room] = {}

    # ---------------------------------------------------------------------
    # Creation / lookup
    # ---------------------------------------------------------------------

    def create_room(self, community_id: str) -> str:
        with self._lock:
            room_id = self._allocate_id()
            self._rooms[room_id] = Room(room_id, community_id, capacity=self._capacity)
            self._communities.setdefault(community_id, {})[room_id] = None
            self._log.info(f"Room {room_id} created in community {community_id}")
            return room_id

    def _allocate_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            room_id = self._id_factory()
            if room_id not in self._rooms:
                return room_id
            self._log.warning(f"Generated room id {room_id} is already live, regenerating")
        raise RoomIdCollision()

    def list_rooms(self, community_id: str) -> List[RoomSummary]:
        """Rooms of *community_id* in creation order; ``[]`` if unknown."""
        with self._lock:
            room_ids = self._communities.get(community_id)
            if not room_ids:
                return []
            summaries: List[RoomSummary] = []
            for room_id in list(room_ids):
                room = self._rooms.get(room_id)
                if room is None:
                    self._log.error(
                        f"Community {community_id} references missing room {room_id}; dropping it"
                    )
                    self._discard_from_community(community_id, room_id)
                    continue
                summaries.append(RoomSummary(id=room_id, participants=len(room.participants)))
            return summaries

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(room_id)
            return room.snapshot() if room else None

    def members(self, room_id: str) -> Tuple[str, ...]:
        with self._lock:
            room = self._rooms.get(room_id)
            return tuple(room.participants) if room else ()

    def room_of(self, connection_id: str) -> Optional[str]:
        """Id of the first room *connection_id* is in, if any."""
        with self._lock:
            for room_id, room in self._rooms.items():
                if room.has_participant(connection_id):
                    return room_id
            return None

    # ---------------------------------------------------------------------
    # Membership
    # ---------------------------------------------------------------------

    def join(self, room_id: str, connection_id: str) -> Room:
        """Add *connection_id* to *room_id*.

        Raises ``RoomNotFound``, ``RoomFull``, or ``AlreadyInRoom`` when the
        connection sits in a different room; use ``move`` to switch rooms.
        """
        with self._lock:
            room = self._admissible(room_id, connection_id)
            if room.has_participant(connection_id):
                return room.snapshot()
            current = self.room_of(connection_id)
            if current is not None:
                raise AlreadyInRoom(current)
            return self._admit(room, connection_id)

    def move(self, room_id: str, connection_id: str) -> Tuple[Room, List[LeaveResult]]:
        """Join *room_id*, first leaving whatever room the connection is in.

        Every check runs before anything changes, so a rejected move leaves
        the connection where it was.
        """
        with self._lock:
            room = self._admissible(room_id, connection_id)
            if room.has_participant(connection_id):
                return room.snapshot(), []
            departed = [
                self._remove_from(other, connection_id)
                for other in list(self._rooms.values())
                if other is not room and other.has_participant(connection_id)
            ]
            return self._admit(room, connection_id), departed

    def _admissible(self, room_id: str, connection_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        if room.is_full() and not room.has_participant(connection_id):
            raise RoomFull(room_id)
        return room

    def _admit(self, room: Room, connection_id: str) -> Room:
        # Caller holds the lock and has run _admissible.
        room_id = room.room_id
        room.add_participant(connection_id)
        self._log.info(
            f"Connection {connection_id} joined room {room_id} "
            f"({len(room.participants)}/{room.capacity})"
        )
        return room.snapshot()

    def leave(self, room_id: str, connection_id: str) -> Optional[LeaveResult]:
        """Remove *connection_id* from *room_id*; ``None`` if the room is unknown."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return None
            return self._remove_from(room, connection_id)

    def remove_connection_everywhere(self, connection_id: str) -> List[LeaveResult]:
        with self._lock:
            results: List[LeaveResult] = []
            for room in list(self._rooms.values()):
                if room.has_participant(connection_id):
                    results.append(self._remove_from(room, connection_id))
            return results

    def _remove_from(self, room: Room, connection_id: str) -> LeaveResult:
        # Caller holds the lock. community_id is captured before any deletion.
        community_id = room.community_id
        was_member = room.remove_participant(connection_id)
        if was_member:
            self._log.info(f"Connection {connection_id} left room {room.room_id}")
        deleted = False
        if was_member and room.is_empty():
            self._delete_room(room.room_id, community_id)
            deleted = True
        return LeaveResult(
            room_id=room.room_id,
            community_id=community_id,
            was_member=was_member,
            room_deleted=deleted,
            remaining=tuple(room.participants),
        )

    # ---------------------------------------------------------------------
    # Deletion
    # ---------------------------------------------------------------------

    def _delete_room(self, room_id: str, community_id: str) -> None:
        self._rooms.pop(room_id, None)
        self._discard_from_community(community_id, room_id)
        self._log.info(f"Room {room_id} deleted")

    def _discard_from_community(self, community_id: str, room_id: str) -> None:
        room_ids = self._communities.get(community_id)
        if room_ids is None:
            self._log.warning(f"Room {room_id} had no entry in community {community_id}")
            return
        room_ids.pop(room_id, None)
        if not room_ids:
            del self._communities[community_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)


__all__ = ["Registry", "LeaveResult"]
