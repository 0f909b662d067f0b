from __future__ import annotations

from typing import List, Optional

from .constants import ROOM_CAPACITY

# NOTE: ``Room`` holds no websocket references. Delivery to members goes
# through ``ConnectionManager`` using the connection ids listed here.


class Room:
    """A one-on-one rendezvous: up to ``ROOM_CAPACITY`` connection ids."""

    def __init__(
        self,
        room_id: str,
        community_id: str,
        participants: Optional[List[str]] = None,
        capacity: int = ROOM_CAPACITY,
    ):
        self.room_id = room_id
        self.community_id = community_id
        self.capacity = capacity
        self.participants: List[str] = list(participants or [])

    # ---------------------------------------------------------------------
    # Membership helpers
    # ---------------------------------------------------------------------

    def is_full(self) -> bool:
        return len(self.participants) >= self.capacity

    def is_empty(self) -> bool:
        return not self.participants

    def has_participant(self, connection_id: str) -> bool:
        return connection_id in self.participants

    def add_participant(self, connection_id: str) -> None:
        self.participants.append(connection_id)

    def remove_participant(self, connection_id: str) -> bool:
        """Drop *connection_id*; return *True* if it was a member."""
        before = len(self.participants)
        self.participants = [cid for cid in self.participants if cid != connection_id]
        return len(self.participants) != before

    def others(self, connection_id: str) -> List[str]:
        """Members other than *connection_id*, in join order."""
        return [cid for cid in self.participants if cid != connection_id]

    def snapshot(self) -> "Room":
        """Detached copy safe to hand out of the registry lock."""
        return Room(self.room_id, self.community_id, self.participants, self.capacity)

    def __repr__(self) -> str:
        return f"Room(room_id={self.room_id!r}, community_id={self.community_id!r}, participants={self.participants!r})"


__all__ = ["Room"]
