"""Pydantic wire schemas for the HTTP surface and the event envelope.

Field names follow Python conventions; aliases carry the camelCase keys
clients expect on the wire.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# -----------------------------
# Listing / creation
# -----------------------------


class RoomSummary(BaseModel):
    """One entry of a community's room listing."""

    id: str
    participants: int  # participant count, not identities


class CreateRoomResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")


class RoomDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    community_id: str = Field(alias="communityId")
    participants: int


# -----------------------------
# WebSocket envelope
# -----------------------------


class EventEnvelope(BaseModel):
    """``{"type": <event name>, "data": <payload>}`` in both directions.

    ``data`` is opaque here; handlers pick out only the routing keys they need.
    """

    type: str
    data: Optional[Any] = None


__all__ = [
    "RoomSummary",
    "CreateRoomResponse",
    "RoomDetail",
    "EventEnvelope",
]
