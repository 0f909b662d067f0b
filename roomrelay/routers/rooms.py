from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..errors import RoomNotFound
from ..logging_config import get_logger
from ..registry import Registry
from ..schemas import CreateRoomResponse, RoomDetail, RoomSummary
from ..state import get_registry

logger = get_logger(__name__)

router = APIRouter(prefix="", tags=["rooms"])


@router.get("/communities/{community_id}/rooms", response_model=List[RoomSummary])
async def list_rooms(community_id: str, registry: Registry = Depends(get_registry)):
    # Unknown communities simply have no rooms.
    return registry.list_rooms(community_id)


@router.post("/communities/{community_id}/rooms", response_model=CreateRoomResponse)
async def create_room(community_id: str, registry: Registry = Depends(get_registry)):
    room_id = registry.create_room(community_id)
    return CreateRoomResponse(room_id=room_id)


# ---------------------------------------------------------------------------
# Single room lookup
# ---------------------------------------------------------------------------


@router.get("/rooms/{room_id}", response_model=RoomDetail)
async def get_room(room_id: str, registry: Registry = Depends(get_registry)):
    room = registry.get_room(room_id)
    if room is None:
        logger.info(f"Room lookup failed: {room_id} not found")
        raise HTTPException(status_code=404, detail=RoomNotFound.reason)
    return RoomDetail(id=room.room_id, community_id=room.community_id, participants=len(room.participants))
