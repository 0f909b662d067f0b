from __future__ import annotations

import logging
import threading

import pytest

from roomrelay.errors import AlreadyInRoom, RoomFull, RoomIdCollision, RoomNotFound
from roomrelay.registry import Registry
from roomrelay.schemas import RoomSummary


def _ids(*values):
    it = iter(values)
    return lambda: next(it)


def test_create_room_is_listed_empty(registry):
    room_id = registry.create_room("c1")

    assert registry.list_rooms("c1") == [RoomSummary(id=room_id, participants=0)]
    room = registry.get_room(room_id)
    assert room.community_id == "c1"
    assert room.participants == []


def test_list_unknown_community_is_empty(registry):
    assert registry.list_rooms("nobody") == []


def test_listing_keeps_creation_order(registry):
    first = registry.create_room("c1")
    second = registry.create_room("c1")
    other = registry.create_room("c2")

    assert [s.id for s in registry.list_rooms("c1")] == [first, second]
    assert [s.id for s in registry.list_rooms("c2")] == [other]


def test_capacity_is_two(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")
    registry.join(room_id, "b")

    with pytest.raises(RoomFull):
        registry.join(room_id, "d")

    assert registry.get_room(room_id).participants == ["a", "b"]


def test_join_unknown_room_changes_nothing(registry):
    existing = registry.create_room("c1")

    with pytest.raises(RoomNotFound) as exc_info:
        registry.join("missing", "a")

    assert str(exc_info.value) == "Room does not exist"
    assert len(registry) == 1
    assert registry.list_rooms("c1") == [RoomSummary(id=existing, participants=0)]


def test_rejoin_same_room_is_noop(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")
    registry.join(room_id, "a")

    assert registry.get_room(room_id).participants == ["a"]


def test_leave_two_person_room_keeps_room(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")
    registry.join(room_id, "b")

    result = registry.leave(room_id, "b")

    assert result.was_member
    assert not result.room_deleted
    assert result.community_id == "c1"
    assert result.remaining == ("a",)
    assert registry.list_rooms("c1") == [RoomSummary(id=room_id, participants=1)]


def test_last_leave_deletes_room_and_community_entry(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")

    result = registry.leave(room_id, "a")

    assert result.room_deleted
    assert result.community_id == "c1"
    assert registry.get_room(room_id) is None
    assert registry.list_rooms("c1") == []


def test_leave_is_best_effort(registry):
    room_id = registry.create_room("c1")

    assert registry.leave("missing", "a") is None
    result = registry.leave(room_id, "stranger")

    assert not result.was_member
    assert not result.room_deleted
    # a fresh, never-joined room survives a stray leave
    assert registry.get_room(room_id) is not None


def test_remove_connection_everywhere(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")
    registry.join(room_id, "b")

    results = registry.remove_connection_everywhere("b")

    assert [(r.room_id, r.room_deleted, r.remaining) for r in results] == [(room_id, False, ("a",))]
    assert registry.remove_connection_everywhere("b") == []


def test_remove_connection_everywhere_handles_multiple_rooms(registry):
    # join refuses this state, so build it by hand; cleanup must still cope.
    r1 = registry.create_room("c1")
    r2 = registry.create_room("c2")
    registry.join(r1, "a")
    registry.join(r2, "b")
    registry._rooms[r2].add_participant("a")

    results = registry.remove_connection_everywhere("a")

    assert {r.room_id: r.room_deleted for r in results} == {r1: True, r2: False}
    assert registry.get_room(r1) is None
    assert registry.members(r2) == ("b",)
    assert registry.list_rooms("c1") == []


def test_get_room_returns_snapshot(registry):
    room_id = registry.create_room("c1")
    room = registry.get_room(room_id)
    room.add_participant("intruder")

    assert registry.members(room_id) == ()


def test_room_of(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")

    assert registry.room_of("a") == room_id
    assert registry.room_of("b") is None


def test_colliding_id_is_regenerated():
    registry = Registry(id_factory=_ids("dup", "dup", "fresh"))
    registry.create_room("c1")

    assert registry.create_room("c1") == "fresh"
    assert [s.id for s in registry.list_rooms("c1")] == ["dup", "fresh"]


def test_colliding_id_never_overwrites():
    registry = Registry(id_factory=lambda: "dup")
    registry.create_room("c1")
    registry.join("dup", "a")

    with pytest.raises(RoomIdCollision):
        registry.create_room("c2")

    assert registry.get_room("dup").participants == ["a"]
    assert registry.list_rooms("c2") == []


def test_dangling_community_entry_is_healed(registry, caplog):
    room_id = registry.create_room("c1")
    kept = registry.create_room("c1")
    registry._rooms.pop(room_id)

    with caplog.at_level(logging.ERROR, logger="roomrelay.registry"):
        assert registry.list_rooms("c1") == [RoomSummary(id=kept, participants=0)]

    assert "references missing room" in caplog.text
    assert registry.list_rooms("c1") == [RoomSummary(id=kept, participants=0)]


def test_concurrent_joins_never_overfill(registry):
    room_id = registry.create_room("c1")
    barrier = threading.Barrier(8)
    admitted = []
    rejected = []

    def worker(cid):
        barrier.wait()
        try:
            registry.join(room_id, cid)
            admitted.append(cid)
        except RoomFull:
            rejected.append(cid)

    threads = [threading.Thread(target=worker, args=(f"conn-{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(admitted) == 2
    assert len(rejected) == 6
    assert sorted(registry.members(room_id)) == sorted(admitted)


def test_join_refuses_a_second_room(registry):
    r1 = registry.create_room("c1")
    r2 = registry.create_room("c1")
    registry.join(r1, "a")

    with pytest.raises(AlreadyInRoom) as exc_info:
        registry.join(r2, "a")

    assert exc_info.value.room_id == r1
    assert registry.members(r1) == ("a",)
    assert registry.members(r2) == ()


def test_move_switches_rooms_in_one_step(registry):
    r1 = registry.create_room("c1")
    r2 = registry.create_room("c1")
    registry.join(r1, "a")
    registry.join(r1, "b")

    room, departed = registry.move(r2, "b")

    assert room.participants == ["b"]
    assert [(d.room_id, d.room_deleted, d.remaining) for d in departed] == [(r1, False, ("a",))]
    assert registry.room_of("b") == r2


def test_move_out_of_last_seat_deletes_old_room(registry):
    r1 = registry.create_room("c1")
    r2 = registry.create_room("c2")
    registry.join(r1, "a")

    _, departed = registry.move(r2, "a")

    assert departed[0].room_deleted
    assert registry.get_room(r1) is None
    assert registry.list_rooms("c1") == []


@pytest.mark.parametrize("target", ["missing", "full"])
def test_rejected_move_keeps_current_room(registry, target):
    current = registry.create_room("c1")
    registry.join(current, "a")
    full = registry.create_room("c1")
    registry.join(full, "x")
    registry.join(full, "y")
    room_id = full if target == "full" else "missing"

    with pytest.raises((RoomFull, RoomNotFound)):
        registry.move(room_id, "a")

    assert registry.members(current) == ("a",)
    assert registry.members(full) == ("x", "y")


def test_move_into_current_room_is_noop(registry):
    room_id = registry.create_room("c1")
    registry.join(room_id, "a")

    room, departed = registry.move(room_id, "a")

    assert departed == []
    assert room.participants == ["a"]
