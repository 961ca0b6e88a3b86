"""Unit tests for rooms."""

import pytest

from daedalus.errors import RoomSealedError
from daedalus.grid import CellType, Grid
from daedalus.room import Room


def make_room(grid: Grid, indices) -> Room:
    """Claim the given cells as a room and seal it."""
    room = Room()
    for index in indices:
        cell = grid.get_cell(index)
        cell.cell_type = CellType.ROOM
        room.add_cell(cell)
    room.calculate_center()
    return room


class TestRoomCenter:
    """Tests for sealing a room with calculate_center."""

    def test_center_is_cell_average(self):
        grid = Grid((5, 5, 5), (10, 3, 10))
        room = make_room(grid, [(0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1)])
        assert room.center == (2.5, 0.0, 2.5)

    def test_center_before_calculation_raises(self):
        with pytest.raises(RoomSealedError):
            Room().center

    def test_sealed_room_rejects_cells(self):
        grid = Grid((1, 1, 1), (3, 3, 3))
        room = make_room(grid, [(0, 0, 0)])
        with pytest.raises(RoomSealedError):
            room.add_cell(grid.get_cell((1, 0, 0)))

    def test_center_cannot_be_recalculated(self):
        grid = Grid((1, 1, 1), (3, 3, 3))
        room = make_room(grid, [(0, 0, 0)])
        with pytest.raises(RoomSealedError):
            room.calculate_center()

    def test_empty_room_has_no_center(self):
        with pytest.raises(ValueError):
            Room().calculate_center()


class TestRoomQueries:
    """Tests for containment and adjacency lookups."""

    def test_contains_index(self):
        grid = Grid((1, 1, 1), (4, 4, 4))
        room = make_room(grid, [(1, 1, 1), (2, 1, 1)])
        assert room.contains_index((2, 1, 1)) is grid.get_cell((2, 1, 1))
        assert room.contains_index([1, 1, 1]) is not None
        assert room.contains_index((3, 1, 1)) is None
        assert len(room) == 2

    def test_adjacent_includes_vertical(self):
        grid = Grid((1, 1, 1), (4, 4, 4))
        room = make_room(grid, [(1, 1, 1)])
        assert room.has_adjacent_cell((1, 2, 1))
        assert room.has_adjacent_cell((0, 1, 1))
        assert not room.has_adjacent_cell((2, 2, 1))

    def test_level_adjacent_excludes_vertical(self):
        grid = Grid((1, 1, 1), (4, 4, 4))
        room = make_room(grid, [(1, 1, 1)])
        assert room.has_level_adjacent_cell((1, 1, 2)) is grid.get_cell((1, 1, 1))
        assert room.has_level_adjacent_cell((1, 2, 1)) is None
        assert room.has_level_adjacent_cell((2, 1, 2)) is None


class TestClosestValidStartCell:
    """Tests for choosing where a hallway leaves a room."""

    def test_picks_cell_nearest_goal(self):
        grid = Grid((1, 1, 1), (10, 1, 10))
        room = make_room(grid, [(1, 0, 1), (2, 0, 1), (1, 0, 2), (2, 0, 2)])
        assert room.closest_valid_start_cell((8, 0, 1), grid) == (2, 0, 1)
        assert room.closest_valid_start_cell((1, 0, 9), grid) == (1, 0, 2)

    def test_skips_boxed_in_cells(self):
        grid = Grid((1, 1, 1), (5, 1, 1))
        room = make_room(grid, [(1, 0, 0), (2, 0, 0)])
        # (2, 0, 0) is nearest, but its only free side gets blocked
        grid.get_cell((3, 0, 0)).cell_type = CellType.HALLWAY
        assert room.closest_valid_start_cell((4, 0, 0), grid) == (1, 0, 0)

    def test_none_when_fully_enclosed(self):
        grid = Grid((1, 1, 1), (1, 1, 1))
        room = make_room(grid, [(0, 0, 0)])
        assert room.closest_valid_start_cell((0, 0, 0), grid) is None


class TestRoomEquality:
    """Rooms compare by center and size."""

    def test_same_center_and_size_are_equal(self):
        room_a = make_room(Grid((1, 1, 1), (4, 4, 4)), [(1, 1, 1)])
        room_b = make_room(Grid((1, 1, 1), (4, 4, 4)), [(1, 1, 1)])
        assert room_a == room_b
        assert hash(room_a) == hash(room_b)
        assert len({room_a, room_b}) == 1

    def test_different_rooms_differ(self):
        grid = Grid((1, 1, 1), (6, 4, 6))
        room_a = make_room(grid, [(0, 0, 0)])
        room_b = make_room(grid, [(3, 0, 3)])
        assert room_a != room_b
