"""Unit tests for the voxel grid."""

import numpy as np
import pytest

from daedalus.errors import OutOfBoundsError
from daedalus.grid import Cell, CellType, Direction, Grid, offset, travel_direction
from daedalus.room import Room


class TestDirection:
    """Tests for the Direction enum."""

    def test_opposites(self):
        assert Direction.NORTH.opposite() == Direction.SOUTH
        assert Direction.SOUTH.opposite() == Direction.NORTH
        assert Direction.EAST.opposite() == Direction.WEST
        assert Direction.WEST.opposite() == Direction.EAST

    def test_steps_are_horizontal(self):
        """North runs along +z and east along +x; no direction moves vertically."""
        assert Direction.NORTH.step() == (0, 0, 1)
        assert Direction.EAST.step() == (1, 0, 0)
        for direction in Direction:
            assert direction.step()[1] == 0
            assert offset(direction.step(), direction.opposite().step()) == (0, 0, 0)

    def test_travel_direction(self):
        assert travel_direction((0, 0, 0), (0, 0, 1)) == Direction.NORTH
        assert travel_direction((0, 0, 0), (-1, 0, 0)) == Direction.WEST
        # Level changes are ignored, only the horizontal part counts
        assert travel_direction((2, 3, 2), (2, 2, 1)) == Direction.SOUTH
        assert travel_direction((1, 1, 1), (1, 2, 1)) is None


class TestGridConstruction:
    """Tests for building and re-initializing a grid."""

    def test_every_cell_starts_empty(self):
        grid = Grid((1, 1, 1), (3, 2, 4))
        cells = list(grid.iter_cells())
        assert len(cells) == 3 * 2 * 4
        assert all(cell.cell_type == CellType.EMPTY for cell in cells)

    def test_cells_know_their_index(self):
        grid = Grid((2, 3, 4), (3, 3, 3))
        cell = grid.get_cell((1, 2, 0))
        assert cell.index == (1, 2, 0)
        assert cell.center == (2.0, 6.0, 0.0)

    def test_init_resets_cells(self):
        grid = Grid((1, 1, 1), (2, 2, 2))
        grid.get_cell((1, 1, 1)).cell_type = CellType.HALLWAY
        grid.init((1, 1, 1), (4, 1, 4))
        assert grid.dimensions == (4, 1, 4)
        assert grid.count(CellType.HALLWAY) == 0

    @pytest.mark.parametrize("cell_size, dimensions", [
        ((0, 1, 1), (2, 2, 2)),
        ((1, 1), (2, 2, 2)),
        ((1, 1, 1), (2, 0, 2)),
    ])
    def test_rejects_bad_shapes(self, cell_size, dimensions):
        with pytest.raises(ValueError):
            Grid(cell_size, dimensions)


class TestGridIndexing:
    """Tests for bounds checks and world / index arithmetic."""

    def test_bounds(self):
        grid = Grid((1, 1, 1), (2, 3, 4))
        assert grid.is_valid_cell((0, 0, 0))
        assert grid.is_valid_cell((1, 2, 3))
        assert not grid.is_valid_cell((2, 0, 0))
        assert not grid.is_valid_cell((0, -1, 0))
        assert not grid.is_valid_cell((0, 0, 4))

    def test_get_cell_out_of_bounds_raises(self):
        grid = Grid((1, 1, 1), (2, 2, 2))
        with pytest.raises(OutOfBoundsError) as exc_info:
            grid.get_cell((2, 0, 0))
        assert exc_info.value.index == (2, 0, 0)
        # Also usable as a plain IndexError
        with pytest.raises(IndexError):
            grid.is_cell_empty((-1, 0, 0))

    def test_world_position_to_index(self):
        grid = Grid((5, 5, 5), (20, 10, 20))
        assert grid.get_grid_indices((0.0, 0.0, 0.0)) == (0, 0, 0)
        assert grid.get_grid_indices((12.4, 5.0, 4.99)) == (2, 1, 0)

    def test_index_round_trips_through_world_position(self):
        """Fractional cell sizes must not lose an index to floating point error."""
        grid = Grid((0.1, 0.3, 0.7), (10, 10, 10))
        for index in [(0, 0, 0), (3, 7, 9), (9, 9, 9)]:
            assert grid.get_grid_indices(grid.get_center_by_indices(index)) == index

    def test_get_center_snaps_to_cell(self):
        grid = Grid((5, 5, 5), (4, 4, 4))
        assert grid.get_center((7.5, 1.0, 19.0)) == (5.0, 0.0, 15.0)

    def test_grid_center(self):
        grid = Grid((5, 2, 5), (20, 10, 4))
        assert grid.get_grid_center() == (50.0, 10.0, 10.0)

    def test_cell_types_snapshot(self):
        grid = Grid((1, 1, 1), (2, 2, 2))
        grid.get_cell((1, 0, 1)).cell_type = CellType.STAIRS
        types = grid.cell_types()
        assert types.shape == (2, 2, 2)
        assert types[1, 0, 1] == CellType.STAIRS
        assert np.count_nonzero(types) == 1


class TestRoomPlacementChecks:
    """Tests for can_place_room and free neighbour checks."""

    def test_can_place_in_empty_grid(self):
        grid = Grid((1, 1, 1), (3, 3, 3))
        assert grid.can_place_room((1, 1, 1), Room())

    def test_cannot_place_on_filled_or_outside(self):
        grid = Grid((1, 1, 1), (3, 3, 3))
        grid.get_cell((1, 1, 1)).cell_type = CellType.HALLWAY
        assert not grid.can_place_room((1, 1, 1), Room())
        assert not grid.can_place_room((3, 1, 1), Room())

    def test_cannot_touch_another_room(self):
        grid = Grid((1, 1, 1), (4, 4, 4))
        other = Room()
        cell = grid.get_cell((1, 1, 1))
        cell.cell_type = CellType.ROOM
        other.add_cell(cell)

        new_room = Room()
        # Above, and beside: both touch the other room
        assert not grid.can_place_room((1, 2, 1), new_room)
        assert not grid.can_place_room((2, 1, 1), new_room)
        # Diagonal neighbours do not share a face
        assert grid.can_place_room((2, 2, 1), new_room)

    def test_may_touch_own_cells(self):
        grid = Grid((1, 1, 1), (4, 4, 4))
        room = Room()
        cell = grid.get_cell((1, 1, 1))
        cell.cell_type = CellType.ROOM
        room.add_cell(cell)
        assert grid.can_place_room((2, 1, 1), room)

    def test_free_level_neighbour(self):
        grid = Grid((1, 1, 1), (3, 2, 3))
        assert grid.has_free_level_adjacent_cell((1, 0, 1))
        for direction in Direction:
            grid.get_cell(offset((1, 0, 1), direction.step())).cell_type = CellType.HALLWAY
        # The cell above is free, but it does not count
        assert not grid.has_free_level_adjacent_cell((1, 0, 1))

    def test_corner_cell_only_counts_inside_neighbours(self):
        grid = Grid((1, 1, 1), (2, 1, 2))
        grid.get_cell((1, 0, 0)).cell_type = CellType.ROOM
        grid.get_cell((0, 0, 1)).cell_type = CellType.ROOM
        assert not grid.has_free_level_adjacent_cell((0, 0, 0))


class TestCell:
    """Tests for the Cell dataclass."""

    def test_defaults(self):
        cell = Cell(index=(0, 0, 0), center=(0.0, 0.0, 0.0))
        assert cell.is_empty
        assert cell.face_direction is None
