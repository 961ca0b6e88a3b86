"""
Voxel grid that rooms, hallways and staircases are carved into.

Cells are addressed by an (x, y, z) index. y is the vertical axis (one level
per y value), north runs along +z and east along +x.
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Iterator, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from .errors import OutOfBoundsError

if TYPE_CHECKING:
    from .room import Room


Index = Tuple[int, int, int]
Vector = Tuple[float, float, float]

# Tolerance used when flooring world positions, so index * size maps back to index
_FLOOR_EPSILON = 1e-9


class CellType(IntEnum):
    """What occupies a grid cell."""

    EMPTY = 0
    ROOM = 1
    HALLWAY = 2
    STAIRS = 3  # The staircase itself
    STAIR_SPACE = 4  # Headroom cell that must stay open next to a staircase


class Direction(Enum):
    """Horizontal cardinal directions. Vertical movement only happens on stairs."""

    NORTH = auto()
    SOUTH = auto()
    EAST = auto()
    WEST = auto()

    def opposite(self) -> "Direction":
        """Returns the opposite direction."""
        opposites = {
            Direction.NORTH: Direction.SOUTH,
            Direction.SOUTH: Direction.NORTH,
            Direction.EAST: Direction.WEST,
            Direction.WEST: Direction.EAST,
        }
        return opposites[self]

    def step(self) -> Index:
        """Returns the index offset for moving one cell in this direction."""
        steps = {
            Direction.NORTH: (0, 0, 1),
            Direction.SOUTH: (0, 0, -1),
            Direction.EAST: (1, 0, 0),
            Direction.WEST: (-1, 0, 0),
        }
        return steps[self]


# Same-level neighbours, in the order candidates are explored
LEVEL_DIRECTIONS = (Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST)

# Face-sharing neighbours in all three axes
ADJACENT_OFFSETS = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)


def offset(index: Sequence[int], delta: Sequence[int]) -> Index:
    """Adds two index triples."""
    return (index[0] + delta[0], index[1] + delta[1], index[2] + delta[2])


def travel_direction(from_index: Sequence[int], to_index: Sequence[int]) -> Optional[Direction]:
    """
    Returns the horizontal direction travelled going from one index to the next.

    The indices are expected to be neighbours in x or z (optionally also one
    level apart). Returns None when there is no horizontal difference.
    """
    dx = to_index[0] - from_index[0]
    dz = to_index[2] - from_index[2]

    if dz > 0:
        return Direction.NORTH
    if dz < 0:
        return Direction.SOUTH
    if dx > 0:
        return Direction.EAST
    if dx < 0:
        return Direction.WEST
    return None


@dataclass
class Cell:
    """
    A single grid cell.

    Cells are never removed from the grid, only retyped as rooms and paths are
    carved. face_direction only matters for STAIRS and STAIR_SPACE cells.
    """

    index: Index
    center: Vector
    cell_type: CellType = CellType.EMPTY
    face_direction: Optional[Direction] = None

    @property
    def is_empty(self) -> bool:
        return self.cell_type == CellType.EMPTY


class Grid:
    """Dense 3D array of cells plus index and world-space arithmetic."""

    def __init__(self, cell_size: Sequence[float], dimensions: Sequence[int]) -> None:
        self.cell_size: Vector
        self.dimensions: Index
        self.cells: np.ndarray
        self.init(cell_size, dimensions)

    def init(self, cell_size: Sequence[float], dimensions: Sequence[int]) -> None:
        """
        (Re)initialize the grid. Every cell is reset to EMPTY.

        Args:
            cell_size: World-space width, height and depth of one cell
            dimensions: Number of cells along x, y and z
        """
        if len(cell_size) != 3 or any(size <= 0 for size in cell_size):
            raise ValueError(f"cell_size must be three positive numbers, got {cell_size}")
        if len(dimensions) != 3 or any(int(count) <= 0 for count in dimensions):
            raise ValueError(f"dimensions must be three positive integers, got {dimensions}")

        self.cell_size = (float(cell_size[0]), float(cell_size[1]), float(cell_size[2]))
        self.dimensions = (int(dimensions[0]), int(dimensions[1]), int(dimensions[2]))

        self.cells = np.empty(self.dimensions, dtype=object)
        for index in np.ndindex(*self.dimensions):
            self.cells[index] = Cell(index=index, center=self.get_center_by_indices(index))

    def get_cell(self, index: Sequence[int]) -> Cell:
        """Returns the cell at index. Raises OutOfBoundsError for invalid indices."""
        if not self.is_valid_cell(index):
            raise OutOfBoundsError(index, self.dimensions)
        return self.cells[index[0], index[1], index[2]]

    def is_valid_cell(self, index: Sequence[int]) -> bool:
        """True if index lies inside the grid."""
        return all(0 <= index[axis] < self.dimensions[axis] for axis in range(3))

    def is_cell_empty(self, index: Sequence[int]) -> bool:
        """True if nothing (room, hallway, stairs) occupies the cell."""
        return self.get_cell(index).is_empty

    def can_place_room(self, index: Sequence[int], room: "Room") -> bool:
        """
        Check whether a room cell may be claimed at index.

        The cell must be inside the grid, empty, and must not touch a filled
        cell that belongs to anything other than this room.
        """
        return (
            self.is_valid_cell(index)
            and self.is_cell_empty(index)
            and self.not_adjacent_to_filled_room(index, room)
        )

    def not_adjacent_to_filled_room(self, index: Sequence[int], room: "Room") -> bool:
        """True if none of the six neighbours is filled by something outside room."""
        for delta in ADJACENT_OFFSETS:
            neighbour = offset(index, delta)
            if not self.is_valid_cell(neighbour):
                continue
            if self.is_cell_empty(neighbour):
                continue
            if room.contains_index(neighbour) is None:
                return False
        return True

    def has_free_level_adjacent_cell(self, index: Sequence[int]) -> bool:
        """True if a north, south, east or west neighbour is inside the grid and empty."""
        for direction in LEVEL_DIRECTIONS:
            neighbour = offset(index, direction.step())
            if self.is_valid_cell(neighbour) and self.is_cell_empty(neighbour):
                return True
        return False

    def get_grid_indices(self, pos: Sequence[float]) -> Index:
        """Returns the index of the cell containing a world-space position."""
        return (
            math.floor(pos[0] / self.cell_size[0] + _FLOOR_EPSILON),
            math.floor(pos[1] / self.cell_size[1] + _FLOOR_EPSILON),
            math.floor(pos[2] / self.cell_size[2] + _FLOOR_EPSILON),
        )

    def get_center_by_indices(self, index: Sequence[float]) -> Vector:
        """Returns the world position of the cell at index."""
        return (
            float(index[0] * self.cell_size[0]),
            float(index[1] * self.cell_size[1]),
            float(index[2] * self.cell_size[2]),
        )

    def get_center(self, pos: Sequence[float]) -> Vector:
        """Snaps a world position to the position of the cell that contains it."""
        return self.get_center_by_indices(self.get_grid_indices(pos))

    def get_grid_center(self) -> Vector:
        """Returns the world-space middle of the whole grid."""
        return (
            self.dimensions[0] * 0.5 * self.cell_size[0],
            self.dimensions[1] * 0.5 * self.cell_size[1],
            self.dimensions[2] * 0.5 * self.cell_size[2],
        )

    def iter_cells(self) -> Iterator[Cell]:
        """Iterates over every cell in x, y, z order."""
        return iter(self.cells.flat)

    def cell_types(self) -> np.ndarray:
        """Returns an integer array of shape dimensions holding each cell's CellType."""
        types = np.zeros(self.dimensions, dtype=int)
        for cell in self.iter_cells():
            types[cell.index] = int(cell.cell_type)
        return types

    def count(self, cell_type: CellType) -> int:
        """Number of cells of the given type."""
        return sum(1 for cell in self.iter_cells() if cell.cell_type == cell_type)
