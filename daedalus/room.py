"""
Rooms: groups of grid cells that hallways connect.
"""

from typing import Dict, List, Optional, Sequence, TYPE_CHECKING

from .errors import RoomSealedError
from .grid import ADJACENT_OFFSETS, LEVEL_DIRECTIONS, Cell, Index, Vector, offset

if TYPE_CHECKING:
    from .grid import Grid


class Room:
    """
    An ordered collection of cells with a fixed center.

    Cells are added while the room is being placed. calculate_center() seals
    the room: its shape and center never change afterwards. Two rooms compare
    equal when their centers and cell counts match; placement guarantees no
    two rooms share a center.
    """

    def __init__(self) -> None:
        self.cells: List[Cell] = []
        self._cells_by_index: Dict[Index, Cell] = {}
        self._center: Optional[Vector] = None

    @property
    def center(self) -> Vector:
        if self._center is None:
            raise RoomSealedError("Room center requested before calculate_center()")
        return self._center

    @property
    def is_sealed(self) -> bool:
        return self._center is not None

    def add_cell(self, cell: Cell) -> None:
        """Add a cell to the room. Not allowed once the center is calculated."""
        if self.is_sealed:
            raise RoomSealedError(f"Cannot add cell {cell.index} to a sealed room")
        self.cells.append(cell)
        self._cells_by_index[cell.index] = cell

    def calculate_center(self) -> Vector:
        """Average the cell positions into the room center and seal the room."""
        if self.is_sealed:
            raise RoomSealedError("Room center has already been calculated")
        if not self.cells:
            raise ValueError("Cannot calculate the center of a room with no cells")

        count = len(self.cells)
        self._center = (
            sum(cell.center[0] for cell in self.cells) / count,
            sum(cell.center[1] for cell in self.cells) / count,
            sum(cell.center[2] for cell in self.cells) / count,
        )
        return self._center

    def contains_index(self, index: Sequence[int]) -> Optional[Cell]:
        """Returns the room's cell at index, or None if the room does not cover it."""
        return self._cells_by_index.get(tuple(index))

    def has_adjacent_cell(self, index: Sequence[int]) -> bool:
        """True if a room cell touches index on any face, including above or below."""
        return any(
            offset(index, delta) in self._cells_by_index for delta in ADJACENT_OFFSETS
        )

    def has_level_adjacent_cell(self, index: Sequence[int]) -> Optional[Cell]:
        """Returns a room cell directly north, south, east or west of index, if any."""
        for direction in LEVEL_DIRECTIONS:
            cell = self._cells_by_index.get(offset(index, direction.step()))
            if cell is not None:
                return cell
        return None

    def closest_valid_start_cell(self, goal_index: Sequence[float], grid: "Grid") -> Optional[Index]:
        """
        Find the room cell nearest to goal_index that a hallway can leave from.

        A cell qualifies when one of its same-level neighbours is free.
        Returns None if every cell is boxed in.
        """
        closest: Optional[Index] = None
        closest_distance = 0.0

        for cell in self.cells:
            if not grid.has_free_level_adjacent_cell(cell.index):
                continue
            distance = sum((cell.index[axis] - goal_index[axis]) ** 2 for axis in range(3))
            if closest is None or distance < closest_distance:
                closest = cell.index
                closest_distance = distance

        return closest

    def __len__(self) -> int:
        return len(self.cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Room):
            return NotImplemented
        return self._center == other._center and len(self.cells) == len(other.cells)

    def __hash__(self) -> int:
        return hash((self._center, len(self.cells)))

    def __repr__(self) -> str:
        return f"Room(center={self._center}, cells={len(self.cells)})"
