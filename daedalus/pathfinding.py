"""
A* search that carves hallways and staircases between rooms.

Movement rules:
- Hallways move north, south, east or west, never straight up or down.
- A path never turns straight back the way it came.
- Changing level means stepping diagonally up or down onto a staircase. The
  staircase needs an empty stair space cell at the current level, costs
  STAIR_COST instead of 1, and must be followed by a flat landing cell in the
  same direction before the path may branch again.
- A path never crosses filled cells or its own earlier cells (stair spaces
  included).

The search stops next to the goal room, so the returned path ends outside it.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, TYPE_CHECKING

from .errors import InvalidGoalError
from .grid import CellType, Direction, Index, LEVEL_DIRECTIONS, offset, travel_direction
from .priority_queue import PriorityQueue

if TYPE_CHECKING:
    from .grid import Grid
    from .room import Room

# Cost of one staircase step; discourages needless level changes
STAIR_COST = 5

# Scales the heuristic just above 1 so ties favour cells nearer the goal
HEURISTIC_BIAS = 1.001


@dataclass(eq=False)
class AStarNode:
    """One step in the search tree."""

    index: Index
    g: float  # Cost from the start
    h: float  # Estimated cost to the goal
    parent: Optional["AStarNode"] = None
    node_type: CellType = CellType.HALLWAY  # HALLWAY or STAIRS
    stair_space_index: Optional[Index] = None  # Only set on STAIRS nodes

    @property
    def f(self) -> float:
        return self.g + self.h

    @property
    def is_stairs(self) -> bool:
        return self.node_type == CellType.STAIRS

    @property
    def direction(self) -> Optional[Direction]:
        """Horizontal direction travelled from the parent to this node."""
        if self.parent is None:
            return None
        return travel_direction(self.parent.index, self.index)

    def chain(self) -> Iterator["AStarNode"]:
        """This node followed by each of its ancestors back to the start."""
        node: Optional[AStarNode] = self
        while node is not None:
            yield node
            node = node.parent

    def occupies(self, index: Sequence[int]) -> bool:
        """True if this node uses index, either as its cell or as its stair space."""
        index = tuple(index)
        return self.index == index or (self.is_stairs and self.stair_space_index == index)

    def in_chain(self, index: Sequence[int]) -> bool:
        """True if this node or any ancestor uses index."""
        return any(node.occupies(index) for node in self.chain())


# A path is a list of nodes from the first step after the start cell to the last cell before the goal room
Path = List[AStarNode]


def heuristic(index: Sequence[int], goal_index: Sequence[int]) -> float:
    """Manhattan distance, nudged upwards to prefer cells closer to the goal."""
    return (
        abs(index[0] - goal_index[0]) + abs(index[1] - goal_index[1]) + abs(index[2] - goal_index[2])
    ) * HEURISTIC_BIAS


def find_path(
    start_index: Sequence[int],
    goal_index: Sequence[int],
    goal_room: "Room",
    grid: "Grid",
    stair_cost: float = STAIR_COST,
) -> Optional[Path]:
    """
    Find a hallway from start_index to the goal room.

    Args:
        start_index: Room cell the hallway leaves from
        goal_index: Cell the heuristic aims for (usually the goal room's center cell)
        goal_room: Room to reach; any of its cells ends the search
        grid: Grid holding already carved rooms and hallways
        stair_cost: Cost of a staircase step

    Returns:
        Nodes from the first step after start_index to the cell just outside
        goal_room (start cell excluded), or None if no path exists. Returns an
        empty list if start_index already borders the goal room.

    Raises:
        InvalidGoalError: If goal_index is outside the grid.
    """
    if not grid.is_valid_cell(goal_index):
        raise InvalidGoalError(f"Goal index {tuple(goal_index)} is outside the grid")

    search = _AStarSearch(tuple(goal_index), goal_room, grid, stair_cost)
    return search.run(tuple(start_index))


def _trace_back(end: AStarNode) -> Path:
    """Collect the nodes from just after the start node up to end."""
    path: Path = [node for node in end.chain() if node.parent is not None]
    path.reverse()
    return path


def _node_priority(node: AStarNode) -> float:
    return node.f


def _node_key(node: AStarNode) -> Index:
    return node.index


class _AStarSearch:
    """State for a single search; open and closed sets never outlive it."""

    def __init__(self, goal_index: Index, goal_room: "Room", grid: "Grid", stair_cost: float) -> None:
        self.goal_index = goal_index
        self.goal_room = goal_room
        self.grid = grid
        self.stair_cost = stair_cost
        self.open: PriorityQueue[AStarNode] = PriorityQueue(priority=_node_priority, key=_node_key)
        self.closed: PriorityQueue[AStarNode] = PriorityQueue(priority=_node_priority, key=_node_key)

    def run(self, start_index: Index) -> Optional[Path]:
        self.open.push(AStarNode(start_index, 0, heuristic(start_index, self.goal_index)))

        while not self.open.empty():
            current = self.open.pop()

            # Never turn straight back; stairs stacked on each other would be impassable
            came_from = current.direction
            backwards = came_from.opposite() if came_from is not None else None

            # Below, level, above for each of the four directions
            for dy in (-1, 0, 1):
                for direction in LEVEL_DIRECTIONS:
                    if direction == backwards:
                        continue
                    dx, _, dz = direction.step()
                    candidate = (current.index[0] + dx, current.index[1] + dy, current.index[2] + dz)
                    path = self._check_cell(current, candidate)
                    if path is not None:
                        return path

            self.closed.push(current)

        return None

    def _check_cell(self, current: AStarNode, candidate: Index) -> Optional[Path]:
        """
        Consider moving from current to candidate.

        Returns the finished path if this move ends the search, otherwise
        queues the candidate (when it is worth exploring) and returns None.
        """
        if not self.grid.is_valid_cell(candidate):
            return None

        level_move = candidate[1] == current.index[1]

        # Stepping into the goal room: the path ends at the cell before it
        if level_move and self.goal_room.contains_index(candidate) is not None:
            return _trace_back(current)

        if not self.grid.is_cell_empty(candidate) or current.in_chain(candidate):
            return None

        if not level_move:
            return self._check_stairs(current, candidate)

        node = AStarNode(
            candidate,
            current.g + 1,
            heuristic(candidate, self.goal_index),
            parent=current,
        )

        # Right beside the goal room: this cell becomes the doorway side of the hallway
        if self.goal_room.has_level_adjacent_cell(candidate) is not None:
            return _trace_back(node)

        self._open_if_better(node)
        return None

    def _check_stairs(self, current: AStarNode, candidate: Index) -> Optional[Path]:
        """
        Place a staircase at candidate and force a landing right after it.

        Only the landing is ever checked with the staircase as its parent, so a
        staircase is always followed by a level cell in its own direction and
        no staircase follows another directly.
        """
        direction = travel_direction(current.index, candidate)
        if direction is None:
            return None

        # Headroom: the candidate column at the current level must be free
        stair_space = (candidate[0], current.index[1], candidate[2])
        if not self.grid.is_cell_empty(stair_space) or current.in_chain(stair_space):
            return None

        stairs = AStarNode(
            candidate,
            current.g + self.stair_cost,
            heuristic(candidate, self.goal_index),
            parent=current,
            node_type=CellType.STAIRS,
            stair_space_index=stair_space,
        )
        if self._dominated(stairs):
            return None

        # The landing is queued through the normal check with the stairs as its parent
        landing = offset(candidate, direction.step())
        return self._check_cell(stairs, landing)

    def _dominated(self, node: AStarNode) -> bool:
        """True if an open or closed node at the same index is at least as good."""
        for queue in (self.open, self.closed):
            existing = queue.find(node.index)
            if existing is not None and existing.f <= node.f:
                return True
        return False

    def _open_if_better(self, node: AStarNode) -> None:
        if self._dominated(node):
            return
        if self.open.contains_key(node.index):
            self.open.replace(node.index, node)
        else:
            self.open.push(node)
