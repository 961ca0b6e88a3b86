"""
Dungeon Generation Algorithm
============================

We scatter rooms through a 3D grid and then work out which of them to join.

1. Clear the grid
2. Place rooms: for each attempt pick a random cell and a random box size,
   and claim every cell of the box that is free and not touching another room
3. Tetrahedralize the room centers (Delaunay), giving a graph of "neighbouring"
   rooms. Coplanar centers are retried with a tiny jitter.
4. Take the minimum spanning tree of that graph so every room is reachable
5. Add back a random share of the edges the tree left out, for loops
6. Turn the edges into a directed room -> rooms map
7. For each connection, run A* from the start room's closest free cell to the
   goal room and carve the result (hallways, stairs and stair space)
"""

import dataclasses
import random
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .config import GeneratorConfig
from .delaunay import EdgeMap, build_edge_map, make_super_tetrahedron, tetrahedralize, unconnected_points
from .errors import DegenerateGeometryError, EmptyEdgeGraphError, GenerationInProgressError
from .event_system import Event, EventBus
from .geometry import Edge, Point, Tetrahedron
from .grid import CellType, Grid, Index, offset, travel_direction
from .mst import derive_mst
from .pathfinding import Path, find_path
from .room import Room

# Jitter applied to room centers when retrying a degenerate tetrahedralization,
# as a fraction of the smallest cell size
JITTER_FRACTION = 1e-3

RoomMap = Dict[Room, List[Room]]


@dataclass
class CarvedPath:
    """A hallway that was carved between two rooms."""

    start_room: Room
    goal_room: Room
    start_index: Index
    nodes: Path

    @property
    def stair_count(self) -> int:
        return sum(1 for node in self.nodes if node.is_stairs)


@dataclass
class GenerationResult:
    """Everything one generation pass produced."""

    grid: Grid
    rooms: List[Room]
    tetrahedra: List[Tetrahedron]
    edge_map: EdgeMap
    mst: List[Edge]
    excluded: List[Edge]  # Non-tree edges that did not get a hallway
    extra_edges: List[Edge]  # Non-tree edges that did
    room_map: RoomMap
    paths: List[CarvedPath] = field(default_factory=list)
    failed_pairs: List[Tuple[Room, Room]] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)  # phase -> milliseconds

    @property
    def connections(self) -> List[Edge]:
        """Edges that were turned into hallways: the tree plus the extras."""
        return self.mst + self.extra_edges


def carve_path(grid: Grid, start_index: Sequence[int], path: Path) -> None:
    """
    Write a path into the grid.

    Level moves become HALLWAY. A step down turns the node's cell into STAIRS
    and the cell above it into STAIR_SPACE; a step up turns the cell below the
    node into STAIRS and the node's cell into STAIR_SPACE. Stairs face the way
    you walk when climbing them, and their stair space faces the other way.
    """
    last = tuple(start_index)
    for node in path:
        if node.index[1] < last[1]:
            # Walking down, so climbing goes the opposite way
            face = travel_direction(last, node.index).opposite()
            stairs = grid.get_cell(node.index)
            space = grid.get_cell(offset(node.index, (0, 1, 0)))
        elif node.index[1] > last[1]:
            face = travel_direction(last, node.index)
            stairs = grid.get_cell(offset(node.index, (0, -1, 0)))
            space = grid.get_cell(node.index)
        else:
            grid.get_cell(node.index).cell_type = CellType.HALLWAY
            last = node.index
            continue

        stairs.cell_type = CellType.STAIRS
        stairs.face_direction = face
        space.cell_type = CellType.STAIR_SPACE
        space.face_direction = face.opposite()
        last = node.index


class DungeonGenerator:
    """
    Runs generation passes for one configuration.

    The grid and every intermediate structure of the latest pass stay
    available as attributes until the next generate() or clear().
    """

    def __init__(self, config: Optional[GeneratorConfig] = None, event_bus: Optional[EventBus] = None) -> None:
        self.config = config or GeneratorConfig()
        self.event_bus = event_bus or EventBus()
        self.grid = Grid(self.config.cell_size, self.config.grid_size)

        self.rooms: List[Room] = []
        self.tetrahedra: List[Tetrahedron] = []
        self.edge_map: EdgeMap = {}
        self.mst: List[Edge] = []
        self.excluded: List[Edge] = []
        self.extra_edges: List[Edge] = []
        self.room_map: RoomMap = {}
        self.paths: List[CarvedPath] = []
        self.failed_pairs: List[Tuple[Room, Room]] = []
        self.timings: Dict[str, float] = {}

        self._rooms_by_center: Dict[Point, Room] = {}
        self._rng = random.Random(self.config.seed)
        self._generating = False

    @property
    def is_generating(self) -> bool:
        return self._generating

    def clear(self) -> None:
        """Forget the previous dungeon and start from an all EMPTY grid."""
        self.event_bus.emit(Event.DUNGEON_CLEARED)

        self.rooms = []
        self.tetrahedra = []
        self.edge_map = {}
        self.mst = []
        self.excluded = []
        self.extra_edges = []
        self.room_map = {}
        self.paths = []
        self.failed_pairs = []
        self.timings = {}
        self._rooms_by_center = {}

        # A fresh grid, so a previous GenerationResult keeps its own cells
        self.grid = Grid(self.config.cell_size, self.config.grid_size)

    def generate(self) -> GenerationResult:
        """
        Run one full generation pass.

        A seeded config reproduces the same dungeon on every pass because the
        random generator is reseeded here.

        Raises:
            GenerationInProgressError: If called while a pass is running
                (e.g. from an event handler).
            DegenerateGeometryError: If the room centers stay degenerate after
                every jittered retry.
            EmptyEdgeGraphError: If fewer than four usable rooms were placed.
        """
        if self._generating:
            raise GenerationInProgressError("A generation pass is already running")

        self._generating = True
        try:
            return self._run()
        finally:
            self._generating = False

    def _run(self) -> GenerationResult:
        start = time.perf_counter()
        self._rng = random.Random(self.config.seed)
        self.event_bus.emit(Event.GENERATION_START, config=self.config)

        self._phase("clear", self.clear)
        self._phase("place_rooms", self._place_rooms)
        self._phase("tetrahedralize", self._build_graph)
        self._phase("spanning_tree", self._build_spanning_tree)
        self._phase("room_map", self._build_room_map)
        self._phase("carve_paths", self._carve_paths)

        self.timings["total"] = (time.perf_counter() - start) * 1000
        if self.config.report_timing:
            print(f"Algorithm time: {self.timings['total']:.1f} ms", file=sys.stderr)

        result = GenerationResult(
            grid=self.grid,
            rooms=list(self.rooms),
            tetrahedra=list(self.tetrahedra),
            edge_map=self.edge_map,
            mst=list(self.mst),
            excluded=list(self.excluded),
            extra_edges=list(self.extra_edges),
            room_map=self.room_map,
            paths=list(self.paths),
            failed_pairs=list(self.failed_pairs),
            timings=dict(self.timings),
        )
        self.event_bus.emit(Event.GENERATION_END, result=result)
        return result

    def _phase(self, label: str, fn: Callable[..., Any], *args: Any) -> Any:
        phase_start = time.perf_counter()
        value = fn(*args)
        ms = (time.perf_counter() - phase_start) * 1000
        self.timings[label] = ms
        self.event_bus.emit(Event.PHASE_TIMED, phase=label, ms=ms)
        if self.config.report_timing:
            print(f"  {label}: {ms:.1f} ms", file=sys.stderr)
        return value

    # -- Rooms -------------------------------------------------------------

    def _place_rooms(self) -> None:
        config = self.config
        for _ in range(config.num_rooms):
            origin = tuple(self._rng.randrange(count) for count in config.grid_size)
            size = tuple(
                self._rng.randint(config.min_room_size[axis], config.max_room_size[axis])
                for axis in range(3)
            )
            self._place_room(origin, size)

    def _place_room(self, origin: Index, size: Sequence[int]) -> Optional[Room]:
        """
        Claim the free cells of a box and seal them into a room.

        Cells that are taken, outside the grid or touching another room are
        skipped, so rooms can come out irregular. Returns None (after undoing
        any claimed cells) if nothing usable was placed.
        """
        room = Room()
        for dx in range(size[0]):
            for dy in range(size[1]):
                for dz in range(size[2]):
                    index = offset(origin, (dx, dy, dz))
                    if not self.grid.can_place_room(index, room):
                        continue
                    cell = self.grid.get_cell(index)
                    cell.cell_type = CellType.ROOM
                    room.add_cell(cell)

        if not room.cells:
            self.event_bus.emit(Event.ROOM_REJECTED, origin=origin, reason="no free cells")
            return None

        center = room.calculate_center()
        if center in self._rooms_by_center:
            # Two rooms on one point would collapse into a single graph vertex
            for cell in room.cells:
                cell.cell_type = CellType.EMPTY
            self.event_bus.emit(Event.ROOM_REJECTED, origin=origin, reason="duplicate center")
            return None

        self.rooms.append(room)
        self._rooms_by_center[center] = room
        self.event_bus.emit(Event.ROOM_PLACED, room=room)
        return room

    # -- Graph -------------------------------------------------------------

    def _build_graph(self) -> None:
        centers = [room.center for room in self.rooms]
        super_tetrahedron = make_super_tetrahedron(self.config.cell_size, self.config.grid_size)

        points = centers
        attempt = 0
        while True:
            try:
                tetrahedra = tetrahedralize(super_tetrahedron, points)
                if not tetrahedra and len(points) >= 4:
                    raise DegenerateGeometryError("All room centers are coplanar")
                break
            except DegenerateGeometryError as e:
                if attempt >= self.config.degenerate_retries:
                    raise
                attempt += 1
                print(
                    f"Degenerate tetrahedralization ({e}); retrying with jitter "
                    f"({attempt}/{self.config.degenerate_retries})",
                    file=sys.stderr,
                )
                self.event_bus.emit(Event.DEGENERATE_RETRY, attempt=attempt, error=e)
                points = self._jitter(centers)

        if points is not centers:
            # Edges must join the real centers, not the jittered ones
            true_point = dict(zip(points, centers))
            tetrahedra = [
                Tetrahedron(
                    true_point[tetrahedron.point_a],
                    true_point[tetrahedron.point_b],
                    true_point[tetrahedron.point_c],
                    true_point[tetrahedron.point_d],
                )
                for tetrahedron in tetrahedra
            ]

        missing = unconnected_points(tetrahedra, centers)
        if tetrahedra and missing:
            print(
                f"Warning: {len(missing)} room(s) are not part of the tetrahedralization",
                file=sys.stderr,
            )

        self.tetrahedra = tetrahedra
        self.edge_map = build_edge_map(tetrahedra)
        self.event_bus.emit(Event.TETRAHEDRALIZATION_DONE, tetrahedra=self.tetrahedra, edge_map=self.edge_map)

    def _jitter(self, points: Sequence[Point]) -> List[Point]:
        scale = JITTER_FRACTION * min(self.config.cell_size)
        return [
            (
                point[0] + self._rng.uniform(-scale, scale),
                point[1] + self._rng.uniform(-scale, scale),
                point[2] + self._rng.uniform(-scale, scale),
            )
            for point in points
        ]

    def _build_spanning_tree(self) -> None:
        if not self.edge_map:
            raise EmptyEdgeGraphError(
                f"No edges between the {len(self.rooms)} placed room(s); "
                "at least four non-coplanar rooms are needed"
            )

        start = next(iter(self.edge_map))
        self.mst, excluded = derive_mst(start, self.edge_map)

        # Sample without replacement so no extra hallway is carved twice
        extra_count = int(self.config.extra_hallway_factor * len(excluded))
        self.extra_edges = self._rng.sample(excluded, extra_count)
        chosen = set(map(id, self.extra_edges))
        self.excluded = [edge for edge in excluded if id(edge) not in chosen]

        self.event_bus.emit(Event.MST_DONE, mst=self.mst, excluded=self.excluded, extra_edges=self.extra_edges)

    def _build_room_map(self) -> None:
        room_map: RoomMap = {}
        for edge in self.mst + self.extra_edges:
            room_a = self._rooms_by_center.get(edge.point_a)
            room_b = self._rooms_by_center.get(edge.point_b)
            if room_a is None or room_b is None:
                continue
            room_map.setdefault(room_a, []).append(room_b)

        self.room_map = room_map
        self.event_bus.emit(Event.ROOM_MAP_DONE, room_map=self.room_map)

    # -- Paths -------------------------------------------------------------

    def _carve_paths(self) -> None:
        for start_room, goal_rooms in self.room_map.items():
            for goal_room in goal_rooms:
                self._carve_between(start_room, goal_room)

    def _carve_between(self, start_room: Room, goal_room: Room) -> Optional[CarvedPath]:
        goal_index = self.grid.get_grid_indices(goal_room.center)
        start_index = start_room.closest_valid_start_cell(goal_index, self.grid)
        if start_index is None:
            self._report_failure(start_room, goal_room, "no free start cell")
            return None

        path = find_path(start_index, goal_index, goal_room, self.grid, self.config.stair_cost)
        if path is None:
            self._report_failure(start_room, goal_room, "no path")
            return None

        carve_path(self.grid, start_index, path)
        carved = CarvedPath(start_room, goal_room, start_index, path)
        self.paths.append(carved)
        self.event_bus.emit(Event.PATH_CARVED, start_room=start_room, goal_room=goal_room, path=path)
        return carved

    def _report_failure(self, start_room: Room, goal_room: Room, reason: str) -> None:
        print(f"Path from {start_room} to {goal_room} failed: {reason}", file=sys.stderr)
        self.failed_pairs.append((start_room, goal_room))
        self.event_bus.emit(Event.PATH_FAILED, start_room=start_room, goal_room=goal_room, reason=reason)


def create_random_dungeon(
    config: Optional[GeneratorConfig] = None,
    event_bus: Optional[EventBus] = None,
    **overrides: Any,
) -> GenerationResult:
    """
    Factory function to generate a dungeon in one call.

    Parameters:
        config: Base configuration (defaults to GeneratorConfig())
        event_bus: Bus to receive generation events
        **overrides: GeneratorConfig fields to replace, e.g. seed=42

    Returns:
        The GenerationResult of a single pass
    """
    if config is None:
        config = GeneratorConfig(**overrides)
    elif overrides:
        config = dataclasses.replace(config, **overrides)
    return DungeonGenerator(config, event_bus).generate()
