"""3D dungeon generation: rooms, Delaunay connectivity and A* hallways."""

from daedalus.config import GeneratorConfig
from daedalus.errors import (
    DungeonError,
    ConfigError,
    OutOfBoundsError,
    RoomSealedError,
    InvalidGoalError,
    DegenerateGeometryError,
    EmptyEdgeGraphError,
    DisconnectedGraphError,
    GenerationInProgressError,
)
from daedalus.grid import Cell, CellType, Direction, Grid, Index
from daedalus.room import Room
from daedalus.geometry import Edge, Triangle, Tetrahedron, Point
from daedalus.delaunay import make_super_tetrahedron, tetrahedralize, build_edge_map
from daedalus.priority_queue import PriorityQueue
from daedalus.mst import derive_mst
from daedalus.pathfinding import AStarNode, Path, find_path, STAIR_COST
from daedalus.event_system import Event, EventBus, EventData
from daedalus.generator import (
    CarvedPath,
    DungeonGenerator,
    GenerationResult,
    carve_path,
    create_random_dungeon,
)
