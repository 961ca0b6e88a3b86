"""Exceptions raised by the dungeon generator."""


class DungeonError(Exception):
    """Base exception for the dungeon generator."""


class ConfigError(DungeonError, ValueError):
    """Raised when generator settings are out of range."""


class OutOfBoundsError(DungeonError, IndexError):
    """Raised when a grid index lies outside the grid."""

    def __init__(self, index, dimensions) -> None:
        super().__init__(f"Index {tuple(index)} is outside grid of size {tuple(dimensions)}")
        self.index = tuple(index)
        self.dimensions = tuple(dimensions)


class RoomSealedError(DungeonError):
    """Raised when a room is modified after its center was calculated."""


class InvalidGoalError(DungeonError):
    """Raised when A* is asked to reach a cell that is not in the grid."""


class DegenerateGeometryError(DungeonError):
    """Raised when tetrahedralization meets coplanar or cospherical points."""

    def __init__(self, message: str, point=None) -> None:
        super().__init__(message)
        self.point = point


class EmptyEdgeGraphError(DungeonError):
    """Raised when tetrahedralization produced no edges to build a tree from."""


class DisconnectedGraphError(DungeonError):
    """Raised when a spanning tree cannot reach every point of the graph."""

    def __init__(self, message: str, unreachable=None) -> None:
        super().__init__(message)
        self.unreachable = list(unreachable or [])


class GenerationInProgressError(DungeonError):
    """Raised when a second generation pass starts before the first finished."""
