"""
Minimum spanning tree over the tetrahedralization's edge map (Prim's algorithm).
"""

from typing import List, Mapping, Sequence, Set, Tuple

from .errors import DisconnectedGraphError
from .geometry import Edge, Point
from .priority_queue import PriorityQueue


def derive_mst(
    start: Point,
    edge_map: Mapping[Point, Sequence[Edge]],
    require_connected: bool = False,
) -> Tuple[List[Edge], List[Edge]]:
    """
    Build a minimum spanning tree starting from start.

    Args:
        start: Point the tree grows from
        edge_map: Undirected adjacency map (point -> edges leaving it)
        require_connected: If True, raise when some points cannot be reached
            from start. Otherwise they are silently left out of the tree.

    Returns:
        (solution, excluded): the tree edges, and the frontier edges that were
        rejected because their destination was already in the tree. The
        excluded edges are candidates for extra hallways.

    Raises:
        DisconnectedGraphError: If require_connected and the graph is split.
    """
    visited: Set[Point] = set()
    solution: List[Edge] = []
    excluded: List[Edge] = []
    frontier: PriorityQueue[Edge] = PriorityQueue(priority=lambda edge: edge.length)

    _visit(start, visited, edge_map, frontier)

    while not frontier.empty():
        current = frontier.pop()

        if current.point_b in visited:
            excluded.append(current)
            continue

        solution.append(current)
        _visit(current.point_b, visited, edge_map, frontier)

    if require_connected:
        unreachable = [point for point in edge_map if point not in visited]
        if unreachable:
            raise DisconnectedGraphError(
                f"{len(unreachable)} point(s) cannot be reached from {start}",
                unreachable=unreachable,
            )

    return solution, excluded


def _visit(
    point: Point,
    visited: Set[Point],
    edge_map: Mapping[Point, Sequence[Edge]],
    frontier: PriorityQueue[Edge],
) -> None:
    """Mark point as part of the tree and queue its edges to unvisited points."""
    visited.add(point)
    for edge in edge_map.get(point, ()):
        if edge.point_b not in visited:
            frontier.push(edge)
