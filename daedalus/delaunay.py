"""
Incremental (Bowyer-Watson) Delaunay tetrahedralization of room centers.

1. Start from a super tetrahedron that encloses every point.
2. For each point:
   a. Find every tetrahedron whose circumsphere contains the point
   b. Collect their faces, dropping faces shared by two of them
   c. Remove those tetrahedra
   d. Join each remaining (boundary) face to the point
3. Drop every tetrahedron that still uses a super tetrahedron vertex.

If a point lands in the plane of a face that uses a super vertex, the flat
tetrahedron says nothing about the input, so the super tetrahedron is grown
and the whole insertion is restarted. Only faces made of input points alone
are reported as degenerate.

The surviving tetrahedra are flattened into an undirected adjacency map of
edges, which is the weighted graph the spanning tree walks.
"""

import math
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Set

from .errors import DegenerateGeometryError
from .geometry import Edge, Point, Tetrahedron, Triangle

# point -> edges leaving that point (edge.point_a is always the key)
EdgeMap = Dict[Point, List[Edge]]

# Irrational fractions of a cell added to every super vertex, keeping it off
# the lattice that room centers sit on
LATTICE_OFFSET = (math.sqrt(2) - 1, math.sqrt(3) - 1, math.sqrt(5) - 2)

# Growth applied around the centroid each time the super tetrahedron is rebuilt
SUPER_GROWTH = 1 + math.sqrt(2) / 10
SUPER_REBUILDS = 4


class _SuperFaceCoincidence(Exception):
    """A point is coplanar with a face that uses a super vertex."""

    def __init__(self, point: Point) -> None:
        super().__init__(f"Point {point} is coplanar with a super tetrahedron face")
        self.point = point


def make_super_tetrahedron(cell_size: Sequence[float], dimensions: Sequence[int]) -> Tetrahedron:
    """
    Build a tetrahedron far larger than the grid so every room center is inside it.

    The corners are pushed outwards by an irrational fraction of a cell, so no
    corner shares a plane with room centers by accident.

    Args:
        cell_size: World size of one cell along x, y, z
        dimensions: Grid size in cells along x, y, z
    """
    cell_x, cell_y, cell_z = (float(size) for size in cell_size)
    extent_x = cell_x * dimensions[0]
    extent_y = cell_y * dimensions[1]
    extent_z = cell_z * dimensions[2]
    nudge_x = cell_x * LATTICE_OFFSET[0]
    nudge_y = cell_y * LATTICE_OFFSET[1]
    nudge_z = cell_z * LATTICE_OFFSET[2]

    return Tetrahedron(
        (-extent_x * 2 - nudge_x, -extent_y * 2 - nudge_y, -extent_z * 2 - nudge_z),
        (extent_x * 4 + nudge_x, -cell_y - nudge_y, -cell_z - nudge_z),
        (-cell_x - nudge_x, extent_y * 4 + nudge_y, -cell_z - nudge_z),
        (-cell_x - nudge_x, -cell_y - nudge_y, extent_z * 4 + nudge_z),
    )


def grow_tetrahedron(tetrahedron: Tetrahedron, factor: float) -> Tetrahedron:
    """Scale a tetrahedron about its centroid."""
    corners = (tetrahedron.point_a, tetrahedron.point_b, tetrahedron.point_c, tetrahedron.point_d)
    centroid = [sum(corner[axis] for corner in corners) / 4 for axis in range(3)]
    return Tetrahedron(*(
        tuple(centroid[axis] + (corner[axis] - centroid[axis]) * factor for axis in range(3))
        for corner in corners
    ))


def tetrahedralize(super_tetrahedron: Tetrahedron, points: Iterable[Point]) -> List[Tetrahedron]:
    """
    Run the tetrahedralization.

    Args:
        super_tetrahedron: Tetrahedron enclosing every point
        points: Points to insert, in insertion order

    Returns:
        Tetrahedra built only from the given points.

    Raises:
        DegenerateGeometryError: If inserting a point would create a flat
            tetrahedron out of input points alone (coplanar or cospherical
            input, or a repeated point).
        ValueError: If a point lies outside the super tetrahedron.
    """
    points = list(points)
    rebuilds = 0
    while True:
        try:
            return _insert_points(super_tetrahedron, points)
        except _SuperFaceCoincidence as e:
            if rebuilds >= SUPER_REBUILDS:
                raise DegenerateGeometryError(
                    f"{e} after {SUPER_REBUILDS} rebuilds", point=e.point
                ) from e
            rebuilds += 1
            super_tetrahedron = grow_tetrahedron(super_tetrahedron, SUPER_GROWTH)


def _insert_points(super_tetrahedron: Tetrahedron, points: List[Point]) -> List[Tetrahedron]:
    super_vertices = super_tetrahedron.vertices()
    tetrahedra: List[Tetrahedron] = [super_tetrahedron]

    for point in points:
        # Split the working set into tetrahedra invalidated by this point and survivors
        invalid: List[Tetrahedron] = []
        survivors: List[Tetrahedron] = []
        for tetrahedron in tetrahedra:
            if tetrahedron.circumsphere_contains(point):
                invalid.append(tetrahedron)
            else:
                survivors.append(tetrahedron)

        if not invalid:
            raise ValueError(f"Point {point} is not enclosed by the super tetrahedron")

        faces: List[Triangle] = [face for tetrahedron in invalid for face in tetrahedron.triangles()]

        # A face seen twice is internal to the cavity and cancels out
        face_counts = Counter(faces)
        boundary = [face for face in faces if face_counts[face] == 1]

        tetrahedra = survivors
        for face in boundary:
            tetrahedron = Tetrahedron(face.point_a, face.point_b, face.point_c, point)
            if tetrahedron.is_degenerate:
                if face.vertices() & super_vertices:
                    raise _SuperFaceCoincidence(point)
                raise DegenerateGeometryError(
                    f"Point {point} is coplanar with face "
                    f"{face.point_a}, {face.point_b}, {face.point_c}",
                    point=point,
                )
            tetrahedra.append(tetrahedron)

    return [tetrahedron for tetrahedron in tetrahedra if not (tetrahedron.vertices() & super_vertices)]


def build_edge_map(tetrahedra: Iterable[Tetrahedron]) -> EdgeMap:
    """
    Collect the unique edges of all tetrahedra into an undirected adjacency map.

    Every edge (a, b) is stored under key a and its reverse (b, a) under key b.
    """
    edge_map: EdgeMap = {}
    seen: Set[Edge] = set()

    for tetrahedron in tetrahedra:
        for edge in tetrahedron.edges():
            if edge in seen:
                continue
            seen.add(edge)
            edge_map.setdefault(edge.point_a, []).append(edge)
            edge_map.setdefault(edge.point_b, []).append(edge.reversed())

    return edge_map


def unconnected_points(tetrahedra: Iterable[Tetrahedron], points: Iterable[Point]) -> List[Point]:
    """Points that ended up in no tetrahedron (lost to the super tetrahedron's hull)."""
    used: Set[Point] = set()
    for tetrahedron in tetrahedra:
        used |= tetrahedron.vertices()
    return [point for point in points if point not in used]
