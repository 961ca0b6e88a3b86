"""
Geometric value types used by the tetrahedralization and spanning tree.

Points are plain (x, y, z) float tuples so they can key dictionaries. Edges,
triangles and tetrahedra compare equal when they share the same vertex set,
regardless of vertex order.

Circumcircle / circumsphere formulas:
    https://gamedev.stackexchange.com/questions/60630/how-do-i-find-the-circumcenter-of-a-triangle-in-3d
    http://rodolphe-vaillant.fr/entry/127/find-a-tetrahedron-circumcenter
"""

import math
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

import numpy as np

Point = Tuple[float, float, float]

# Relative size below which a triangle's area or a tetrahedron's volume counts as zero
DEGENERACY_TOLERANCE = 1e-12


@dataclass(frozen=True)
class Circumcircle:
    """Circle through the three corners of a triangle."""

    center: Point
    radius: float

    def contains(self, point: Point) -> bool:
        """True if point is no further than radius from the center."""
        return _squared_distance(point, self.center) <= self.radius * self.radius


@dataclass(frozen=True)
class Circumsphere:
    """Sphere through the four corners of a tetrahedron."""

    center: Point
    radius: float

    def contains(self, point: Point) -> bool:
        """True if point lies inside or on the sphere."""
        return _squared_distance(point, self.center) <= self.radius * self.radius


def _squared_distance(a: Point, b: Point) -> float:
    return (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2


def _as_point(values: np.ndarray) -> Point:
    return (float(values[0]), float(values[1]), float(values[2]))


def find_circumcircle(point_a: Point, point_b: Point, point_c: Point) -> Optional[Circumcircle]:
    """
    Circumcircle of a triangle in 3D.

    Returns None when the three points are collinear (or coincide).
    """
    a = np.asarray(point_a, dtype=float)
    ab = np.asarray(point_b, dtype=float) - a
    ac = np.asarray(point_c, dtype=float) - a
    ab_cross_ac = np.cross(ab, ac)

    cross_sq = float(np.dot(ab_cross_ac, ab_cross_ac))
    scale = max(float(np.dot(ab, ab)), float(np.dot(ac, ac)))
    if scale == 0.0 or cross_sq <= DEGENERACY_TOLERANCE * scale * scale:
        return None

    a_to_center = (
        np.cross(ab_cross_ac, ab) * float(np.dot(ac, ac))
        + np.cross(ac, ab_cross_ac) * float(np.dot(ab, ab))
    ) / (2.0 * cross_sq)

    return Circumcircle(
        center=_as_point(a + a_to_center),
        radius=float(np.linalg.norm(a_to_center)),
    )


def find_circumsphere(
    point_a: Point, point_b: Point, point_c: Point, point_d: Point
) -> Optional[Circumsphere]:
    """
    Circumsphere of a tetrahedron.

    Returns None when the four points are coplanar (zero volume).
    """
    a = np.asarray(point_a, dtype=float)
    ab = np.asarray(point_b, dtype=float) - a
    ac = np.asarray(point_c, dtype=float) - a
    ad = np.asarray(point_d, dtype=float) - a

    ab_cross_ac = np.cross(ab, ac)
    ad_cross_ab = np.cross(ad, ab)
    ac_cross_ad = np.cross(ac, ad)

    # Six times the signed volume
    determinant = float(np.dot(ab, ac_cross_ad))
    longest = math.sqrt(max(float(np.dot(ab, ab)), float(np.dot(ac, ac)), float(np.dot(ad, ad))))
    if longest == 0.0 or abs(determinant) <= DEGENERACY_TOLERANCE * longest ** 3:
        return None

    offset = (
        float(np.dot(ab, ab)) * ac_cross_ad
        + float(np.dot(ac, ac)) * ad_cross_ab
        + float(np.dot(ad, ad)) * ab_cross_ac
    ) * (0.5 / determinant)

    return Circumsphere(
        center=_as_point(a + offset),
        radius=float(np.linalg.norm(offset)),
    )


@dataclass(frozen=True, eq=False)
class Edge:
    """
    Undirected segment between two points with a cached length.

    Edge(a, b) == Edge(b, a). Adjacency maps still store both orientations so
    a graph can be walked from either endpoint via point_a -> point_b.
    """

    point_a: Point
    point_b: Point
    length: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "length", math.dist(self.point_a, self.point_b))

    def reversed(self) -> "Edge":
        """Same edge walked from the other end."""
        return Edge(self.point_b, self.point_a)

    def vertices(self) -> FrozenSet[Point]:
        return frozenset((self.point_a, self.point_b))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.point_a == other.point_a and self.point_b == other.point_b) or (
            self.point_a == other.point_b and self.point_b == other.point_a
        )

    def __hash__(self) -> int:
        return hash(self.vertices())


@dataclass(eq=False)
class Triangle:
    """Three points; one face of a tetrahedron."""

    point_a: Point
    point_b: Point
    point_c: Point
    circumcircle: Optional[Circumcircle] = field(init=False)

    def __post_init__(self) -> None:
        self.circumcircle = find_circumcircle(self.point_a, self.point_b, self.point_c)

    @property
    def is_degenerate(self) -> bool:
        return self.circumcircle is None

    def vertices(self) -> FrozenSet[Point]:
        return frozenset((self.point_a, self.point_b, self.point_c))

    def circumcircle_contains(self, point: Point) -> bool:
        """True if point is within the circumcircle's radius of its center."""
        return self.circumcircle is not None and self.circumcircle.contains(point)

    def edges(self) -> Tuple[Edge, Edge, Edge]:
        return (
            Edge(self.point_a, self.point_b),
            Edge(self.point_a, self.point_c),
            Edge(self.point_c, self.point_b),
        )

    def contains_edge(self, edge: Edge) -> bool:
        return edge in self.edges()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return self.vertices() == other.vertices()

    def __hash__(self) -> int:
        return hash(self.vertices())


@dataclass(eq=False)
class Tetrahedron:
    """Four points plus their circumsphere (None if the points are coplanar)."""

    point_a: Point
    point_b: Point
    point_c: Point
    point_d: Point
    circumsphere: Optional[Circumsphere] = field(init=False)

    def __post_init__(self) -> None:
        self.circumsphere = find_circumsphere(self.point_a, self.point_b, self.point_c, self.point_d)

    @property
    def is_degenerate(self) -> bool:
        return self.circumsphere is None

    def vertices(self) -> FrozenSet[Point]:
        return frozenset((self.point_a, self.point_b, self.point_c, self.point_d))

    def volume(self) -> float:
        a = np.asarray(self.point_a, dtype=float)
        ab = np.asarray(self.point_b, dtype=float) - a
        ac = np.asarray(self.point_c, dtype=float) - a
        ad = np.asarray(self.point_d, dtype=float) - a
        return abs(float(np.dot(ab, np.cross(ac, ad)))) / 6.0

    def circumsphere_contains(self, point: Point) -> bool:
        """True if point lies inside or on the circumsphere."""
        return self.circumsphere is not None and self.circumsphere.contains(point)

    def triangles(self) -> Tuple[Triangle, Triangle, Triangle, Triangle]:
        return (
            Triangle(self.point_a, self.point_b, self.point_c),
            Triangle(self.point_a, self.point_c, self.point_d),
            Triangle(self.point_a, self.point_b, self.point_d),
            Triangle(self.point_b, self.point_c, self.point_d),
        )

    def edges(self) -> Tuple[Edge, Edge, Edge, Edge, Edge, Edge]:
        return (
            Edge(self.point_a, self.point_b),
            Edge(self.point_a, self.point_c),
            Edge(self.point_a, self.point_d),
            Edge(self.point_b, self.point_c),
            Edge(self.point_b, self.point_d),
            Edge(self.point_c, self.point_d),
        )

    def contains_vertex(self, point: Point) -> bool:
        return point in (self.point_a, self.point_b, self.point_c, self.point_d)

    def contains_edge(self, edge: Edge) -> bool:
        return edge.vertices() <= self.vertices()

    def contains_triangle(self, triangle: Triangle) -> bool:
        return triangle.vertices() <= self.vertices()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tetrahedron):
            return NotImplemented
        return self.vertices() == other.vertices()

    def __hash__(self) -> int:
        return hash(self.vertices())
