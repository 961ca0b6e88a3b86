"""Unit tests for the minimum spanning tree."""

import random

import pytest

from daedalus.delaunay import build_edge_map, make_super_tetrahedron, tetrahedralize
from daedalus.errors import DisconnectedGraphError
from daedalus.geometry import Edge, Tetrahedron
from daedalus.mst import derive_mst


def edge_map_from(edges):
    """Undirected adjacency map from a list of (a, b) pairs."""
    edge_map = {}
    for a, b in edges:
        edge_map.setdefault(a, []).append(Edge(a, b))
        edge_map.setdefault(b, []).append(Edge(b, a))
    return edge_map


def total_length(edges) -> float:
    return sum(edge.length for edge in edges)


class TestDeriveMst:
    """Tests for derive_mst."""

    def test_skips_long_diagonal(self):
        """In a tetrahedron with one long edge, the long edge is never in the tree."""
        a, b = (0.0, 0.0, 0.0), (2.0, 0.0, 0.0)
        c, d = (1.0, 1.0, 0.0), (1.0, 0.0, 1.0)
        edge_map = build_edge_map([Tetrahedron(a, b, c, d)])

        solution, excluded = derive_mst(a, edge_map)

        assert len(solution) == 3
        assert Edge(a, b) not in solution
        assert total_length(solution) == pytest.approx(3 * 2 ** 0.5)
        assert all(edge not in solution for edge in excluded)

    def test_tree_spans_every_point(self):
        a, b, c, d = (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0), (3.0, 0.0, 0.0)
        edge_map = edge_map_from([(a, b), (b, c), (c, d), (a, d)])

        solution, excluded = derive_mst(b, edge_map)

        reached = {b} | {edge.point_b for edge in solution}
        assert reached == {a, b, c, d}
        assert len(solution) == 3
        assert excluded == [Edge(a, d)]

    def test_tree_edges_lead_away_from_tree(self):
        """Every tree edge's point_b is a newly reached point."""
        points = [(0.0, 0.0, 0.0), (3.0, 0.0, 0.0), (0.0, 4.0, 0.0), (0.0, 0.0, 5.0)]
        edge_map = build_edge_map([Tetrahedron(*points)])
        solution, _ = derive_mst(points[0], edge_map)
        destinations = [edge.point_b for edge in solution]
        assert len(set(destinations)) == len(destinations)
        assert points[0] not in destinations

    def test_unreachable_points_are_left_out(self):
        a, b = (0.0, 0.0, 0.0), (1.0, 0.0, 0.0)
        c, d = (10.0, 0.0, 0.0), (11.0, 0.0, 0.0)
        edge_map = edge_map_from([(a, b), (c, d)])

        solution, excluded = derive_mst(a, edge_map)

        assert solution == [Edge(a, b)]
        assert excluded == []

    def test_require_connected_raises(self):
        a, b = (0.0, 0.0, 0.0), (1.0, 0.0, 0.0)
        c, d = (10.0, 0.0, 0.0), (11.0, 0.0, 0.0)
        edge_map = edge_map_from([(a, b), (c, d)])

        with pytest.raises(DisconnectedGraphError) as exc_info:
            derive_mst(a, edge_map, require_connected=True)
        assert set(exc_info.value.unreachable) == {c, d}

    def test_single_point(self):
        solution, excluded = derive_mst((0.0, 0.0, 0.0), {})
        assert solution == []
        assert excluded == []

    @pytest.mark.parametrize("seed", [7, 8])
    def test_matches_brute_force_weight(self, seed):
        """The tree is as light as the best one found by Kruskal's algorithm."""
        rng = random.Random(seed)
        points = [(rng.uniform(10, 90), rng.uniform(5, 45), rng.uniform(10, 90)) for _ in range(10)]
        edge_map = build_edge_map(tetrahedralize(make_super_tetrahedron((5, 5, 5), (20, 10, 20)), points))
        start = next(iter(edge_map))

        solution, excluded = derive_mst(start, edge_map)

        unique_edges = {edge for edges in edge_map.values() for edge in edges}
        assert len(solution) + len(excluded) == len(unique_edges)
        assert total_length(solution) == pytest.approx(total_length(kruskal(edge_map)))


def kruskal(edge_map):
    parent = {point: point for point in edge_map}

    def root(point):
        while parent[point] != point:
            point = parent[point]
        return point

    tree = []
    for edge in sorted({edge for edges in edge_map.values() for edge in edges}, key=lambda e: e.length):
        root_a, root_b = root(edge.point_a), root(edge.point_b)
        if root_a != root_b:
            parent[root_a] = root_b
            tree.append(edge)
    return tree
