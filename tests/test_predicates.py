"""Tests for topological predicates."""

from __future__ import annotations

import pytest

from cadastre.exceptions import TopologyError
from cadastre.geometry import (
    Relation,
    adjacent,
    intersects,
    parse_multipolygon,
    prepare,
    relate,
    touches,
    within,
)
from cadastre.geometry.predicates import matches, transpose

from conftest import (
    BIG_SQUARE,
    BOWTIE,
    EAST_SQUARE,
    FAR_SQUARE,
    INNER_SQUARE,
    UNIT_SQUARE,
    square,
)


@pytest.fixture
def unit():
    return parse_multipolygon(UNIT_SQUARE)


class TestMatrixHelpers:
    def test_matches_wildcards(self):
        assert matches("FF2F11212", "F***T****")
        assert matches("FF2F11212", "FF*FT****")
        assert not matches("FF2F11212", "T********")

    def test_matches_exact_dimension(self):
        assert matches("FF2F11212", "****1****")
        assert not matches("FF2F11212", "****0****")

    def test_transpose(self):
        assert transpose("012345678") == "036147258"
        assert transpose(transpose("2FF1FF212")) == "2FF1FF212"


class TestRelation:
    def test_shared_edge(self):
        relation = Relation("FF2F11212")
        assert relation.touches
        assert relation.intersects
        assert relation.adjacent

    def test_disjoint(self):
        relation = Relation("FF2FF1212")
        assert not relation.intersects
        assert not relation.adjacent

    def test_containment_is_not_adjacency(self):
        # left strictly inside right
        relation = Relation("2FF1FF212")
        assert relation.left_within
        assert not relation.right_within
        assert not relation.adjacent


class TestPredicates:
    def test_disjoint_squares(self, unit):
        far = parse_multipolygon(FAR_SQUARE)
        assert not touches(unit, far)
        assert not intersects(unit, far)
        assert not adjacent(unit, far)

    def test_shared_edge(self, unit):
        east = parse_multipolygon(EAST_SQUARE)
        assert touches(unit, east)
        assert touches(east, unit)
        assert adjacent(unit, east)

    def test_shared_corner(self, unit):
        corner = parse_multipolygon(square(1, 1))
        assert touches(unit, corner)
        assert adjacent(unit, corner)

    def test_containment(self):
        outer = parse_multipolygon(BIG_SQUARE)
        inner = parse_multipolygon(INNER_SQUARE)
        assert intersects(inner, outer)
        assert within(inner, outer)
        assert not within(outer, inner)
        assert not touches(inner, outer)
        assert not adjacent(inner, outer)
        assert not adjacent(outer, inner)

    def test_partial_overlap(self):
        a = parse_multipolygon(square(0, 0, 2))
        b = parse_multipolygon(square(1, 1, 2))
        assert intersects(a, b)
        assert not touches(a, b)
        assert not within(a, b)
        assert not within(b, a)
        assert adjacent(a, b)

    def test_equal_geometries_are_not_within(self, unit):
        twin = parse_multipolygon(UNIT_SQUARE)
        assert not within(unit, twin)
        assert adjacent(unit, twin)

    def test_gap_below_grid_is_shared_edge(self, unit):
        nearly = parse_multipolygon(
            "MULTIPOLYGON(((1.0000000000001 0,1.0000000000001 1,2 1,2 0,1.0000000000001 0)))"
        )
        assert touches(unit, nearly)
        assert adjacent(unit, nearly)

    def test_gap_above_grid_is_not_adjacent(self, unit):
        apart = parse_multipolygon(square(1.001, 0))
        assert not adjacent(unit, apart)

    def test_coarser_grid_widens_tolerance(self, unit):
        apart = parse_multipolygon(square(1.001, 0))
        assert adjacent(unit, apart, grid_size=0.01)

    def test_hole_neighbour_is_adjacent(self):
        ring = parse_multipolygon(
            "MULTIPOLYGON(((0 0,0 10,10 10,10 0,0 0),(2 2,2 3,3 3,3 2,2 2)))"
        )
        plug = parse_multipolygon(INNER_SQUARE)
        assert touches(ring, plug)
        assert adjacent(ring, plug)


class TestDegenerateGeometry:
    def test_self_intersecting_ring(self, unit):
        bowtie = parse_multipolygon(BOWTIE)
        with pytest.raises(TopologyError) as excinfo:
            adjacent(bowtie, unit)
        error = excinfo.value
        assert error.operation == "adjacent"
        assert error.left is not None
        assert error.right is not None

    def test_zero_length_ring(self, unit):
        point_ring = parse_multipolygon("MULTIPOLYGON(((0 0,0 0,0 0,0 0)))")
        with pytest.raises(TopologyError):
            touches(unit, point_ring)

    def test_prepare_rejects_degenerate(self):
        with pytest.raises(TopologyError) as excinfo:
            prepare(parse_multipolygon(BOWTIE))
        assert excinfo.value.operation == "prepare"

    def test_collapse_on_grid(self):
        tiny = parse_multipolygon(square(0, 0, 0.001))
        with pytest.raises(TopologyError):
            prepare(tiny, grid_size=0.5)

    def test_prepare_and_relate(self, unit):
        left = prepare(unit)
        right = prepare(parse_multipolygon(EAST_SQUARE))
        relation = relate(left, right)
        assert relation.matrix == "FF2F11212"
        assert relation.adjacent
