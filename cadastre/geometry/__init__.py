"""
Geometry module for parcel boundaries.

Provides the boundary model (rings, polygons, multipolygons), the WKT
parser that accepts only multipolygons, and the topological predicates
used to decide parcel adjacency.

Usage:
    from cadastre.geometry import parse_multipolygon, adjacent

    a = parse_multipolygon("MULTIPOLYGON(((0 0,0 1,1 1,1 0,0 0)))")
    b = parse_multipolygon("MULTIPOLYGON(((1 0,1 1,2 1,2 0,1 0)))")
    adjacent(a, b)  # True
"""

from .models import (
    BoundingBox,
    GeometryKind,
    MultiPolygon,
    Point,
    Polygon,
    Ring,
)
from .parser import classify, parse_multipolygon
from .predicates import (
    DEFAULT_GRID_SIZE,
    Relation,
    adjacent,
    intersects,
    prepare,
    relate,
    touches,
    within,
)

__all__ = [
    # Model
    "BoundingBox",
    "GeometryKind",
    "MultiPolygon",
    "Point",
    "Polygon",
    "Ring",
    # Parser
    "classify",
    "parse_multipolygon",
    # Predicates
    "DEFAULT_GRID_SIZE",
    "Relation",
    "adjacent",
    "intersects",
    "prepare",
    "relate",
    "touches",
    "within",
]
