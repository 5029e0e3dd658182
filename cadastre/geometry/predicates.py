"""
Topological predicates between parcel boundaries.

Two boundaries are adjacent when they touch, or when they intersect and
neither lies within the other:

    touches(A, B) or (intersects(A, B) and not within(A, B) and not within(B, A))

Tolerance:
    Before evaluation every geometry is snapped to a fixed precision grid
    (``DEFAULT_GRID_SIZE``) with ``shapely.set_precision``. Vertices closer
    than one grid cell collapse onto the same grid point, so edges that
    are shared up to floating-point noise compare as shared. All
    predicates are then read from one DE-9IM matrix so they can never
    disagree with each other for a given pair.

Degenerate geometry (rings with fewer than three distinct points,
geometry Shapely reports as invalid, geometry that collapses on the grid)
raises TopologyError instead of evaluating to False.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from cadastre.exceptions import TopologyError

from .models import MultiPolygon

logger = logging.getLogger(__name__)

# Precision grid cell in coordinate units
DEFAULT_GRID_SIZE = 1e-9

# DE-9IM patterns (interior, boundary, exterior of A against those of B)
DISJOINT_PATTERN = "FF*FF****"
TOUCHES_PATTERNS = ("FT*******", "F**T*****", "F***T****")
WITHIN_PATTERN = "T*F**F***"
EQUALS_PATTERN = "T*F**FFF*"


def matches(matrix: str, pattern: str) -> bool:
    """
    Test a DE-9IM matrix against a pattern.

    Pattern characters: ``T`` any non-empty intersection, ``F`` empty,
    ``*`` anything, ``0``/``1``/``2`` exact dimension.
    """
    for actual, wanted in zip(matrix, pattern):
        if wanted == "*":
            continue
        if wanted == "T":
            if actual == "F":
                return False
        elif actual != wanted:
            return False
    return True


@dataclass(frozen=True)
class Relation:
    """Predicates derived from one DE-9IM matrix of (left, right)."""

    matrix: str

    @property
    def intersects(self) -> bool:
        return not matches(self.matrix, DISJOINT_PATTERN)

    @property
    def touches(self) -> bool:
        return any(matches(self.matrix, p) for p in TOUCHES_PATTERNS)

    @property
    def equals(self) -> bool:
        return matches(self.matrix, EQUALS_PATTERN)

    @property
    def left_within(self) -> bool:
        """Left lies within right and the two are not equal."""
        return matches(self.matrix, WITHIN_PATTERN) and not self.equals

    @property
    def right_within(self) -> bool:
        """Right lies within left and the two are not equal."""
        return matches(transpose(self.matrix), WITHIN_PATTERN) and not self.equals

    @property
    def adjacent(self) -> bool:
        if self.touches:
            return True
        return self.intersects and not self.left_within and not self.right_within


def transpose(matrix: str) -> str:
    """Swap the roles of the two geometries in a DE-9IM matrix."""
    return "".join(matrix[row + 3 * col] for row in range(3) for col in range(3))


def prepare(
    shape: MultiPolygon,
    grid_size: float = DEFAULT_GRID_SIZE,
) -> BaseGeometry:
    """
    Validate a boundary and snap it to the precision grid.

    Args:
        shape: Boundary to prepare.
        grid_size: Precision grid cell size.

    Returns:
        The snapped Shapely geometry.

    Raises:
        TopologyError: If the boundary is degenerate.
    """
    if shape.is_degenerate:
        raise TopologyError(
            "prepare", "ring with fewer than 3 distinct points", left=_wkt(shape)
        )

    try:
        geometry = shape.to_shapely()
        if not shapely.is_valid(geometry):
            raise TopologyError(
                "prepare", shapely.is_valid_reason(geometry), left=_wkt(shape)
            )
        snapped = shapely.set_precision(geometry, grid_size)
    except GEOSException as e:
        raise TopologyError("prepare", str(e), left=_wkt(shape), cause=e) from e

    if snapped.is_empty:
        raise TopologyError(
            "prepare", f"geometry collapses on grid of {grid_size}", left=_wkt(shape)
        )
    return snapped


def relate(left: BaseGeometry, right: BaseGeometry) -> Relation:
    """
    Compute the Relation between two prepared geometries.

    Raises:
        TopologyError: If GEOS fails to compute the intersection matrix.
    """
    try:
        return Relation(shapely.relate(left, right))
    except GEOSException as e:
        raise TopologyError(
            "relate", str(e), left=left.wkt, right=right.wkt, cause=e
        ) from e


def _wkt(shape: MultiPolygon) -> Optional[str]:
    # Degenerate rings may not even build a Shapely geometry
    try:
        return shape.to_wkt()
    except (GEOSException, ValueError):
        return repr(shape)


def _relation(
    operation: str,
    a: MultiPolygon,
    b: MultiPolygon,
    grid_size: float,
) -> Relation:
    try:
        left = prepare(a, grid_size)
        right = prepare(b, grid_size)
    except TopologyError as e:
        raise TopologyError(
            operation, e.reason, left=_wkt(a), right=_wkt(b), cause=e
        ) from e
    relation = relate(left, right)
    logger.debug("%s: DE-9IM %s", operation, relation.matrix)
    return relation


def touches(a: MultiPolygon, b: MultiPolygon, grid_size: float = DEFAULT_GRID_SIZE) -> bool:
    """True if the boundaries meet and the interiors do not."""
    return _relation("touches", a, b, grid_size).touches


def intersects(a: MultiPolygon, b: MultiPolygon, grid_size: float = DEFAULT_GRID_SIZE) -> bool:
    """True if the geometries share at least one point."""
    return _relation("intersects", a, b, grid_size).intersects


def within(a: MultiPolygon, b: MultiPolygon, grid_size: float = DEFAULT_GRID_SIZE) -> bool:
    """True if ``a`` lies inside ``b`` (boundary included) and ``a != b``."""
    return _relation("within", a, b, grid_size).left_within


def adjacent(a: MultiPolygon, b: MultiPolygon, grid_size: float = DEFAULT_GRID_SIZE) -> bool:
    """Parcel adjacency predicate; see module docstring."""
    return _relation("adjacent", a, b, grid_size).adjacent
