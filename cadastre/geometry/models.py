"""
In-memory geometry model for parcel boundaries.

Rings are stored in open form: when the last point repeats the first
it is dropped, and ``closed_coords`` adds it back for output. Shapely
geometries are built on demand from the model and cached per instance.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterable, NamedTuple, Sequence

import shapely
from pydantic import BaseModel, Field, field_validator
from shapely.geometry import MultiPolygon as ShapelyMultiPolygon
from shapely.geometry.base import BaseGeometry

# Minimum number of distinct vertices a ring needs to enclose an area
MIN_RING_POINTS = 3


class Point(NamedTuple):
    """A 2D coordinate pair."""

    x: float
    y: float


class BoundingBox(BaseModel):
    """Axis-aligned bounding box defined by corner coordinates."""

    min_x: float = Field(..., description="Minimum x coordinate")
    min_y: float = Field(..., description="Minimum y coordinate")
    max_x: float = Field(..., description="Maximum x coordinate")
    max_y: float = Field(..., description="Maximum y coordinate")

    @field_validator("max_x")
    @classmethod
    def validate_x_range(cls, v: float, info) -> float:
        """Ensure max_x is not smaller than min_x."""
        if "min_x" in info.data and v < info.data["min_x"]:
            raise ValueError("max_x must not be smaller than min_x")
        return v

    @field_validator("max_y")
    @classmethod
    def validate_y_range(cls, v: float, info) -> float:
        """Ensure max_y is not smaller than min_y."""
        if "min_y" in info.data and v < info.data["min_y"]:
            raise ValueError("max_y must not be smaller than min_y")
        return v

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "BoundingBox":
        """
        Create the smallest bounding box containing all points.

        Args:
            points: Non-empty iterable of points.

        Returns:
            BoundingBox instance.

        Raises:
            ValueError: If no points are given.
        """
        xs, ys = [], []
        for point in points:
            xs.append(point.x)
            ys.append(point.y)
        if not xs:
            raise ValueError("Cannot compute bounding box of zero points")
        return cls(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))

    def expand(self, margin: float) -> "BoundingBox":
        """Return a copy grown by ``margin`` on every side."""
        return BoundingBox(
            min_x=self.min_x - margin,
            min_y=self.min_y - margin,
            max_x=self.max_x + margin,
            max_y=self.max_y + margin,
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return ``(min_x, min_y, max_x, max_y)``."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class GeometryKind(str, Enum):
    """Kinds of parsed geometry the parser distinguishes."""

    POLYGON = "Polygon"
    MULTIPOLYGON = "MultiPolygon"
    OTHER = "Other"

    @classmethod
    def of(cls, geometry: BaseGeometry) -> "GeometryKind":
        """Classify a Shapely geometry."""
        if geometry.geom_type == "MultiPolygon":
            return cls.MULTIPOLYGON
        if geometry.geom_type == "Polygon":
            return cls.POLYGON
        return cls.OTHER


@dataclass(frozen=True)
class Ring:
    """Implicitly closed sequence of points."""

    points: tuple[Point, ...]

    @classmethod
    def from_coords(cls, coords: Iterable[Sequence[float]]) -> "Ring":
        """
        Build a ring from coordinate sequences, dropping a closing point.

        Extra dimensions (z, m) are ignored.
        """
        points = [Point(float(c[0]), float(c[1])) for c in coords]
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()
        return cls(tuple(points))

    @property
    def distinct_count(self) -> int:
        return len(set(self.points))

    @property
    def is_degenerate(self) -> bool:
        """True when the ring has fewer than three distinct points."""
        return self.distinct_count < MIN_RING_POINTS

    def closed_coords(self) -> list[tuple[float, float]]:
        """Coordinates with the first point repeated at the end."""
        coords = [tuple(p) for p in self.points]
        if coords:
            coords.append(coords[0])
        return coords


@dataclass(frozen=True)
class Polygon:
    """Exterior ring with zero or more interior holes."""

    exterior: Ring
    holes: tuple[Ring, ...] = ()

    @property
    def rings(self) -> tuple[Ring, ...]:
        return (self.exterior,) + self.holes


@dataclass(frozen=True)
class MultiPolygon:
    """
    Ordered, non-empty collection of polygons.

    Equality compares ring point sequences; the cached Shapely geometry
    takes no part in it.
    """

    polygons: tuple[Polygon, ...]

    def __post_init__(self) -> None:
        if not self.polygons:
            raise ValueError("MultiPolygon requires at least one polygon")

    @classmethod
    def from_shapely(cls, geometry: ShapelyMultiPolygon) -> "MultiPolygon":
        """Convert a Shapely MultiPolygon into the model."""
        polygons = []
        for part in geometry.geoms:
            exterior = Ring.from_coords(part.exterior.coords)
            holes = tuple(Ring.from_coords(hole.coords) for hole in part.interiors)
            polygons.append(Polygon(exterior, holes))
        return cls(tuple(polygons))

    @property
    def rings(self) -> tuple[Ring, ...]:
        """All rings, exterior first, in polygon order."""
        return tuple(ring for polygon in self.polygons for ring in polygon.rings)

    @property
    def is_degenerate(self) -> bool:
        return any(ring.is_degenerate for ring in self.rings)

    @cached_property
    def bounds(self) -> BoundingBox:
        """Bounding box over every exterior ring."""
        return BoundingBox.from_points(
            point for polygon in self.polygons for point in polygon.exterior.points
        )

    @cached_property
    def _shape(self) -> ShapelyMultiPolygon:
        return ShapelyMultiPolygon(
            [
                (
                    polygon.exterior.closed_coords(),
                    [hole.closed_coords() for hole in polygon.holes],
                )
                for polygon in self.polygons
            ]
        )

    def to_shapely(self) -> ShapelyMultiPolygon:
        """Return the equivalent Shapely geometry, built once."""
        return self._shape

    def to_wkt(self) -> str:
        """Encode as full-precision WKT."""
        return shapely.to_wkt(self.to_shapely(), rounding_precision=-1)
