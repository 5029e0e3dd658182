"""
Parcel record construction and validation.

A raw row has a fixed schema followed by a variable tail of location tags:

    id; (unused); (unused); length; area; boundary_wkt; owner; location*

Fields are validated in schema order so that the first bad field is the
one reported.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from cadastre.exceptions import FieldFormatError
from cadastre.geometry import MultiPolygon, parse_multipolygon

# Column positions in a raw row
ID_COLUMN = 0
LENGTH_COLUMN = 3
AREA_COLUMN = 4
BOUNDARY_COLUMN = 5
OWNER_COLUMN = 6
FIRST_LOCATION_COLUMN = 7

# Sentinel used by the source data for an unknown location level
MISSING_MARKER = "NA"


def _field(fields: Sequence[str], index: int, name: str) -> str:
    if index >= len(fields) or fields[index] is None:
        raise FieldFormatError(name)
    return fields[index]


def _parse_int(fields: Sequence[str], index: int, name: str) -> int:
    raw = _field(fields, index, name)
    try:
        return int(raw.strip())
    except (ValueError, AttributeError) as e:
        raise FieldFormatError(name, raw, cause=e) from e


def _parse_positive_float(fields: Sequence[str], index: int, name: str) -> float:
    raw = _field(fields, index, name)
    try:
        value = float(raw.strip())
    except (ValueError, AttributeError) as e:
        raise FieldFormatError(name, raw, cause=e) from e
    if not math.isfinite(value) or value <= 0:
        raise FieldFormatError(name, raw)
    return value


@dataclass(frozen=True, eq=False)
class Parcel:
    """
    Validated parcel record.

    Parcels compare and hash by identity, so two rows with the same
    content are still distinct vertices of an adjacency graph.

    Attributes:
        id: Parcel identifier, assumed unique within a batch.
        length: Boundary length, positive.
        area: Parcel area, positive.
        owner: Owner reference.
        geometry: Parcel boundary; None for a parcel without one, which
            never has neighbours.
        locations: Location tags in source order, sentinel values removed.
    """

    id: int
    length: float
    area: float
    owner: int
    geometry: Optional[MultiPolygon]
    locations: tuple[str, ...] = ()

    @classmethod
    def from_row(
        cls,
        fields: Sequence[str],
        missing_marker: str = MISSING_MARKER,
    ) -> "Parcel":
        """
        Build a parcel from one raw row.

        Args:
            fields: Ordered string fields of the row.
            missing_marker: Location value that means "not available".

        Returns:
            Parcel instance.

        Raises:
            FieldFormatError: If id, length, area or owner is missing or
                malformed.
            GeometrySyntaxError: If the boundary is not valid WKT.
            GeometryTypeError: If the boundary is not a multipolygon.
        """
        parcel_id = _parse_int(fields, ID_COLUMN, "id")
        length = _parse_positive_float(fields, LENGTH_COLUMN, "length")
        area = _parse_positive_float(fields, AREA_COLUMN, "area")
        geometry = parse_multipolygon(_field(fields, BOUNDARY_COLUMN, "geometry"))
        owner = _parse_int(fields, OWNER_COLUMN, "owner")
        tags = (tag.strip() for tag in fields[FIRST_LOCATION_COLUMN:])
        locations = tuple(tag for tag in tags if tag and tag != missing_marker)
        return cls(
            id=parcel_id,
            length=length,
            area=area,
            owner=owner,
            geometry=geometry,
            locations=locations,
        )

    def __str__(self) -> str:
        location = " / ".join(self.locations) if self.locations else "unknown location"
        polygons = len(self.geometry.polygons) if self.geometry is not None else 0
        return (
            f"Parcel {self.id} (owner {self.owner}, area {self.area:g}, "
            f"length {self.length:g}, {polygons} polygon(s), "
            f"{location})"
        )


class SortKey(str, Enum):
    """Attributes parcels can be ordered by."""

    ID = "id"
    LENGTH = "length"
    AREA = "area"
    OWNER = "owner"


def sort_parcels(
    parcels: Iterable[Parcel],
    key: SortKey = SortKey.ID,
    descending: bool = False,
) -> list[Parcel]:
    """
    Return parcels ordered by one attribute.

    The sort is stable, so ties keep their input order.

    Args:
        parcels: Parcels to order.
        key: Attribute to sort by.
        descending: Sort from largest to smallest.

    Returns:
        New sorted list; the input is left untouched.
    """
    attribute = SortKey(key).value
    return sorted(parcels, key=lambda p: getattr(p, attribute), reverse=descending)
