"""Shared test fixtures and helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from cadastre.acquisition import Parcel
from cadastre.geometry import parse_multipolygon

HEADER = "OBJECTID;PAR_ID;PAR_NUM;Shape_Length;Shape_Area;geometry;OWNER;Freguesia;Municipio;Ilha"

UNIT_SQUARE = "MULTIPOLYGON(((0 0,0 1,1 1,1 0,0 0)))"
EAST_SQUARE = "MULTIPOLYGON(((1 0,1 1,2 1,2 0,1 0)))"
FAR_SQUARE = "MULTIPOLYGON(((5 5,5 6,6 6,6 5,5 5)))"
BIG_SQUARE = "MULTIPOLYGON(((-5 -5,-5 5,5 5,5 -5,-5 -5)))"
INNER_SQUARE = "MULTIPOLYGON(((2 2,2 3,3 3,3 2,2 2)))"
BOWTIE = "MULTIPOLYGON(((0 0,1 1,1 0,0 1,0 0)))"
PLAIN_POLYGON = "POLYGON((0 0,0 1,1 1,1 0,0 0))"


def square(x: float, y: float, size: float = 1.0) -> str:
    """WKT of an axis-aligned square multipolygon with lower-left corner (x, y)."""
    x2, y2 = x + size, y + size
    return f"MULTIPOLYGON((({x} {y},{x} {y2},{x2} {y2},{x2} {y},{x} {y})))"


def make_parcel(parcel_id: int, wkt: str, owner: int = 1, area: float = 1.0) -> Parcel:
    return Parcel(
        id=parcel_id,
        length=4.0,
        area=area,
        owner=owner,
        geometry=parse_multipolygon(wkt),
    )


def row(parcel_id="1", wkt=UNIT_SQUARE, owner="7", length="4.0", area="1.0", *locations):
    """Build a delimited data line in the source column order."""
    fields = [str(parcel_id), "7343148.0", "2,99624E+12", str(length), str(area), wkt, str(owner)]
    fields.extend(locations)
    return ";".join(fields)


@pytest.fixture
def write_csv(tmp_path):
    """Return a function writing lines (header first) to a file in tmp_path."""

    def _write(lines: list[str], name: str = "parcels.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def grid_parcels():
    """3x3 grid of unit squares, row by row from the origin."""
    return [
        make_parcel(3 * r + c + 1, square(c, r))
        for r in range(3)
        for c in range(3)
    ]
