"""
WKT boundary parsing.

Only ``MULTIPOLYGON`` text is accepted as a parcel boundary. Text that
cannot be read at all raises GeometrySyntaxError; text that reads as
some other kind of geometry raises GeometryTypeError so that callers can
tell a data-quality problem from a malformed string.
"""

import logging

import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from cadastre.exceptions import GeometrySyntaxError, GeometryTypeError

from .models import GeometryKind, MultiPolygon

logger = logging.getLogger(__name__)


def _read(text: str) -> BaseGeometry:
    if not isinstance(text, str):
        raise GeometrySyntaxError(
            f"Boundary must be text, got {type(text).__name__}",
            text=None if text is None else repr(text),
        )
    if not text.strip():
        raise GeometrySyntaxError("Boundary text is empty", text=text)
    try:
        return shapely.from_wkt(text)
    except GEOSException as e:
        raise GeometrySyntaxError(
            f"Cannot parse boundary text: {text[:80]}", text=text, cause=e
        ) from e


def classify(text: str) -> GeometryKind:
    """
    Classify boundary text without converting it.

    Args:
        text: WKT geometry text.

    Returns:
        The GeometryKind of the parsed geometry.

    Raises:
        GeometrySyntaxError: If the text is not valid WKT.
    """
    return GeometryKind.of(_read(text))


def parse_multipolygon(text: str) -> MultiPolygon:
    """
    Parse WKT boundary text into a MultiPolygon.

    Args:
        text: WKT text, expected to be a ``MULTIPOLYGON``.

    Returns:
        The parsed MultiPolygon.

    Raises:
        GeometrySyntaxError: If the text is not valid WKT.
        GeometryTypeError: If the text is valid WKT of another kind, or an
            empty multipolygon.
    """
    geometry = _read(text)
    kind = GeometryKind.of(geometry)

    if kind is not GeometryKind.MULTIPOLYGON:
        # Report the concrete type for OTHER rather than the bucket name
        name = kind.value if kind is GeometryKind.POLYGON else geometry.geom_type
        raise GeometryTypeError(
            f"Expected MultiPolygon boundary, got {name}", kind=name, text=text
        )
    if geometry.is_empty:
        raise GeometryTypeError(
            "Expected non-empty MultiPolygon boundary, got MULTIPOLYGON EMPTY",
            kind="EmptyMultiPolygon",
            text=text,
        )

    shape = MultiPolygon.from_shapely(geometry)
    logger.debug("Parsed multipolygon with %d polygon(s)", len(shape.polygons))
    return shape
