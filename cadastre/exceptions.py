"""
Custom exceptions for parcel loading and adjacency graph construction.

This module defines a hierarchy of exceptions for handling the error
conditions that may occur while reading parcel files, parsing boundary
geometry and evaluating topological predicates.
"""

from typing import Optional

# Upper bound on how much boundary text is kept on an exception
MAX_TEXT_LENGTH = 500


def _truncate(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = str(text)
    if len(text) > MAX_TEXT_LENGTH:
        return text[:MAX_TEXT_LENGTH] + "..."
    return text


class CadastreError(Exception):
    """Base exception for all cadastre errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        """
        Initialize the cadastre error.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that caused this error, if any.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class SourceReadError(CadastreError):
    """Raised when a parcel source file cannot be opened or read."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the source read error.

        Args:
            message: Human-readable error description.
            path: Path of the resource that could not be read.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message, cause)
        self.path = path


class GeometrySyntaxError(CadastreError):
    """Raised when boundary text is not well-formed WKT."""

    def __init__(
        self,
        message: str,
        text: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the geometry syntax error.

        Args:
            message: Human-readable error description.
            text: The boundary text that could not be parsed.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message, cause)
        self.text = _truncate(text)


class GeometryTypeError(CadastreError):
    """Raised when boundary text parses but is not a non-empty multipolygon."""

    def __init__(
        self,
        message: str,
        kind: str,
        text: Optional[str] = None,
    ) -> None:
        """
        Initialize the geometry type error.

        Args:
            message: Human-readable error description.
            kind: Name of the rejected geometry kind (e.g. "Polygon").
            text: The original boundary text.
        """
        super().__init__(message)
        self.kind = kind
        self.text = _truncate(text)


class FieldFormatError(CadastreError):
    """Raised when a record field is missing or cannot be converted."""

    def __init__(
        self,
        field_name: str,
        value: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the field format error.

        Args:
            field_name: Name of the offending field (id, length, area, owner).
            value: Raw field value, or None when the field is absent.
            cause: The underlying exception that caused this error.
        """
        if value is None:
            message = f"Field '{field_name}' is missing"
        else:
            message = f"Field '{field_name}' has invalid value {value!r}"
        super().__init__(message, cause)
        self.field_name = field_name
        self.value = value


class EmptyResultError(CadastreError):
    """Raised when a source yields no valid parcel at all."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        skipped_count: int = 0,
    ) -> None:
        """
        Initialize the empty result error.

        Args:
            message: Human-readable error description.
            path: Path of the source that produced no parcels.
            skipped_count: Number of data rows that were rejected.
        """
        super().__init__(message)
        self.path = path
        self.skipped_count = skipped_count


class InvalidInputError(CadastreError):
    """Raised when graph construction or a graph query gets invalid arguments."""

    def __init__(self, message: str, reason: str) -> None:
        """
        Initialize the invalid input error.

        Args:
            message: Human-readable error description.
            reason: Short machine-readable reason
                    ("missing", "empty", "null_element", "null_argument").
        """
        super().__init__(message)
        self.reason = reason


class TopologyError(CadastreError):
    """Raised when a topological predicate cannot be evaluated."""

    def __init__(
        self,
        operation: str,
        reason: str,
        left: Optional[str] = None,
        right: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the topology error.

        Args:
            operation: Name of the failing operation (prepare, relate, ...).
            reason: Description of the degenerate condition.
            left: WKT of the first geometry involved.
            right: WKT of the second geometry involved, if any.
            cause: The underlying exception that caused this error.
        """
        super().__init__(f"Topology error during {operation}: {reason}", cause)
        self.operation = operation
        self.reason = reason
        self.left = _truncate(left)
        self.right = _truncate(right)


class AdjacencyBuildError(CadastreError):
    """Raised when the adjacency graph cannot be built."""

    def __init__(
        self,
        message: str,
        parcel_ids: tuple = (),
        cause: Optional[Exception] = None,
    ) -> None:
        """
        Initialize the adjacency build error.

        Args:
            message: Human-readable error description.
            parcel_ids: Identifiers of the parcels being evaluated.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message, cause)
        self.parcel_ids = tuple(parcel_ids)


class ConfigurationError(CadastreError):
    """Raised when a configuration file is malformed or fails validation."""

    pass
