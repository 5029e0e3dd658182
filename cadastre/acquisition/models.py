"""
Configuration model and result containers for parcel file loading.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator

from cadastre.exceptions import CadastreError

from .parcel import MISSING_MARKER, Parcel


class LoaderConfig(BaseModel):
    """Configuration for reading delimited parcel files."""

    delimiter: str = Field(
        default=";",
        min_length=1,
        max_length=1,
        description="Single-character field delimiter",
    )
    encoding: str = Field(
        default="utf-8",
        min_length=1,
        description="Text encoding of the source file",
    )
    missing_marker: str = Field(
        default=MISSING_MARKER,
        description="Location value treated as 'not available'",
    )
    header_rows: int = Field(
        default=1,
        ge=0,
        le=100,
        description="Number of leading rows to discard",
    )

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Reject delimiters that would split WKT coordinates."""
        if v in (",", " ", "(", ")"):
            raise ValueError(f"delimiter {v!r} conflicts with WKT syntax")
        return v


@dataclass
class SkippedRow:
    """A data row rejected during loading."""

    line_number: int
    error: CadastreError

    @property
    def reason(self) -> str:
        return str(self.error)


@dataclass
class LoadResult:
    """Container for the outcome of loading one parcel source."""

    parcels: list[Parcel]
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def total_rows(self) -> int:
        return len(self.parcels) + len(self.skipped)
