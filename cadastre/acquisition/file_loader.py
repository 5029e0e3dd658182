"""
File-based loader for delimited parcel records.

This module provides the ParcelFileLoader class for reading parcel
records from a delimited text file (semicolon-separated in the reference
data) into validated Parcel objects.

File layout:
- First row is a header and is discarded
- Columns: id; (unused); (unused); length; area; boundary_wkt; owner; location*
- The location tail has a variable number of columns per row; ``NA`` marks
  an unknown location level

Rows that fail validation are skipped and reported back to the caller in
the LoadResult; a file that yields no valid parcel at all is an error.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import pandas as pd

from cadastre.exceptions import (
    EmptyResultError,
    FieldFormatError,
    GeometrySyntaxError,
    GeometryTypeError,
    SourceReadError,
)

from .models import LoadResult, LoaderConfig, SkippedRow
from .parcel import Parcel

# Errors that reject a single row without aborting the load
ROW_ERRORS = (FieldFormatError, GeometrySyntaxError, GeometryTypeError)


class ParcelFileLoader:
    """
    Loader for parcel records stored in a delimited text file.

    Usage:
        loader = ParcelFileLoader()
        result = loader.load("data/parcels.csv")

        print(len(result.parcels), "parcels")
        for skipped in result.skipped:
            print(skipped.line_number, skipped.reason)

    Attributes:
        config: Delimiter, encoding and header settings.
        logger: Logger receiving progress and skipped-row reports.
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize the file loader.

        Args:
            config: Loader configuration. Defaults to LoaderConfig().
            logger: Logger for diagnostics. Defaults to this module's logger.
        """
        self.config = config or LoaderConfig()
        self.logger = logger or logging.getLogger(__name__)

    def _read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding=self.config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(
                f"Failed to read parcel file: {path}",
                path=str(path),
                cause=e,
            ) from e

    def _read_rows(self, path: Path) -> tuple[list[int], pd.DataFrame]:
        """
        Read the data rows of a file into a string DataFrame.

        Rows are padded to the widest row; the padding is NaN while empty
        fields stay as empty strings.
        Quote characters are plain text, so every line is exactly one record.

        Returns:
            Source line numbers (1-based) and the DataFrame, row-aligned.
        """
        lines = self._read_text(path).splitlines()

        line_numbers = []
        data_lines = []
        for number, line in enumerate(lines, start=1):
            if number <= self.config.header_rows or not line.strip():
                continue
            line_numbers.append(number)
            data_lines.append(line)

        if not data_lines:
            return [], pd.DataFrame()

        width = max(line.count(self.config.delimiter) for line in data_lines) + 1

        try:
            frame = pd.read_csv(
                io.StringIO("\n".join(data_lines)),
                sep=self.config.delimiter,
                header=None,
                names=list(range(width)),
                quoting=csv.QUOTE_NONE,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except (pd.errors.ParserError, ValueError) as e:
            raise SourceReadError(
                f"Failed to parse parcel file: {path}",
                path=str(path),
                cause=e,
            ) from e

        if len(frame) != len(line_numbers):
            raise SourceReadError(
                f"Parsed {len(frame)} records from {len(line_numbers)} data lines "
                f"in parcel file: {path}",
                path=str(path),
            )

        return line_numbers, frame

    @staticmethod
    def _row_fields(values: Sequence[Any]) -> list[str]:
        # Drop the padding added for rows shorter than the widest one;
        # trailing empty fields carry no data either
        fields = list(values)
        while fields and (not isinstance(fields[-1], str) or not fields[-1]):
            fields.pop()
        return fields

    def load(self, path: Union[str, Path]) -> LoadResult:
        """
        Load all valid parcels from a file.

        Args:
            path: Path to the delimited parcel file.

        Returns:
            LoadResult with parcels in file order and the skipped rows.

        Raises:
            SourceReadError: If the file cannot be opened or read.
            EmptyResultError: If no row yields a valid parcel.
        """
        path = Path(path)
        self.logger.info("Loading parcels from %s", path)

        line_numbers, frame = self._read_rows(path)
        result = LoadResult(parcels=[])

        for line_number, values in zip(
            line_numbers, frame.itertuples(index=False, name=None)
        ):
            fields = self._row_fields(values)
            try:
                parcel = Parcel.from_row(fields, missing_marker=self.config.missing_marker)
            except ROW_ERRORS as e:
                self.logger.warning("Skipping line %d of %s: %s", line_number, path, e)
                result.skipped.append(SkippedRow(line_number=line_number, error=e))
                continue
            result.parcels.append(parcel)

        self.logger.info(
            "Loaded %d parcels from %s (%d rows skipped)",
            len(result.parcels),
            path,
            result.skipped_count,
        )

        if not result.parcels:
            raise EmptyResultError(
                f"No valid parcels in {path} "
                f"({result.skipped_count} data rows rejected)",
                path=str(path),
                skipped_count=result.skipped_count,
            )

        return result


def load_parcels(
    path: Union[str, Path],
    config: Optional[LoaderConfig] = None,
) -> list[Parcel]:
    """
    Load the valid parcels of a file.

    Convenience wrapper around ParcelFileLoader.load(); use the loader
    directly to see which rows were skipped.

    Args:
        path: Path to the delimited parcel file.
        config: Optional loader configuration.

    Returns:
        List of parcels in file order.
    """
    return ParcelFileLoader(config).load(path).parcels
