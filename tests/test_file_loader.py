"""Tests for the delimited parcel file loader."""

from __future__ import annotations

import logging

import pandas as pd
import pytest
from pydantic import ValidationError

from cadastre.acquisition import LoaderConfig, ParcelFileLoader, load_parcels
from cadastre.exceptions import (
    EmptyResultError,
    FieldFormatError,
    GeometryTypeError,
    SourceReadError,
)

from conftest import EAST_SQUARE, HEADER, PLAIN_POLYGON, UNIT_SQUARE, row


@pytest.fixture
def loader():
    return ParcelFileLoader()


class TestParcelFileLoader:
    def test_skips_bad_row(self, loader, write_csv):
        path = write_csv(
            [
                HEADER,
                row("1", UNIT_SQUARE),
                row("2", EAST_SQUARE),
                row("abc", UNIT_SQUARE),
            ]
        )
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [1, 2]
        assert result.skipped_count == 1
        assert result.total_rows == 3
        skipped = result.skipped[0]
        assert skipped.line_number == 4
        assert isinstance(skipped.error, FieldFormatError)
        assert "id" in skipped.reason

    def test_wrong_geometry_kind_skipped(self, loader, write_csv):
        path = write_csv([HEADER, row("1", PLAIN_POLYGON), row("2", UNIT_SQUARE)])
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [2]
        assert isinstance(result.skipped[0].error, GeometryTypeError)

    def test_header_is_always_skipped(self, loader, write_csv):
        # A header that happens to look like data is still discarded
        path = write_csv([row("1", UNIT_SQUARE), row("2", EAST_SQUARE)])
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [2]

    def test_variable_location_tail(self, loader, write_csv):
        path = write_csv(
            [
                HEADER,
                row("1", UNIT_SQUARE, "7", "4", "1"),
                row("2", EAST_SQUARE, "7", "4", "1", "Arco da Calheta", "NA", "Ilha da Madeira (Madeira)"),
                row("3", UNIT_SQUARE, "7", "4", "1", "Funchal"),
            ]
        )
        parcels = loader.load(path).parcels
        assert parcels[0].locations == ()
        assert parcels[1].locations == ("Arco da Calheta", "Ilha da Madeira (Madeira)")
        assert parcels[2].locations == ("Funchal",)

    def test_blank_lines_ignored(self, loader, write_csv):
        path = write_csv([HEADER, "", row("1", UNIT_SQUARE), "   ", row("2", EAST_SQUARE)])
        result = loader.load(path)
        assert len(result.parcels) == 2
        assert result.skipped_count == 0

    def test_keeps_file_order(self, loader, write_csv):
        path = write_csv([HEADER] + [row(str(i), UNIT_SQUARE) for i in (5, 3, 9, 1)])
        assert [p.id for p in loader.load(path).parcels] == [5, 3, 9, 1]

    def test_unbalanced_quote_kept_as_text(self, loader, write_csv):
        path = write_csv(
            [HEADER, row("1", UNIT_SQUARE, "7", "4", "1", '"Sao Jorge')]
            + [row(str(i), EAST_SQUARE) for i in range(2, 6)]
        )
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [1, 2, 3, 4, 5]
        assert result.parcels[0].locations == ('"Sao Jorge',)

    def test_quotes_never_join_lines(self, loader, write_csv):
        path = write_csv(
            [
                HEADER,
                row("1", UNIT_SQUARE, "7", "4", "1", '"Sao'),
                row("2", EAST_SQUARE),
                row("3", UNIT_SQUARE, "7", "4", "1", 'Jorge"'),
                row("4", EAST_SQUARE),
            ]
        )
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [1, 2, 3, 4]
        assert result.skipped_count == 0
        assert result.parcels[0].locations == ('"Sao',)
        assert result.parcels[2].locations == ('Jorge"',)

    def test_dialect_characters_are_plain_text(self, loader, write_csv):
        path = write_csv(
            [
                HEADER,
                row("1", UNIT_SQUARE, "7", "4", "1", "Ribeira d'Alva", "C:\\Sé", '""'),
                row("x", UNIT_SQUARE, "7", "4", "1", '"'),
                row("3", EAST_SQUARE),
            ]
        )
        result = loader.load(path)
        assert [p.id for p in result.parcels] == [1, 3]
        assert result.parcels[0].locations == ("Ribeira d'Alva", "C:\\Sé", '""')
        assert result.skipped[0].line_number == 3

    def test_record_count_mismatch(self, loader, write_csv, monkeypatch):
        path = write_csv([HEADER, row("1", UNIT_SQUARE), row("2", EAST_SQUARE)])
        read_csv = pd.read_csv
        monkeypatch.setattr(pd, "read_csv", lambda *args, **kwargs: read_csv(*args, **kwargs).head(1))
        with pytest.raises(SourceReadError) as excinfo:
            loader.load(path)
        assert "1 records from 2 data lines" in str(excinfo.value)

    def test_header_only_file(self, loader, write_csv):
        path = write_csv([HEADER])
        with pytest.raises(EmptyResultError) as excinfo:
            loader.load(path)
        assert excinfo.value.skipped_count == 0

    def test_all_rows_invalid(self, loader, write_csv):
        path = write_csv([HEADER, row("x"), row("2", PLAIN_POLYGON)])
        with pytest.raises(EmptyResultError) as excinfo:
            loader.load(path)
        assert excinfo.value.skipped_count == 2

    def test_missing_file(self, loader, tmp_path):
        with pytest.raises(SourceReadError) as excinfo:
            loader.load(tmp_path / "missing.csv")
        assert isinstance(excinfo.value.cause, FileNotFoundError)

    def test_directory_is_unreadable(self, loader, tmp_path):
        with pytest.raises(SourceReadError):
            loader.load(tmp_path)

    def test_wrong_encoding(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes((HEADER + "\n" + row("1", UNIT_SQUARE, "7", "4", "1", "Sé")).encode("latin-1"))
        with pytest.raises(SourceReadError):
            ParcelFileLoader().load(path)
        parcels = ParcelFileLoader(LoaderConfig(encoding="latin-1")).load(path).parcels
        assert parcels[0].locations == ("Sé",)

    def test_custom_delimiter(self, tmp_path):
        path = tmp_path / "pipe.csv"
        path.write_text(
            "id|a|b|len|area|geom|owner\n"
            f"1|x|y|4|1|{UNIT_SQUARE}|7|Funchal\n",
            encoding="utf-8",
        )
        parcels = ParcelFileLoader(LoaderConfig(delimiter="|")).load(path).parcels
        assert parcels[0].owner == 7
        assert parcels[0].locations == ("Funchal",)

    def test_injected_logger_reports_skips(self, write_csv, caplog):
        path = write_csv([HEADER, row("1", UNIT_SQUARE), row("bad", UNIT_SQUARE)])
        custom = logging.getLogger("tests.loader")
        with caplog.at_level(logging.WARNING, logger="tests.loader"):
            ParcelFileLoader(logger=custom).load(path)
        assert any(
            r.name == "tests.loader" and "Skipping line 3" in r.getMessage()
            for r in caplog.records
        )

    def test_load_parcels_returns_list(self, write_csv):
        path = write_csv([HEADER, row("1", UNIT_SQUARE)])
        parcels = load_parcels(path)
        assert isinstance(parcels, list)
        assert parcels[0].id == 1


class TestLoaderConfig:
    def test_defaults(self):
        config = LoaderConfig()
        assert config.delimiter == ";"
        assert config.missing_marker == "NA"
        assert config.header_rows == 1

    @pytest.mark.parametrize("delimiter", [",", " ", ";;"])
    def test_rejects_bad_delimiter(self, delimiter):
        with pytest.raises(ValidationError):
            LoaderConfig(delimiter=delimiter)
