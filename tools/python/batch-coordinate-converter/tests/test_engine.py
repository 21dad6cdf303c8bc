"""
Tests — Batch Conversion Engine
================================
Unit tests for :func:`batch_coord_converter.engine.convert`.

The identity cases use the ``utm-datum`` kind with equal datums directly
through the engine, which does not enforce the distinct-datum rule (only
the workflow guard does).
"""

from __future__ import annotations

import logging

import pytest

from batch_coord_converter.engine import convert
from batch_coord_converter.formatter import format_for_clipboard
from batch_coord_converter.models import (
    LATLNG_TO_UTM,
    UTM_DATUM,
    UTM_TO_LATLNG,
    ColumnMapping,
    ConversionParameters,
    GeographicCoordinate,
    UTMCoordinate,
)
from batch_coord_converter.parser import parse
from shared.python.exceptions import ColumnMappingError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def xy_mapping() -> ColumnMapping:
    return ColumnMapping.for_roles(("x", "y")).assign("x", 0).assign("y", 1)


@pytest.fixture()
def zone_18n() -> ConversionParameters:
    return ConversionParameters(zone=18, hemisphere="N")


@pytest.fixture()
def grid() -> tuple[tuple[str, ...], ...]:
    return parse("X,Y\n500000,4649776\n700000,9300000", UTM_DATUM.header_vocabulary)


# ---------------------------------------------------------------------------
# Happy-path tests
# ---------------------------------------------------------------------------


class TestConvertHappyPath:
    """Batches where every row converts."""

    def test_identity_batch(self, grid, xy_mapping, zone_18n) -> None:
        """Same zone, hemisphere and datum: every row comes back unchanged."""
        batch = convert(grid, xy_mapping, zone_18n, UTM_DATUM)
        assert batch.success_count == 2
        assert batch.failed_count == 0
        assert [row.converted for row in batch.rows] == [
            UTMCoordinate(500000.0, 4649776.0, 18, "N", "WGS84"),
            UTMCoordinate(700000.0, 9300000.0, 18, "N", "WGS84"),
        ]

    def test_row_numbers_and_order(self, grid, xy_mapping, zone_18n) -> None:
        batch = convert(grid, xy_mapping, zone_18n, UTM_DATUM)
        assert [row.row_number for row in batch.rows] == [1, 2]
        assert [row.original for row in batch.rows] == list(grid)

    def test_utm_to_latlng_values(self, xy_mapping, zone_18n) -> None:
        batch = convert((("500000", "4649776.22"),), xy_mapping, zone_18n, UTM_TO_LATLNG)
        converted = batch.rows[0].converted
        assert isinstance(converted, GeographicCoordinate)
        assert converted.lat == pytest.approx(42.0, abs=1e-6)
        assert converted.lng == pytest.approx(-75.0, abs=1e-6)

    def test_degrees_rounded_to_eight_places(self, xy_mapping, zone_18n) -> None:
        batch = convert((("512345.678", "4650000"),), xy_mapping, zone_18n, UTM_TO_LATLNG)
        converted = batch.rows[0].converted
        assert round(converted.lat, 8) == converted.lat
        assert round(converted.lng, 8) == converted.lng

    def test_latlng_hemisphere_per_row(self) -> None:
        mapping = ColumnMapping.for_roles(("lat", "lng")).assign("lat", 0).assign("lng", 1)
        rows = (("42", "-75"), ("-12", "-75"))
        batch = convert(rows, mapping, ConversionParameters(zone=18), LATLNG_TO_UTM)
        assert [row.converted.hemisphere for row in batch.rows] == ["N", "S"]
        assert batch.rows[0].converted.x == pytest.approx(500000.0, abs=0.01)

    def test_swapped_mapping(self, zone_18n) -> None:
        mapping = ColumnMapping.for_roles(("x", "y")).assign("x", 1).assign("y", 0)
        batch = convert((("4649776", "500000"),), mapping, zone_18n, UTM_DATUM)
        assert batch.rows[0].converted.xy == (500000.0, 4649776.0)

    def test_extra_columns_ignored(self, xy_mapping, zone_18n) -> None:
        batch = convert((("500000", "4649776", "P-01"),), xy_mapping, zone_18n, UTM_DATUM)
        assert batch.success_count == 1

    def test_deterministic(self, grid, xy_mapping, zone_18n) -> None:
        first = convert(grid, xy_mapping, zone_18n, UTM_TO_LATLNG)
        second = convert(grid, xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert first == second

    def test_empty_grid(self, xy_mapping, zone_18n) -> None:
        batch = convert((), xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert batch.total == 0
        assert batch.success_count == 0

    def test_identity_round_trip_preserves_row_count(
        self, grid, xy_mapping, zone_18n
    ) -> None:
        """parse → identity convert → format gives a header plus one line per row."""
        batch = convert(grid, xy_mapping, zone_18n, UTM_DATUM)
        system = UTM_DATUM.source_system(zone_18n)
        text = format_for_clipboard(batch.rows, system, system)
        assert len(text.split("\n")) == len(grid) + 1


# ---------------------------------------------------------------------------
# Partial-failure tests
# ---------------------------------------------------------------------------


class TestConvertRowFailures:
    """Rows that fail must not abort the batch."""

    def test_non_numeric_cell(self, xy_mapping, zone_18n) -> None:
        rows = (("500000", "4649776"), ("abc", "4649776"), ("700000", "9300000"))
        batch = convert(rows, xy_mapping, zone_18n, UTM_TO_LATLNG)

        assert batch.success_count == 2
        assert batch.success_count + batch.failed_count == batch.total
        failed = batch.rows[1]
        assert not failed.ok
        assert "invalid number for 'x'" in failed.error
        assert failed.converted == GeographicCoordinate(0.0, 0.0, "WGS84")
        assert failed.original == ("abc", "4649776")

    def test_missing_cell(self, xy_mapping, zone_18n) -> None:
        batch = convert((("500000",),), xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert batch.rows[0].error == "missing value for 'y' (column 2)"

    def test_empty_row(self, xy_mapping, zone_18n) -> None:
        batch = convert(((),), xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert batch.failed_count == 1

    def test_nan_cell(self, xy_mapping, zone_18n) -> None:
        batch = convert((("nan", "4649776"),), xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert "invalid number" in batch.rows[0].error

    def test_projection_rejection(self, zone_18n) -> None:
        mapping = ColumnMapping.for_roles(("lat", "lng")).assign("lat", 0).assign("lng", 1)
        batch = convert((("95", "-75"), ("42", "-75")), mapping, zone_18n, LATLNG_TO_UTM)
        assert "latitude" in batch.rows[0].error
        assert batch.rows[1].ok

    def test_invalid_parameters_fail_every_row(self, grid, xy_mapping) -> None:
        """Bad parameters surface per row rather than raising."""
        params = ConversionParameters(zone=75, hemisphere="N")
        batch = convert(grid, xy_mapping, params, UTM_TO_LATLNG)
        assert batch.success_count == 0
        assert all("zone" in row.error for row in batch.rows)


# ---------------------------------------------------------------------------
# Batch-level errors
# ---------------------------------------------------------------------------


class TestConvertValidation:
    """Problems that stop the whole batch."""

    def test_incomplete_mapping_raises(self, grid, zone_18n) -> None:
        mapping = ColumnMapping.for_roles(("x", "y")).assign("x", 0)
        with pytest.raises(ColumnMappingError):
            convert(grid, mapping, zone_18n, UTM_TO_LATLNG)

    def test_mapping_for_other_roles_raises(self, grid, zone_18n) -> None:
        mapping = ColumnMapping.for_roles(("lat", "lng")).assign("lat", 0).assign("lng", 1)
        with pytest.raises(ColumnMappingError):
            convert(grid, mapping, zone_18n, UTM_TO_LATLNG)


class TestConvertLogging:
    """The batch summary names both coordinate systems."""

    def test_summary_log_names_systems(self, grid, xy_mapping, zone_18n, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="coordpaste.batch_coord_converter.engine"):
            convert(grid, xy_mapping, zone_18n, UTM_TO_LATLNG)
        assert "utm-to-latlng (UTM 18N WGS84 → Geographic WGS84)" in caplog.text
