"""
Tests — Coordinate Projector
=============================
Unit tests for :func:`batch_coord_converter.projector.project`.

Test strategy:
- Project well-known reference points with the real pyproj backend and
  assert the results are within a small tolerance.
- Assert that invalid systems and out-of-range input raise
  :class:`ProjectionError` instead of returning garbage.
"""

from __future__ import annotations

import math

import pytest

from batch_coord_converter.models import CoordinateSystem, ProjectionKind
from batch_coord_converter.projector import project
from shared.python.exceptions import ProjectionError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def utm_18n() -> CoordinateSystem:
    return CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=18, hemisphere="N")


@pytest.fixture()
def wgs84() -> CoordinateSystem:
    return CoordinateSystem(ProjectionKind.GEOGRAPHIC, "WGS84")


# ---------------------------------------------------------------------------
# Happy-path tests
# ---------------------------------------------------------------------------


class TestProjectHappyPath:
    """Projection between valid systems."""

    def test_identity_returns_input(self, utm_18n: CoordinateSystem) -> None:
        assert project((500000.0, 4649776.0), utm_18n, utm_18n) == (500000.0, 4649776.0)

    def test_utm_to_geographic(
        self, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        """(500000, 4649776.22) in zone 18N is 42°N on the 75°W central meridian."""
        lng, lat = project((500000.0, 4649776.22), utm_18n, wgs84)
        assert lng == pytest.approx(-75.0, abs=1e-6)
        assert lat == pytest.approx(42.0, abs=1e-6)

    def test_geographic_to_utm(
        self, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        x, y = project((-75.0, 42.0), wgs84, utm_18n)
        assert x == pytest.approx(500000.0, abs=0.01)
        assert y == pytest.approx(4649776.22, abs=0.01)

    def test_southern_hemisphere_false_northing(self, wgs84: CoordinateSystem) -> None:
        utm_18s = CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=18, hemisphere="S")
        _, y = project((-75.0, -12.0), wgs84, utm_18s)
        assert 8_600_000 < y < 10_000_000

    def test_psad56_datum_shift(self) -> None:
        """PSAD56 → WGS84 in Peru moves points by a few hundred metres."""
        psad = CoordinateSystem(ProjectionKind.UTM, "PSAD56", zone=18, hemisphere="S")
        wgs = CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=18, hemisphere="S")
        x, y = project((280000.0, 8660000.0), psad, wgs)
        shift = math.hypot(x - 280000.0, y - 8660000.0)
        assert 100.0 < shift < 1000.0

    def test_result_is_finite(
        self, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        lng, lat = project((700000.0, 9300000.0), utm_18n, wgs84)
        assert math.isfinite(lng) and math.isfinite(lat)


# ---------------------------------------------------------------------------
# Rejection tests
# ---------------------------------------------------------------------------


class TestProjectValidation:
    """Inputs the projector must reject."""

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_input(
        self, value: float, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        with pytest.raises(ProjectionError, match="not finite"):
            project((value, 4649776.0), utm_18n, wgs84)

    def test_zone_out_of_range(self, wgs84: CoordinateSystem) -> None:
        bad = CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=0, hemisphere="N")
        with pytest.raises(ProjectionError, match="zone"):
            project((500000.0, 4649776.0), bad, wgs84)

    def test_bad_hemisphere(self, wgs84: CoordinateSystem) -> None:
        bad = CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=18, hemisphere="E")
        with pytest.raises(ProjectionError, match="hemisphere"):
            project((500000.0, 4649776.0), bad, wgs84)

    def test_unknown_datum(self, utm_18n: CoordinateSystem) -> None:
        bad = CoordinateSystem(ProjectionKind.GEOGRAPHIC, "NAD27")
        with pytest.raises(ProjectionError, match="datum"):
            project((500000.0, 4649776.0), utm_18n, bad)

    def test_latitude_out_of_range(
        self, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        with pytest.raises(ProjectionError, match="latitude"):
            project((-75.0, 95.0), wgs84, utm_18n)

    def test_longitude_out_of_range(
        self, utm_18n: CoordinateSystem, wgs84: CoordinateSystem
    ) -> None:
        with pytest.raises(ProjectionError, match="longitude"):
            project((-190.0, 42.0), wgs84, utm_18n)

    def test_identity_still_validates(self, wgs84: CoordinateSystem) -> None:
        """Identical systems skip pyproj but not the range checks."""
        with pytest.raises(ProjectionError):
            project((0.0, 91.0), wgs84, wgs84)
