"""
Batch Coordinate Converter — Coordinate Projector
==================================================
Projects a single (x, y) point from one :class:`CoordinateSystem` to
another using :mod:`pyproj`.

Geographic points are handled in (longitude, latitude) order throughout —
transformers are built with ``always_xy=True`` so axis order never depends
on the CRS definition.

Usage::

    from batch_coord_converter.models import CoordinateSystem, ProjectionKind
    from batch_coord_converter.projector import project

    utm = CoordinateSystem(ProjectionKind.UTM, "WGS84", zone=18, hemisphere="N")
    wgs84 = CoordinateSystem(ProjectionKind.GEOGRAPHIC, "WGS84")
    lng, lat = project((500000.0, 4649776.0), utm, wgs84)
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache

import pyproj
from pyproj.exceptions import CRSError as PyprojCRSError
from pyproj.exceptions import ProjError

from batch_coord_converter.models import CoordinateSystem
from shared.python.exceptions import CRSError, ParameterError, ProjectionError

logger = logging.getLogger("coordpaste.batch_coord_converter.projector")

LATITUDE_LIMIT = 90.0
LONGITUDE_LIMIT = 180.0

Point = tuple[float, float]


@lru_cache(maxsize=64)
def _transformer(source_proj: str, target_proj: str) -> pyproj.Transformer:
    """Build (and cache) a transformer between two PROJ strings.

    Raises:
        CRSError: If either PROJ string cannot be parsed.
    """
    crs = []
    for proj_string in (source_proj, target_proj):
        try:
            crs.append(pyproj.CRS.from_user_input(proj_string))
        except PyprojCRSError as exc:
            raise CRSError(proj_string) from exc
    logger.debug("Building transformer %s → %s", source_proj, target_proj)
    return pyproj.Transformer.from_crs(crs[0], crs[1], always_xy=True)


def _check_geographic_range(lng: float, lat: float, what: str) -> None:
    if not -LATITUDE_LIMIT <= lat <= LATITUDE_LIMIT:
        raise ProjectionError(
            f"{what} latitude {lat} outside the valid range -90 to 90"
        )
    if not -LONGITUDE_LIMIT <= lng <= LONGITUDE_LIMIT:
        raise ProjectionError(
            f"{what} longitude {lng} outside the valid range -180 to 180"
        )


def system_proj(system: CoordinateSystem) -> str:
    """Return the PROJ string for *system*, as a :class:`ProjectionError`
    when a parameter is invalid."""
    try:
        return system.to_proj()
    except ParameterError as exc:
        raise ProjectionError(exc.message) from exc


def project(
    point: Point, source: CoordinateSystem, target: CoordinateSystem
) -> Point:
    """Project *point* from *source* to *target*.

    Args:
        point: ``(x, y)`` — easting/northing for UTM systems,
               longitude/latitude for geographic systems.
        source: System *point* is expressed in.
        target: System to express the result in.

    Returns:
        The projected ``(x, y)``.  When *source* equals *target* the input
        point is returned unchanged.

    Raises:
        ProjectionError: If the input is not finite, a zone / hemisphere /
            datum is invalid, the input or result falls outside the
            geographic range, or PROJ rejects the point.
        CRSError: If a PROJ string cannot be parsed.
    """
    x, y = point
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ProjectionError(f"Input coordinates ({x}, {y}) are not finite numbers")

    source_proj = system_proj(source)
    target_proj = system_proj(target)

    if not source.is_utm:
        _check_geographic_range(x, y, "Input")

    if source == target:
        return point

    try:
        new_x, new_y = _transformer(source_proj, target_proj).transform(
            x, y, errcheck=True
        )
    except ProjError as exc:
        raise ProjectionError(f"Projection failed: {exc}") from exc

    if not (math.isfinite(new_x) and math.isfinite(new_y)):
        raise ProjectionError("Projection produced non-finite coordinates")
    if not target.is_utm:
        _check_geographic_range(new_x, new_y, "Resulting")

    return (new_x, new_y)
