"""
Batch Coordinate Converter — Clipboard Formatter
=================================================
Renders a conversion batch as tab-delimited text that pastes cleanly back
into a spreadsheet.

The output is a header line followed by exactly one line per converted
row.  Failed rows are written as ``ERROR`` in every column so each output
line still lines up with the pasted row it came from.
"""

from __future__ import annotations

from typing import Literal, Sequence

from batch_coord_converter.models import (
    Coordinate,
    CoordinateSystem,
    ConversionRow,
    GeographicCoordinate,
    OutputFormat,
)

DELIMITER = "\t"
ERROR_SENTINEL = "ERROR"


def decimal_to_dms(value: float, axis: Literal["lat", "lng"]) -> str:
    """Format decimal degrees as degrees-minutes-seconds.

    Example::

        decimal_to_dms(-12.0464, "lat")   # '12°2\\'47.04"S'
    """
    if axis == "lat":
        direction = "N" if value >= 0 else "S"
    else:
        direction = "E" if value >= 0 else "W"

    # Round on total hundredths of a second so 59.999" never prints as 60.00".
    hundredths = round(abs(value) * 360_000)
    degrees, remainder = divmod(hundredths, 360_000)
    minutes, remainder = divmod(remainder, 6_000)
    seconds = remainder / 100
    return f"{degrees}°{minutes}'{seconds:.2f}\"{direction}"


def coordinate_headers(
    system: CoordinateSystem, output_format: OutputFormat = "decimal"
) -> list[str]:
    """Column titles for coordinates in *system*."""
    if system.is_utm:
        return ["X UTM", "Y UTM", "Zone", "Hemisphere", "Datum"]
    if output_format == "dms":
        return ["Latitude DMS", "Longitude DMS", "Datum"]
    return ["Latitude", "Longitude", "Datum"]


def coordinate_fields(
    coordinate: Coordinate,
    decimal_places: int | None = None,
    output_format: OutputFormat = "decimal",
) -> list[str]:
    """Cell values for one coordinate, matching :func:`coordinate_headers`."""
    digits = coordinate.system.precision if decimal_places is None else decimal_places
    if isinstance(coordinate, GeographicCoordinate):
        if output_format == "dms":
            lat = decimal_to_dms(coordinate.lat, "lat")
            lng = decimal_to_dms(coordinate.lng, "lng")
        else:
            lat = f"{coordinate.lat:.{digits}f}"
            lng = f"{coordinate.lng:.{digits}f}"
        return [lat, lng, coordinate.datum]
    return [
        f"{coordinate.x:.{digits}f}",
        f"{coordinate.y:.{digits}f}",
        "" if coordinate.zone is None else str(coordinate.zone),
        coordinate.hemisphere or "",
        coordinate.datum,
    ]


def format_for_clipboard(
    rows: Sequence[ConversionRow],
    source: CoordinateSystem,
    target: CoordinateSystem,
    decimal_places: int | None = None,
    output_format: OutputFormat = "decimal",
) -> str:
    """Render *rows* as tab-delimited text.

    Args:
        rows: Converted rows in input order.
        source: System of the pasted coordinates (first column group).
        target: System of the converted coordinates (second column group).
        decimal_places: Digits for numeric values; ``None`` keeps the
                        native precision (2 for metres, 8 for degrees).
        output_format: ``"dms"`` renders converted geographic values as
                       degrees-minutes-seconds.

    Returns:
        Header plus one line per row joined with ``\\n``, or ``""`` when
        *rows* is empty.
    """
    if not rows:
        return ""

    headers = [f"{h} Original" for h in coordinate_headers(source)]
    headers += [f"{h} Converted" for h in coordinate_headers(target, output_format)]

    lines = [DELIMITER.join(headers)]
    for row in rows:
        if row.error is not None:
            lines.append(DELIMITER.join([ERROR_SENTINEL] * len(headers)))
            continue
        fields = coordinate_fields(row.source, decimal_places)
        fields += coordinate_fields(row.converted, decimal_places, output_format)
        lines.append(DELIMITER.join(fields))
    return "\n".join(lines)
