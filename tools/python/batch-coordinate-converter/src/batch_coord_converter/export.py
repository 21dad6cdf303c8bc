"""
Batch Coordinate Converter — Results Export
============================================
Writes a finished conversion batch to disk, either as a CSV table (one
row per pasted row, failures included) or as a GeoJSON FeatureCollection
(failed rows keep ``null`` geometry so no data is silently lost).

Usage::

    from pathlib import Path
    from batch_coord_converter.export import write_results

    write_results(
        workflow.state.converted_data,
        workflow.state.source_system,
        workflow.state.target_system,
        Path("output/points.geojson"),
    )
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from batch_coord_converter.formatter import coordinate_fields, coordinate_headers
from batch_coord_converter.models import (
    ConversionRow,
    CoordinateSystem,
    GeographicCoordinate,
    OutputFormat,
)
from shared.python.exceptions import OutputWriteError
from shared.python.validators import Validators

logger = logging.getLogger("coordpaste.batch_coord_converter.export")

EXPORT_EXTENSIONS = (".csv", ".tsv", ".geojson", ".json")


def results_to_frame(
    rows: Sequence[ConversionRow],
    source: CoordinateSystem,
    target: CoordinateSystem,
    output_format: OutputFormat = "decimal",
) -> pd.DataFrame:
    """Tabulate *rows* with original cells, both coordinates and the error.

    Failed rows keep their placeholder coordinates blanked out so they
    cannot be mistaken for real positions.
    """
    source_cols = [f"{h} Original" for h in coordinate_headers(source)]
    target_cols = [f"{h} Converted" for h in coordinate_headers(target, output_format)]
    columns = ["Row", "Original Data", *source_cols, *target_cols, "Error"]

    records = []
    for row in rows:
        if row.ok:
            values = coordinate_fields(row.source) + coordinate_fields(
                row.converted, output_format=output_format
            )
        else:
            values = [""] * (len(source_cols) + len(target_cols))
        records.append(
            [row.row_number, " ".join(row.original), *values, row.error or ""]
        )
    return pd.DataFrame.from_records(records, columns=columns)


def _feature(row: ConversionRow) -> dict[str, Any]:
    converted = row.converted
    if isinstance(converted, GeographicCoordinate):
        props: dict[str, Any] = {"datum": converted.datum}
    else:
        props = {
            "zone": converted.zone,
            "hemisphere": converted.hemisphere,
            "datum": converted.datum,
        }
    props.update(
        {
            "row": row.row_number,
            "original": list(row.original),
            "convert_success": row.ok,
            "error": row.error,
        }
    )
    geometry = (
        {"type": "Point", "coordinates": list(converted.xy)} if row.ok else None
    )
    return {"type": "Feature", "geometry": geometry, "properties": props}


def write_results(
    rows: Sequence[ConversionRow],
    source: CoordinateSystem,
    target: CoordinateSystem,
    output_path: Path,
    *,
    output_format: OutputFormat = "decimal",
) -> Path:
    """Write *rows* to *output_path*; the format follows the extension.

    ``.csv`` / ``.tsv`` produce a table, ``.geojson`` / ``.json`` a
    FeatureCollection of converted points.

    Raises:
        InputValidationError: If the extension is not supported.
        OutputWriteError: If the file cannot be written.
    """
    output_path = Path(output_path)
    Validators.assert_supported_extension(output_path, EXPORT_EXTENSIONS)
    Validators.assert_output_dir_writable(output_path)

    suffix = output_path.suffix.lower()
    try:
        if suffix in (".geojson", ".json"):
            geojson = {
                "type": "FeatureCollection",
                "features": [_feature(row) for row in rows],
            }
            with open(output_path, "w", encoding="utf-8") as fh:
                json.dump(geojson, fh, indent=2, ensure_ascii=False)
        else:
            sep = "\t" if suffix == ".tsv" else ","
            frame = results_to_frame(rows, source, target, output_format)
            frame.to_csv(output_path, index=False, sep=sep)
    except OSError as exc:
        raise OutputWriteError(str(output_path), str(exc)) from exc

    logger.info("Exported %d row(s) to %s", len(rows), output_path)
    return output_path
