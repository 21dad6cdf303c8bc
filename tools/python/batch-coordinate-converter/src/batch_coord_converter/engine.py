"""
Batch Coordinate Converter — Batch Conversion Engine
=====================================================
Converts every row of a parsed grid, in order, through the projector.

A bad row never aborts the batch: rows whose mapped cells are missing or
non-numeric, or that the projector rejects, are recorded with an error
message and zero-valued placeholder coordinates.

Usage::

    from batch_coord_converter.engine import convert
    from batch_coord_converter.models import (
        ColumnMapping, ConversionParameters, UTM_TO_LATLNG,
    )

    mapping = ColumnMapping.for_roles(("x", "y")).assign("x", 0).assign("y", 1)
    params = ConversionParameters(zone=18, hemisphere="N")
    batch = convert(grid, mapping, params, UTM_TO_LATLNG)
    print(batch.summary())
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from batch_coord_converter.models import (
    ColumnMapping,
    ConversionBatch,
    ConversionKind,
    ConversionParameters,
    ConversionRow,
)
from batch_coord_converter.projector import project
from shared.python.exceptions import ColumnMappingError, ProjectionError

logger = logging.getLogger("coordpaste.batch_coord_converter.engine")


class _RowError(Exception):
    """Internal signal carrying a per-row failure message."""


def _read_number(row: Sequence[str], index: int, role: str) -> float:
    if index >= len(row):
        raise _RowError(f"missing value for '{role}' (column {index + 1})")
    cell = row[index]
    try:
        value = float(cell)
    except ValueError:
        raise _RowError(f"invalid number for '{role}': {cell!r}") from None
    if math.isnan(value):
        raise _RowError(f"invalid number for '{role}': {cell!r}")
    return value


def convert_row(
    row: Sequence[str],
    row_number: int,
    indices: tuple[int, int],
    params: ConversionParameters,
    kind: ConversionKind,
) -> ConversionRow:
    """Convert a single row.  Never raises for row-level problems.

    Args:
        row: The row's cells.
        row_number: 1-based position, used only for reporting.
        indices: Column indices for ``kind.roles`` in order.
        params: Conversion parameters.
        kind: Conversion direction.

    Returns:
        A :class:`ConversionRow`; ``error`` is set when the row failed.
    """
    original = tuple(row)
    try:
        first = _read_number(row, indices[0], kind.roles[0])
        second = _read_number(row, indices[1], kind.roles[1])
        source = kind.make_source(params, first, second)
        target = kind.target_system(params, source)
        x, y = project(source.xy, source.system, target)
    except (_RowError, ProjectionError) as exc:
        message = str(exc)
        logger.warning("Row %d failed: %s", row_number, message)
        return ConversionRow(
            row_number=row_number,
            original=original,
            source=kind.source_system(params).placeholder(),
            converted=kind.target_system(params).placeholder(),
            error=message,
        )

    return ConversionRow(
        row_number=row_number,
        original=original,
        source=source,
        converted=target.coordinate(x, y),
    )


def convert(
    rows: Sequence[Sequence[str]],
    mapping: ColumnMapping,
    params: ConversionParameters,
    kind: ConversionKind,
) -> ConversionBatch:
    """Convert every row in *rows*, preserving input order.

    Args:
        rows: Parsed grid (header already removed).
        mapping: Column indices for each of ``kind.roles``.
        params: Zone, hemisphere and datums.
        kind: Conversion direction.

    Returns:
        A :class:`ConversionBatch` with one row per input row.

    Raises:
        ColumnMappingError: If a role of *kind* has no column assigned.
            This is a whole-batch problem, not a per-row one.
    """
    try:
        indices = (mapping.get(kind.roles[0]), mapping.get(kind.roles[1]))
    except KeyError:
        raise ColumnMappingError(None, None) from None
    if indices[0] is None or indices[1] is None:
        raise ColumnMappingError(*indices)

    converted: list[ConversionRow] = []
    success_count = 0
    for row_number, row in enumerate(rows, start=1):
        result = convert_row(row, row_number, indices, params, kind)  # type: ignore[arg-type]
        if result.ok:
            success_count += 1
        converted.append(result)

    batch = ConversionBatch(rows=tuple(converted), success_count=success_count)
    logger.info(
        "%s (%s → %s): %s",
        kind.name,
        kind.source_system(params).label,
        kind.target_system(params).label,
        batch.summary(),
    )
    return batch
