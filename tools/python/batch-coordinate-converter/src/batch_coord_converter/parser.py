"""
Batch Coordinate Converter — Tabular Parser
============================================
Turns text pasted from a spreadsheet into a rectangular-ish grid of string
cells and strips a detected header row.

Cells are split on tabs, commas or runs of whitespace, and empty cells are
discarded.  Malformed cells are *not* an error here; they surface per row
during conversion.

Usage::

    from batch_coord_converter.parser import parse

    grid = parse("X,Y\\n500000,4649776", header_vocabulary=("x", "y"))
    # (("500000", "4649776"),)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from shared.python.exceptions import DataParseError

logger = logging.getLogger("coordpaste.batch_coord_converter.parser")

ParsedGrid = tuple[tuple[str, ...], ...]

_CELL_SEPARATOR = re.compile(r"\t|,|\s+")


@dataclass(frozen=True)
class ParseLimits:
    """Upper bounds on a single paste.

    Attributes:
        max_rows: Maximum number of lines (header included).
        max_columns: Maximum number of cells on any line.
        max_cell_length: Maximum characters in a single cell.
    """

    max_rows: int = 10_000
    max_columns: int = 50
    max_cell_length: int = 1_000


DEFAULT_LIMITS = ParseLimits()


def split_cells(line: str) -> tuple[str, ...]:
    """Split one line on tab, comma or whitespace, dropping empty cells."""
    return tuple(cell for cell in _CELL_SEPARATOR.split(line) if cell.strip())


def _is_number(cell: str) -> bool:
    try:
        float(cell)
    except ValueError:
        return False
    return True


def is_header_row(row: Sequence[str], vocabulary: Iterable[str]) -> bool:
    """Return ``True`` if any non-numeric cell contains a vocabulary word.

    Matching is a case-insensitive substring test, so ``"Easting_m"``
    matches ``"easting"``.  Cells that parse as numbers never count,
    which keeps values like ``"Infinity"`` or ``"1e5"`` in the data.
    """
    words = [word.lower() for word in vocabulary]
    for cell in row:
        if _is_number(cell):
            continue
        lowered = cell.strip().lower()
        if any(word in lowered for word in words):
            return True
    return False


def detect_and_remove_header(grid: ParsedGrid, vocabulary: Iterable[str]) -> ParsedGrid:
    """Drop the first row of *grid* when it looks like a header."""
    if not grid:
        return grid
    if is_header_row(grid[0], vocabulary):
        logger.debug("Header row detected and removed: %s", grid[0])
        return grid[1:]
    return grid


def parse(
    raw: str,
    header_vocabulary: Iterable[str] = (),
    limits: ParseLimits = DEFAULT_LIMITS,
) -> ParsedGrid:
    """Parse pasted text into a grid of string cells.

    Leading and trailing blank lines are ignored; blank lines between data
    rows are kept as empty rows so row numbers match the pasted block.

    Args:
        raw: Text as pasted from the spreadsheet.
        header_vocabulary: Substrings identifying a header row.
        limits: Size bounds for the paste.

    Returns:
        Tuple of rows, each a tuple of cells.  Empty input gives ``()``.

    Raises:
        DataParseError: If *raw* is not text or exceeds *limits*.
    """
    if not isinstance(raw, str):
        raise DataParseError(
            f"Pasted data must be text, got {type(raw).__name__}."
        )

    text = raw.strip()
    if not text:
        return ()

    lines = text.splitlines()
    if len(lines) > limits.max_rows:
        raise DataParseError(
            f"Pasted data has {len(lines)} rows; the maximum is {limits.max_rows}."
        )

    rows = []
    for line_number, line in enumerate(lines, start=1):
        cells = split_cells(line)
        if len(cells) > limits.max_columns:
            raise DataParseError(
                f"Line {line_number} has {len(cells)} columns; "
                f"the maximum is {limits.max_columns}."
            )
        for cell in cells:
            if len(cell) > limits.max_cell_length:
                raise DataParseError(
                    f"Line {line_number} has a cell longer than "
                    f"{limits.max_cell_length} characters."
                )
        rows.append(cells)

    grid = detect_and_remove_header(tuple(rows), header_vocabulary)
    logger.debug("Parsed %d data row(s) from %d line(s).", len(grid), len(lines))
    return grid
