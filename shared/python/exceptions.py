"""
CoordPaste — Custom Exception Hierarchy
========================================
All CoordPaste tools raise exceptions from this module so callers can
catch them at the right level of granularity.

Hierarchy::

    CoordPasteError                      ← catch-all base
    ├── InputValidationError             ← bad pasted data, columns, params
    │   ├── DataParseError               ← pasted text cannot be split
    │   ├── ColumnMappingError           ← duplicate / negative column index
    │   └── ParameterError               ← zone, hemisphere or datum invalid
    ├── CRSError                         ← coordinate system cannot be built
    ├── ProjectionError                  ← a single point cannot be projected
    ├── WorkflowError                    ← driver used in the wrong stage
    ├── ClipboardWriteError              ← clipboard primitive refused text
    └── OutputWriteError                 ← cannot write to output path

Usage::

    from shared.python.exceptions import ProjectionError

    raise ProjectionError("Latitude 97.2 outside the range -90 to 90")
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class CoordPasteError(Exception):
    """Base exception for all CoordPaste tools.

    Catch this to handle any tool-specific error without caring about
    the exact subtype.

    Args:
        message: Human-readable description of the error.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class InputValidationError(CoordPasteError):
    """Raised when a tool's inputs fail pre-processing validation.

    This is the parent class for more specific input problems.
    """


class DataParseError(InputValidationError):
    """Raised when pasted text cannot be turned into a grid of cells.

    Malformed *cells* are not a parse error: they surface per row during
    conversion.  This covers whole-input problems such as a non-text
    payload or a paste that exceeds the configured size limits.
    """


class ColumnMappingError(InputValidationError):
    """Raised when a column mapping refers to the same or a negative index.

    Args:
        first: Column index requested for the first coordinate role.
        second: Column index requested for the second coordinate role.

    Example::

        raise ColumnMappingError(1, 1)
    """

    def __init__(self, first: int | None, second: int | None) -> None:
        super().__init__(
            f"Invalid column mapping ({first}, {second}). "
            "Both coordinate columns must be set, distinct and >= 0."
        )
        self.first: int | None = first
        self.second: int | None = second


class ParameterError(InputValidationError):
    """Raised when a conversion parameter (zone, hemisphere, datum) is invalid.

    Args:
        name: Parameter name, e.g. ``"zone"``.
        value: The offending value.
        reason: Short explanation shown to the user.

    Example::

        raise ParameterError("zone", 75, "must be between 1 and 60")
    """

    def __init__(self, name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid {name} {value!r}: {reason}")
        self.name: str = name
        self.value: object = value
        self.reason: str = reason


# ---------------------------------------------------------------------------
# CRS / projection
# ---------------------------------------------------------------------------


class CRSError(CoordPasteError):
    """Raised when a coordinate system descriptor cannot be turned into a
    pyproj CRS.

    Args:
        crs_string: The PROJ string or identifier that failed to parse.

    Example::

        raise CRSError("+proj=utm +zone=99")
    """

    def __init__(self, crs_string: str) -> None:
        super().__init__(
            f"Invalid or unrecognised coordinate system: '{crs_string}'."
        )
        self.crs_string: str = crs_string


class ProjectionError(CoordPasteError):
    """Raised when a single coordinate cannot be projected.

    The batch engine catches this per row and records the message on the
    row instead of aborting the batch.
    """


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


class WorkflowError(CoordPasteError):
    """Raised when the workflow driver is asked to do something its
    current stage cannot do (e.g. copy before any conversion ran).

    Args:
        stage: Name of the stage the workflow was in.
        action: The action that was attempted.
    """

    def __init__(self, stage: str, action: str) -> None:
        super().__init__(f"Cannot {action} while the workflow is in '{stage}'.")
        self.stage: str = stage
        self.action: str = action


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class ClipboardWriteError(CoordPasteError):
    """Raised when the clipboard primitive refuses or fails a write.

    Args:
        reason: Underlying platform or library error message.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to copy results to the clipboard: {reason}")
        self.reason: str = reason


class OutputWriteError(CoordPasteError):
    """Raised when the tool cannot write its output to disk.

    Args:
        output_path: String representation of the path that failed.
        reason: Underlying OS or library error message.

    Example::

        raise OutputWriteError("/read-only/dir/out.csv", "Permission denied")
    """

    def __init__(self, output_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to write output to '{output_path}': {reason}"
        )
        self.output_path: str = output_path
        self.reason: str = reason
