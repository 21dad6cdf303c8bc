"""
CoordPaste — Shared Input Validators
=====================================
Static utility methods used across CoordPaste tools to validate common
preconditions before processing begins.

All methods raise an appropriate exception from
:mod:`shared.python.exceptions` rather than returning booleans — this
makes ``validate_inputs`` implementations in each tool simple and
readable::

    class MyTool(GeoTool):
        def validate_inputs(self) -> None:
            Validators.assert_file_exists(self.input_path)
            Validators.assert_zone_valid(self.config.zone)
            Validators.assert_hemisphere_valid(self.config.hemisphere)
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from shared.python.exceptions import (
    ColumnMappingError,
    InputValidationError,
    OutputWriteError,
    ParameterError,
)

UTM_ZONE_MIN = 1
UTM_ZONE_MAX = 60
HEMISPHERES = ("N", "S")


class Validators:
    """Collection of static precondition checks shared across all tools.

    All methods are ``@staticmethod`` — this class is never instantiated.
    It exists purely as a logical namespace.
    """

    # ------------------------------------------------------------------
    # File-system checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_file_exists(path: Path) -> None:
        """Assert that *path* points to an existing regular file.

        Args:
            path: Path object to check.

        Raises:
            InputValidationError: If *path* does not exist or is a
                directory rather than a file.
        """
        path = Path(path)
        if not path.exists():
            raise InputValidationError(
                f"Input file not found: '{path}'. "
                "Check that the path is correct and the file exists."
            )
        if path.is_dir():
            raise InputValidationError(
                f"Expected a file but got a directory: '{path}'."
            )

    @staticmethod
    def assert_output_dir_writable(output_path: Path) -> None:
        """Assert that the parent directory of *output_path* is writable.

        Creates the parent directory (and any missing parents) if it does
        not yet exist.

        Raises:
            OutputWriteError: If the parent directory cannot be created.
        """
        parent = Path(output_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(str(output_path), str(exc)) from exc

    @staticmethod
    def assert_supported_extension(path: Path, extensions: Iterable[str]) -> None:
        """Assert that *path* has one of the allowed file extensions.

        Args:
            path: File path to check.
            extensions: Allowed extensions, each starting with a dot.

        Raises:
            InputValidationError: If the file extension is not allowed.
        """
        path = Path(path)
        suffix = path.suffix.lower()
        allowed = [ext.lower() for ext in extensions]
        if suffix not in allowed:
            raise InputValidationError(
                f"Unsupported file extension '{suffix}' for '{path.name}'. "
                f"Accepted extensions: {', '.join(allowed)}"
            )

    # ------------------------------------------------------------------
    # Projection parameter checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_zone_valid(zone: object) -> None:
        """Assert that *zone* is an integer UTM zone between 1 and 60.

        Raises:
            ParameterError: If *zone* is missing, not an integer, or out
                of range.

        Example::

            Validators.assert_zone_valid(18)
        """
        if zone is None:
            raise ParameterError("zone", zone, "a UTM zone is required")
        if isinstance(zone, bool) or not isinstance(zone, int):
            raise ParameterError("zone", zone, "must be an integer")
        if not UTM_ZONE_MIN <= zone <= UTM_ZONE_MAX:
            raise ParameterError(
                "zone", zone, f"must be between {UTM_ZONE_MIN} and {UTM_ZONE_MAX}"
            )

    @staticmethod
    def assert_hemisphere_valid(hemisphere: object) -> None:
        """Assert that *hemisphere* is ``"N"`` or ``"S"``.

        Raises:
            ParameterError: If *hemisphere* is anything else.
        """
        if hemisphere not in HEMISPHERES:
            raise ParameterError("hemisphere", hemisphere, "must be 'N' or 'S'")

    @staticmethod
    def assert_datum_known(datum: object, known: Iterable[str]) -> None:
        """Assert that *datum* is one of the *known* datum identifiers.

        Raises:
            ParameterError: If the datum is not registered.
        """
        known = list(known)
        if datum not in known:
            raise ParameterError(
                "datum", datum, f"supported datums: {', '.join(known)}"
            )

    # ------------------------------------------------------------------
    # Tabular data checks
    # ------------------------------------------------------------------

    @staticmethod
    def assert_columns_distinct(first: int | None, second: int | None) -> None:
        """Assert that two coordinate column indices are set, distinct and >= 0.

        Raises:
            ColumnMappingError: If either index is missing or negative, or
                both point at the same column.

        Example::

            Validators.assert_columns_distinct(0, 1)
        """
        if first is None or second is None:
            raise ColumnMappingError(first, second)
        if first < 0 or second < 0 or first == second:
            raise ColumnMappingError(first, second)
