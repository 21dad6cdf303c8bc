"""
CoordPaste — Shared Base Tool
==============================
Abstract base class that every CoordPaste command-line tool inherits from.

Design Pattern:
    Template Method — the public ``run()`` method defines a fixed
    pipeline (validate → process → report) that subclasses fill in
    by implementing the abstract methods ``validate_inputs`` and
    ``process``.

Tools here work on pasted spreadsheet text, so both ends of the pipeline
are optional: ``input_path=None`` means "read from stdin" and
``output_path=None`` means "write to stdout".

Usage::

    from shared.python.base_tool import GeoTool

    class MyTool(GeoTool):
        def validate_inputs(self) -> None:
            ...
        def process(self) -> None:
            ...
"""

from __future__ import annotations

import logging
import sys
import time
from abc import ABC, abstractmethod
from pathlib import Path

# ---------------------------------------------------------------------------
# Module-level logger — each tool gets its own child logger under the
#   "coordpaste" root inside its own module.
# ---------------------------------------------------------------------------
logger = logging.getLogger("coordpaste")


class GeoTool(ABC):
    """Abstract base class for all CoordPaste tools.

    Every concrete tool must inherit from this class and implement
    :meth:`validate_inputs` and :meth:`process`.  Calling :meth:`run`
    executes the full pipeline in the correct order.

    Attributes:
        input_path: Path to the pasted-text input file, or ``None`` for stdin.
        output_path: Path where output will be written, or ``None`` for stdout.
        verbose: When ``True`` the tool logs DEBUG-level messages in
            addition to INFO/WARNING/ERROR.
    """

    def __init__(
        self,
        input_path: Path | None = None,
        output_path: Path | None = None,
        *,
        verbose: bool = False,
    ) -> None:
        self.input_path: Path | None = Path(input_path) if input_path else None
        self.output_path: Path | None = Path(output_path) if output_path else None
        self.verbose: bool = verbose

        self._configure_logging()

    # ------------------------------------------------------------------
    # Abstract interface — subclasses MUST implement these
    # ------------------------------------------------------------------

    @abstractmethod
    def validate_inputs(self) -> None:
        """Validate all inputs before processing begins.

        Raises:
            InputValidationError: If a required file is missing or a
                conversion parameter is invalid.
        """

    @abstractmethod
    def process(self) -> None:
        """Execute the core processing logic.

        Called by :meth:`run` after :meth:`validate_inputs` has succeeded.
        Any exception raised here propagates up through :meth:`run`.
        """

    # ------------------------------------------------------------------
    # Template method — the public API callers use
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Execute the full tool pipeline.

        1. :meth:`validate_inputs` — verify all preconditions.
        2. :meth:`process` — perform the work.
        3. :meth:`_report_success` — log the elapsed time and destination.
        """
        logger.info("Starting %s", self.__class__.__name__)
        start = time.perf_counter()

        self.validate_inputs()
        self.process()

        elapsed = time.perf_counter() - start
        self._report_success(elapsed)

    # ------------------------------------------------------------------
    # Protected helpers — subclasses may override if needed
    # ------------------------------------------------------------------

    def read_input_text(self) -> str:
        """Return the raw input text from :attr:`input_path` or stdin."""
        if self.input_path is None:
            return sys.stdin.read()
        return self.input_path.read_text(encoding="utf-8")

    def _report_success(self, elapsed: float) -> None:
        logger.info(
            "%s completed in %.2fs → %s",
            self.__class__.__name__,
            elapsed,
            self.output_path or "<stdout>",
        )

    def _configure_logging(self) -> None:
        """Set up console logging for this tool instance.

        Attaches a :class:`logging.StreamHandler` (stderr) to the root
        ``coordpaste`` logger if no handlers are already present, so log
        lines never mix with clipboard text written to stdout.
        """
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                fmt="[%(asctime)s] %(levelname)-8s %(name)s — %(message)s",
                datefmt="%H:%M:%S",
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"input_path={self.input_path!r}, "
            f"output_path={self.output_path!r})"
        )
