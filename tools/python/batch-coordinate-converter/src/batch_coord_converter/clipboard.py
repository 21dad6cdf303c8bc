"""
Batch Coordinate Converter — Clipboard Writers
===============================================
Adapters for the single clipboard primitive the workflow depends on:
``write_text(text)``, which either succeeds or raises
:class:`~shared.python.exceptions.ClipboardWriteError`.

Architecture:
    ``ClipboardWriter`` is an abstract strategy; the workflow never knows
    whether text lands on the system clipboard, in a file, or on stdout.

Classes:
    ClipboardWriter         Abstract base for clipboard targets.
    StreamClipboardWriter   Writes to a text stream (stdout by default).
    FileClipboardWriter     Writes to a file, e.g. for scripted runs.
    TkClipboardWriter       Places text on the desktop clipboard via tkinter.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

from shared.python.exceptions import ClipboardWriteError

logger = logging.getLogger("coordpaste.batch_coord_converter.clipboard")


class ClipboardWriter(ABC):
    """Abstract clipboard target.

    Subclass this and implement :meth:`write_text` to add a new target.
    """

    @abstractmethod
    def write_text(self, text: str) -> None:
        """Place *text* on the clipboard.

        Raises:
            ClipboardWriteError: If the write is refused or fails.
        """


class StreamClipboardWriter(ClipboardWriter):
    """Write clipboard text to a stream so it can be piped (``| pbcopy``).

    Args:
        stream: Target stream.  Defaults to ``sys.stdout`` at write time.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def write_text(self, text: str) -> None:
        stream = self.stream or sys.stdout
        try:
            stream.write(text)
            if text and not text.endswith("\n"):
                stream.write("\n")
            stream.flush()
        except (OSError, ValueError) as exc:
            raise ClipboardWriteError(str(exc)) from exc


class FileClipboardWriter(ClipboardWriter):
    """Write clipboard text to *path* (UTF-8), replacing its contents."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def write_text(self, text: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ClipboardWriteError(f"{self.path}: {exc}") from exc
        logger.debug("Clipboard text written to %s", self.path)


class TkClipboardWriter(ClipboardWriter):
    """Place text on the desktop clipboard using a hidden tkinter root.

    Requires a display.  On headless systems the write fails with a
    :class:`ClipboardWriteError` rather than crashing the run.
    """

    def write_text(self, text: str) -> None:
        try:
            import tkinter  # noqa: PLC0415
        except ImportError as exc:
            raise ClipboardWriteError("tkinter is not available") from exc

        try:
            root = tkinter.Tk()
        except tkinter.TclError as exc:
            raise ClipboardWriteError(str(exc)) from exc
        try:
            root.withdraw()
            root.clipboard_clear()
            root.clipboard_append(text)
            root.update()
        except tkinter.TclError as exc:
            raise ClipboardWriteError(str(exc)) from exc
        finally:
            root.destroy()
