"""
CoordPaste — Shared Python Package
===================================
Re-exports the shared base class, exception hierarchy, and validator
utilities so individual tools can import from a single location::

    from shared.python import GeoTool, Validators
    from shared.python.exceptions import ProjectionError
"""

from shared.python.base_tool import GeoTool
from shared.python.exceptions import (
    ClipboardWriteError,
    ColumnMappingError,
    CoordPasteError,
    CRSError,
    DataParseError,
    InputValidationError,
    OutputWriteError,
    ParameterError,
    ProjectionError,
    WorkflowError,
)
from shared.python.validators import Validators

__all__ = [
    "GeoTool",
    "Validators",
    "CoordPasteError",
    "InputValidationError",
    "DataParseError",
    "ColumnMappingError",
    "ParameterError",
    "CRSError",
    "ProjectionError",
    "WorkflowError",
    "ClipboardWriteError",
    "OutputWriteError",
]
