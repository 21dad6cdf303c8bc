"""
Batch Coordinate Converter
==========================
A CoordPaste tool that converts coordinate rows pasted from a spreadsheet
between UTM and latitude / longitude, or between UTM datums, and renders
the result as tab-delimited text ready to paste back.

Public API::

    from batch_coord_converter import CoordinateWorkflow, BatchCoordinateConverter
"""

from batch_coord_converter.converter import BatchCoordinateConverter, ConverterConfig
from batch_coord_converter.workflow import CoordinateWorkflow, Stage, WorkflowState

__all__ = [
    "BatchCoordinateConverter",
    "ConverterConfig",
    "CoordinateWorkflow",
    "Stage",
    "WorkflowState",
]
__version__ = "1.0.0"
