"""
Batch Coordinate Converter — Core Tool
=======================================
Provides :class:`BatchCoordinateConverter`, which runs pasted spreadsheet
text through the :class:`~batch_coord_converter.workflow.CoordinateWorkflow`
non-interactively: paste → parse → map columns → set parameters →
convert → copy, plus an optional CSV / GeoJSON export.

Classes:
    ConverterConfig           Configuration bundle for one run.
    BatchCoordinateConverter  Primary tool class (inherits GeoTool).

Typical usage::

    from pathlib import Path
    from batch_coord_converter.converter import (
        BatchCoordinateConverter,
        ConverterConfig,
    )

    cfg = ConverterConfig(kind="utm-to-latlng", zone=18, hemisphere="N")
    tool = BatchCoordinateConverter(Path("data/pasted.txt"), None, cfg)
    tool.run()
    print(tool.result.summary())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from batch_coord_converter.clipboard import (
    ClipboardWriter,
    FileClipboardWriter,
    StreamClipboardWriter,
)
from batch_coord_converter.export import EXPORT_EXTENSIONS, write_results
from batch_coord_converter.models import (
    DEFAULT_DATUM,
    ConversionBatch,
    ConversionParameters,
    OutputFormat,
    get_kind,
)
from batch_coord_converter.parser import ParseLimits
from batch_coord_converter.workflow import CoordinateWorkflow, Stage
from shared.python.base_tool import GeoTool
from shared.python.exceptions import (
    ColumnMappingError,
    CoordPasteError,
    DataParseError,
    ParameterError,
    WorkflowError,
)
from shared.python.validators import Validators

logger = logging.getLogger("coordpaste.batch_coord_converter")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class ConverterConfig:
    """Configuration bundle for :class:`BatchCoordinateConverter`.

    Attributes:
        kind: Conversion direction: ``"utm-to-latlng"``,
              ``"latlng-to-utm"`` or ``"utm-datum"``.
        first_col: 0-based column of the first role (X or latitude).
        second_col: 0-based column of the second role (Y or longitude).
        zone: UTM zone, 1–60.
        hemisphere: ``"N"`` or ``"S"``.  Optional for ``latlng-to-utm``
                    (taken from each row's latitude).
        from_datum: Datum of the pasted coordinates.
        to_datum: Datum of the converted coordinates.
        output_format: ``"decimal"`` or ``"dms"`` for geographic output.
        decimals: Digits in the clipboard text; ``None`` keeps 2 for
                  metres and 8 for degrees.
        limits: Size bounds for the pasted text.
    """

    kind: str = "utm-to-latlng"
    first_col: int = 0
    second_col: int = 1
    zone: int | None = None
    hemisphere: str | None = None
    from_datum: str = DEFAULT_DATUM
    to_datum: str = DEFAULT_DATUM
    output_format: OutputFormat = "decimal"
    decimals: int | None = None
    limits: ParseLimits = field(default_factory=ParseLimits)

    @property
    def parameters(self) -> ConversionParameters:
        return ConversionParameters(
            zone=self.zone,
            hemisphere=self.hemisphere.upper() if self.hemisphere else None,
            source_datum=self.from_datum,
            target_datum=self.to_datum,
        )


# ---------------------------------------------------------------------------
# Main tool class
# ---------------------------------------------------------------------------


class BatchCoordinateConverter(GeoTool):
    """Convert pasted coordinate rows and copy the result table.

    Inherits the Template Method pipeline from :class:`~shared.python.GeoTool`:
    ``validate_inputs`` → ``process`` → ``_report_success``.

    Args:
        input_path: File holding the pasted text, or ``None`` for stdin.
        output_path: File receiving the clipboard text, or ``None`` for
                     stdout.  Ignored when *writer* is given.
        config: A :class:`ConverterConfig`.
        writer: Clipboard target; overrides *output_path*.
        export_path: Optional ``.csv`` / ``.tsv`` / ``.geojson`` file for
                     the full results table.
        verbose: Enable DEBUG-level logging.
    """

    def __init__(
        self,
        input_path: Path | None,
        output_path: Path | None,
        config: ConverterConfig,
        *,
        writer: ClipboardWriter | None = None,
        export_path: Path | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__(input_path, output_path, verbose=verbose)
        self.config: ConverterConfig = config
        self.export_path: Path | None = Path(export_path) if export_path else None
        if writer is None:
            writer = (
                FileClipboardWriter(self.output_path)
                if self.output_path
                else StreamClipboardWriter()
            )
        self.writer: ClipboardWriter = writer

        self._workflow: CoordinateWorkflow | None = None

    # ------------------------------------------------------------------
    # GeoTool abstract method implementations
    # ------------------------------------------------------------------

    def validate_inputs(self) -> None:
        """Validate the input file, column choice and parameters.

        Raises:
            InputValidationError: On a missing input file or bad export
                extension.
            ColumnMappingError: If the two columns are equal or negative.
            ParameterError: If the kind, zone, hemisphere or datums are
                invalid for the chosen conversion.
        """
        if self.input_path is not None:
            Validators.assert_file_exists(self.input_path)
        kind = get_kind(self.config.kind)
        Validators.assert_columns_distinct(self.config.first_col, self.config.second_col)
        kind.validate_parameters(self.config.parameters)
        if self.export_path is not None:
            Validators.assert_supported_extension(self.export_path, EXPORT_EXTENSIONS)
            Validators.assert_output_dir_writable(self.export_path)
        logger.debug("Inputs validated successfully.")

    def process(self) -> None:
        """Drive the workflow through every stage and deliver the output.

        Raises:
            DataParseError: If the pasted text cannot be parsed.
            CoordPasteError: If the batch or the clipboard write fails.
        """
        cfg = self.config
        params = cfg.parameters
        workflow = CoordinateWorkflow(cfg.kind, limits=cfg.limits)
        self._workflow = workflow

        workflow.paste_data(self.read_input_text())
        workflow.request_parse()
        if workflow.stage is Stage.ERROR:
            raise DataParseError(workflow.state.first_error or "Parsing failed.")
        if workflow.state.total_rows == 0:
            logger.warning("No data rows found in the pasted text.")

        if not workflow.map_columns(cfg.first_col, cfg.second_col):
            raise ColumnMappingError(cfg.first_col, cfg.second_col)

        workflow.set_zone(params.zone)
        workflow.set_hemisphere(params.hemisphere)
        workflow.set_source_datum(params.source_datum)
        workflow.set_target_datum(params.target_datum)
        if not workflow.set_output_format(cfg.output_format):
            raise ParameterError("output format", cfg.output_format, "use 'decimal' or 'dms'")
        if not workflow.set_clipboard_decimals(cfg.decimals):
            raise ParameterError("decimals", cfg.decimals, "must be between 0 and 12")

        if not workflow.request_convert():
            workflow.kind.validate_parameters(workflow.state.parameters)
            raise WorkflowError(workflow.stage.value, "convert")
        if workflow.stage is Stage.ERROR:
            raise CoordPasteError(workflow.state.first_error or "Conversion failed.")

        for row in workflow.state.failed_rows:
            logger.warning("Row %d: %s", row.row_number, row.error)

        if not workflow.copy_to_clipboard(self.writer):
            raise CoordPasteError(workflow.state.errors[-1])

        if self.export_path is not None:
            state = workflow.state
            write_results(
                state.converted_data,
                state.source_system,
                state.target_system,
                self.export_path,
                output_format=state.output_format,
            )

        logger.info(self.result.summary())  # type: ignore[union-attr]

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def workflow(self) -> CoordinateWorkflow | None:
        """The workflow driven by the last :meth:`run`, or ``None``."""
        return self._workflow

    @property
    def result(self) -> ConversionBatch | None:
        """The :class:`ConversionBatch` from the last :meth:`run` call.

        Returns ``None`` if :meth:`run` has not produced results yet.
        """
        if self._workflow is None or self._workflow.stage is not Stage.RESULTS:
            return None
        state = self._workflow.state
        return ConversionBatch(rows=state.converted_data, success_count=state.valid_rows)
