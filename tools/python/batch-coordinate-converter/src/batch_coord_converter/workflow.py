"""
Batch Coordinate Converter — Workflow State Machine
===================================================
Drives pasted text through parsing, column mapping, parameter entry,
batch conversion and clipboard copy as an explicit finite-state machine.

Architecture:
    :class:`Stage` enumerates the stages, :class:`WorkflowState` is the
    immutable aggregate, and every user command is an :class:`Event`
    dataclass.  :func:`step` is the pure transition table
    ``(state, event) -> state``; :func:`transition` additionally runs the
    synchronous work of ``parsingData`` / ``converting`` and feeds the
    outcome event back in.  :class:`CoordinateWorkflow` is the stateful
    driver that owns the single :class:`WorkflowState`.

Stage chain::

    idle → dataInput → parsingData → columnMapping → parameterInput
         → converting → results ⇄ copying
    parsingData / converting ──failure──▶ error ──retry──▶ …
    any stage (except copying) ──reset──▶ idle

Rejected events (unknown in the current stage, or a failing guard) leave
the state untouched.

Usage::

    from batch_coord_converter.workflow import CoordinateWorkflow

    wf = CoordinateWorkflow("utm-to-latlng")
    wf.paste_data("X\\tY\\n500000\\t4649776")
    wf.request_parse()
    wf.map_columns(0, 1)
    wf.set_zone(18)
    wf.set_hemisphere("N")
    wf.request_convert()
    print(wf.clipboard_text())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterable

from batch_coord_converter.clipboard import ClipboardWriter
from batch_coord_converter.engine import convert
from batch_coord_converter.formatter import format_for_clipboard
from batch_coord_converter.models import (
    OUTPUT_FORMATS,
    UTM_TO_LATLNG,
    ColumnMapping,
    ConversionBatch,
    ConversionKind,
    ConversionParameters,
    ConversionRow,
    CoordinateSystem,
    OutputFormat,
    get_kind,
)
from batch_coord_converter.parser import DEFAULT_LIMITS, ParseLimits, ParsedGrid, parse
from shared.python.exceptions import (
    ClipboardWriteError,
    CoordPasteError,
    ParameterError,
    WorkflowError,
)

logger = logging.getLogger("coordpaste.batch_coord_converter.workflow")

MAX_CLIPBOARD_DECIMALS = 12


# ---------------------------------------------------------------------------
# Stages & state
# ---------------------------------------------------------------------------


class Stage(Enum):
    """Stages of the conversion workflow."""

    IDLE = "idle"
    DATA_INPUT = "dataInput"
    PARSING_DATA = "parsingData"
    COLUMN_MAPPING = "columnMapping"
    PARAMETER_INPUT = "parameterInput"
    CONVERTING = "converting"
    RESULTS = "results"
    COPYING = "copying"
    ERROR = "error"


_PROCESSING_STAGES = (Stage.PARSING_DATA, Stage.CONVERTING)


@dataclass(frozen=True)
class WorkflowState:
    """Immutable aggregate of everything the user entered and produced.

    ``kind`` and ``limits`` are the workflow's configuration and survive a
    reset; every other field returns to its default on entering ``idle``.

    Attributes:
        kind: Conversion direction strategy.
        limits: Bounds applied when parsing pasted text.
        stage: Current :class:`Stage`.
        raw_data: Pasted text.
        parsed_data: Grid produced by the last successful parse.
        column_mapping: Role → column index.
        parameters: Zone, hemisphere and datums.
        output_format: ``"decimal"`` or ``"dms"`` for geographic output.
        clipboard_decimals: Digits used when copying, ``None`` for native.
        converted_data: Rows of the last completed batch.
        errors: Accumulated workflow-level error messages.
        failed_stage: Stage whose work last failed, for retry.
        is_processing: ``True`` while parsing or converting.
        copy_success: ``True`` after the last clipboard write succeeded.
        pending_clipboard_text: Text awaiting the clipboard write in
            ``copying``.
        total_rows: Number of parsed (or converted) rows.
        valid_rows: Number of successfully converted rows.
    """

    kind: ConversionKind = UTM_TO_LATLNG
    limits: ParseLimits = DEFAULT_LIMITS
    stage: Stage = Stage.IDLE
    raw_data: str = ""
    parsed_data: ParsedGrid = ()
    column_mapping: ColumnMapping = field(default_factory=ColumnMapping)
    parameters: ConversionParameters = field(default_factory=ConversionParameters)
    output_format: OutputFormat = "decimal"
    clipboard_decimals: int | None = None
    converted_data: tuple[ConversionRow, ...] = ()
    errors: tuple[str, ...] = ()
    failed_stage: Stage | None = None
    is_processing: bool = False
    copy_success: bool = False
    pending_clipboard_text: str | None = None
    total_rows: int = 0
    valid_rows: int = 0

    def __post_init__(self) -> None:
        if not self.column_mapping.columns:
            object.__setattr__(
                self, "column_mapping", ColumnMapping.for_roles(self.kind.roles)
            )

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None

    @property
    def failed_rows(self) -> tuple[ConversionRow, ...]:
        return tuple(row for row in self.converted_data if not row.ok)

    @property
    def source_system(self) -> CoordinateSystem:
        return self.kind.source_system(self.parameters)

    @property
    def target_system(self) -> CoordinateSystem:
        return self.kind.target_system(self.parameters)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """Base class for all workflow events."""


@dataclass(frozen=True)
class PasteData(Event):
    text: str


@dataclass(frozen=True)
class RequestParse(Event):
    pass


@dataclass(frozen=True)
class ParseSucceeded(Event):
    grid: ParsedGrid


@dataclass(frozen=True)
class ParseFailed(Event):
    message: str


@dataclass(frozen=True)
class AssignColumn(Event):
    role: str
    index: int | None


@dataclass(frozen=True)
class MapColumns(Event):
    first: int | None
    second: int | None


@dataclass(frozen=True)
class SetZone(Event):
    zone: int | None


@dataclass(frozen=True)
class SetHemisphere(Event):
    hemisphere: str | None


@dataclass(frozen=True)
class SetSourceDatum(Event):
    datum: str


@dataclass(frozen=True)
class SetTargetDatum(Event):
    datum: str


@dataclass(frozen=True)
class SetOutputFormat(Event):
    output_format: str


@dataclass(frozen=True)
class SetClipboardDecimals(Event):
    decimals: int | None


@dataclass(frozen=True)
class RequestConvert(Event):
    pass


@dataclass(frozen=True)
class BatchCompleted(Event):
    batch: ConversionBatch


@dataclass(frozen=True)
class BatchFailed(Event):
    message: str


@dataclass(frozen=True)
class RequestCopy(Event):
    pass


@dataclass(frozen=True)
class CopySucceeded(Event):
    pass


@dataclass(frozen=True)
class CopyFailed(Event):
    message: str


@dataclass(frozen=True)
class Reset(Event):
    pass


@dataclass(frozen=True)
class Retry(Event):
    pass


@dataclass(frozen=True)
class ClearErrors(Event):
    pass


# ---------------------------------------------------------------------------
# Entry / exit actions
# ---------------------------------------------------------------------------


def _enter(state: WorkflowState, stage: Stage) -> WorkflowState:
    """Move to *stage*, running the exit action of the current stage and
    the entry action of the new one."""
    if state.stage in _PROCESSING_STAGES:
        state = replace(state, is_processing=False)

    if stage is Stage.IDLE:
        return WorkflowState(kind=state.kind, limits=state.limits)
    if stage is Stage.RESULTS:
        return replace(state, stage=stage, copy_success=False)
    if stage in _PROCESSING_STAGES:
        return replace(state, stage=stage, is_processing=True)
    return replace(state, stage=stage)


def _append_error(state: WorkflowState, message: str) -> WorkflowState:
    return replace(state, errors=state.errors + (message,))


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def _columns_valid(first: object, second: object) -> bool:
    return (
        isinstance(first, int)
        and isinstance(second, int)
        and not isinstance(first, bool)
        and not isinstance(second, bool)
        and first != second
        and first >= 0
        and second >= 0
    )


def _parameters_problem(state: WorkflowState) -> str | None:
    try:
        state.kind.validate_parameters(state.parameters)
    except ParameterError as exc:
        return exc.message
    return None


def _can_retry_parsing(state: WorkflowState) -> bool:
    return len(state.raw_data) > 0


def _can_retry_converting(state: WorkflowState) -> bool:
    return (
        len(state.parsed_data) > 0
        and state.column_mapping.is_complete
        and state.kind.parameters_ready(state.parameters)
    )


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

Handler = Callable[[WorkflowState, Event], "WorkflowState | None"]

_TRANSITIONS: dict[tuple[Stage, type], Handler] = {}


def _on(stages: Iterable[Stage], *event_types: type) -> Callable[[Handler], Handler]:
    """Register a handler for every (stage, event type) combination."""

    def decorator(handler: Handler) -> Handler:
        for stage in stages:
            for event_type in event_types:
                _TRANSITIONS[(stage, event_type)] = handler
        return handler

    return decorator


@_on([Stage.IDLE, Stage.DATA_INPUT], PasteData)
def _paste(state: WorkflowState, event: PasteData) -> WorkflowState:
    if state.stage is not Stage.DATA_INPUT:
        state = _enter(state, Stage.DATA_INPUT)
    return replace(state, raw_data=event.text, errors=())


@_on([Stage.DATA_INPUT], RequestParse)
def _request_parse(state: WorkflowState, event: RequestParse) -> WorkflowState:
    return _enter(state, Stage.PARSING_DATA)


@_on([Stage.PARSING_DATA], ParseSucceeded)
def _parse_succeeded(state: WorkflowState, event: ParseSucceeded) -> WorkflowState:
    state = _enter(state, Stage.COLUMN_MAPPING)
    return replace(
        state,
        parsed_data=event.grid,
        total_rows=len(event.grid),
        errors=(),
        failed_stage=None,
    )


@_on([Stage.PARSING_DATA], ParseFailed)
def _parse_failed(state: WorkflowState, event: ParseFailed) -> WorkflowState:
    state = _enter(state, Stage.ERROR)
    return replace(_append_error(state, event.message), failed_stage=Stage.PARSING_DATA)


@_on([Stage.COLUMN_MAPPING], AssignColumn)
def _assign_column(state: WorkflowState, event: AssignColumn) -> WorkflowState | None:
    if event.role not in state.kind.roles:
        return None
    if event.index is not None and (not isinstance(event.index, int) or event.index < 0):
        return None
    return replace(
        state, column_mapping=state.column_mapping.assign(event.role, event.index)
    )


@_on([Stage.COLUMN_MAPPING], MapColumns)
def _map_columns(state: WorkflowState, event: MapColumns) -> WorkflowState | None:
    if not _columns_valid(event.first, event.second):
        return None
    first_role, second_role = state.kind.roles
    mapping = (
        ColumnMapping.for_roles(state.kind.roles)
        .assign(first_role, event.first)
        .assign(second_role, event.second)
    )
    return replace(_enter(state, Stage.PARAMETER_INPUT), column_mapping=mapping)


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetZone)
def _set_zone(state: WorkflowState, event: SetZone) -> WorkflowState:
    return replace(state, parameters=replace(state.parameters, zone=event.zone))


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetHemisphere)
def _set_hemisphere(state: WorkflowState, event: SetHemisphere) -> WorkflowState:
    hemisphere = event.hemisphere.upper() if isinstance(event.hemisphere, str) else None
    return replace(state, parameters=replace(state.parameters, hemisphere=hemisphere))


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetSourceDatum)
def _set_source_datum(state: WorkflowState, event: SetSourceDatum) -> WorkflowState:
    return replace(state, parameters=replace(state.parameters, source_datum=event.datum))


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetTargetDatum)
def _set_target_datum(state: WorkflowState, event: SetTargetDatum) -> WorkflowState:
    return replace(state, parameters=replace(state.parameters, target_datum=event.datum))


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetClipboardDecimals)
def _set_clipboard_decimals(
    state: WorkflowState, event: SetClipboardDecimals
) -> WorkflowState | None:
    decimals = event.decimals
    if decimals is not None and (
        isinstance(decimals, bool)
        or not isinstance(decimals, int)
        or not 0 <= decimals <= MAX_CLIPBOARD_DECIMALS
    ):
        return None
    return replace(state, clipboard_decimals=decimals)


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], SetOutputFormat)
def _set_output_format(state: WorkflowState, event: SetOutputFormat) -> WorkflowState | None:
    if event.output_format not in OUTPUT_FORMATS:
        return None
    state = replace(state, output_format=event.output_format)  # type: ignore[arg-type]
    if state.stage is Stage.RESULTS and state.kind.parameters_ready(state.parameters):
        # Results were rendered in the previous format; convert again.
        return _enter(state, Stage.CONVERTING)
    return state


@_on([Stage.PARAMETER_INPUT, Stage.RESULTS], RequestConvert)
def _request_convert(state: WorkflowState, event: RequestConvert) -> WorkflowState | None:
    problem = _parameters_problem(state)
    if problem is not None:
        logger.info("Conversion not started: %s", problem)
        return None
    return _enter(state, Stage.CONVERTING)


@_on([Stage.CONVERTING], BatchCompleted)
def _batch_completed(state: WorkflowState, event: BatchCompleted) -> WorkflowState:
    state = _enter(state, Stage.RESULTS)
    return replace(
        state,
        converted_data=event.batch.rows,
        total_rows=event.batch.total,
        valid_rows=event.batch.success_count,
        errors=(),
        failed_stage=None,
    )


@_on([Stage.CONVERTING], BatchFailed)
def _batch_failed(state: WorkflowState, event: BatchFailed) -> WorkflowState:
    state = _enter(state, Stage.ERROR)
    return replace(_append_error(state, event.message), failed_stage=Stage.CONVERTING)


@_on([Stage.RESULTS], RequestCopy)
def _request_copy(state: WorkflowState, event: RequestCopy) -> WorkflowState:
    text = format_for_clipboard(
        state.converted_data,
        state.source_system,
        state.target_system,
        decimal_places=state.clipboard_decimals,
        output_format=state.output_format,
    )
    return replace(_enter(state, Stage.COPYING), pending_clipboard_text=text)


@_on([Stage.COPYING], CopySucceeded)
def _copy_succeeded(state: WorkflowState, event: CopySucceeded) -> WorkflowState:
    state = _enter(state, Stage.RESULTS)
    return replace(state, copy_success=True, pending_clipboard_text=None)


@_on([Stage.COPYING], CopyFailed)
def _copy_failed(state: WorkflowState, event: CopyFailed) -> WorkflowState:
    state = _enter(state, Stage.RESULTS)
    return replace(_append_error(state, event.message), pending_clipboard_text=None)


@_on([Stage.ERROR], Retry)
def _retry(state: WorkflowState, event: Retry) -> WorkflowState:
    if state.failed_stage is Stage.CONVERTING and _can_retry_converting(state):
        return _enter(state, Stage.CONVERTING)
    if _can_retry_parsing(state):
        return _enter(state, Stage.PARSING_DATA)
    if _can_retry_converting(state):
        return _enter(state, Stage.CONVERTING)
    return _enter(state, Stage.IDLE)


@_on([Stage.ERROR], ClearErrors)
def _clear_errors_to_idle(state: WorkflowState, event: ClearErrors) -> WorkflowState:
    return _enter(state, Stage.IDLE)


@_on([Stage.RESULTS], ClearErrors)
def _clear_errors(state: WorkflowState, event: ClearErrors) -> WorkflowState:
    return replace(state, errors=())


@_on([stage for stage in Stage if stage is not Stage.COPYING], Reset)
def _reset(state: WorkflowState, event: Reset) -> WorkflowState:
    return _enter(state, Stage.IDLE)


def step(state: WorkflowState, event: Event) -> WorkflowState:
    """Apply one event to *state* using the transition table.

    Returns:
        The next state, or *state* itself (same object) when the event is
        not handled in the current stage or its guard rejects it.
    """
    handler = _TRANSITIONS.get((state.stage, type(event)))
    if handler is None:
        logger.debug(
            "Ignored %s in stage %s", type(event).__name__, state.stage.value
        )
        return state

    next_state = handler(state, event)
    if next_state is None:
        logger.debug(
            "Guard rejected %s in stage %s", type(event).__name__, state.stage.value
        )
        return state

    if next_state.stage is not state.stage:
        logger.debug(
            "%s: %s → %s",
            type(event).__name__,
            state.stage.value,
            next_state.stage.value,
        )
    return next_state


def _invoke(state: WorkflowState) -> Event:
    """Run the work of a processing stage and return its outcome event."""
    if state.stage is Stage.PARSING_DATA:
        try:
            grid = parse(state.raw_data, state.kind.header_vocabulary, state.limits)
        except CoordPasteError as exc:
            logger.error("Parsing failed: %s", exc.message)
            return ParseFailed(exc.message)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while parsing")
            return ParseFailed(str(exc) or type(exc).__name__)
        return ParseSucceeded(grid)

    try:
        batch = convert(
            state.parsed_data, state.column_mapping, state.parameters, state.kind
        )
    except CoordPasteError as exc:
        logger.error("Conversion failed: %s", exc.message)
        return BatchFailed(exc.message)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while converting")
        return BatchFailed(str(exc) or type(exc).__name__)
    return BatchCompleted(batch)


def transition(state: WorkflowState, event: Event) -> WorkflowState:
    """Apply *event*, then settle any processing stage it led into.

    Parsing and conversion run synchronously; their outcome is fed back
    through :func:`step` until the workflow rests in a non-processing stage.
    """
    state = step(state, event)
    while state.stage in _PROCESSING_STAGES:
        state = step(state, _invoke(state))
    return state


# ---------------------------------------------------------------------------
# Stateful driver
# ---------------------------------------------------------------------------


class CoordinateWorkflow:
    """Owns one :class:`WorkflowState` and exposes the user command set.

    Every command returns ``True`` when the workflow accepted it and
    ``False`` when the current stage or a guard rejected it.

    Args:
        kind: Conversion direction, a :class:`ConversionKind` or one of
              ``"utm-to-latlng"``, ``"latlng-to-utm"``, ``"utm-datum"``.
        limits: Parse limits for pasted text.

    Example::

        wf = CoordinateWorkflow("utm-datum")
        wf.paste_data(text)
        wf.request_parse()
        wf.map_columns(0, 1)
        wf.set_zone(18)
        wf.set_hemisphere("S")
        wf.set_target_datum("PSAD56")
        wf.request_convert()
        wf.copy_to_clipboard(StreamClipboardWriter())
    """

    def __init__(
        self,
        kind: ConversionKind | str = UTM_TO_LATLNG,
        *,
        limits: ParseLimits | None = None,
    ) -> None:
        self._state = WorkflowState(kind=get_kind(kind), limits=limits or DEFAULT_LIMITS)

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def stage(self) -> Stage:
        return self._state.stage

    @property
    def kind(self) -> ConversionKind:
        return self._state.kind

    def send(self, event: Event) -> bool:
        """Feed *event* to the machine; ``True`` if the state changed."""
        previous = self._state
        self._state = transition(previous, event)
        return self._state is not previous

    # -- commands ------------------------------------------------------

    def paste_data(self, text: str) -> bool:
        return self.send(PasteData(text))

    def request_parse(self) -> bool:
        return self.send(RequestParse())

    def assign_column(self, role: str, index: int | None) -> bool:
        return self.send(AssignColumn(role, index))

    def map_columns(self, first: int | None, second: int | None) -> bool:
        return self.send(MapColumns(first, second))

    def set_zone(self, zone: int | None) -> bool:
        return self.send(SetZone(zone))

    def set_hemisphere(self, hemisphere: str | None) -> bool:
        return self.send(SetHemisphere(hemisphere))

    def set_source_datum(self, datum: str) -> bool:
        return self.send(SetSourceDatum(datum))

    def set_target_datum(self, datum: str) -> bool:
        return self.send(SetTargetDatum(datum))

    def set_output_format(self, output_format: str) -> bool:
        return self.send(SetOutputFormat(output_format))

    def set_clipboard_decimals(self, decimals: int | None) -> bool:
        return self.send(SetClipboardDecimals(decimals))

    def request_convert(self) -> bool:
        return self.send(RequestConvert())

    def request_copy(self) -> bool:
        return self.send(RequestCopy())

    def copy_succeeded(self) -> bool:
        return self.send(CopySucceeded())

    def copy_failed(self, message: str) -> bool:
        return self.send(CopyFailed(message))

    def reset(self) -> bool:
        return self.send(Reset())

    def retry(self) -> bool:
        return self.send(Retry())

    def clear_errors(self) -> bool:
        return self.send(ClearErrors())

    # -- helpers -------------------------------------------------------

    def clipboard_text(self) -> str:
        """Preview the text :meth:`copy_to_clipboard` would write."""
        state = self._state
        return format_for_clipboard(
            state.converted_data,
            state.source_system,
            state.target_system,
            decimal_places=state.clipboard_decimals,
            output_format=state.output_format,
        )

    def copy_to_clipboard(self, writer: ClipboardWriter) -> bool:
        """Run the full copy round trip through *writer*.

        The pending write always settles: whatever *writer* raises, the
        workflow is back in ``results`` before this method returns.

        Returns:
            ``True`` if the text was written, ``False`` if the writer
            failed (the failure is appended to ``state.errors``).

        Raises:
            WorkflowError: If there are no results to copy.
            Exception: Any non-clipboard error from *writer*, re-raised
                after the failure has been recorded.
        """
        if not self.request_copy():
            raise WorkflowError(self.stage.value, "copy results")
        text = self._state.pending_clipboard_text or ""
        try:
            writer.write_text(text)
        except ClipboardWriteError as exc:
            logger.warning("%s", exc.message)
            self.copy_failed(exc.message)
            return False
        except Exception as exc:
            logger.exception("Unexpected error while copying to the clipboard")
            self.copy_failed(str(exc) or type(exc).__name__)
            raise
        self.copy_succeeded()
        logger.info("Copied %d row(s) to the clipboard.", len(self._state.converted_data))
        return True
