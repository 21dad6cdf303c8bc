"""
Batch Coordinate Converter — CLI Entry Point
=============================================
Command-line interface built with Click.  Installed as the ``geo-convert``
command via ``pyproject.toml``.

Usage:
    pbpaste | geo-convert --kind utm-to-latlng --zone 18 --hemisphere S

    geo-convert -i pasted.txt --kind utm-datum --zone 17 --hemisphere S \\
                --from-datum PSAD56 --to-datum WGS84 --clipboard

Every option can also be set through a ``GEO_CONVERT_<OPTION>`` environment
variable (e.g. ``GEO_CONVERT_ZONE=18``).

Run ``geo-convert --help`` for a full list of options.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from batch_coord_converter.clipboard import TkClipboardWriter
from batch_coord_converter.converter import BatchCoordinateConverter, ConverterConfig
from batch_coord_converter.models import DATUMS, DEFAULT_DATUM, KINDS, OUTPUT_FORMATS
from shared.python.exceptions import CoordPasteError


@click.command(
    name="geo-convert",
    help=(
        "Convert coordinate rows pasted from a spreadsheet.\n\n"
        "Reads tab, comma or space separated rows from INPUT (stdin by "
        "default), converts the two mapped columns and writes a "
        "tab-delimited table ready to paste back into a spreadsheet."
    ),
)
# ---------------------------------------------------------------------------
# Input / output
# ---------------------------------------------------------------------------
@click.option(
    "--input", "-i",
    "input_path",
    default="-",
    show_default=True,
    envvar="GEO_CONVERT_INPUT",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=Path),
    help="File holding the pasted rows, or '-' to read stdin.",
)
@click.option(
    "--output", "-o",
    "output_path",
    default=None,
    envvar="GEO_CONVERT_OUTPUT",
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    help="Write the clipboard text to this file instead of stdout.",
)
@click.option(
    "--clipboard",
    "use_clipboard",
    is_flag=True,
    default=False,
    envvar="GEO_CONVERT_CLIPBOARD",
    help="Place the result on the system clipboard (needs a display).",
)
@click.option(
    "--export",
    "export_path",
    default=None,
    envvar="GEO_CONVERT_EXPORT",
    type=click.Path(file_okay=True, dir_okay=False, path_type=Path),
    help="Also export the full results table (.csv, .tsv, .geojson).",
)
# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------
@click.option(
    "--kind",
    type=click.Choice(sorted(KINDS), case_sensitive=False),
    default="utm-to-latlng",
    show_default=True,
    envvar="GEO_CONVERT_KIND",
    help="Conversion direction.",
)
@click.option(
    "--first-col",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    envvar="GEO_CONVERT_FIRST_COL",
    help="0-based column holding X (or latitude for latlng-to-utm).",
)
@click.option(
    "--second-col",
    type=click.IntRange(min=0),
    default=1,
    show_default=True,
    envvar="GEO_CONVERT_SECOND_COL",
    help="0-based column holding Y (or longitude for latlng-to-utm).",
)
@click.option(
    "--zone",
    type=int,
    default=None,
    envvar="GEO_CONVERT_ZONE",
    help="UTM zone, 1-60.",
)
@click.option(
    "--hemisphere",
    type=click.Choice(["N", "S"], case_sensitive=False),
    default=None,
    envvar="GEO_CONVERT_HEMISPHERE",
    help="UTM hemisphere.  Optional for latlng-to-utm (taken from latitude).",
)
@click.option(
    "--from-datum",
    type=click.Choice(sorted(DATUMS), case_sensitive=False),
    default=DEFAULT_DATUM,
    show_default=True,
    envvar="GEO_CONVERT_FROM_DATUM",
    help="Datum of the pasted coordinates.",
)
@click.option(
    "--to-datum",
    type=click.Choice(sorted(DATUMS), case_sensitive=False),
    default=DEFAULT_DATUM,
    show_default=True,
    envvar="GEO_CONVERT_TO_DATUM",
    help="Datum of the converted coordinates.",
)
# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS), case_sensitive=False),
    default="decimal",
    show_default=True,
    envvar="GEO_CONVERT_FORMAT",
    help="Render converted latitude / longitude as decimal degrees or DMS.",
)
@click.option(
    "--decimals",
    type=click.IntRange(0, 12),
    default=None,
    envvar="GEO_CONVERT_DECIMALS",
    help="Digits after the decimal point (default: 2 for metres, 8 for degrees).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug-level logging output.",
)
def main(
    input_path: Path,
    output_path: Path | None,
    use_clipboard: bool,
    export_path: Path | None,
    kind: str,
    first_col: int,
    second_col: int,
    zone: int | None,
    hemisphere: str | None,
    from_datum: str,
    to_datum: str,
    output_format: str,
    decimals: int | None,
    verbose: bool,
) -> None:
    """CLI entry point — wires Click options into BatchCoordinateConverter."""
    config = ConverterConfig(
        kind=kind.lower(),
        first_col=first_col,
        second_col=second_col,
        zone=zone,
        hemisphere=hemisphere,
        from_datum=from_datum.upper(),
        to_datum=to_datum.upper(),
        output_format=output_format.lower(),  # type: ignore[arg-type]
        decimals=decimals,
    )

    tool = BatchCoordinateConverter(
        input_path=None if str(input_path) == "-" else input_path,
        output_path=output_path,
        config=config,
        writer=TkClipboardWriter() if use_clipboard else None,
        export_path=export_path,
        verbose=verbose,
    )

    try:
        tool.run()
    except CoordPasteError as exc:
        # User-facing errors: print a clean message, no stack trace
        click.echo(f"Error: {exc.message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
