#!/usr/bin/env python3
"""Command-line front end for modbus-group-advisor using Typer."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from . import __version__  # type: ignore
from .advisor import run, validate_input
from .errors import GroupAdvisorError, ParseFailedError
from .sheet import read_workbook_text
from .types import DEFAULT_LIMITS, AnalysisResult

app = typer.Typer(
    name="mbgroup",
    help="Group Modbus register lists into read batches and export them as XML.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared options and helpers
# ============================================================================

InputArgument = Annotated[
    Optional[str],
    typer.Argument(
        help="Register list: text file (tab/semicolon/comma separated), .xlsx workbook, or '-' for stdin",
        envvar="MBGROUP_INPUT",
        show_default=False,
    ),
]
SheetOption = Annotated[
    Optional[str],
    typer.Option("--sheet", "-s", help="Worksheet name for .xlsx input (default: active sheet)", envvar="MBGROUP_SHEET"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def read_input(source: Optional[str], sheet: Optional[str] = None) -> str:
    """Read raw register text from stdin ('-' or None), an .xlsx workbook, or a text file."""
    if source is None or source == "-":
        logger.debug("Reading register list from stdin")
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        logger.debug("Reading workbook %s (sheet=%s)", path, sheet or "<active>")
        return read_workbook_text(path, sheet)
    # utf-8-sig drops the BOM Excel puts in front of CSV exports
    return path.read_text(encoding="utf-8-sig")


def format_groups(result: AnalysisResult) -> list[str]:
    """One line per group for the text report."""
    lines = []
    for g in result.groups:
        gaps = " gaps" if g.has_gaps else ""
        lines.append(
            f"  #{g.id:<3} FC{g.function_code:<3} {g.unit_kind.value:<8} "
            f"{g.start_address}-{g.end_address}  units={g.total_units} points={g.num_points}{gaps}"
        )
    return lines


def _echo_warnings(warnings: tuple[str, ...]) -> None:
    for w in warnings:
        typer.echo(f"Warning: {w}", err=True)


def _load(source: Optional[str], sheet: Optional[str]) -> str:
    raw = read_input(source, sheet)
    problems = validate_input(raw)
    if problems:
        for p in problems:
            typer.echo(f"Error: {p}", err=True)
        raise typer.Exit(2)
    return raw


# ============================================================================
# Commands
# ============================================================================

@app.command()
def analyze(
    source: InputArgument = None,
    sheet: SheetOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Parse a register list and show the proposed read groups.

    Rejected rows and warnings are reported on stderr.
    Use --json for the full preview/groups payload.
    """
    setup_logging(verbose)

    try:
        raw = _load(source, sheet)
        report = run(raw)

        if json_output:
            typer.echo(json.dumps(report.result.to_dict(), indent=2))
        else:
            typer.echo(report.summary)
            for line in format_groups(report.result):
                typer.echo(line)
            for r in report.result.rejects:
                typer.echo(f"Rejected: {r.message}", err=True)
        _echo_warnings(report.warnings)
    except ParseFailedError as e:
        typer.echo(f"Error: No rows could be parsed:\n{e}", err=True)
        raise typer.Exit(2)
    except (FileNotFoundError, ValueError, GroupAdvisorError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: Unexpected error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(4)


@app.command()
def export(
    source: InputArgument = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the XML document here instead of stdout"),
    ] = None,
    sheet: SheetOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Parse a register list and write the XML import document for its groups.

    Fails with exit code 2 when no groups could be built.
    """
    setup_logging(verbose)

    try:
        raw = _load(source, sheet)
        report = run(raw)
        _echo_warnings(report.warnings)

        if not report.xml:
            typer.echo("Error: No groups to export", err=True)
            raise typer.Exit(2)

        if output is None:
            typer.echo(report.xml, nl=False)
        else:
            output.write_text(report.xml, encoding="utf-8")
            typer.echo(f"OK: Wrote {len(report.result.groups)} groups to {output}")
    except ParseFailedError as e:
        typer.echo(f"Error: No rows could be parsed:\n{e}", err=True)
        raise typer.Exit(2)
    except (FileNotFoundError, ValueError, GroupAdvisorError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: Unexpected error: {e}", err=True)
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(4)


@app.command()
def limits(json_output: JsonOption = False) -> None:
    """Show the per-request capacity and max gap for registers and coils."""
    table = {kind.value: {"capacity": lim.capacity, "max_gap": lim.max_gap} for kind, lim in DEFAULT_LIMITS.items()}
    if json_output:
        typer.echo(json.dumps(table, indent=2))
        return
    for kind, lim in table.items():
        typer.echo(f"{kind:<9} capacity={lim['capacity']:<5} max_gap={lim['max_gap']}")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"modbus-group-advisor {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """mbgroup - plan Modbus read groups from a register list."""
    pass


if __name__ == "__main__":
    app()
