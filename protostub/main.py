"""
protostub — CLI entrypoint.

Usage:
    protostub --help
    protostub -p protos/ -o generated/ -r
    python -m protostub.main -p api.proto -o out/ -w PythonServiceWriter
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import NoReturn

import click
from click.core import ParameterSource

from protostub import __version__
from protostub.core.observability.logging_config import setup_logging

_STATUS_STYLE = {
    "generated": ("✓", "green", "generated"),
    "exists": ("•", "cyan", "exists, left untouched"),
    "no_services": ("⚠️ ", "yellow", "no services"),
    "parse_error": ("✗", "red", "parse error"),
    "create_error": ("✗", "red", "cannot create output"),
    "write_error": ("✗", "red", "write failed"),
}


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="protostub")
@click.option(
    "--proto",
    "-p",
    "proto",
    type=click.Path(path_type=Path),
    default=None,
    help="Proto file or folder with proto files.",
)
@click.option(
    "--recursive/--no-recursive",
    "-r",
    default=False,
    help="Recursive file search in proto folder (overrides the config file).",
)
@click.option(
    "--out",
    "-o",
    "out",
    type=click.Path(path_type=Path),
    default=None,
    help="Output folder (created if missing).",
)
@click.option("--writer", "-w", "writer", default=None, help="Short class name of service writer.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to protostub.yml (default: auto-detect).",
)
@click.option("--list-writers", "-l", is_flag=True, help="List available writers and exit.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
def cli(
    proto: Path | None,
    recursive: bool,
    out: Path | None,
    writer: str | None,
    config_path: Path | None,
    list_writers: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
) -> None:
    """protostub — generate service stubs from proto3 files."""
    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("PROTOSTUB_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("PROTOSTUB_LOG_FILE"),
        log_file_level=os.environ.get("PROTOSTUB_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )

    from protostub.adapters.registry import default_registry
    from protostub.core.config.loader import ConfigError, load_config
    from protostub.core.use_cases.generate import run_generate

    registry = default_registry()

    if list_writers:
        _print_writers(registry.writer_status(), as_json)
        return

    try:
        config = load_config(config_path)
    except ConfigError as e:
        _fail(str(e), as_json)

    proto = proto or config.proto
    out = out or config.out
    writer = writer or config.writer
    if click.get_current_context().get_parameter_source("recursive") is ParameterSource.DEFAULT:
        recursive = config.recursive

    if proto is None:
        raise click.UsageError("Missing option '-p' / '--proto'.")
    if out is None:
        raise click.UsageError("Missing option '-o' / '--out'.")

    result = run_generate(
        proto_path=proto,
        output_path=out,
        writer_name=writer,
        recursive=recursive,
        registry=registry,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        _fail(result.error, as_json)

    report = result.report
    assert report is not None  # guaranteed when no error
    assert result.writer is not None

    if not quiet:
        click.secho(f"\n📦 {result.writer.name}", fg="cyan", bold=True)
        click.echo(f"   {proto} → {out}")
        click.echo()

    if report.total_files == 0:
        click.secho("   ⚠️  No proto files found", fg="yellow")

    for outcome in report.outcomes:
        if quiet and outcome.ok:
            continue
        marker, color, label = _STATUS_STYLE[outcome.status]
        click.secho(f"   {marker} {outcome.input_path} ", fg=color, nl=False)
        detail = f"→ {outcome.output_path}" if outcome.output_path else ""
        click.echo(f"({label}) {detail}".rstrip())
        if outcome.error:
            click.echo(f"       {outcome.error}")

    if not quiet:
        click.echo()
        summary = ", ".join(
            f"{count} {status.replace('_', ' ')}"
            for status, count in sorted(report.counts().items())
        )
        click.echo(f"   Files: {report.total_files}" + (f" ({summary})" if summary else ""))
        click.echo()


def _print_writers(status: dict[str, dict], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(status, indent=2))
        return

    if not status:
        click.secho("No writers registered", fg="yellow")
        return

    click.secho("Available writers:", bold=True)
    for index, (name, info) in enumerate(status.items()):
        default = " (default)" if index == 0 else ""
        click.echo(f"   • {name}{default}  {info['description']}".rstrip())


def _fail(message: str, as_json: bool) -> NoReturn:
    if as_json:
        click.echo(json.dumps({"error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red", err=True)
        click.echo("Try 'protostub --help' for help.", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
