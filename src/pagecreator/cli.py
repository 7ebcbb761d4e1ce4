"""CLI interface for pagecreator.

Command-line tool for creating pages from collection files.
"""

import asyncio
import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from pagecreator.builder import BuildState, CycleResult
from pagecreator.config import Config
from pagecreator.core.derive import derive_path
from pagecreator.core.paths import create_path
from pagecreator.core.template import strip_extension
from pagecreator.reporter import Reporter, ReporterConfig
from pagecreator.session import BuildSession


def _config_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by commands that load a configuration."""
    options = [
        click.option(
            "--config",
            "-c",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="Path to configuration file (default: auto-discover pagecreator.toml)",
        ),
        click.option(
            "--pages-dir",
            "-p",
            type=click.Path(exists=True, path_type=Path, file_okay=False),
            default=None,
            help="Collection source directory (overrides config)",
        ),
        click.option(
            "--data-dir",
            "-d",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Data directory (overrides config)",
        ),
        click.option(
            "--output-dir",
            "-o",
            type=click.Path(path_type=Path, file_okay=False),
            default=None,
            help="Output directory for pages.json (overrides config)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose output (show lookup diagnostics)",
        ),
    ]
    for option in reversed(options):
        command = option(command)
    return command


@click.group()
def cli() -> None:
    """pagecreator - Create static pages from data collections."""


@cli.command()
@_config_options
def build(
    config_path: Path | None,
    pages_dir: Path | None,
    data_dir: Path | None,
    output_dir: Path | None,
    verbose: bool,
) -> None:
    """Create pages for every collection file once."""
    session = _create_session(config_path, pages_dir, data_dir, output_dir, verbose)

    results = asyncio.run(session.build())
    _print_summary(session, results)

    if session.reporter.has_panicked:
        click.echo(click.style("Build failed.", fg="red", bold=True), err=True)
        sys.exit(1)


@cli.command()
@_config_options
@click.option(
    "--serve/--no-serve",
    default=False,
    help="Serve the page API while watching (default: disabled)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
def develop(
    config_path: Path | None,
    pages_dir: Path | None,
    data_dir: Path | None,
    output_dir: Path | None,
    verbose: bool,
    serve: bool,
    host: str | None,
    port: int | None,
) -> None:
    """Create pages, then rebuild them as collection files and data change."""
    session = _create_session(
        config_path, pages_dir, data_dir, output_dir, verbose, host=host, port=port
    )

    results = asyncio.run(session.build())
    _print_summary(session, results)

    click.echo(f"Watching {session.config.pages.source_dir} and {session.config.data.source_dir}")
    if serve:
        from pagecreator.server import run_server

        click.echo(f"Serving pages on {session.config.server.host}:{session.config.server.port}")
        run_server(session)
        return

    try:
        asyncio.run(session.coordinator.run())
    except KeyboardInterrupt:
        click.echo("Stopped watching.")


@cli.command()
@click.argument("pattern")
@click.argument("record_json")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log fields that could not be found",
)
def derive(pattern: str, record_json: str, verbose: bool) -> None:
    """Derive the page path PATTERN gives for the record RECORD_JSON.

    Example: pagecreator derive 'product/{Product.sku__en}' '{"sku": {"en": "Blue Hat"}}'
    """
    _configure_logging(verbose)

    try:
        record = json.loads(record_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="RECORD_JSON") from e
    if not isinstance(record, dict):
        raise click.BadParameter("must be a JSON object", param_hint="RECORD_JSON")

    reporter = Reporter(ReporterConfig(verbose=verbose))
    derivation = derive_path(strip_extension(pattern), record, reporter)

    click.echo(f"Derived path: {derivation.derived_path}")
    click.echo(f"Page path: {create_path(derivation.derived_path)}")
    click.echo(f"Errors: {derivation.errors}")

    if derivation.errors:
        sys.exit(1)


def _create_session(
    config_path: Path | None,
    pages_dir: Path | None,
    data_dir: Path | None,
    output_dir: Path | None,
    verbose: bool,
    *,
    host: str | None = None,
    port: int | None = None,
) -> BuildSession:
    try:
        config = Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    config = config.with_overrides(
        pages_dir=pages_dir,
        data_dir=data_dir,
        output_dir=output_dir,
        host=host,
        port=port,
        verbose=verbose or None,
    )
    _configure_logging(config.logging.verbose)

    click.echo(f"Pages directory: {config.pages.source_dir}")
    click.echo(f"Data directory: {config.data.source_dir}")
    return BuildSession(config)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _print_summary(session: BuildSession, results: list[CycleResult]) -> None:
    created = sum(len(result.paths) for result in results)
    waiting = [result for result in results if result.halted_at != BuildState.WATCHING]

    files = len(results)
    click.echo(
        f"Created {created} page{'s' if created != 1 else ''} "
        f"from {files} collection file{'s' if files != 1 else ''}"
    )
    for result in waiting:
        click.echo(f"  {result.file_path}: stopped at {result.halted_at.value}")

    if session.reporter.errors:
        click.echo(
            click.style(f"{len(session.reporter.errors)} error(s) reported", fg="yellow"),
            err=True,
        )
    for report in session.reporter.panics:
        click.echo(click.style(report.format(), fg="red"), err=True)

    click.echo(f"Manifest: {session.manifest.path}")
