"""CLI interface for BUILDSTATUS.

This module provides the Typer-based command-line interface. It doubles as
a reference host for MonitorContext: ``watch`` plays the role of an editor
with a fixed set of open files.
"""

import time
from pathlib import Path
from typing import Annotated

import typer
from rich.live import Live

from buildstatus.config.manager import ConfigManager
from buildstatus.config.settings import Settings
from buildstatus.integrations.circleci import StatusClient
from buildstatus.integrations.project import open_web_page, require_project
from buildstatus.monitor.context import MonitorContext
from buildstatus.ui.indicator import describe_status, render_indicator, render_table
from buildstatus.utils.console import console, print_error, print_info, print_warning, show_version
from buildstatus.utils.errors import BuildStatusError, ExitCode, MissingTokenError
from buildstatus.utils.logging import setup_logging

app = typer.Typer(
    name="buildstatus",
    help="BUILDSTATUS - CircleCI build status for the projects you are editing",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        show_version()
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Show CircleCI build status for the project a file belongs to."""
    setup_logging()


def _load_settings() -> tuple[ConfigManager, Settings]:
    config = ConfigManager()
    settings = config.load()
    return config, settings


@app.command()
def status(
    path: Annotated[
        Path,
        typer.Argument(help="File or directory inside a CircleCI project"),
    ] = Path("."),
) -> None:
    """Fetch and print the latest build status once."""
    try:
        _, settings = _load_settings()
        descriptor = require_project(path, settings.default_token)
        if not descriptor.api_token:
            raise MissingTokenError(str(descriptor.root_path))
        client = StatusClient(timeout_seconds=settings.timeout_seconds)
        result = client.fetch_status(descriptor)
    except BuildStatusError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    line = render_indicator(result)
    line.append(f" {descriptor.slug} {describe_status(result)}")
    console.print(line)


@app.command(name="open")
def open_page(
    path: Annotated[
        Path,
        typer.Argument(help="File or directory inside a CircleCI project"),
    ] = Path("."),
) -> None:
    """Open the project's CircleCI page in a browser."""
    try:
        _, settings = _load_settings()
        descriptor = require_project(path, settings.default_token)
    except BuildStatusError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    url = open_web_page(descriptor)
    print_info(f"Opened {url}")


@app.command()
def watch(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files to watch, as if open in an editor"),
    ],
    interval: Annotated[
        int | None,
        typer.Option(
            "--interval",
            "-i",
            min=1,
            help="Seconds between polls (overrides BUILD_STATUS_CHECK_INTERVAL)",
        ),
    ] = None,
) -> None:
    """Keep polling the projects of the given files until interrupted."""
    try:
        _, settings = _load_settings()
    except BuildStatusError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    if interval is not None:
        settings.check_interval = interval

    def open_files() -> list[Path]:
        return [p for p in paths if p.exists()]

    context = MonitorContext.from_settings(settings, open_files)
    for path in paths:
        try:
            if context.watch_file(path) is None:
                print_warning(f"Not a CircleCI project: {path}")
        except MissingTokenError as e:
            print_error(str(e))
            raise typer.Exit(e.exit_code) from e

    if not context.snapshot():
        print_error("None of the given paths belong to a CircleCI project")
        raise typer.Exit(ExitCode.NOT_A_PROJECT)

    try:
        with context, Live(
            get_renderable=lambda: render_table(context.snapshot()),
            console=console,
            refresh_per_second=1,
        ):
            while context.snapshot():
                time.sleep(1)
    except KeyboardInterrupt as e:
        print_info("Stopped watching")
        raise typer.Exit(ExitCode.USER_CANCELLED) from e

    print_info("No monitored projects left")


@app.command(name="config")
def show_config(
    set_token: Annotated[
        str | None,
        typer.Option(
            "--set-token",
            help="Save the global CircleCI API token to ~/.buildstatus-config",
        ),
    ] = None,
) -> None:
    """Show the effective configuration."""
    try:
        config, _ = _load_settings()
        if set_token is not None:
            warning = config.save("BUILD_STATUS_API_TOKEN", set_token)
            if warning:
                print_warning(warning)
    except BuildStatusError as e:
        print_error(str(e))
        raise typer.Exit(e.exit_code) from e

    config.show()


__all__ = ["app"]
