# SPDX-License-Identifier: MIT

import logging
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from recon import configuration
from recon.configuration import Configuration
from recon.repository.configuration import CONFIGURATION_REPO
from recon.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _config_table(config: Configuration, title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row(
        "data_path",
        config["data_path"] if config["data_path"] else "None (user data directory)",
    )
    table.add_row(
        "show_header",
        "✓ Enabled" if config["show_header"] else "✗ Disabled",
    )
    table.add_row("log_level", config["log_level"])
    table.add_row("top_performers_limit", str(config["top_performers_limit"]))
    table.add_row("recent_days", str(config["recent_days"]))
    return table


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    console.print(_config_table(config))
    console.print(f"Config file: {configuration.APP_CONFIG_PATH}")
    console.print(f"Data directory: {configuration.DATA_PATH}")

    yaml_library_type = "untested"
    try:
        from yaml import CDumper as Dumper  # noqa: F401
        from yaml import CLoader as Loader  # noqa: F401

        yaml_library_type = "C"
    except ImportError:
        yaml_library_type = "Python"

    console.print()
    console.print(f"YAML Library Type: {yaml_library_type}")


@app.command("set, s")
def set(
    data_path: Annotated[
        Optional[str],
        typer.Option(
            "--data-path",
            help="Directory for vehicles, analytics and inspection settings",
        ),
    ] = None,
    remove_data_path: Annotated[
        bool,
        typer.Option(
            "--remove-data-path",
            help="Reset data path to None (use the user data directory)",
        ),
    ] = False,
    show_header: Annotated[
        Optional[bool],
        typer.Option(
            "--show-header/--no-show-header",
            help="Enable/disable headers above reports",
        ),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help=", ".join(LOG_LEVELS)),
    ] = None,
    top_performers_limit: Annotated[
        Optional[int],
        typer.Option(
            "--top-performers-limit",
            help="Default number of rows in the top performers report",
        ),
    ] = None,
    recent_days: Annotated[
        Optional[int],
        typer.Option(
            "--recent-days",
            help="Default number of days in daily reports",
        ),
    ] = None,
) -> None:
    """
    Update configuration settings.
    """
    if log_level is not None:
        log_level = log_level.upper()
        if log_level not in LOG_LEVELS:
            typer.echo(f"Invalid log level: {log_level}. Valid options: {', '.join(LOG_LEVELS)}")
            raise typer.Exit(1)
    if top_performers_limit is not None and top_performers_limit < 1:
        typer.echo("--top-performers-limit must be at least 1")
        raise typer.Exit(1)
    if recent_days is not None and recent_days < 1:
        typer.echo("--recent-days must be at least 1")
        raise typer.Exit(1)

    CONFIGURATION_REPO.update_config(
        data_path=data_path,
        remove_data_path=remove_data_path,
        show_header=show_header,
        log_level=log_level,
        top_performers_limit=top_performers_limit,
        recent_days=recent_days,
    )
    if log_level is not None:
        logging.getLogger("recon").setLevel(log_level)

    console = Console()
    console.print("[green]Configuration updated successfully![/green]\n")
    console.print(
        _config_table(CONFIGURATION_REPO.get_config(), title="Updated Configuration")
    )
