# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer

from recon.repository.inspection_settings import (
    INSPECTION_SETTINGS_REPO,
    DuplicateSectionError,
    UnknownSectionError,
)
from recon.service.status import get_status_key
from recon.terminal.custom_typer import AliasedTyperGroup
from recon.view.section import sections_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def _parse_item(value: str) -> tuple[str, str]:
    """Parse an "id:label" pair."""
    item_id, separator, label = value.partition(":")
    if separator == "" or item_id.strip() == "" or label.strip() == "":
        raise typer.BadParameter(f"Expected id:label, got {value}")
    return item_id.strip(), label.strip()


@app.command("list, ls")
def list_sections() -> None:
    """Show the inspection catalog, including inactive sections and items."""
    sections_view(INSPECTION_SETTINGS_REPO.get_settings()["sections"])


@app.command("add, a", no_args_is_help=True)
def add(
    key: str,
    label: str,
    description: Annotated[
        Optional[str], typer.Option("--description", "-d")
    ] = None,
    items: Annotated[
        Optional[list[str]],
        typer.Option("--item", "-i", help="id:label, accepts multiple"),
    ] = None,
) -> None:
    """Add a custom inspection section."""
    key = key.strip().lower()
    parsed_items = [_parse_item(item) for item in items] if items is not None else []
    item_ids = [item_id for item_id, _ in parsed_items]
    duplicate_ids = sorted({item_id for item_id in item_ids if item_ids.count(item_id) > 1})
    if len(duplicate_ids) > 0:
        typer.echo(f"Duplicate item ids: {', '.join(duplicate_ids)}")
        raise typer.Exit(1)

    try:
        INSPECTION_SETTINGS_REPO.add_section(key, label, description)
        for item_id, item_label in parsed_items:
            INSPECTION_SETTINGS_REPO.add_item(key, item_id, item_label)
    except DuplicateSectionError as e:
        typer.echo(str(e))
        raise typer.Exit(1)

    if get_status_key(key) != key:
        typer.echo(f"Section {key} is tracked as {get_status_key(key)}")
    sections_view(INSPECTION_SETTINGS_REPO.get_settings()["sections"])


@app.command("item, i", no_args_is_help=True)
def item(section_key: str, item_id: str, label: str) -> None:
    """Add an item to an inspection section."""
    try:
        INSPECTION_SETTINGS_REPO.add_item(section_key, item_id, label)
    except (DuplicateSectionError, UnknownSectionError) as e:
        typer.echo(str(e))
        raise typer.Exit(1)

    sections_view(INSPECTION_SETTINGS_REPO.get_settings()["sections"])


@app.command("activate, on", no_args_is_help=True)
def activate(section_key: str) -> None:
    """Include a section in vehicle inspections."""
    _set_active(section_key, True)


@app.command("deactivate, off", no_args_is_help=True)
def deactivate(section_key: str) -> None:
    """Exclude a section from vehicle inspections."""
    _set_active(section_key, False)


def _set_active(section_key: str, is_active: bool) -> None:
    try:
        INSPECTION_SETTINGS_REPO.set_section_active(section_key, is_active)
    except UnknownSectionError as e:
        typer.echo(str(e))
        raise typer.Exit(1)

    sections_view(INSPECTION_SETTINGS_REPO.get_settings()["sections"])
