# SPDX-License-Identifier: MIT

from typing import cast

from rich import box
from rich.console import Console
from rich.table import Table

from recon.model.entity_id import EntityId, short_entity_id
from recon.model.vehicle import Vehicle, get_stock_number, get_vehicle_name
from recon.service.inspection import RatingChange
from recon.service.status import (
    get_section_display_name,
    get_status_key,
    is_ready_for_sale,
    overall_progress,
    section_progress,
)
from recon.time import datetime_to_display_local_datetime_str, datetime_to_local_date_str
from recon.view.header import header
from recon.view.util import format_percentage, format_rating, format_status


def vehicles_view(vehicles: list[Vehicle], status_keys: list[str]) -> None:
    """Display the reconditioning board, one row per vehicle."""
    header("vehicles")

    vehicles_table = Table(box=box.SIMPLE)
    vehicles_table.add_column("id")
    vehicles_table.add_column("stock")
    vehicles_table.add_column("vehicle")
    vehicles_table.add_column("location")
    for status_key in status_keys:
        vehicles_table.add_column(get_section_display_name(status_key).lower())
    vehicles_table.add_column("progress")

    for vehicle in vehicles:
        row = [
            short_entity_id(cast(EntityId, vehicle["id"])),
            get_stock_number(vehicle["vin"]),
            get_vehicle_name(vehicle),
            vehicle["location"] or "",
        ]
        for status_key in status_keys:
            row.append(format_status(vehicle["status"].get(status_key)))
        progress = format_percentage(overall_progress(vehicle))
        if is_ready_for_sale(vehicle):
            progress = f"[green]{progress} ready[/green]"
        row.append(progress)
        vehicles_table.add_row(*row)

    console = Console()
    console.print(vehicles_table)


def single_vehicle_view(vehicle: Vehicle) -> None:
    """Display a vehicle's properties followed by its inspection checklist."""
    header(get_vehicle_name(vehicle))

    vehicle_table = Table(box=box.SIMPLE)
    vehicle_table.add_column("property")
    vehicle_table.add_column("value")

    vehicle_table.add_row("id", cast(EntityId, vehicle["id"]))
    vehicle_table.add_row("stock", get_stock_number(vehicle["vin"]))
    vehicle_table.add_row("vin", vehicle["vin"])
    vehicle_table.add_row("trim", vehicle["trim"] or "")
    vehicle_table.add_row("mileage", str(vehicle["mileage"]))
    vehicle_table.add_row("color", vehicle["color"] or "")
    vehicle_table.add_row(
        "price", f"{vehicle['price']:,.2f}" if vehicle["price"] is not None else ""
    )
    vehicle_table.add_row("location", vehicle["location"] or "")
    vehicle_table.add_row(
        "acquired", datetime_to_local_date_str(vehicle["date_acquired"])
    )
    vehicle_table.add_row("progress", format_percentage(overall_progress(vehicle)))

    console = Console()
    console.print(vehicle_table)

    inspection_table = Table(box=box.SIMPLE)
    inspection_table.add_column("section")
    inspection_table.add_column("item")
    inspection_table.add_column("label")
    inspection_table.add_column("rating")

    for section_key, items in vehicle["inspection"].items():
        checked, total = section_progress(items)
        status_key = get_status_key(section_key)
        if status_key not in vehicle["status"]:
            # Section was deactivated in the catalog
            continue
        inspection_table.add_row(
            f"[bold]{section_key}[/bold]",
            "",
            f"{checked}/{total} checked",
            format_status(vehicle["status"][status_key]),
        )
        for item in items:
            inspection_table.add_row("", item["key"], item["label"], format_rating(item["rating"]))

    console.print(inspection_table)


def team_notes_view(vehicle: Vehicle) -> None:
    header(f"{get_vehicle_name(vehicle)} notes")

    notes_table = Table(box=box.SIMPLE)
    notes_table.add_column("when")
    notes_table.add_column("by")
    notes_table.add_column("category")
    notes_table.add_column("note")

    for team_note in sorted(vehicle["team_notes"], key=lambda note: note["timestamp"]):
        notes_table.add_row(
            datetime_to_display_local_datetime_str(team_note["timestamp"]),
            team_note["user_initials"],
            team_note["category"] or "",
            team_note["text"],
        )

    console = Console()
    console.print(notes_table)


def rating_change_view(change: RatingChange) -> None:
    console = Console()
    console.print(
        f"{change['item_label']}: {format_rating(change['old_rating'])} -> "
        f"{format_rating(change['new_rating'])}, "
        f"{change['status_key']} is now {format_status(change['status'])}"
    )
    if change["event"] is None:
        console.print("[bright_black]no change recorded[/bright_black]")
