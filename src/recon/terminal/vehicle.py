# SPDX-License-Identifier: MIT

from typing import Annotated, Optional, cast

import typer

from recon.model.entity_id import EntityId
from recon.model.vehicle import Vehicle
from recon.repository.analytics import (
    ANALYTICS_REPO,
    AnalyticsWriteError,
    StaleAnalyticsError,
)
from recon.repository.inspection_settings import (
    INSPECTION_SETTINGS_REPO,
    UnknownSectionError,
)
from recon.repository.vehicle import VEHICLE_REPO, VehicleNotFoundError
from recon.service.inspection import (
    MissingActorError,
    UnknownItemError,
    initialize_inspection,
    new_team_note,
    rate_item,
)
from recon.service.status import (
    VEHICLE_FILTERS,
    InvalidRatingError,
    VehicleFilter,
    get_status_key,
    matches_filter,
)
from recon.template.vehicle import get_vehicle_template
from recon.terminal.custom_typer import AliasedTyperGroup
from recon.terminal.parse import parse_date
from recon.time import now_utc
from recon.view import vehicle as vehicle_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def _find_vehicle(reference: str) -> Vehicle:
    try:
        vehicle = VEHICLE_REPO.find_vehicle(reference)
    except VehicleNotFoundError as e:
        typer.echo(str(e))
        raise typer.Exit(1)

    # Pick up catalog changes made since the vehicle was added
    initialize_inspection(vehicle, INSPECTION_SETTINGS_REPO.get_active_sections())
    return vehicle


def _active_status_keys() -> list[str]:
    return [
        get_status_key(section["key"])
        for section in INSPECTION_SETTINGS_REPO.get_active_sections()
    ]


@app.command("add, a", no_args_is_help=True)
def add(
    vin: str,
    year: Annotated[int, typer.Option("--year", "-y")],
    make: Annotated[str, typer.Option("--make", "-mk")],
    model: Annotated[str, typer.Option("--model", "-md")],
    trim: Annotated[Optional[str], typer.Option("--trim", "-t")] = None,
    mileage: Annotated[int, typer.Option("--mileage", "-mi")] = 0,
    color: Annotated[Optional[str], typer.Option("--color", "-col")] = None,
    price: Annotated[Optional[float], typer.Option("--price", "-p")] = None,
    location: Annotated[Optional[str], typer.Option("--location", "-l")] = None,
    acquired: Annotated[
        Optional[str],
        typer.Option("--acquired", "-ac", help="YYYY-MM-DD, defaults to today"),
    ] = None,
) -> None:
    """Add a vehicle to the reconditioning board."""
    vehicle = get_vehicle_template()
    vehicle["vin"] = vin.strip().upper()
    vehicle["year"] = year
    vehicle["make"] = make
    vehicle["model"] = model
    vehicle["trim"] = trim
    vehicle["mileage"] = mileage
    vehicle["color"] = color
    vehicle["price"] = price
    vehicle["location"] = location
    acquired_date = parse_date(acquired)
    if acquired_date is not None:
        vehicle["date_acquired"] = acquired_date

    initialize_inspection(vehicle, INSPECTION_SETTINGS_REPO.get_active_sections())

    id = VEHICLE_REPO.save_new_vehicle(vehicle)

    vehicle_report.single_vehicle_view(VEHICLE_REPO.get_vehicle(id))


@app.command("list, ls")
def list_vehicles(
    vehicle_filter: Annotated[
        str,
        typer.Option(
            "--filter",
            "-f",
            help="all, active, completed, pending, needs-attention",
        ),
    ] = "active",
) -> None:
    """Show the reconditioning board."""
    if vehicle_filter not in VEHICLE_FILTERS:
        typer.echo(
            f"Invalid filter: {vehicle_filter}. Valid options: {', '.join(VEHICLE_FILTERS)}"
        )
        raise typer.Exit(1)

    vehicles = [
        vehicle
        for vehicle in VEHICLE_REPO.get_all_vehicles()
        if matches_filter(vehicle, cast(VehicleFilter, vehicle_filter))
    ]
    vehicles.sort(key=lambda vehicle: vehicle["date_acquired"])

    vehicle_report.vehicles_view(vehicles, _active_status_keys())


@app.command("show, s", no_args_is_help=True)
def show(reference: str) -> None:
    """Show a vehicle and its inspection checklist (id, id prefix or stock number)."""
    vehicle_report.single_vehicle_view(_find_vehicle(reference))


@app.command("rate, r", no_args_is_help=True)
def rate(
    reference: str,
    section: str,
    item: str,
    rating: Annotated[str, typer.Argument(help="great, fair, needs-attention, not-checked")],
    initials: Annotated[
        Optional[str],
        typer.Option("--initials", "-i", help="Prompted for when omitted"),
    ] = None,
) -> None:
    """Rate one inspection item, updating the section status and analytics."""
    vehicle = _find_vehicle(reference)

    if initials is None:
        initials = typer.prompt(
            "Enter your initials to record this task update",
            default="",
            show_default=False,
        )

    try:
        change = rate_item(
            vehicle,
            section,
            item,
            rating,
            initials,
            analytics_repository=ANALYTICS_REPO,
        )
    except (
        InvalidRatingError,
        MissingActorError,
        UnknownSectionError,
        UnknownItemError,
    ) as e:
        typer.echo(str(e))
        raise typer.Exit(1)
    except (AnalyticsWriteError, StaleAnalyticsError) as e:
        typer.echo(f"Rating not saved: {e}")
        raise typer.Exit(1)

    id = cast(EntityId, vehicle["id"])
    VEHICLE_REPO.update_inspection(id, vehicle["inspection"], vehicle["status"])
    if change["team_note"] is not None:
        VEHICLE_REPO.add_team_note(id, change["team_note"])

    vehicle_report.rating_change_view(change)


@app.command("note, n", no_args_is_help=True)
def note(
    reference: str,
    text: str,
    initials: Annotated[str, typer.Option("--initials", "-i", prompt=True)],
    category: Annotated[str, typer.Option("--category", "-c")] = "general",
) -> None:
    """Add a team note to a vehicle."""
    vehicle = _find_vehicle(reference)
    if initials.strip() == "":
        typer.echo("Enter your initials to add a team note.")
        raise typer.Exit(1)

    VEHICLE_REPO.add_team_note(
        cast(EntityId, vehicle["id"]), new_team_note(text, initials, category)
    )

    vehicle_report.team_notes_view(VEHICLE_REPO.get_vehicle(cast(EntityId, vehicle["id"])))


@app.command("notes, ns", no_args_is_help=True)
def notes(reference: str) -> None:
    """Show a vehicle's team notes."""
    vehicle_report.team_notes_view(_find_vehicle(reference))


@app.command("delete, d", no_args_is_help=True)
def delete(reference: str) -> None:
    """Remove a vehicle from the board."""
    vehicle = _find_vehicle(reference)
    VEHICLE_REPO.delete_vehicle(cast(EntityId, vehicle["id"]), now_utc())
    typer.echo(f"deleted {vehicle['year']} {vehicle['make']} {vehicle['model']}")
