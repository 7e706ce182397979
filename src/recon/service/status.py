# SPDX-License-Identifier: MIT

from typing import Literal, Optional, Sequence, cast, get_args

from recon.model.inspection import InspectionItem
from recon.model.rating import NOT_CHECKED, RATINGS, Rating
from recon.model.section import (
    CATALOG_TO_STATUS_KEY,
    SECTION_DISPLAY_NAMES,
    SectionStatus,
)
from recon.model.vehicle import Vehicle


class InvalidRatingError(Exception):
    """Raised when a rating is not one of the known rating values."""

    pass


class EmptySectionError(Exception):
    """Raised when a status is requested for a section without items."""

    pass


def parse_rating(value: object) -> Rating:
    if value not in RATINGS:
        raise InvalidRatingError(
            f"Invalid rating: {value}. Valid options: {', '.join(RATINGS)}"
        )
    return cast(Rating, value)


def derive_status(items: Sequence[InspectionItem]) -> SectionStatus:
    """
    Derive a section's status from the ratings of its items.

    Rules are checked in order, first match wins:

    - nothing rated other than not-checked: not-started
    - any item needs attention: needs-attention
    - any item rated fair: pending
    - every item great: completed
    - otherwise (great mixed with not-checked): pending
    """
    if len(items) == 0:
        raise EmptySectionError("Cannot derive a status for a section with no items.")

    ratings = [item["rating"] for item in items]

    if all(rating == NOT_CHECKED for rating in ratings):
        return "not-started"
    if "needs-attention" in ratings:
        return "needs-attention"
    if "fair" in ratings:
        return "pending"
    if all(rating == "great" for rating in ratings):
        return "completed"
    return "pending"


def get_status_key(section_key: str) -> str:
    """Map a catalog section key to the key used in Vehicle["status"]."""
    return CATALOG_TO_STATUS_KEY.get(section_key, section_key)


def get_section_display_name(status_key: str) -> str:
    if status_key in SECTION_DISPLAY_NAMES:
        return SECTION_DISPLAY_NAMES[status_key]
    return status_key.replace("-", " ").replace("_", " ").title()


def derive_vehicle_status(
    vehicle: Vehicle, section_keys: Optional[Sequence[str]] = None
) -> dict[str, SectionStatus]:
    """
    Recompute section statuses of a vehicle from its inspection items.

    Only `section_keys` (catalog keys) are included when given, so sections
    that were deactivated in the catalog drop out of the status.
    """
    if section_keys is None:
        section_keys = list(vehicle["inspection"].keys())

    status: dict[str, SectionStatus] = {}
    for section_key in section_keys:
        items = vehicle["inspection"].get(section_key, [])
        if len(items) == 0:
            # A catalog section with every item deactivated has nothing to derive from
            status[get_status_key(section_key)] = "not-started"
            continue
        status[get_status_key(section_key)] = derive_status(items)
    return status


def is_ready_for_sale(vehicle: Vehicle) -> bool:
    statuses = list(vehicle["status"].values())
    return len(statuses) > 0 and all(status == "completed" for status in statuses)


def overall_progress(vehicle: Vehicle) -> float:
    """Percentage of sections that are completed."""
    statuses = list(vehicle["status"].values())
    if len(statuses) == 0:
        return 0.0
    completed = len([status for status in statuses if status == "completed"])
    return completed / len(statuses) * 100


def section_progress(items: Sequence[InspectionItem]) -> tuple[int, int]:
    """Return (checked items, total items)."""
    checked = len([item for item in items if item["rating"] != NOT_CHECKED])
    return checked, len(items)


VehicleFilter = Literal["all", "active", "completed", "pending", "needs-attention"]

VEHICLE_FILTERS: tuple[VehicleFilter, ...] = get_args(VehicleFilter)


def matches_filter(vehicle: Vehicle, vehicle_filter: VehicleFilter) -> bool:
    """
    - all: every vehicle
    - active: still being reconditioned
    - completed: ready for sale
    - pending / needs-attention: at least one section in that status
    """
    if vehicle_filter == "all":
        return True
    if vehicle_filter == "active":
        return not is_ready_for_sale(vehicle)
    if vehicle_filter == "completed":
        return is_ready_for_sale(vehicle)
    return vehicle_filter in vehicle["status"].values()
