# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from recon.model.entity_id import EntityId
from recon.model.inspection import InspectionItem
from recon.model.section import SectionStatus


class TeamNote(TypedDict):
    id: EntityId
    text: str
    user_initials: str
    timestamp: pendulum.DateTime
    category: Optional[str]  # status key of the section, or "general"


class Vehicle(TypedDict):
    id: Optional[EntityId]
    vin: str
    year: int
    make: str
    model: str
    trim: Optional[str]
    mileage: int
    color: Optional[str]
    price: Optional[float]
    location: Optional[str]
    date_acquired: pendulum.DateTime

    # status key -> derived section status, one entry per active section
    status: dict[str, SectionStatus]
    # catalog section key -> ordered inspection items
    inspection: dict[str, list[InspectionItem]]
    team_notes: list[TeamNote]

    created: pendulum.DateTime
    updated: pendulum.DateTime
    deleted: Optional[pendulum.DateTime]  # Soft delete


def get_stock_number(vin: str) -> str:
    return vin[-6:]


def get_vehicle_name(vehicle: Vehicle) -> str:
    """e.g. '2023 Honda Accord'"""
    return f"{vehicle['year']} {vehicle['make']} {vehicle['model']}"
