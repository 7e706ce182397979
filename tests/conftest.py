"""Pytest configuration for recon tests."""
from __future__ import annotations

import pendulum
import pytest

from recon.model.inspection import InspectionItem
from recon.model.rating import Rating
from recon.model.vehicle import Vehicle
from recon.notify import ChangeNotifier
from recon.repository.analytics import AnalyticsRepository
from recon.repository.store import InMemoryStore
from recon.service.inspection import initialize_inspection
from recon.template.inspection import get_inspection_settings_template
from recon.template.vehicle import get_vehicle_template


def make_items(*ratings: Rating) -> list[InspectionItem]:
    """Build an inspection item list with the given ratings."""
    return [
        {"key": f"item-{index}", "label": f"Item {index}", "rating": rating}
        for index, rating in enumerate(ratings)
    ]


def local_datetime(year: int, month: int, day: int, hour: int = 10) -> pendulum.DateTime:
    """Return a local wall-clock instant so local dates are deterministic."""
    return pendulum.datetime(year, month, day, hour, tz="local")


@pytest.fixture
def store():
    """Return an empty in-memory key-value store."""
    return InMemoryStore()


@pytest.fixture
def notifier():
    """Return a change notifier."""
    return ChangeNotifier()


@pytest.fixture
def analytics_repository(store, notifier):
    """Return an analytics repository backed by the in-memory store."""
    return AnalyticsRepository(store=store, notifier=notifier)


@pytest.fixture
def vehicle() -> Vehicle:
    """Return a vehicle with every default section seeded as not-checked."""
    vehicle = get_vehicle_template()
    vehicle["id"] = "7d1e2a1c-2f38-4d0f-9a55-5f0d6c0b2a11"
    vehicle["vin"] = "1HGCM82633A004352"
    vehicle["year"] = 2023
    vehicle["make"] = "Honda"
    vehicle["model"] = "Accord"
    initialize_inspection(vehicle, get_inspection_settings_template()["sections"])
    return vehicle
