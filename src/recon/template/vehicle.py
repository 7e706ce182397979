# SPDX-License-Identifier: MIT

from recon.model.vehicle import Vehicle
from recon.time import now_utc


def get_vehicle_template() -> Vehicle:
    now = now_utc()
    return {
        "id": None,
        "vin": "",
        "year": now.year,
        "make": "",
        "model": "",
        "trim": None,
        "mileage": 0,
        "color": None,
        "price": None,
        "location": None,
        "date_acquired": now,
        "status": {},
        "inspection": {},
        "team_notes": [],
        "created": now,
        "updated": now,
        "deleted": None,
    }
