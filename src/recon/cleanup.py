# SPDX-License-Identifier: MIT

import atexit

from recon.repository.configuration import CONFIGURATION_REPO
from recon.repository.inspection_settings import INSPECTION_SETTINGS_REPO
from recon.repository.vehicle import VEHICLE_REPO


def flush() -> None:
    # Analytics are written eagerly on every recorded event
    CONFIGURATION_REPO.flush()
    INSPECTION_SETTINGS_REPO.flush()
    VEHICLE_REPO.flush()


def register_cleanup() -> None:
    atexit.register(flush)
