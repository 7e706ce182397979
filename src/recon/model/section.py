# SPDX-License-Identifier: MIT

from typing import Literal, get_args

SectionStatus = Literal["not-started", "pending", "needs-attention", "completed"]

SECTION_STATUSES: tuple[SectionStatus, ...] = get_args(SectionStatus)

# Status keys of the built-in sections, as stored on Vehicle["status"]
FixedSection = Literal["emissions", "cosmetic", "mechanical", "cleaned", "photos"]

FIXED_SECTIONS: tuple[FixedSection, ...] = get_args(FixedSection)

SECTION_DISPLAY_NAMES: dict[str, str] = {
    "emissions": "Emissions",
    "cosmetic": "Cosmetic",
    "mechanical": "Mechanical",
    "cleaned": "Cleaning",
    "photos": "Photography",
}

# The catalog names the cleaning section "cleaning", vehicles store it as "cleaned"
CATALOG_TO_STATUS_KEY: dict[str, str] = {"cleaning": "cleaned"}
STATUS_TO_CATALOG_KEY: dict[str, str] = {
    value: key for key, value in CATALOG_TO_STATUS_KEY.items()
}
