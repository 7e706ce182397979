# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

import pendulum

from recon.model.rating import Rating


class InspectionItem(TypedDict):
    key: str  # unique within its section
    label: str
    rating: Rating


class InspectionSectionItem(TypedDict):
    id: str
    label: str
    is_active: bool
    order: int


class InspectionSection(TypedDict):
    key: str  # emissions, cosmetic, mechanical, cleaning, photos or a custom key
    label: str
    description: Optional[str]
    is_active: bool
    is_custom: bool
    order: int
    items: list[InspectionSectionItem]


class InspectionSettings(TypedDict):
    sections: list[InspectionSection]
    created: pendulum.DateTime
    updated: pendulum.DateTime
