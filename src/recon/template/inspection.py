# SPDX-License-Identifier: MIT

from recon.model.inspection import (
    InspectionSection,
    InspectionSectionItem,
    InspectionSettings,
)
from recon.time import now_utc

DEFAULT_SECTIONS: list[tuple[str, str, str, list[tuple[str, str]]]] = [
    (
        "emissions",
        "Emissions & Environmental",
        "Environmental compliance and emissions testing",
        [
            ("emissions-test", "Pass Emissions Test"),
            ("obd2-scan", "OBD2 Diagnostic Scan"),
            ("catalytic-converter", "Catalytic Converter Check"),
        ],
    ),
    (
        "cosmetic",
        "Cosmetic Inspection",
        "Visual appearance and cosmetic condition",
        [
            ("exterior-paint", "Exterior Paint Condition"),
            ("bumper-condition", "Bumper Condition"),
            ("windows-glass", "Windows & Glass"),
            ("lights-function", "All Lights Functioning"),
            ("tires-condition", "Tire Condition & Tread"),
            ("interior-cleanliness", "Interior Cleanliness"),
        ],
    ),
    (
        "mechanical",
        "Mechanical Inspection",
        "Engine, transmission, and mechanical systems",
        [
            ("engine-operation", "Engine Operation"),
            ("transmission-function", "Transmission Function"),
            ("brakes-condition", "Brakes Condition"),
            ("suspension-check", "Suspension Check"),
            ("steering-alignment", "Steering & Alignment"),
            ("fluids-levels", "Fluid Levels Check"),
        ],
    ),
    (
        "cleaning",
        "Cleaning & Detailing",
        "Vehicle cleaning and detailing services",
        [
            ("exterior-wash", "Exterior Wash & Wax"),
            ("interior-vacuum", "Interior Vacuum"),
            ("windows-cleaned", "Windows Cleaned"),
            ("detail-complete", "Detail Complete"),
        ],
    ),
    (
        "photos",
        "Photography Documentation",
        "Vehicle photography and documentation",
        [
            ("exterior-photos", "Exterior Photos (All Angles)"),
            ("interior-photos", "Interior Photos"),
            ("engine-bay-photos", "Engine Bay Photos"),
            ("damage-photos", "Any Damage Photos"),
        ],
    ),
]


def get_section_item_template(id: str, label: str, order: int) -> InspectionSectionItem:
    return {
        "id": id,
        "label": label,
        "is_active": True,
        "order": order,
    }


def get_section_template(key: str, label: str, order: int) -> InspectionSection:
    return {
        "key": key,
        "label": label,
        "description": None,
        "is_active": True,
        "is_custom": True,
        "order": order,
        "items": [],
    }


def get_inspection_settings_template() -> InspectionSettings:
    now = now_utc()
    sections: list[InspectionSection] = []
    for order, (key, label, description, items) in enumerate(DEFAULT_SECTIONS, 1):
        section = get_section_template(key, label, order)
        section["description"] = description
        section["is_custom"] = False
        section["items"] = [
            get_section_item_template(item_id, item_label, item_order)
            for item_order, (item_id, item_label) in enumerate(items, 1)
        ]
        sections.append(section)

    return {
        "sections": sections,
        "created": now,
        "updated": now,
    }
