# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict, cast

import pendulum

from recon.model.analytics import CompletionEvent
from recon.model.entity_id import EntityId, generate_entity_id
from recon.model.inspection import InspectionItem, InspectionSection
from recon.model.rating import NOT_CHECKED, RATING_LABELS, Rating
from recon.model.section import STATUS_TO_CATALOG_KEY, SectionStatus
from recon.model.vehicle import TeamNote, Vehicle, get_vehicle_name
from recon.repository.analytics import ANALYTICS_REPO, AnalyticsRepository
from recon.repository.inspection_settings import UnknownSectionError
from recon.service.analytics import (
    is_noop_change,
    normalize_initials,
    record_task_update,
)
from recon.service.status import (
    derive_status,
    derive_vehicle_status,
    get_status_key,
    is_ready_for_sale,
    parse_rating,
)
from recon.time import now_utc


class MissingActorError(Exception):
    """Raised when a rating change is attempted without user initials."""

    pass


class UnknownItemError(Exception):
    """Raised when an item key is not part of a vehicle's inspection section."""

    pass


class RatingChange(TypedDict):
    vehicle: Vehicle
    section_key: str
    status_key: str
    item_key: str
    item_label: str
    old_rating: Rating
    new_rating: Rating
    status: SectionStatus
    event: Optional[CompletionEvent]
    team_note: Optional[TeamNote]


def initialize_inspection(vehicle: Vehicle, sections: list[InspectionSection]) -> None:
    """
    Seed the vehicle's inspection from the active catalog sections. Existing
    ratings are kept, new items start as not-checked.
    """
    for section in sections:
        existing: dict[str, InspectionItem] = {
            item["key"]: item for item in vehicle["inspection"].get(section["key"], [])
        }
        vehicle["inspection"][section["key"]] = [
            {
                "key": item["id"],
                "label": item["label"],
                "rating": existing[item["id"]]["rating"]
                if item["id"] in existing
                else NOT_CHECKED,
            }
            for item in section["items"]
        ]

    vehicle["status"] = derive_vehicle_status(
        vehicle, [section["key"] for section in sections]
    )


def build_team_note_text(
    item_label: str, status_key: str, old_rating: Rating, new_rating: Rating
) -> str:
    if old_rating == NOT_CHECKED:
        text = (
            f'{item_label} rated as "{RATING_LABELS[new_rating]}" '
            f"during {status_key} inspection."
        )
    else:
        text = (
            f'{item_label} updated from "{RATING_LABELS[old_rating]}" to '
            f'"{RATING_LABELS[new_rating]}" during {status_key} inspection.'
        )

    if new_rating == "needs-attention":
        text += " Requires attention before completion."
    elif new_rating == "great" and old_rating == "needs-attention":
        text += " Issue resolved."
    return text


def new_team_note(
    text: str,
    user_initials: str,
    category: Optional[str],
    now: Optional[pendulum.DateTime] = None,
) -> TeamNote:
    return {
        "id": generate_entity_id(),
        "text": text,
        "user_initials": normalize_initials(user_initials),
        "timestamp": now if now is not None else now_utc(),
        "category": category,
    }


def rate_item(
    vehicle: Vehicle,
    section_key: str,
    item_key: str,
    rating: str,
    user_initials: Optional[str],
    *,
    analytics_repository: AnalyticsRepository = ANALYTICS_REPO,
    now: Optional[pendulum.DateTime] = None,
) -> RatingChange:
    """
    Apply a rating to one inspection item of `vehicle` (mutated in place),
    recompute the section status and, unless the change is a no-op, record
    a team note and a completion event.
    """
    new_rating = parse_rating(rating)
    initials = normalize_initials(user_initials)
    if initials == "":
        raise MissingActorError("Enter your initials to record this task update.")

    if section_key not in vehicle["inspection"]:
        section_key = STATUS_TO_CATALOG_KEY.get(section_key, section_key)
    if section_key not in vehicle["inspection"]:
        raise UnknownSectionError(f"Vehicle has no inspection section {section_key}")
    # Sections deactivated in the catalog keep their items but have no status entry
    if get_status_key(section_key) not in vehicle["status"]:
        raise UnknownSectionError(f"Inspection section {section_key} is not active")

    items = vehicle["inspection"][section_key]
    matches = [item for item in items if item["key"] == item_key]
    if len(matches) == 0:
        raise UnknownItemError(f"Section {section_key} has no item {item_key}")
    item = matches[0]

    if now is None:
        now = now_utc()

    was_ready_for_sale = is_ready_for_sale(vehicle)
    old_rating = item["rating"]
    item["rating"] = new_rating

    status_key = get_status_key(section_key)
    status = derive_status(items)
    vehicle["status"][status_key] = status

    event: Optional[CompletionEvent] = None
    team_note: Optional[TeamNote] = None
    if not is_noop_change(old_rating, new_rating):
        team_note = new_team_note(
            build_team_note_text(item["label"], status_key, old_rating, new_rating),
            initials,
            status_key,
            now,
        )
        vehicle["team_notes"].append(team_note)

        event = record_task_update(
            cast(EntityId, vehicle["id"]),
            get_vehicle_name(vehicle),
            status_key,
            initials,
            item["label"],
            old_rating,
            new_rating,
            repository=analytics_repository,
            vehicle_completed=not was_ready_for_sale and is_ready_for_sale(vehicle),
            now=now,
        )

    return {
        "vehicle": vehicle,
        "section_key": section_key,
        "status_key": status_key,
        "item_key": item_key,
        "item_label": item["label"],
        "old_rating": old_rating,
        "new_rating": new_rating,
        "status": status,
        "event": event,
        "team_note": team_note,
    }
