# SPDX-License-Identifier: MIT

from typing import Optional

from recon.model.rating import RATING_LABELS, Rating
from recon.model.section import SectionStatus

STATUS_COLORS: dict[SectionStatus, str] = {
    "completed": "green",
    "pending": "yellow",
    "needs-attention": "red",
    "not-started": "bright_black",
}

RATING_COLORS: dict[Rating, str] = {
    "great": "green",
    "fair": "yellow",
    "needs-attention": "red",
    "not-checked": "bright_black",
}


def format_status(status: Optional[SectionStatus]) -> str:
    if status is None:
        return ""
    color = STATUS_COLORS[status]
    return f"[{color}]{status}[/{color}]"


def format_rating(rating: Rating) -> str:
    color = RATING_COLORS[rating]
    return f"[{color}]{RATING_LABELS[rating]}[/{color}]"


def format_percentage(value: float) -> str:
    return f"{round(value)}%"


def format_counts(counts: dict[str, int]) -> str:
    """Format non-zero counters as 'key: n' pairs."""
    return ", ".join(f"{key}: {count}" for key, count in counts.items() if count > 0)
