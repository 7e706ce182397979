# SPDX-License-Identifier: MIT

from typing import Literal, get_args

Rating = Literal["great", "fair", "needs-attention", "not-checked"]

RATINGS: tuple[Rating, ...] = get_args(Rating)

NOT_CHECKED: Rating = "not-checked"

RATING_LABELS: dict[Rating, str] = {
    "great": "Great",
    "fair": "Fair",
    "needs-attention": "Needs Attention",
    "not-checked": "Not Checked",
}
