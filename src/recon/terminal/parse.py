# SPDX-License-Identifier: MIT

import re
from typing import Optional

import pendulum
import typer


def parse_day(day_param: Optional[str]) -> Optional[pendulum.Date]:
    """
    Parse a local calendar day.

    Accepts YYYY-MM-DD, a relative day offset ("-1", "7"), "today"/"t" and
    "yesterday"/"y".
    """
    if day_param is None:
        return None

    day = day_param.strip()
    today = pendulum.today("local").date()

    if re.match(r"^\d{4}-\d{2}-\d{2}$", day):
        try:
            return pendulum.date(int(day[0:4]), int(day[5:7]), int(day[8:10]))
        except ValueError as e:
            raise typer.BadParameter(f"Invalid date: {e}")

    # Match numeric input for relative days (e.g., "1", "-1", "365")
    if re.match(r"^-?\d+$", day):
        return today.add(days=int(day))

    if day == "today" or day == "t":
        return today
    if day == "yesterday" or day == "y":
        return today.subtract(days=1)
    raise typer.BadParameter("Incorrect date format")


def parse_date(date_param: Optional[str]) -> Optional[pendulum.DateTime]:
    """Parse a local calendar day into the UTC instant at its local midnight."""
    day = parse_day(date_param)
    if day is None:
        return None
    return pendulum.datetime(day.year, day.month, day.day, tz="local").in_tz("UTC")
