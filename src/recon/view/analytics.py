# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from recon.model.analytics import (
    DailyAnalytics,
    Performer,
    Trends,
    UserDailyAnalytics,
    UserMonthlyAnalytics,
    UserWeeklyAnalytics,
    UserYearlyAnalytics,
    WeeklyAnalytics,
)
from recon.time import date_from_str, date_to_display_str
from recon.view.header import header
from recon.view.util import format_counts


def _no_data(sub_header: str) -> None:
    header(sub_header)
    console = Console()
    console.print("[bright_black]no activity recorded[/bright_black]")


def _format_trends(trends: Trends) -> str:
    if trends["completions_growth"] is None:
        return trends["efficiency_trend"]
    return f"{trends['completions_growth']:+.1f}% ({trends['efficiency_trend']})"


def user_daily_view(
    user_initials: str, daily_data: list[UserDailyAnalytics]
) -> None:
    header(f"{user_initials} daily")

    daily_table = Table(box=box.SIMPLE)
    daily_table.add_column("date")
    daily_table.add_column("completions")
    daily_table.add_column("vehicles")
    daily_table.add_column("sections")

    for day in daily_data:
        daily_table.add_row(
            date_to_display_str(date_from_str(day["date"])),
            str(day["total_completions"]),
            str(len(day["vehicles_worked_on"])),
            format_counts(day["completions_by_section"]),
        )

    console = Console()
    console.print(daily_table)


def team_daily_view(daily_data: list[DailyAnalytics]) -> None:
    header("team daily")

    daily_table = Table(box=box.SIMPLE)
    daily_table.add_column("date")
    daily_table.add_column("completions")
    daily_table.add_column("by user")
    daily_table.add_column("sections")

    for day in daily_data:
        daily_table.add_row(
            date_to_display_str(date_from_str(day["date"])),
            str(day["total_completions"]),
            format_counts(day["completions_by_user"]),
            format_counts(day["completions_by_section"]),
        )

    console = Console()
    console.print(daily_table)


def user_week_view(user_initials: str, week: Optional[UserWeeklyAnalytics]) -> None:
    if week is None:
        _no_data(f"{user_initials} week")
        return
    header(f"{user_initials} week of {week['week_start']}")

    week_table = Table(box=box.SIMPLE)
    week_table.add_column("property")
    week_table.add_column("value")
    week_table.add_row("total", str(week["total_completions"]))
    week_table.add_row("per day", f"{week['average_completions_per_day']:.2f}")
    week_table.add_row(
        "best day",
        f"{week['most_productive_day']['date']} "
        f"({week['most_productive_day']['completions']})",
    )
    week_table.add_row("vehicles", str(len(week["vehicles_worked_on"])))
    week_table.add_row("sections", format_counts(week["section_breakdown"]))

    console = Console()
    console.print(week_table)
    user_daily_view(user_initials, week["daily_data"])


def team_week_view(week: Optional[WeeklyAnalytics]) -> None:
    if week is None:
        _no_data("team week")
        return
    header(f"team week of {week['week_start']}")

    week_table = Table(box=box.SIMPLE)
    week_table.add_column("property")
    week_table.add_column("value")
    week_table.add_row("total", str(week["total_completions"]))
    week_table.add_row("per day", f"{week['average_completions_per_day']:.2f}")
    week_table.add_row(
        "best day",
        f"{week['most_productive_day']['date']} "
        f"({week['most_productive_day']['completions']})",
    )
    if week["top_performer"] is not None:
        week_table.add_row(
            "top performer",
            f"{week['top_performer']['user_initials']} "
            f"({week['top_performer']['completions']})",
        )
    week_table.add_row("sections", format_counts(week["section_breakdown"]))

    console = Console()
    console.print(week_table)
    team_daily_view(week["daily_data"])


def user_month_view(user_initials: str, month: Optional[UserMonthlyAnalytics]) -> None:
    if month is None:
        _no_data(f"{user_initials} month")
        return
    header(f"{user_initials} {month['month_name']}")

    month_table = Table(box=box.SIMPLE)
    month_table.add_column("property")
    month_table.add_column("value")
    month_table.add_row("total", str(month["total_completions"]))
    month_table.add_row("working days", str(month["total_working_days"]))
    month_table.add_row("per working day", f"{month['average_completions_per_day']:.2f}")
    month_table.add_row(
        "best week",
        f"{month['best_week']['week_start']} ({month['best_week']['completions']})",
    )
    month_table.add_row("vehicles", str(len(month["vehicles_worked_on"])))
    month_table.add_row("sections", format_counts(month["section_breakdown"]))
    month_table.add_row("vs last month", _format_trends(month["trends"]))

    weeks_table = Table(box=box.SIMPLE)
    weeks_table.add_column("week")
    weeks_table.add_column("completions")
    for week in month["weekly_data"]:
        weeks_table.add_row(week["week_start"], str(week["total_completions"]))

    console = Console()
    console.print(month_table)
    console.print(weeks_table)


def user_year_view(user_initials: str, year: Optional[UserYearlyAnalytics]) -> None:
    if year is None:
        _no_data(f"{user_initials} year")
        return
    header(f"{user_initials} {year['year']}")

    year_table = Table(box=box.SIMPLE)
    year_table.add_column("property")
    year_table.add_column("value")
    year_table.add_row("total", str(year["total_completions"]))
    year_table.add_row("working days", str(year["total_working_days"]))
    year_table.add_row("per month", f"{year['average_completions_per_month']:.2f}")
    year_table.add_row(
        "best month",
        f"{year['best_month']['month']} ({year['best_month']['completions']})",
    )
    year_table.add_row("vehicles", str(len(year["vehicles_worked_on"])))
    year_table.add_row("sections", format_counts(year["section_breakdown"]))
    year_table.add_row("vs last year", _format_trends(year["trends"]))

    months_table = Table(box=box.SIMPLE)
    months_table.add_column("month")
    months_table.add_column("completions")
    for month in year["monthly_data"]:
        months_table.add_row(month["month"], str(month["completions"]))

    console = Console()
    console.print(year_table)
    console.print(months_table)


def users_view(users: list[str]) -> None:
    header("users")

    users_table = Table(box=box.SIMPLE)
    users_table.add_column("initials")
    for user_initials in users:
        users_table.add_row(user_initials)

    console = Console()
    console.print(users_table)


def top_performers_view(period: str, performers: list[Performer]) -> None:
    header(f"top performers ({period})")

    performers_table = Table(box=box.SIMPLE)
    performers_table.add_column("#")
    performers_table.add_column("initials")
    performers_table.add_column("completions")
    for rank, performer in enumerate(performers, 1):
        performers_table.add_row(
            str(rank), performer["user_initials"], str(performer["completions"])
        )

    console = Console()
    console.print(performers_table)
