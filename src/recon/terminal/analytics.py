# SPDX-License-Identifier: MIT

from typing import Annotated, Optional, cast

import typer

from recon.model.analytics import TopPerformerPeriod
from recon.repository.analytics import ANALYTICS_REPO
from recon.repository.configuration import CONFIGURATION_REPO
from recon.service.analytics import (
    TOP_PERFORMER_WINDOW_DAYS,
    get_all_users,
    get_current_week_analytics,
    get_recent_daily_analytics,
    get_top_performers,
    get_user_current_month_analytics,
    get_user_current_week_analytics,
    get_user_recent_daily_analytics,
    get_user_year_analytics,
    normalize_initials,
)
from recon.terminal.custom_typer import AliasedTyperGroup
from recon.terminal.parse import parse_day
from recon.view import analytics as analytics_report

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)

DateOption = Annotated[
    Optional[str],
    typer.Option(
        "--date",
        "-d",
        help="Report as of this day (YYYY-MM-DD, offset, today, yesterday)",
    ),
]


@app.command("daily, d", no_args_is_help=True)
def daily(
    user: str,
    days: Annotated[Optional[int], typer.Option("--days", "-n")] = None,
    date: DateOption = None,
) -> None:
    """A user's completions for each of the last N days."""
    if days is None:
        days = CONFIGURATION_REPO.get_config()["recent_days"]
    if days < 1:
        typer.echo("--days must be at least 1")
        raise typer.Exit(1)

    user_initials = normalize_initials(user)
    daily_data = get_user_recent_daily_analytics(
        ANALYTICS_REPO.get_analytics_data(), user_initials, days, parse_day(date)
    )
    analytics_report.user_daily_view(user_initials, daily_data)


@app.command("week, w", no_args_is_help=True)
def week(user: str, date: DateOption = None) -> None:
    """A user's current Monday-start week."""
    user_initials = normalize_initials(user)
    analytics_report.user_week_view(
        user_initials,
        get_user_current_week_analytics(
            ANALYTICS_REPO.get_analytics_data(), user_initials, parse_day(date)
        ),
    )


@app.command("month, m", no_args_is_help=True)
def month(user: str, date: DateOption = None) -> None:
    """A user's current calendar month."""
    user_initials = normalize_initials(user)
    analytics_report.user_month_view(
        user_initials,
        get_user_current_month_analytics(
            ANALYTICS_REPO.get_analytics_data(), user_initials, parse_day(date)
        ),
    )


@app.command("year, y", no_args_is_help=True)
def year(user: str, date: DateOption = None) -> None:
    """A user's current calendar year."""
    user_initials = normalize_initials(user)
    analytics_report.user_year_view(
        user_initials,
        get_user_year_analytics(
            ANALYTICS_REPO.get_analytics_data(), user_initials, parse_day(date)
        ),
    )


@app.command("team, t")
def team(
    days: Annotated[Optional[int], typer.Option("--days", "-n")] = None,
    date: DateOption = None,
) -> None:
    """Team-wide summary of the current week and the last N days."""
    if days is None:
        days = CONFIGURATION_REPO.get_config()["recent_days"]
    if days < 1:
        typer.echo("--days must be at least 1")
        raise typer.Exit(1)
    analytics = ANALYTICS_REPO.get_analytics_data()
    today = parse_day(date)

    analytics_report.team_week_view(get_current_week_analytics(analytics, today))
    analytics_report.team_daily_view(get_recent_daily_analytics(analytics, days, today))


@app.command("users, u")
def users() -> None:
    """Everyone who has recorded a task update."""
    analytics_report.users_view(get_all_users(ANALYTICS_REPO.get_analytics_data()))


@app.command("top, tp")
def top(
    period: Annotated[
        str, typer.Option("--period", "-p", help="week (7 days) or month (30 days)")
    ] = "week",
    limit: Annotated[Optional[int], typer.Option("--limit", "-l")] = None,
    date: DateOption = None,
) -> None:
    """Leaderboard over a rolling window."""
    if period not in TOP_PERFORMER_WINDOW_DAYS:
        typer.echo(f"Invalid period: {period}. Valid options: week, month")
        raise typer.Exit(1)
    if limit is None:
        limit = CONFIGURATION_REPO.get_config()["top_performers_limit"]
    if limit < 1:
        typer.echo("--limit must be at least 1")
        raise typer.Exit(1)

    performers = get_top_performers(
        ANALYTICS_REPO.get_analytics_data(),
        cast(TopPerformerPeriod, period),
        limit,
        parse_day(date),
    )
    analytics_report.top_performers_view(period, performers)
