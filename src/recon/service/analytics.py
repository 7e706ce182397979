# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Optional

import pendulum

from recon.model.analytics import (
    AnalyticsData,
    CompletionEvent,
    DailyAnalytics,
    DayCompletions,
    EfficiencyTrend,
    MonthCompletions,
    Performer,
    TopPerformerPeriod,
    Trends,
    UserDailyAnalytics,
    UserMonthlyAnalytics,
    UserWeeklyAnalytics,
    UserYearlyAnalytics,
    WeekCompletions,
    WeeklyAnalytics,
)
from recon.model.entity_id import EntityId, generate_entity_id
from recon.model.rating import NOT_CHECKED
from recon.repository.analytics import ANALYTICS_REPO, AnalyticsRepository
from recon.service.status import get_section_display_name
from recon.template.analytics import (
    get_daily_analytics_template,
    get_section_counter_template,
    get_user_daily_analytics_template,
)
from recon.time import (
    date_to_str,
    datetime_to_iso_str,
    datetime_to_local_date_str,
    month_display_name,
    month_key,
    now_utc,
    today_local,
)

_LOGGER = logging.getLogger(__name__)

# Relative change of the per-working-day average treated as "stable"
EFFICIENCY_TREND_BAND = 0.05

TOP_PERFORMER_WINDOW_DAYS: dict[str, int] = {"week": 7, "month": 30}


# ─────────────────────────────────────────────────────────────
# Recording
# ─────────────────────────────────────────────────────────────


def normalize_initials(user_initials: Optional[str]) -> str:
    if user_initials is None:
        return ""
    return user_initials.strip().upper()


def is_noop_change(old_rating: Optional[str], new_rating: Optional[str]) -> bool:
    """
    A rating change is a no-op when nothing changed or when the item ends up
    not-checked. Section-level updates without ratings are never no-ops.
    """
    if new_rating is None:
        return False
    return new_rating == old_rating or new_rating == NOT_CHECKED


def build_completion_event(
    vehicle_id: EntityId,
    vehicle_name: str,
    section: str,
    user_initials: str,
    item_name: Optional[str] = None,
    old_rating: Optional[str] = None,
    new_rating: Optional[str] = None,
    now: Optional[pendulum.DateTime] = None,
) -> CompletionEvent:
    if now is None:
        now = now_utc()
    return {
        "id": generate_entity_id(),
        "vehicle_id": vehicle_id,
        "vehicle_name": vehicle_name,
        "section": section,
        "section_name": get_section_display_name(section),
        "completed_by": user_initials,
        "completed_date": datetime_to_local_date_str(now),
        "timestamp": datetime_to_iso_str(now),
        "item_name": item_name,
        "old_rating": old_rating,
        "new_rating": new_rating,
    }


def apply_event(
    analytics: AnalyticsData,
    event: CompletionEvent,
    vehicle_completed: bool = False,
) -> None:
    """Add an event to its day's team-wide bucket and the user's daily bucket."""
    date = event["completed_date"]
    user_initials = event["completed_by"]
    section = event["section"]

    if date not in analytics["daily_analytics"]:
        analytics["daily_analytics"][date] = get_daily_analytics_template(date)
    daily = analytics["daily_analytics"][date]
    daily["total_completions"] += 1
    daily["completions_by_section"][section] = (
        daily["completions_by_section"].get(section, 0) + 1
    )
    daily["completions_by_user"][user_initials] = (
        daily["completions_by_user"].get(user_initials, 0) + 1
    )
    daily["events"].append(event)
    if vehicle_completed and event["vehicle_id"] not in daily["vehicles_completed"]:
        daily["vehicles_completed"].append(event["vehicle_id"])

    user_days = analytics["user_daily_analytics"].setdefault(user_initials, {})
    if date not in user_days:
        user_days[date] = get_user_daily_analytics_template(user_initials, date)
    user_daily = user_days[date]
    user_daily["total_completions"] += 1
    user_daily["completions_by_section"][section] = (
        user_daily["completions_by_section"].get(section, 0) + 1
    )
    # Own copy so the saved YAML has no anchors between the two buckets
    user_daily["events"].append(deepcopy(event))
    if event["vehicle_id"] not in user_daily["vehicles_worked_on"]:
        user_daily["vehicles_worked_on"].append(event["vehicle_id"])


def record_task_update(
    vehicle_id: EntityId,
    vehicle_name: str,
    section: str,
    user_initials: Optional[str],
    item_name: Optional[str] = None,
    old_rating: Optional[str] = None,
    new_rating: Optional[str] = None,
    *,
    repository: AnalyticsRepository = ANALYTICS_REPO,
    vehicle_completed: bool = False,
    now: Optional[pendulum.DateTime] = None,
) -> Optional[CompletionEvent]:
    """
    Record one inspection task update and persist the analytics.

    Returns the recorded event, or None when the update was rejected (no
    initials) or skipped (no-op rating change). Write failures propagate as
    AnalyticsWriteError / StaleAnalyticsError.
    """
    initials = normalize_initials(user_initials)
    if initials == "":
        _LOGGER.warning(
            "rejected task update on %s/%s without user initials", vehicle_id, section
        )
        return None

    if is_noop_change(old_rating, new_rating):
        _LOGGER.debug(
            "skipped no-op rating change %s -> %s on %s", old_rating, new_rating, item_name
        )
        return None

    event = build_completion_event(
        vehicle_id,
        vehicle_name,
        section,
        initials,
        item_name,
        old_rating,
        new_rating,
        now,
    )
    repository.update(lambda analytics: apply_event(analytics, event, vehicle_completed))
    _LOGGER.info("recorded task update for %s on %s", initials, event["completed_date"])
    return event


# ─────────────────────────────────────────────────────────────
# Shared helpers
# ─────────────────────────────────────────────────────────────


def _dates(start: pendulum.Date, count: int) -> list[pendulum.Date]:
    return [start.add(days=offset) for offset in range(count)]


def _dates_between(start: pendulum.Date, end: pendulum.Date) -> list[pendulum.Date]:
    return _dates(start, (end - start).in_days() + 1)


def _user_day(
    analytics: AnalyticsData, user_initials: str, date: pendulum.Date
) -> UserDailyAnalytics:
    date_str = date_to_str(date)
    stored = analytics["user_daily_analytics"].get(user_initials, {}).get(date_str)
    if stored is None:
        return get_user_daily_analytics_template(user_initials, date_str)
    return deepcopy(stored)


def _day(analytics: AnalyticsData, date: pendulum.Date) -> DailyAnalytics:
    date_str = date_to_str(date)
    stored = analytics["daily_analytics"].get(date_str)
    if stored is None:
        return get_daily_analytics_template(date_str)
    return deepcopy(stored)


def _add_counts(target: dict[str, int], source: dict[str, int]) -> None:
    for key, count in source.items():
        target[key] = target.get(key, 0) + count


def _add_unique(target: list[EntityId], source: list[EntityId]) -> None:
    for vehicle_id in source:
        if vehicle_id not in target:
            target.append(vehicle_id)


def _most_productive_day(
    days: list[UserDailyAnalytics] | list[DailyAnalytics],
) -> DayCompletions:
    # Strictly greater keeps the first day on ties
    best: DayCompletions = {"date": days[0]["date"], "completions": 0}
    for day in days:
        if day["total_completions"] > best["completions"]:
            best = {"date": day["date"], "completions": day["total_completions"]}
    return best


def _trends(
    total: int,
    previous_total: int,
    average: float,
    previous_average: float,
) -> Trends:
    completions_growth: Optional[float] = None
    if previous_total > 0:
        completions_growth = (total - previous_total) / previous_total * 100

    efficiency_trend: EfficiencyTrend = "stable"
    if previous_average == 0:
        if average > 0:
            efficiency_trend = "improving"
    else:
        change = (average - previous_average) / previous_average
        if change > EFFICIENCY_TREND_BAND:
            efficiency_trend = "improving"
        elif change < -EFFICIENCY_TREND_BAND:
            efficiency_trend = "declining"

    return {
        "completions_growth": completions_growth,
        "efficiency_trend": efficiency_trend,
    }


# ─────────────────────────────────────────────────────────────
# Daily
# ─────────────────────────────────────────────────────────────


def get_user_recent_daily_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    days: int = 7,
    today: Optional[pendulum.Date] = None,
) -> list[UserDailyAnalytics]:
    """
    Exactly `days` entries, oldest to newest, ending today. Days without
    activity are returned as zero-valued entries.
    """
    if days < 0:
        raise ValueError(f"days must not be negative, got {days}")
    if today is None:
        today = today_local()
    return [
        _user_day(analytics, user_initials, date)
        for date in _dates(today.subtract(days=days - 1), days)
    ]


def get_recent_daily_analytics(
    analytics: AnalyticsData,
    days: int = 7,
    today: Optional[pendulum.Date] = None,
) -> list[DailyAnalytics]:
    """Team-wide counterpart of get_user_recent_daily_analytics."""
    if days < 0:
        raise ValueError(f"days must not be negative, got {days}")
    if today is None:
        today = today_local()
    return [_day(analytics, date) for date in _dates(today.subtract(days=days - 1), days)]


# ─────────────────────────────────────────────────────────────
# Weekly
# ─────────────────────────────────────────────────────────────


def calculate_user_weekly_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    week_start: pendulum.Date,
    within: Optional[tuple[pendulum.Date, pendulum.Date]] = None,
) -> UserWeeklyAnalytics:
    """
    Summarize the Monday-start week beginning at `week_start`.

    When `within` is given only the days inside that (start, end) range are
    counted, which is how a month splits its edge weeks.
    """
    week_end = week_start.add(days=6)
    dates = _dates(week_start, 7)
    if within is not None:
        dates = [date for date in dates if within[0] <= date <= within[1]]

    daily_data = [_user_day(analytics, user_initials, date) for date in dates]
    section_breakdown = get_section_counter_template()
    vehicles_worked_on: list[EntityId] = []
    total_completions = 0
    for day in daily_data:
        total_completions += day["total_completions"]
        _add_counts(section_breakdown, day["completions_by_section"])
        _add_unique(vehicles_worked_on, day["vehicles_worked_on"])

    return {
        "week_start": date_to_str(week_start),
        "week_end": date_to_str(week_end),
        "user_initials": user_initials,
        "total_completions": total_completions,
        # Flat average over the whole week, not only the days worked
        "average_completions_per_day": total_completions / 7,
        "most_productive_day": _most_productive_day(daily_data),
        "section_breakdown": section_breakdown,
        "vehicles_worked_on": vehicles_worked_on,
        "daily_data": daily_data,
    }


def get_user_current_week_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    today: Optional[pendulum.Date] = None,
) -> Optional[UserWeeklyAnalytics]:
    if today is None:
        today = today_local()
    week = calculate_user_weekly_analytics(
        analytics, user_initials, today.start_of("week")
    )
    if week["total_completions"] == 0:
        return None
    return week


def get_current_week_analytics(
    analytics: AnalyticsData,
    today: Optional[pendulum.Date] = None,
) -> Optional[WeeklyAnalytics]:
    """Team-wide summary of the current Monday-start week."""
    if today is None:
        today = today_local()
    week_start = today.start_of("week")

    daily_data = [_day(analytics, date) for date in _dates(week_start, 7)]
    section_breakdown = get_section_counter_template()
    user_totals: dict[str, int] = {}
    total_completions = 0
    for day in daily_data:
        total_completions += day["total_completions"]
        _add_counts(section_breakdown, day["completions_by_section"])
        _add_counts(user_totals, day["completions_by_user"])

    if total_completions == 0:
        return None

    top_performer: Optional[Performer] = None
    for user_initials, completions in user_totals.items():
        if top_performer is None or completions > top_performer["completions"]:
            top_performer = {"user_initials": user_initials, "completions": completions}

    return {
        "week_start": date_to_str(week_start),
        "week_end": date_to_str(week_start.add(days=6)),
        "total_completions": total_completions,
        "average_completions_per_day": total_completions / 7,
        "most_productive_day": _most_productive_day(daily_data),
        "top_performer": top_performer,
        "section_breakdown": section_breakdown,
        "daily_data": daily_data,
    }


# ─────────────────────────────────────────────────────────────
# Monthly
# ─────────────────────────────────────────────────────────────


def _user_period_totals(
    analytics: AnalyticsData,
    user_initials: str,
    start: pendulum.Date,
    end: pendulum.Date,
) -> tuple[int, int]:
    """Return (completions, working days) for the inclusive date range."""
    total_completions = 0
    working_days = 0
    for date in _dates_between(start, end):
        day = _user_day(analytics, user_initials, date)
        if day["total_completions"] > 0:
            working_days += 1
            total_completions += day["total_completions"]
    return total_completions, working_days


def calculate_user_monthly_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    month_start: pendulum.Date,
) -> UserMonthlyAnalytics:
    month_start = month_start.start_of("month")
    month_end = month_start.end_of("month")

    total_completions = 0
    working_days = 0
    section_breakdown = get_section_counter_template()
    vehicles_worked_on: list[EntityId] = []
    for date in _dates_between(month_start, month_end):
        day = _user_day(analytics, user_initials, date)
        if day["total_completions"] > 0:
            working_days += 1
            total_completions += day["total_completions"]
            _add_counts(section_breakdown, day["completions_by_section"])
            _add_unique(vehicles_worked_on, day["vehicles_worked_on"])

    weekly_data: list[UserWeeklyAnalytics] = []
    week_start = month_start.start_of("week")
    while week_start <= month_end:
        weekly_data.append(
            calculate_user_weekly_analytics(
                analytics, user_initials, week_start, within=(month_start, month_end)
            )
        )
        week_start = week_start.add(days=7)

    best_week: WeekCompletions = {
        "week_start": weekly_data[0]["week_start"],
        "completions": 0,
    }
    for week in weekly_data:
        if week["total_completions"] > best_week["completions"]:
            best_week = {
                "week_start": week["week_start"],
                "completions": week["total_completions"],
            }

    # Average over days with activity, unlike the flat weekly average
    average = total_completions / working_days if working_days > 0 else 0.0

    previous_start = month_start.subtract(months=1)
    previous_total, previous_working_days = _user_period_totals(
        analytics, user_initials, previous_start, previous_start.end_of("month")
    )
    previous_average = (
        previous_total / previous_working_days if previous_working_days > 0 else 0.0
    )

    return {
        "month": month_key(month_start),
        "month_name": month_display_name(month_start),
        "user_initials": user_initials,
        "total_completions": total_completions,
        "average_completions_per_day": average,
        "total_working_days": working_days,
        "best_week": best_week,
        "section_breakdown": section_breakdown,
        "vehicles_worked_on": vehicles_worked_on,
        "weekly_data": weekly_data,
        "trends": _trends(total_completions, previous_total, average, previous_average),
    }


def get_user_current_month_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    today: Optional[pendulum.Date] = None,
) -> Optional[UserMonthlyAnalytics]:
    if today is None:
        today = today_local()
    month = calculate_user_monthly_analytics(analytics, user_initials, today)
    if month["total_completions"] == 0:
        return None
    return month


# ─────────────────────────────────────────────────────────────
# Yearly
# ─────────────────────────────────────────────────────────────


def get_user_year_analytics(
    analytics: AnalyticsData,
    user_initials: str,
    today: Optional[pendulum.Date] = None,
) -> Optional[UserYearlyAnalytics]:
    if today is None:
        today = today_local()
    year_start = today.start_of("year")

    total_completions = 0
    working_days = 0
    section_breakdown = get_section_counter_template()
    vehicles_worked_on: list[EntityId] = []
    monthly_data: list[MonthCompletions] = []
    for month_offset in range(12):
        month_start = year_start.add(months=month_offset)
        month_completions = 0
        for date in _dates_between(month_start, month_start.end_of("month")):
            day = _user_day(analytics, user_initials, date)
            if day["total_completions"] > 0:
                working_days += 1
                month_completions += day["total_completions"]
                _add_counts(section_breakdown, day["completions_by_section"])
                _add_unique(vehicles_worked_on, day["vehicles_worked_on"])
        total_completions += month_completions
        monthly_data.append(
            {"month": month_key(month_start), "completions": month_completions}
        )

    if total_completions == 0:
        return None

    best_month: MonthCompletions = {"month": monthly_data[0]["month"], "completions": 0}
    for month in monthly_data:
        if month["completions"] > best_month["completions"]:
            best_month = month

    previous_start = year_start.subtract(years=1)
    previous_total, previous_working_days = _user_period_totals(
        analytics, user_initials, previous_start, previous_start.end_of("year")
    )
    average_per_day = total_completions / working_days
    previous_average_per_day = (
        previous_total / previous_working_days if previous_working_days > 0 else 0.0
    )

    return {
        "year": year_start.format("YYYY"),
        "user_initials": user_initials,
        "total_completions": total_completions,
        "average_completions_per_month": total_completions / 12,
        "total_working_days": working_days,
        "best_month": best_month,
        "section_breakdown": section_breakdown,
        "vehicles_worked_on": vehicles_worked_on,
        "monthly_data": monthly_data,
        "trends": _trends(
            total_completions,
            previous_total,
            average_per_day,
            previous_average_per_day,
        ),
    }


# ─────────────────────────────────────────────────────────────
# Users and leaderboard
# ─────────────────────────────────────────────────────────────


def get_all_users(analytics: AnalyticsData) -> list[str]:
    users: set[str] = set(analytics["user_daily_analytics"].keys())
    for day in analytics["daily_analytics"].values():
        users.update(day["completions_by_user"].keys())
    return sorted(users)


def get_top_performers(
    analytics: AnalyticsData,
    period: TopPerformerPeriod = "week",
    limit: int = 5,
    today: Optional[pendulum.Date] = None,
) -> list[Performer]:
    """
    Rank users over the trailing 7 ("week") or 30 ("month") calendar days,
    including today. Equal totals keep the order in which users were first
    seen, scanning from today backwards.
    """
    if period not in TOP_PERFORMER_WINDOW_DAYS:
        raise ValueError(f"Invalid period: {period}. Valid options: week, month")
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")
    if today is None:
        today = today_local()

    user_totals: dict[str, int] = {}
    for offset in range(TOP_PERFORMER_WINDOW_DAYS[period]):
        date_str = date_to_str(today.subtract(days=offset))
        day = analytics["daily_analytics"].get(date_str)
        if day is not None:
            _add_counts(user_totals, day["completions_by_user"])

    performers: list[Performer] = [
        {"user_initials": user_initials, "completions": completions}
        for user_initials, completions in user_totals.items()
    ]
    performers.sort(key=lambda performer: performer["completions"], reverse=True)
    return performers[:limit]
