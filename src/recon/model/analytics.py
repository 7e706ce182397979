# SPDX-License-Identifier: MIT

from typing import Literal, Optional, TypedDict

from recon.model.entity_id import EntityId

EfficiencyTrend = Literal["improving", "declining", "stable"]
TopPerformerPeriod = Literal["week", "month"]


class CompletionEvent(TypedDict):
    """One recorded rating change. Immutable once created."""

    id: EntityId
    vehicle_id: EntityId
    vehicle_name: str  # e.g. "2023 Honda Accord"
    section: str
    section_name: str
    completed_by: str  # user initials
    completed_date: str  # YYYY-MM-DD, device-local
    timestamp: str  # ISO-8601
    item_name: Optional[str]
    old_rating: Optional[str]
    new_rating: Optional[str]


class DailyAnalytics(TypedDict):
    date: str  # YYYY-MM-DD
    total_completions: int
    completions_by_section: dict[str, int]
    completions_by_user: dict[str, int]
    vehicles_completed: list[EntityId]
    events: list[CompletionEvent]


class UserDailyAnalytics(TypedDict):
    date: str
    user_initials: str
    total_completions: int
    completions_by_section: dict[str, int]
    vehicles_worked_on: list[EntityId]
    events: list[CompletionEvent]


class DayCompletions(TypedDict):
    date: str
    completions: int


class WeekCompletions(TypedDict):
    week_start: str
    completions: int


class MonthCompletions(TypedDict):
    month: str
    completions: int


class Performer(TypedDict):
    user_initials: str
    completions: int


class Trends(TypedDict):
    # Percentage change from the previous period, None when it had no activity
    completions_growth: Optional[float]
    efficiency_trend: EfficiencyTrend


class UserWeeklyAnalytics(TypedDict):
    week_start: str  # Monday
    week_end: str
    user_initials: str
    total_completions: int
    average_completions_per_day: float
    most_productive_day: DayCompletions
    section_breakdown: dict[str, int]
    vehicles_worked_on: list[EntityId]
    daily_data: list[UserDailyAnalytics]


class UserMonthlyAnalytics(TypedDict):
    month: str  # YYYY-MM
    month_name: str  # e.g. "January 2024"
    user_initials: str
    total_completions: int
    average_completions_per_day: float
    total_working_days: int
    best_week: WeekCompletions
    section_breakdown: dict[str, int]
    vehicles_worked_on: list[EntityId]
    weekly_data: list[UserWeeklyAnalytics]
    trends: Trends


class UserYearlyAnalytics(TypedDict):
    year: str
    user_initials: str
    total_completions: int
    average_completions_per_month: float
    total_working_days: int
    best_month: MonthCompletions
    section_breakdown: dict[str, int]
    vehicles_worked_on: list[EntityId]
    monthly_data: list[MonthCompletions]
    trends: Trends


class WeeklyAnalytics(TypedDict):
    week_start: str
    week_end: str
    total_completions: int
    average_completions_per_day: float
    most_productive_day: DayCompletions
    top_performer: Optional[Performer]
    section_breakdown: dict[str, int]
    daily_data: list[DailyAnalytics]


class AnalyticsData(TypedDict):
    version: int  # write stamp, incremented on every save
    daily_analytics: dict[str, DailyAnalytics]  # [date]
    user_daily_analytics: dict[str, dict[str, UserDailyAnalytics]]  # [user][date]
    last_updated: str
