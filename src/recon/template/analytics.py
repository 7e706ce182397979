# SPDX-License-Identifier: MIT

from recon.model.analytics import AnalyticsData, DailyAnalytics, UserDailyAnalytics
from recon.model.section import FIXED_SECTIONS
from recon.time import datetime_to_iso_str, now_utc


def get_section_counter_template() -> dict[str, int]:
    return {section: 0 for section in FIXED_SECTIONS}


def get_daily_analytics_template(date: str) -> DailyAnalytics:
    return {
        "date": date,
        "total_completions": 0,
        "completions_by_section": get_section_counter_template(),
        "completions_by_user": {},
        "vehicles_completed": [],
        "events": [],
    }


def get_user_daily_analytics_template(
    user_initials: str, date: str
) -> UserDailyAnalytics:
    return {
        "date": date,
        "user_initials": user_initials,
        "total_completions": 0,
        "completions_by_section": get_section_counter_template(),
        "vehicles_worked_on": [],
        "events": [],
    }


def get_analytics_data_template() -> AnalyticsData:
    return {
        "version": 0,
        "daily_analytics": {},
        "user_daily_analytics": {},
        "last_updated": datetime_to_iso_str(now_utc()),
    }
