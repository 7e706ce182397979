"""Unit tests for analytics recording and rollups."""
from __future__ import annotations

from copy import deepcopy

import pendulum
import pytest

from conftest import local_datetime
from recon.model.section import FIXED_SECTIONS
from recon.service.analytics import (
    apply_event,
    build_completion_event,
    calculate_user_monthly_analytics,
    get_all_users,
    get_current_week_analytics,
    get_recent_daily_analytics,
    get_top_performers,
    get_user_current_month_analytics,
    get_user_current_week_analytics,
    get_user_recent_daily_analytics,
    get_user_year_analytics,
    is_noop_change,
    record_task_update,
)
from recon.template.analytics import get_analytics_data_template


def record(repository, user, when, section="mechanical", vehicle_id="vehicle-1", **kwargs):
    """Record a not-checked to great change."""
    return record_task_update(
        vehicle_id,
        "2023 Honda Accord",
        section,
        user,
        kwargs.pop("item_name", "Engine Operation"),
        kwargs.pop("old_rating", "not-checked"),
        kwargs.pop("new_rating", "great"),
        repository=repository,
        now=when,
        **kwargs,
    )


@pytest.fixture
def jd_week(analytics_repository):
    """JD logs 3 events on Monday 2024-03-04 and 2 on Wednesday 2024-03-06."""
    for _ in range(3):
        record(analytics_repository, "JD", local_datetime(2024, 3, 4))
    for _ in range(2):
        record(analytics_repository, "JD", local_datetime(2024, 3, 6), section="cosmetic")
    return analytics_repository


class TestRecordTaskUpdate:
    """Test recording task updates."""

    def test_record_event(self, analytics_repository):
        """Test JD rating Engine Operation as needing attention on 2024-03-01."""
        event = record(
            analytics_repository,
            "JD",
            local_datetime(2024, 3, 1),
            vehicle_id="vehicle-7",
            new_rating="needs-attention",
        )

        assert event is not None
        assert event["completed_by"] == "JD"
        assert event["completed_date"] == "2024-03-01"
        assert event["section_name"] == "Mechanical"

        analytics = analytics_repository.get_analytics_data()
        daily = analytics["daily_analytics"]["2024-03-01"]
        assert daily["total_completions"] == 1
        assert daily["completions_by_section"]["mechanical"] == 1
        assert daily["completions_by_user"] == {"JD": 1}
        assert daily["events"] == [event]

        user_daily = analytics["user_daily_analytics"]["JD"]["2024-03-01"]
        assert user_daily["total_completions"] == 1
        assert user_daily["vehicles_worked_on"] == ["vehicle-7"]

    def test_persisted_and_notified(self, analytics_repository, store, notifier):
        """Test each recorded event is saved and announced once."""
        notified = []
        notifier.subscribe(notified.append)

        record(analytics_repository, "JD", local_datetime(2024, 3, 1))
        record(analytics_repository, "JD", local_datetime(2024, 3, 1))

        assert notified == ["analytics", "analytics"]
        assert "analytics" in store.values
        assert analytics_repository.get_analytics_data()["version"] == 2

    def test_initials_normalized(self, analytics_repository):
        """Test initials are trimmed and upper-cased."""
        event = record(analytics_repository, " jd ", local_datetime(2024, 3, 1))
        assert event is not None
        assert event["completed_by"] == "JD"
        assert get_all_users(analytics_repository.get_analytics_data()) == ["JD"]

    @pytest.mark.parametrize("initials", [None, "", "   "])
    def test_missing_initials_rejected(self, analytics_repository, store, initials):
        """Test updates without initials are not recorded."""
        assert record(analytics_repository, initials, local_datetime(2024, 3, 1)) is None
        assert store.values == {}

    @pytest.mark.parametrize(
        "old_rating,new_rating",
        [
            ("great", "great"),
            ("not-checked", "not-checked"),
            ("great", "not-checked"),
            ("needs-attention", "needs-attention"),
        ],
    )
    def test_noop_changes_skipped(self, analytics_repository, store, old_rating, new_rating):
        """Test no-op rating changes leave analytics untouched."""
        record(analytics_repository, "JD", local_datetime(2024, 3, 1))
        before = deepcopy(store.values)

        event = record(
            analytics_repository,
            "JD",
            local_datetime(2024, 3, 1),
            old_rating=old_rating,
            new_rating=new_rating,
        )

        assert event is None
        assert store.values == before
        assert analytics_repository.get_analytics_data()["daily_analytics"]["2024-03-01"][
            "total_completions"
        ] == 1

    def test_section_level_update_recorded(self, analytics_repository):
        """Test an update without ratings is never a no-op."""
        event = record(
            analytics_repository,
            "JD",
            local_datetime(2024, 3, 1),
            item_name=None,
            old_rating=None,
            new_rating=None,
        )
        assert event is not None
        assert not is_noop_change(None, None)

    def test_custom_section_counted(self, analytics_repository):
        """Test custom sections are counted under their own key."""
        record(analytics_repository, "JD", local_datetime(2024, 3, 1), section="undercarriage")

        daily = analytics_repository.get_analytics_data()["daily_analytics"]["2024-03-01"]
        assert daily["completions_by_section"]["undercarriage"] == 1
        for section in FIXED_SECTIONS:
            assert daily["completions_by_section"][section] == 0

    def test_vehicle_completed(self, analytics_repository):
        """Test completed vehicles are listed once on the day they complete."""
        record(analytics_repository, "JD", local_datetime(2024, 3, 1), vehicle_completed=True)
        record(analytics_repository, "AB", local_datetime(2024, 3, 1), vehicle_completed=True)

        daily = analytics_repository.get_analytics_data()["daily_analytics"]["2024-03-01"]
        assert daily["vehicles_completed"] == ["vehicle-1"]


class TestDailyConservation:
    """Test daily bucket counters stay consistent with their events."""

    def test_counters_match_events(self):
        """Test totals agree across sections, users and events."""
        analytics = get_analytics_data_template()
        when = local_datetime(2024, 3, 1)
        updates = [
            ("JD", "mechanical", "vehicle-1"),
            ("JD", "cosmetic", "vehicle-2"),
            ("AB", "cleaned", "vehicle-1"),
            ("AB", "paint-correction", "vehicle-3"),
            ("CK", "photos", "vehicle-2"),
        ]
        for user, section, vehicle_id in updates:
            apply_event(
                analytics,
                build_completion_event(
                    vehicle_id, "2023 Honda Accord", section, user, now=when
                ),
            )

        daily = analytics["daily_analytics"]["2024-03-01"]
        assert daily["total_completions"] == len(daily["events"]) == len(updates)
        assert sum(daily["completions_by_section"].values()) == len(updates)
        assert sum(daily["completions_by_user"].values()) == len(updates)

        jd = analytics["user_daily_analytics"]["JD"]["2024-03-01"]
        assert jd["total_completions"] == len(jd["events"]) == 2
        assert jd["vehicles_worked_on"] == ["vehicle-1", "vehicle-2"]


class TestRecentDailyAnalytics:
    """Test fixed-length daily windows."""

    @pytest.mark.parametrize("days", [1, 7, 10, 31])
    def test_fixed_length(self, jd_week, days):
        """Test exactly N chronological entries ending today."""
        today = pendulum.date(2024, 3, 10)
        daily_data = get_user_recent_daily_analytics(
            jd_week.get_analytics_data(), "JD", days, today
        )

        assert len(daily_data) == days
        assert daily_data[-1]["date"] == "2024-03-10"
        assert daily_data[0]["date"] == today.subtract(days=days - 1).format("YYYY-MM-DD")
        dates = [day["date"] for day in daily_data]
        assert dates == sorted(dates)

    def test_missing_days_zero_filled(self, jd_week):
        """Test days without activity are synthesized as empty entries."""
        daily_data = get_user_recent_daily_analytics(
            jd_week.get_analytics_data(), "JD", 3, pendulum.date(2024, 3, 6)
        )

        assert [day["total_completions"] for day in daily_data] == [3, 0, 2]
        empty_day = daily_data[1]
        assert empty_day["user_initials"] == "JD"
        assert empty_day["vehicles_worked_on"] == []
        assert empty_day["events"] == []
        assert sum(empty_day["completions_by_section"].values()) == 0

    def test_unknown_user(self, jd_week):
        """Test an unknown user gets a full window of zeros."""
        daily_data = get_user_recent_daily_analytics(
            jd_week.get_analytics_data(), "ZZ", 7, pendulum.date(2024, 3, 10)
        )
        assert len(daily_data) == 7
        assert all(day["total_completions"] == 0 for day in daily_data)

    def test_zero_and_negative_days(self, jd_week):
        """Test zero days is empty and negative days raise."""
        analytics = jd_week.get_analytics_data()
        today = pendulum.date(2024, 3, 10)
        assert get_user_recent_daily_analytics(analytics, "JD", 0, today) == []
        with pytest.raises(ValueError):
            get_user_recent_daily_analytics(analytics, "JD", -1, today)

    def test_read_does_not_mutate(self, jd_week):
        """Test queries leave the analytics untouched."""
        analytics = jd_week.get_analytics_data()
        before = deepcopy(analytics)

        daily_data = get_user_recent_daily_analytics(
            analytics, "JD", 7, pendulum.date(2024, 3, 10)
        )
        daily_data[0]["total_completions"] = 99
        get_recent_daily_analytics(analytics, 7, pendulum.date(2024, 3, 10))

        assert analytics == before

    def test_team_daily(self, jd_week):
        """Test the team-wide window."""
        daily_data = get_recent_daily_analytics(
            jd_week.get_analytics_data(), 7, pendulum.date(2024, 3, 10)
        )
        assert len(daily_data) == 7
        assert sum(day["total_completions"] for day in daily_data) == 5


class TestWeeklyAnalytics:
    """Test Monday-start weekly rollups."""

    def test_week_example(self, jd_week):
        """Test 3 events on Monday and 2 on Wednesday."""
        week = get_user_current_week_analytics(
            jd_week.get_analytics_data(), "JD", pendulum.date(2024, 3, 7)
        )

        assert week is not None
        assert week["week_start"] == "2024-03-04"
        assert week["week_end"] == "2024-03-10"
        assert week["total_completions"] == 5
        assert week["most_productive_day"] == {"date": "2024-03-04", "completions": 3}
        assert week["average_completions_per_day"] == pytest.approx(5 / 7)
        assert week["section_breakdown"]["mechanical"] == 3
        assert week["section_breakdown"]["cosmetic"] == 2
        assert week["vehicles_worked_on"] == ["vehicle-1"]
        assert len(week["daily_data"]) == 7

    def test_week_matches_daily_sum(self, jd_week):
        """Test the week total equals the sum of its seven daily totals."""
        analytics = jd_week.get_analytics_data()
        sunday = pendulum.date(2024, 3, 10)

        week = get_user_current_week_analytics(analytics, "JD", sunday)
        daily_data = get_user_recent_daily_analytics(analytics, "JD", 7, sunday)

        assert week is not None
        assert week["total_completions"] == sum(
            day["total_completions"] for day in daily_data
        )

    def test_most_productive_day_tie_keeps_first(self, analytics_repository):
        """Test ties go to the earliest day of the week."""
        record(analytics_repository, "JD", local_datetime(2024, 3, 5))
        record(analytics_repository, "JD", local_datetime(2024, 3, 8))

        week = get_user_current_week_analytics(
            analytics_repository.get_analytics_data(), "JD", pendulum.date(2024, 3, 8)
        )
        assert week is not None
        assert week["most_productive_day"]["date"] == "2024-03-05"

    def test_empty_week_absent(self, jd_week):
        """Test a week without activity returns None."""
        analytics = jd_week.get_analytics_data()
        assert get_user_current_week_analytics(analytics, "JD", pendulum.date(2024, 3, 12)) is None
        assert get_current_week_analytics(analytics, pendulum.date(2024, 3, 12)) is None

    def test_team_week(self, jd_week):
        """Test the team-wide week and its top performer."""
        record(jd_week, "AB", local_datetime(2024, 3, 8), section="photos")

        week = get_current_week_analytics(jd_week.get_analytics_data(), pendulum.date(2024, 3, 8))

        assert week is not None
        assert week["total_completions"] == 6
        assert week["top_performer"] == {"user_initials": "JD", "completions": 5}
        assert week["section_breakdown"]["photos"] == 1
        assert week["average_completions_per_day"] == pytest.approx(6 / 7)


class TestMonthlyAnalytics:
    """Test calendar month rollups."""

    @pytest.fixture
    def jd_month(self, jd_week):
        """Add 2 events on Friday 2024-03-01 to JD's week."""
        record(jd_week, "JD", local_datetime(2024, 3, 1), vehicle_id="vehicle-2")
        record(jd_week, "JD", local_datetime(2024, 3, 1), vehicle_id="vehicle-2")
        return jd_week

    def test_month(self, jd_month):
        """Test totals and the working-day average."""
        month = get_user_current_month_analytics(
            jd_month.get_analytics_data(), "JD", pendulum.date(2024, 3, 20)
        )

        assert month is not None
        assert month["month"] == "2024-03"
        assert month["month_name"] == "March 2024"
        assert month["total_completions"] == 7
        assert month["total_working_days"] == 3
        assert month["average_completions_per_day"] == pytest.approx(7 / 3)
        assert sorted(month["vehicles_worked_on"]) == ["vehicle-1", "vehicle-2"]

    def test_weekly_data(self, jd_month):
        """Test edge weeks only count days inside the month."""
        month = get_user_current_month_analytics(
            jd_month.get_analytics_data(), "JD", pendulum.date(2024, 3, 20)
        )

        assert month is not None
        weeks = month["weekly_data"]
        assert [week["week_start"] for week in weeks] == [
            "2024-02-26",
            "2024-03-04",
            "2024-03-11",
            "2024-03-18",
            "2024-03-25",
        ]
        assert [week["total_completions"] for week in weeks] == [2, 5, 0, 0, 0]
        assert sum(week["total_completions"] for week in weeks) == month["total_completions"]
        assert month["best_week"] == {"week_start": "2024-03-04", "completions": 5}

    def test_trends_without_previous_month(self, jd_month):
        """Test growth is absent when the previous month had no activity."""
        month = get_user_current_month_analytics(
            jd_month.get_analytics_data(), "JD", pendulum.date(2024, 3, 20)
        )

        assert month is not None
        assert month["trends"] == {"completions_growth": None, "efficiency_trend": "improving"}

    def test_trends_against_previous_month(self, jd_month):
        """Test growth and efficiency against February."""
        record(jd_month, "JD", local_datetime(2024, 2, 15))
        record(jd_month, "JD", local_datetime(2024, 2, 15))

        month = get_user_current_month_analytics(
            jd_month.get_analytics_data(), "JD", pendulum.date(2024, 3, 20)
        )

        assert month is not None
        assert month["trends"]["completions_growth"] == pytest.approx(250.0)
        assert month["trends"]["efficiency_trend"] == "improving"

    def test_declining_and_stable(self, analytics_repository):
        """Test the efficiency band around the previous month's average."""
        for _ in range(4):
            record(analytics_repository, "JD", local_datetime(2024, 2, 15))
        record(analytics_repository, "JD", local_datetime(2024, 3, 15))
        for _ in range(4):
            record(analytics_repository, "AB", local_datetime(2024, 2, 15))
            record(analytics_repository, "AB", local_datetime(2024, 3, 15))

        analytics = analytics_repository.get_analytics_data()
        jd = calculate_user_monthly_analytics(analytics, "JD", pendulum.date(2024, 3, 1))
        ab = calculate_user_monthly_analytics(analytics, "AB", pendulum.date(2024, 3, 1))

        assert jd["trends"]["efficiency_trend"] == "declining"
        assert jd["trends"]["completions_growth"] == pytest.approx(-75.0)
        assert ab["trends"] == {"completions_growth": 0.0, "efficiency_trend": "stable"}

    def test_empty_month_absent(self, jd_month):
        """Test a month without activity returns None."""
        assert (
            get_user_current_month_analytics(
                jd_month.get_analytics_data(), "JD", pendulum.date(2024, 4, 2)
            )
            is None
        )


class TestYearlyAnalytics:
    """Test calendar year rollups."""

    def test_year(self, jd_week):
        """Test the year rolls up every month."""
        record(jd_week, "JD", local_datetime(2024, 1, 10))

        year = get_user_year_analytics(
            jd_week.get_analytics_data(), "JD", pendulum.date(2024, 6, 1)
        )

        assert year is not None
        assert year["year"] == "2024"
        assert year["total_completions"] == 6
        assert year["total_working_days"] == 3
        assert len(year["monthly_data"]) == 12
        assert year["monthly_data"][0] == {"month": "2024-01", "completions": 1}
        assert year["best_month"] == {"month": "2024-03", "completions": 5}
        assert sum(month["completions"] for month in year["monthly_data"]) == 6
        assert year["average_completions_per_month"] == pytest.approx(6 / 12)
        assert year["trends"]["completions_growth"] is None

    def test_empty_year_absent(self, jd_week):
        """Test a year without activity returns None."""
        assert (
            get_user_year_analytics(jd_week.get_analytics_data(), "JD", pendulum.date(2023, 6, 1))
            is None
        )


class TestUsers:
    """Test user discovery."""

    def test_all_users_sorted(self, jd_week):
        """Test users are unique and sorted."""
        record(jd_week, "AB", local_datetime(2024, 3, 5))
        assert get_all_users(jd_week.get_analytics_data()) == ["AB", "JD"]

    def test_union_of_both_maps(self):
        """Test users only present in a daily bucket are included."""
        analytics = get_analytics_data_template()
        apply_event(
            analytics,
            build_completion_event("vehicle-1", "2023 Honda Accord", "photos", "JD"),
        )
        day = next(iter(analytics["daily_analytics"].values()))
        day["completions_by_user"]["MK"] = 2

        assert get_all_users(analytics) == ["JD", "MK"]

    def test_no_users(self):
        """Test empty analytics have no users."""
        assert get_all_users(get_analytics_data_template()) == []


class TestTopPerformers:
    """Test the rolling-window leaderboard."""

    @pytest.fixture
    def leaderboard(self, jd_week):
        """JD 5 this week, AB 1 this week, CK 5 a month back."""
        record(jd_week, "AB", local_datetime(2024, 3, 6))
        for _ in range(5):
            record(jd_week, "CK", local_datetime(2024, 2, 10))
        return jd_week.get_analytics_data()

    def test_week(self, leaderboard):
        """Test the trailing seven days."""
        assert get_top_performers(leaderboard, "week", 5, pendulum.date(2024, 3, 7)) == [
            {"user_initials": "JD", "completions": 5},
            {"user_initials": "AB", "completions": 1},
        ]

    def test_month_is_rolling(self, leaderboard):
        """Test the trailing thirty days reach back into February."""
        performers = get_top_performers(leaderboard, "month", 5, pendulum.date(2024, 3, 7))

        assert [performer["completions"] for performer in performers] == [5, 5, 1]
        # Equal totals keep the most recently active user first
        assert [performer["user_initials"] for performer in performers] == ["JD", "CK", "AB"]

    def test_window_edge(self, leaderboard):
        """Test the thirtieth day back is included and the thirty-first is not."""
        assert [
            performer["user_initials"]
            for performer in get_top_performers(leaderboard, "month", 5, pendulum.date(2024, 3, 10))
        ] == ["JD", "CK", "AB"]
        assert [
            performer["user_initials"]
            for performer in get_top_performers(leaderboard, "month", 5, pendulum.date(2024, 3, 11))
        ] == ["JD", "AB"]

    def test_limit(self, leaderboard):
        """Test the result is cut to the limit."""
        performers = get_top_performers(leaderboard, "month", 1, pendulum.date(2024, 3, 7))
        assert performers == [{"user_initials": "JD", "completions": 5}]

    def test_limit_zero_and_negative(self, leaderboard):
        """Test a zero limit is empty and a negative limit raises."""
        today = pendulum.date(2024, 3, 7)
        assert get_top_performers(leaderboard, "month", 0, today) == []
        with pytest.raises(ValueError):
            get_top_performers(leaderboard, "month", -1, today)

    def test_invalid_period(self, leaderboard):
        """Test unknown periods raise."""
        with pytest.raises(ValueError):
            get_top_performers(leaderboard, "year", 5, pendulum.date(2024, 3, 7))  # type: ignore[arg-type]
