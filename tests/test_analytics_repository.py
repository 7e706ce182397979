"""Unit tests for analytics persistence."""
from __future__ import annotations

import pytest
from yaml import safe_dump, safe_load

from conftest import local_datetime
from recon.notify import ChangeNotifier
from recon.repository.analytics import (
    AnalyticsRepository,
    AnalyticsWriteError,
    StaleAnalyticsError,
)
from recon.repository.store import FileStore, InMemoryStore
from recon.service.analytics import get_all_users, record_task_update


class FlakyStore(InMemoryStore):
    """In-memory store whose writes fail while `fail` is set."""

    def __init__(self):
        super().__init__()
        self.fail = True

    def set(self, key, value):
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)


def record(repository, user="JD", day=1):
    return record_task_update(
        "vehicle-1",
        "2023 Honda Accord",
        "mechanical",
        user,
        "Engine Operation",
        "not-checked",
        "great",
        repository=repository,
        now=local_datetime(2024, 3, day),
    )


def total_completions(repository, date="2024-03-01"):
    return repository.get_analytics_data()["daily_analytics"][date]["total_completions"]


class TestLoading:
    """Test loading persisted analytics."""

    def test_missing_blob_starts_empty(self, analytics_repository):
        """Test a fresh store yields an empty analytics blob."""
        analytics = analytics_repository.get_analytics_data()
        assert analytics["version"] == 0
        assert analytics["daily_analytics"] == {}
        assert analytics["user_daily_analytics"] == {}

    @pytest.mark.parametrize(
        "raw",
        [
            "{ daily_analytics: [unclosed",
            "- just\n- a list\n",
            "daily_analytics: 12\n",
            "user_daily_analytics:\n  JD: not-a-map\n",
            "version: latest\n",
            "daily_analytics:\n  '2024-03-01': 5\n",
            "daily_analytics:\n  '2024-03-01': {date: '2024-03-01'}\n",
            "user_daily_analytics:\n  JD:\n    '2024-03-01': [1]\n",
        ],
    )
    def test_malformed_blob_falls_back(self, raw):
        """Test corrupt or unexpected data never reaches the caller."""
        repository = AnalyticsRepository(store=InMemoryStore({"analytics": raw}))

        analytics = repository.get_analytics_data()

        assert analytics["version"] == 0
        assert analytics["daily_analytics"] == {}
        assert analytics["user_daily_analytics"] == {}

    def test_malformed_days_dropped(self, analytics_repository, store):
        """Test bad day entries are dropped while valid history is kept."""
        record(analytics_repository)
        data = safe_load(store.values["analytics"])
        data["daily_analytics"]["2024-03-02"] = 5
        data["user_daily_analytics"]["JD"]["2024-03-02"] = [1]
        data["user_daily_analytics"]["AB"] = {"2024-03-02": {"total_completions": "many"}}

        repository = AnalyticsRepository(store=InMemoryStore({"analytics": safe_dump(data)}))
        analytics = repository.get_analytics_data()

        assert list(analytics["daily_analytics"].keys()) == ["2024-03-01"]
        assert list(analytics["user_daily_analytics"]["JD"].keys()) == ["2024-03-01"]
        assert get_all_users(analytics) == ["JD"]

        record(repository, day=2)
        assert total_completions(repository, "2024-03-02") == 1

    def test_missing_fields_migrated(self):
        """Test older blobs without a version stamp still load."""
        repository = AnalyticsRepository(
            store=InMemoryStore({"analytics": "daily_analytics: {}\n"})
        )

        analytics = repository.get_analytics_data()

        assert analytics["version"] == 0
        assert analytics["user_daily_analytics"] == {}
        assert "last_updated" in analytics

    def test_round_trip(self, analytics_repository, store):
        """Test a second repository on the same store sees saved events."""
        event = record(analytics_repository)

        reloaded = AnalyticsRepository(store=store)

        assert reloaded.get_analytics_data() == analytics_repository.get_analytics_data()
        assert reloaded.get_analytics_data()["daily_analytics"]["2024-03-01"]["events"] == [
            event
        ]

    def test_get_returns_copy(self, analytics_repository):
        """Test callers cannot mutate the cached analytics."""
        record(analytics_repository)
        analytics_repository.get_analytics_data()["daily_analytics"].clear()
        assert total_completions(analytics_repository) == 1


class TestSaving:
    """Test optimistic concurrency and write failures."""

    def test_stale_write_rejected(self, store):
        """Test a writer holding an outdated copy cannot overwrite newer data."""
        first = AnalyticsRepository(store=store)
        second = AnalyticsRepository(store=store)
        second.get_analytics_data()

        record(first)

        with pytest.raises(StaleAnalyticsError):
            record(second, user="AB")

        reloaded = AnalyticsRepository(store=store)
        assert reloaded.get_analytics_data()["daily_analytics"]["2024-03-01"][
            "completions_by_user"
        ] == {"JD": 1}

    def test_reload_after_stale_write(self, store):
        """Test reloading picks up the newer data and allows saving again."""
        first = AnalyticsRepository(store=store)
        second = AnalyticsRepository(store=store)
        second.get_analytics_data()
        record(first)
        with pytest.raises(StaleAnalyticsError):
            record(second, user="AB")

        second.reload()
        record(second, user="AB")

        assert second.get_analytics_data()["version"] == 2
        assert total_completions(AnalyticsRepository(store=store)) == 2

    def test_write_failure_surfaces(self):
        """Test write failures raise and keep the in-memory change."""
        store = FlakyStore()
        notifier = ChangeNotifier()
        notified = []
        notifier.subscribe(notified.append)
        repository = AnalyticsRepository(store=store, notifier=notifier)

        with pytest.raises(AnalyticsWriteError):
            record(repository)

        assert store.values == {}
        assert notified == []
        assert total_completions(repository) == 1
        assert repository.get_analytics_data()["version"] == 0

        store.fail = False
        record(repository)

        assert notified == ["analytics"]
        assert total_completions(AnalyticsRepository(store=store)) == 2


class TestNotifier:
    """Test change notification."""

    def test_unsubscribe(self, analytics_repository, notifier):
        """Test listeners stop receiving notifications once removed."""
        notified = []
        unsubscribe = notifier.subscribe(notified.append)

        record(analytics_repository)
        unsubscribe()
        record(analytics_repository)

        assert notified == ["analytics"]

    def test_unsubscribe_while_notifying(self):
        """Test a listener may remove itself during emit."""
        notifier = ChangeNotifier()
        notified = []

        def once(key):
            notified.append(key)
            unsubscribe()

        unsubscribe = notifier.subscribe(once)
        notifier.subscribe(notified.append)

        notifier.emit("analytics")
        notifier.emit("analytics")

        assert notified == ["analytics", "analytics", "analytics"]


class TestFileStore:
    """Test the file backed store."""

    def test_get_and_set(self, tmp_path):
        """Test values are written to <key>.yaml."""
        store = FileStore(tmp_path / "data")

        assert store.get("analytics") is None
        store.set("analytics", "version: 1\n")

        assert (tmp_path / "data" / "analytics.yaml").read_text() == "version: 1\n"
        assert store.get("analytics") == "version: 1\n"

    def test_repository_on_file_store(self, tmp_path):
        """Test analytics persist to disk."""
        repository = AnalyticsRepository(store=FileStore(tmp_path))
        record(repository)

        assert (tmp_path / "analytics.yaml").is_file()
        assert total_completions(AnalyticsRepository(store=FileStore(tmp_path))) == 1
