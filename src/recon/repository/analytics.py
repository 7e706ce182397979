# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Any, Callable, Optional, cast

from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from recon import configuration, time
from recon.model.analytics import AnalyticsData
from recon.notify import ChangeNotifier
from recon.repository.store import FileStore, KeyValueStore
from recon.template.analytics import get_analytics_data_template

_LOGGER = logging.getLogger(__name__)

# Expected type of every field of a stored day bucket
DAILY_FIELDS: dict[str, type] = {
    "date": str,
    "total_completions": int,
    "completions_by_section": dict,
    "completions_by_user": dict,
    "vehicles_completed": list,
    "events": list,
}
USER_DAILY_FIELDS: dict[str, type] = {
    "date": str,
    "user_initials": str,
    "total_completions": int,
    "completions_by_section": dict,
    "vehicles_worked_on": list,
    "events": list,
}


class AnalyticsWriteError(Exception):
    """Raised when the analytics blob could not be written to storage."""

    pass


class StaleAnalyticsError(Exception):
    """Raised when another writer saved the analytics blob since it was loaded."""

    pass


class AnalyticsRepository:
    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        notifier: Optional[ChangeNotifier] = None,
        key: str = configuration.ANALYTICS_STORAGE_KEY,
    ) -> None:
        self._store: KeyValueStore = store if store is not None else FileStore()
        self.notifier = notifier if notifier is not None else ChangeNotifier()
        self.key = key
        self._analytics_data: Optional[AnalyticsData] = None

    @property
    def analytics_data(self) -> AnalyticsData:
        if self._analytics_data is None:
            self.__load_data()
        if self._analytics_data is None:
            raise ValueError()
        return self._analytics_data

    def __load_data(self) -> None:
        self._analytics_data = self.__parse(self._store.get(self.key))

    def __parse(self, raw: Optional[str]) -> AnalyticsData:
        if raw is None:
            return get_analytics_data_template()

        try:
            data = load(raw, Loader=Loader)
        except YAMLError as e:
            _LOGGER.error("analytics data is not valid YAML, starting empty: %s", e)
            return get_analytics_data_template()

        if not self.__has_valid_shape(data):
            _LOGGER.error("analytics data has an unexpected shape, starting empty")
            return get_analytics_data_template()

        # Migration: fill in fields written by older versions
        if "version" not in data:
            data["version"] = 0
        if "daily_analytics" not in data:
            data["daily_analytics"] = {}
        if "user_daily_analytics" not in data:
            data["user_daily_analytics"] = {}
        if "last_updated" not in data:
            data["last_updated"] = time.datetime_to_iso_str(time.now_utc())

        self.__drop_invalid_days(data)

        return cast(AnalyticsData, data)

    def __drop_invalid_days(self, data: dict[str, Any]) -> None:
        daily_analytics = data["daily_analytics"]
        for date in list(daily_analytics.keys()):
            if not self.__is_valid_day(daily_analytics[date], DAILY_FIELDS):
                _LOGGER.error("dropping malformed daily analytics for %s", date)
                del daily_analytics[date]

        user_daily_analytics = data["user_daily_analytics"]
        for user_initials in list(user_daily_analytics.keys()):
            user_days = user_daily_analytics[user_initials]
            for date in list(user_days.keys()):
                if not self.__is_valid_day(user_days[date], USER_DAILY_FIELDS):
                    _LOGGER.error(
                        "dropping malformed analytics for %s on %s", user_initials, date
                    )
                    del user_days[date]
            if len(user_days) == 0:
                del user_daily_analytics[user_initials]

    def __is_valid_day(self, day: Any, fields: dict[str, type]) -> bool:
        if not isinstance(day, dict):
            return False
        return all(
            isinstance(day.get(field), field_type) for field, field_type in fields.items()
        )

    def __has_valid_shape(self, data: Any) -> bool:
        if not isinstance(data, dict):
            return False
        if not isinstance(data.get("version", 0), int):
            return False
        for field in ("daily_analytics", "user_daily_analytics"):
            if not isinstance(data.get(field, {}), dict):
                return False
        for user_days in data.get("user_daily_analytics", {}).values():
            if not isinstance(user_days, dict):
                return False
        return True

    def __stored_version(self) -> int:
        return self.__parse(self._store.get(self.key))["version"]

    def __save_data(self) -> None:
        analytics_data = self.analytics_data

        stored_version = self.__stored_version()
        if stored_version != analytics_data["version"]:
            raise StaleAnalyticsError(
                f"{AnalyticsRepository.__name__}: stored analytics are at version "
                f"{stored_version} but version {analytics_data['version']} was loaded"
            )

        analytics_data["version"] += 1
        try:
            self._store.set(self.key, dump(analytics_data, Dumper=Dumper))
        except OSError as e:
            # Keep the in-memory change, the next successful save will carry it
            analytics_data["version"] -= 1
            raise AnalyticsWriteError(
                f"could not write analytics to storage key {self.key}: {e}"
            ) from e

    def get_analytics_data(self) -> AnalyticsData:
        return deepcopy(self.analytics_data)

    def update(self, mutate: Callable[[AnalyticsData], None]) -> None:
        """
        Apply a mutation to the in-memory analytics, persist the whole blob
        and notify listeners.
        """
        mutate(self.analytics_data)
        self.analytics_data["last_updated"] = time.datetime_to_iso_str(time.now_utc())
        self.__save_data()
        self.notifier.emit(self.key)

    def reload(self) -> None:
        """Drop the cached copy so the next access re-reads storage."""
        self._analytics_data = None


ANALYTICS_REPO = AnalyticsRepository()
