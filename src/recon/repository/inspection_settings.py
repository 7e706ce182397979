# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, cast

from yaml import YAMLError, dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from recon import configuration, time
from recon.model.inspection import (
    InspectionSection,
    InspectionSectionItem,
    InspectionSettings,
)
from recon.template.inspection import (
    get_inspection_settings_template,
    get_section_item_template,
    get_section_template,
)

_LOGGER = logging.getLogger(__name__)


class DuplicateSectionError(Exception):
    """Raised when a section or item key is already in the catalog."""

    pass


class UnknownSectionError(Exception):
    """Raised when a section key is not in the catalog."""

    pass


class InspectionSettingsRepository:
    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = path
        self._settings: Optional[InspectionSettings] = None
        self.is_dirty = False

    @property
    def path(self) -> Path:
        if self._path is not None:
            return self._path
        return configuration.DATA_INSPECTION_SETTINGS_PATH

    @property
    def settings(self) -> InspectionSettings:
        if self._settings is None:
            self.__load_data()
        if self._settings is None:
            raise ValueError()
        return self._settings

    def __load_data(self) -> None:
        if not self.path.is_file():
            self._settings = get_inspection_settings_template()
            return
        try:
            raw_settings = load(self.path.read_text(), Loader=Loader)
        except YAMLError as e:
            _LOGGER.error("inspection settings are not valid YAML, using defaults: %s", e)
            self._settings = get_inspection_settings_template()
            return
        if not isinstance(raw_settings, dict) or "sections" not in raw_settings:
            _LOGGER.error("inspection settings have an unexpected shape, using defaults")
            self._settings = get_inspection_settings_template()
            return
        self._settings = self.__convert_settings_for_deserialization(raw_settings)

    def __save_data(self, settings: InspectionSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        serializable_settings = self.__convert_settings_for_serialization(
            deepcopy(settings)
        )
        self.path.write_text(dump(serializable_settings, Dumper=Dumper))

    def flush(self) -> bool:
        if self._settings is not None and self.is_dirty:
            self.__save_data(self._settings)
            self.is_dirty = False
            return True
        return False

    def __convert_settings_for_serialization(
        self, settings: InspectionSettings
    ) -> dict[str, Any]:
        serializable_settings = cast(dict[str, Any], settings)
        serializable_settings["created"] = time.datetime_to_iso_str(settings["created"])
        serializable_settings["updated"] = time.datetime_to_iso_str(settings["updated"])
        return serializable_settings

    def __convert_settings_for_deserialization(
        self, settings: dict[str, Any]
    ) -> InspectionSettings:
        now = time.now_utc()
        settings["created"] = time.datetime_from_str_optional(settings.get("created")) or now
        settings["updated"] = time.datetime_from_str_optional(settings.get("updated")) or now
        return cast(InspectionSettings, settings)

    def __find_section(self, key: str) -> InspectionSection:
        matches = [
            section for section in self.settings["sections"] if section["key"] == key
        ]
        if len(matches) == 0:
            raise UnknownSectionError(f"No inspection section with key {key}")
        return matches[0]

    def get_settings(self) -> InspectionSettings:
        return deepcopy(self.settings)

    def get_active_sections(self) -> list[InspectionSection]:
        """Active sections ordered for display, each with only its active items."""
        sections = []
        for section in sorted(self.settings["sections"], key=lambda s: s["order"]):
            if not section["is_active"]:
                continue
            active_section = deepcopy(section)
            active_section["items"] = sorted(
                [item for item in section["items"] if item["is_active"]],
                key=lambda item: item["order"],
            )
            sections.append(active_section)
        return sections

    def add_section(self, key: str, label: str, description: Optional[str]) -> None:
        if key in [section["key"] for section in self.settings["sections"]]:
            raise DuplicateSectionError(f"Inspection section {key} already exists")
        self.is_dirty = True

        order = max([s["order"] for s in self.settings["sections"]], default=0) + 1
        section = get_section_template(key, label, order)
        section["description"] = description
        self.settings["sections"].append(section)
        self.settings["updated"] = time.now_utc()

    def add_item(self, section_key: str, item_id: str, label: str) -> None:
        section = self.__find_section(section_key)
        if item_id in [item["id"] for item in section["items"]]:
            raise DuplicateSectionError(
                f"Item {item_id} already exists in section {section_key}"
            )
        self.is_dirty = True

        items: list[InspectionSectionItem] = section["items"]
        order = max([item["order"] for item in items], default=0) + 1
        items.append(get_section_item_template(item_id, label, order))
        self.settings["updated"] = time.now_utc()

    def set_section_active(self, key: str, is_active: bool) -> None:
        section = self.__find_section(key)
        self.is_dirty = True
        section["is_active"] = is_active
        self.settings["updated"] = time.now_utc()


INSPECTION_SETTINGS_REPO = InspectionSettingsRepository()
