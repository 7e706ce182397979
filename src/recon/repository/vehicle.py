# SPDX-License-Identifier: MIT

from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, cast

import pendulum
from yaml import dump, load

try:
    from yaml import CDumper as Dumper  # noqa: F401
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from recon import configuration, time
from recon.model.entity_id import EntityId, generate_entity_id
from recon.model.inspection import InspectionItem
from recon.model.section import SectionStatus
from recon.model.vehicle import TeamNote, Vehicle, get_stock_number


class VehicleNotFoundError(Exception):
    """Raised when no vehicle matches an id or stock number."""

    pass


class VehicleRepository:
    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory
        self._vehicles: Optional[list[Vehicle]] = None
        self.is_dirty = False
        self._dirty_ids: set[str] = set()

    @property
    def directory(self) -> Path:
        if self._directory is not None:
            return self._directory
        return configuration.DATA_VEHICLES_DIR

    @property
    def vehicles(self) -> list[Vehicle]:
        if self._vehicles is None:
            self.__load_data()
        if self._vehicles is None:
            raise ValueError()
        return self._vehicles

    def __load_data(self) -> None:
        self._vehicles = []
        if not self.directory.is_dir():
            return
        for file_path in sorted(self.directory.iterdir()):
            if file_path.suffix != ".yaml":
                continue
            raw_vehicle = load(file_path.read_text(), Loader=Loader)
            if raw_vehicle is not None:
                self._vehicles.append(
                    self.__convert_vehicle_for_deserialization(raw_vehicle)
                )

    def __save_data(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        for vehicle in self.vehicles:
            if vehicle["id"] in self._dirty_ids:
                serializable_vehicle = self.__convert_vehicle_for_serialization(
                    deepcopy(vehicle)
                )
                file_path = self.directory / f"{vehicle['id']}.yaml"
                file_path.write_text(dump(serializable_vehicle, Dumper=Dumper))

        self._dirty_ids.clear()

    def flush(self) -> bool:
        if self._vehicles is not None and self.is_dirty:
            self.__save_data()
            self.is_dirty = False
            return True
        return False

    def __convert_vehicle_for_serialization(self, vehicle: Vehicle) -> dict[str, Any]:
        serializable_vehicle = cast(dict[str, Any], vehicle)
        for field in ("date_acquired", "created", "updated"):
            serializable_vehicle[field] = time.datetime_to_iso_str(
                serializable_vehicle[field]
            )
        serializable_vehicle["deleted"] = time.datetime_to_iso_str_optional(
            serializable_vehicle["deleted"]
        )
        for team_note in serializable_vehicle["team_notes"]:
            team_note["timestamp"] = time.datetime_to_iso_str(team_note["timestamp"])
        return serializable_vehicle

    def __convert_vehicle_for_deserialization(self, vehicle: dict[str, Any]) -> Vehicle:
        deserializable_vehicle = vehicle
        for field in ("date_acquired", "created", "updated"):
            deserializable_vehicle[field] = time.datetime_from_str(
                deserializable_vehicle[field]
            )
        deserializable_vehicle["deleted"] = time.datetime_from_str_optional(
            deserializable_vehicle.get("deleted")
        )
        # Migration: older files may lack these collections
        deserializable_vehicle.setdefault("status", {})
        deserializable_vehicle.setdefault("inspection", {})
        deserializable_vehicle.setdefault("team_notes", [])
        for team_note in deserializable_vehicle["team_notes"]:
            team_note["timestamp"] = time.datetime_from_str(team_note["timestamp"])
        return cast(Vehicle, deserializable_vehicle)

    def __find(self, id: EntityId) -> Vehicle:
        matches = [vehicle for vehicle in self.vehicles if vehicle["id"] == id]
        if len(matches) == 0:
            raise VehicleNotFoundError(f"No vehicle with id {id}")
        return matches[0]

    def __touch(self, vehicle: Vehicle) -> None:
        self.is_dirty = True
        self._dirty_ids.add(cast(EntityId, vehicle["id"]))
        vehicle["updated"] = time.now_utc()

    def save_new_vehicle(self, vehicle: Vehicle) -> EntityId:
        self.is_dirty = True

        vehicle["id"] = generate_entity_id()
        self.vehicles.append(vehicle)
        self._dirty_ids.add(vehicle["id"])

        return vehicle["id"]

    def update_inspection(
        self,
        id: EntityId,
        inspection: dict[str, list[InspectionItem]],
        status: dict[str, SectionStatus],
    ) -> None:
        vehicle = self.__find(id)
        vehicle["inspection"] = deepcopy(inspection)
        vehicle["status"] = dict(status)
        self.__touch(vehicle)

    def add_team_note(self, id: EntityId, team_note: TeamNote) -> None:
        vehicle = self.__find(id)
        vehicle["team_notes"].append(deepcopy(team_note))
        self.__touch(vehicle)

    def delete_vehicle(self, id: EntityId, deleted: pendulum.DateTime) -> None:
        vehicle = self.__find(id)
        vehicle["deleted"] = deleted
        self.__touch(vehicle)

    def get_all_vehicles(self) -> list[Vehicle]:
        return deepcopy(
            [vehicle for vehicle in self.vehicles if vehicle["deleted"] is None]
        )

    def get_vehicle(self, id: EntityId) -> Vehicle:
        return deepcopy(self.__find(id))

    def find_vehicle(self, reference: str) -> Vehicle:
        """Resolve a full id, an id prefix or a stock number (last six of the VIN)."""
        reference = reference.strip()
        if reference == "":
            raise VehicleNotFoundError("No vehicle reference given")
        candidates = [
            vehicle
            for vehicle in self.vehicles
            if vehicle["deleted"] is None
            and (
                vehicle["id"] == reference
                or cast(str, vehicle["id"]).startswith(reference)
                or get_stock_number(vehicle["vin"]).upper() == reference.upper()
            )
        ]
        if len(candidates) != 1:
            raise VehicleNotFoundError(
                f"{'No' if len(candidates) == 0 else 'More than one'} vehicle matches {reference}"
            )
        return deepcopy(candidates[0])


VEHICLE_REPO = VehicleRepository()
