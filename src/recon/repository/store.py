# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Optional, Protocol

from recon import configuration


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class FileStore:
    """Stores each key as `<key>.yaml` inside the data directory."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        # Resolved lazily so a configured data_path is honoured
        if self._directory is not None:
            return self._directory
        return configuration.DATA_PATH

    def __path(self, key: str) -> Path:
        return self.directory / f"{key}.yaml"

    def get(self, key: str) -> Optional[str]:
        file_path = self.__path(key)
        if not file_path.is_file():
            return None
        return file_path.read_text()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.__path(key).write_text(value)


class InMemoryStore:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value
