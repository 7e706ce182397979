# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Optional, TypedDict

from yaml import load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]
import platformdirs

APP_NAME = "recon"

CONFIG_PATH = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH = CONFIG_PATH / "config.yaml"

# These will be set dynamically by load_data_path_configuration()
DATA_PATH: Path = platformdirs.user_data_path(APP_NAME)
DATA_VEHICLES_DIR: Path = DATA_PATH / "vehicles"
DATA_INSPECTION_SETTINGS_PATH: Path = DATA_PATH / "inspection-settings.yaml"

# Key under which the whole analytics blob is stored
ANALYTICS_STORAGE_KEY = "analytics"


class Configuration(TypedDict):
    data_path: Optional[str]
    show_header: bool
    log_level: str
    top_performers_limit: int
    recent_days: int


DEFAULT_CONFIGURATION: Configuration = {
    "data_path": None,
    "show_header": True,
    "log_level": "WARNING",
    "top_performers_limit": 5,
    "recent_days": 7,
}


def load_data_path_configuration() -> None:
    """
    Load the configuration and set the DATA_PATH variables dynamically.

    This must be called after the config file exists and before any
    repositories touch the file system.
    """
    global DATA_PATH, DATA_VEHICLES_DIR, DATA_INSPECTION_SETTINGS_PATH

    if not APP_CONFIG_PATH.is_file():
        # Config doesn't exist yet, use defaults
        return

    config: Optional[Configuration] = load(APP_CONFIG_PATH.read_text(), Loader=Loader)
    if config is None:
        return
    data_path_setting = config.get("data_path")

    if data_path_setting is not None:
        set_data_path(Path(data_path_setting))


def set_data_path(data_path: Path) -> None:
    global DATA_PATH, DATA_VEHICLES_DIR, DATA_INSPECTION_SETTINGS_PATH

    DATA_PATH = data_path
    DATA_VEHICLES_DIR = DATA_PATH / "vehicles"
    DATA_INSPECTION_SETTINGS_PATH = DATA_PATH / "inspection-settings.yaml"
