"""Configuration for app-upgrader.

Settings are read from an optional YAML file and then overridden by
environment variables.

Environment Variables:
    APP_UPGRADER_STATE_FILE: Path to the JSON version store
        (default: ./.app-upgrader/versions.json)
    APP_UPGRADER_NAME: Slot name in the version store (default: app)

Example config file:
    ```yaml
    state_file: ~/.myapp/versions.json
    name: com.company.myapp
    ```
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from app_upgrader.storage import JsonVersionStore

logger = logging.getLogger(__name__)

STATE_FILE_ENV = "APP_UPGRADER_STATE_FILE"
NAME_ENV = "APP_UPGRADER_NAME"

DEFAULT_STATE_DIR = ".app-upgrader"
DEFAULT_STATE_FILE = "versions.json"
DEFAULT_NAME = "app"


def get_default_state_file() -> Path:
    """Get the project-level version store path.

    Returns:
        Path to versions.json in ./.app-upgrader/
    """
    return Path.cwd() / DEFAULT_STATE_DIR / DEFAULT_STATE_FILE


class UpgraderConfig(BaseModel):
    """Settings for locating the version slot.

    Attributes:
        state_file: JSON file holding committed versions.
        name: Slot name within the state file.
    """

    state_file: Path = Field(default_factory=get_default_state_file, description="Version store")
    name: str = Field(default=DEFAULT_NAME, min_length=1, description="Slot name")

    @field_validator("state_file")
    @classmethod
    def _expand_state_file(cls, value: Path) -> Path:
        return value.expanduser()

    def create_store(self) -> JsonVersionStore:
        """Open the version store described by this config."""
        return JsonVersionStore(self.state_file)


def load_config(path: Path | None = None) -> UpgraderConfig:
    """Load configuration from a YAML file and the environment.

    Args:
        path: YAML config file. Missing files are ignored.

    Returns:
        Resolved UpgraderConfig.

    Raises:
        ValueError: If the file is not valid YAML or has invalid values.
    """
    data: dict = {}

    if path is not None and path.exists():
        try:
            loaded = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e
        if loaded:
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            data.update(loaded)
        logger.debug(f"Loaded config from {path}")

    if os.environ.get(STATE_FILE_ENV):
        data["state_file"] = os.environ[STATE_FILE_ENV]
    if os.environ.get(NAME_ENV):
        data["name"] = os.environ[NAME_ENV]

    return UpgraderConfig.model_validate(data)
