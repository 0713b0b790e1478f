"""Persistence of the current version of named slots.

The upgrader reads and writes a single integer per slot through the
``VersionStore`` protocol. Two implementations are provided:

- ``JsonVersionStore``: a JSON file keyed by slot name, so several
  independent counters can share one file.
- ``MemoryVersionStore``: a dict, for tests and throwaway runs.

Storage Location: ./.app-upgrader/versions.json by default (see
``app_upgrader.config``).

Stores assume a single writer. Two runs against the same slot at the
same time race on their commits.
"""

import json
import logging
from pathlib import Path
from typing import Protocol

from app_upgrader.storage.models import VersionRecord

logger = logging.getLogger(__name__)


class VersionStore(Protocol):
    """Get/set access to the committed version of a named slot."""

    def get_version(self, name: str) -> int | None:
        """Return the committed version, or None if nothing was committed."""
        ...

    def set_version(self, name: str, version: int) -> None:
        """Durably record ``version`` as current for ``name``."""
        ...


class JsonVersionStore:
    """JSON-file storage for version slots.

    A file that cannot be read or parsed reads as nothing committed for
    every slot, so the next run replays every step from the base version.
    The next commit then rewrites the file with only that slot, dropping
    any other slots it held. Such files are logged at ERROR.

    Attributes:
        path: Path to the JSON file.

    Example:
        ```python
        store = JsonVersionStore(Path(".app-upgrader/versions.json"))
        store.set_version("com.company.myapp", 3)
        store.get_version("com.company.myapp")  # 3
        ```
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load_records(self) -> dict[str, dict]:
        """Load all slot records from the JSON file.

        Returns:
            Dictionary mapping slot names to record data.
        """
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load version store {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring malformed version store {self.path}")
            return {}
        return data

    def _save_records(self, records: dict[str, dict]) -> None:
        """Write all slot records, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        with open(tmp_path, "w") as f:
            json.dump(records, f, indent=2, default=str)
        tmp_path.replace(self.path)

    def retrieve(self, name: str) -> VersionRecord | None:
        """Return the full record for a slot.

        Returns:
            VersionRecord if present and valid, None otherwise.
        """
        records = self._load_records()

        if name not in records:
            return None

        try:
            return VersionRecord.model_validate(records[name])
        except ValueError as e:
            logger.error(f"Ignoring corrupted version record {name!r}: {e}")
            return None

    def get_version(self, name: str) -> int | None:
        record = self.retrieve(name)
        return record.version if record else None

    def set_version(self, name: str, version: int) -> None:
        records = self._load_records()
        records[name] = json.loads(VersionRecord(version=version).model_dump_json())
        self._save_records(records)
        logger.debug(f"Committed version {version} for {name!r} to {self.path}")

    def delete(self, name: str) -> bool:
        """Forget a slot.

        Returns:
            True if the slot was deleted, False if it didn't exist.
        """
        records = self._load_records()

        if name not in records:
            return False

        del records[name]
        self._save_records(records)
        return True

    def list_names(self) -> list[str]:
        """List all slots with a committed version."""
        return sorted(self._load_records().keys())


class MemoryVersionStore:
    """In-memory storage for version slots."""

    def __init__(self, versions: dict[str, int] | None = None) -> None:
        self.versions: dict[str, int] = dict(versions or {})

    def get_version(self, name: str) -> int | None:
        return self.versions.get(name)

    def set_version(self, name: str, version: int) -> None:
        self.versions[name] = version
