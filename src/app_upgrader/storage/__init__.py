"""Storage backends for the committed version of named slots.

Quick Start:
    ```python
    from app_upgrader.storage import JsonVersionStore

    store = JsonVersionStore(Path(".app-upgrader/versions.json"))
    store.set_version("com.company.myapp", 2)
    ```
"""

from app_upgrader.storage.models import VersionRecord
from app_upgrader.storage.version_store import JsonVersionStore, MemoryVersionStore, VersionStore

__all__ = [
    "JsonVersionStore",
    "MemoryVersionStore",
    "VersionRecord",
    "VersionStore",
]
