"""Shared pytest fixtures for app-upgrader tests.

This module provides reusable fixtures for version sets, step
registries, and version stores.
"""

from collections.abc import Callable
from enum import IntEnum
from pathlib import Path

import pytest

from app_upgrader.storage import JsonVersionStore, MemoryVersionStore
from app_upgrader.upgrade import AppUpgrader, Outcome, StepRegistry, Success, VersionSet

SLOT_NAME = "com.company.myappversion"


class MyAppVersion(IntEnum):
    """Release history of a sample application."""

    V0_0 = 0
    V1_0 = 1
    V1_1 = 2
    V2_0 = 3
    V2_1 = 4
    V3_0 = 5
    V4_0 = 6


# =============================================================================
# Version Fixtures
# =============================================================================


@pytest.fixture
def app_version() -> type[MyAppVersion]:
    """The sample release history enum."""
    return MyAppVersion


@pytest.fixture
def versions() -> VersionSet:
    """Version set built from the sample IntEnum."""
    return VersionSet(MyAppVersion)


@pytest.fixture
def small_versions() -> VersionSet:
    """Plain int versions 0..4."""
    return VersionSet.from_range(4)


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> MemoryVersionStore:
    """Create an empty in-memory version store."""
    return MemoryVersionStore()


@pytest.fixture
def temp_state_file(tmp_path: Path) -> Path:
    """Get the path for a temporary versions.json file."""
    return tmp_path / ".app-upgrader" / "versions.json"


@pytest.fixture
def json_store(temp_state_file: Path) -> JsonVersionStore:
    """Create a JsonVersionStore with temporary storage."""
    return JsonVersionStore(temp_state_file)


# =============================================================================
# Upgrader Fixtures
# =============================================================================


class RecordingSteps(StepRegistry):
    """StepRegistry that records which versions were looked up and run."""

    def __init__(self, versions: VersionSet) -> None:
        super().__init__(versions)
        self.looked_up: list[int] = []
        self.ran: list[int] = []

    def set(self, version: int, outcome: Outcome) -> None:
        """Register a step returning a fixed outcome."""

        def step() -> Outcome:
            self.ran.append(version)
            return outcome

        self.add(version, step)

    def lookup(self, version):
        self.looked_up.append(int(version))
        return super().lookup(version)


@pytest.fixture
def make_steps() -> Callable[..., RecordingSteps]:
    """Factory for recording registries with every step succeeding by default."""

    def _make(versions: VersionSet, **outcomes: Outcome) -> RecordingSteps:
        steps = RecordingSteps(versions)
        for member in versions.after(versions.base):
            steps.set(int(member), outcomes.get(f"v{int(member)}", Success()))
        return steps

    return _make


@pytest.fixture
def upgrader(small_versions: VersionSet, memory_store: MemoryVersionStore) -> AppUpgrader:
    """AppUpgrader over versions 0..4 with an in-memory store."""
    return AppUpgrader(small_versions, memory_store, name=SLOT_NAME)
