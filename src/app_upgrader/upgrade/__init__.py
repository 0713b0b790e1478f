"""Sequential version upgrade system for app-upgrader.

This module walks a persisted version slot forward, running one upgrade
step per version and reporting fatal and non-fatal errors.

Example usage:
    ```python
    from enum import IntEnum

    from app_upgrader.storage import MemoryVersionStore
    from app_upgrader.upgrade import AppUpgrader, NonFatalError, StepRegistry, Success, VersionSet

    class MyAppVersion(IntEnum):
        V0_0 = 0
        V1_0 = 1
        V1_1 = 2

    steps = StepRegistry(VersionSet(MyAppVersion))

    @steps.register(MyAppVersion.V1_0)
    def initial_launch():
        return Success()

    @steps.register(MyAppVersion.V1_1)
    def update_settings():
        return NonFatalError(LookupError("volume setting lost"))

    upgrader = AppUpgrader(steps.versions, MemoryVersionStore(), name="com.company.myapp")
    report = upgrader.run(steps)
    print(report.state)
    ```
"""

from app_upgrader.upgrade.classifier import Classification, classify
from app_upgrader.upgrade.errors import (
    InvalidJumpError,
    InvalidOutcomeError,
    MissingStepError,
    UnknownVersionError,
    UpgradeCanceled,
    UpgradeCompletedWithErrors,
    UpgradeError,
    UpgraderError,
)
from app_upgrader.upgrade.models import (
    Batch,
    FatalError,
    JumpTo,
    NonFatalError,
    Outcome,
    Success,
    UpgradeReport,
    UpgradeState,
    batch,
)
from app_upgrader.upgrade.runner import AppUpgrader
from app_upgrader.upgrade.steps import Step, StepProvider, StepRegistry
from app_upgrader.upgrade.versions import VersionSet, format_version

__all__ = [
    "AppUpgrader",
    "Batch",
    "Classification",
    "FatalError",
    "InvalidJumpError",
    "InvalidOutcomeError",
    "JumpTo",
    "MissingStepError",
    "NonFatalError",
    "Outcome",
    "Step",
    "StepProvider",
    "StepRegistry",
    "Success",
    "UnknownVersionError",
    "UpgradeCanceled",
    "UpgradeCompletedWithErrors",
    "UpgradeError",
    "UpgradeReport",
    "UpgradeState",
    "UpgraderError",
    "VersionSet",
    "batch",
    "classify",
    "format_version",
]
