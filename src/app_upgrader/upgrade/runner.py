"""Upgrade runner for walking a version slot forward one step at a time.

This module provides the AppUpgrader class which reads the committed
version of a named slot, runs the step for each following version,
commits every version that completes without a fatal error, and reports
the run as clean, completed with non-fatal errors, or canceled.
"""

import logging
from collections.abc import Callable
from typing import Any

from app_upgrader.storage import VersionStore
from app_upgrader.upgrade.classifier import classify
from app_upgrader.upgrade.errors import (
    InvalidJumpError,
    InvalidOutcomeError,
    UpgradeCanceled,
    UpgradeCompletedWithErrors,
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
)
from app_upgrader.upgrade.steps import StepProvider
from app_upgrader.upgrade.versions import VersionSet, format_version

logger = logging.getLogger(__name__)


class AppUpgrader:
    """Runner for sequential, one-time upgrade steps.

    Steps are run one at a time, in version order, starting with the
    version after the one recorded in the store. The recorded version
    is never run again. After each step that does not report a fatal
    error, the version it reached is committed before the next step.

    Only one run per slot may be active at a time; the store is not locked.

    Attributes:
        versions: The known versions.
        store: Where the current version is committed.
        name: Slot name in the store.

    Example:
        ```python
        upgrader = AppUpgrader(versions, JsonVersionStore(path), name="com.company.myapp")

        report = upgrader.run(steps)
        if report.state == UpgradeState.HALTED_FATAL:
            print(f"Failed at {report.error.at_version}")
        ```
    """

    def __init__(self, versions: VersionSet, store: VersionStore, name: str) -> None:
        self.versions = versions
        self.store = store
        self.name = name
        self._on_progress: Callable[[str], None] | None = None

    def set_progress_callback(self, callback: Callable[[str], None] | None) -> None:
        """Set a callback for progress updates.

        Args:
            callback: Function to call with progress messages.
        """
        self._on_progress = callback

    def _log(self, message: str, level: int = logging.INFO) -> None:
        """Log a message and call progress callback if set."""
        logger.log(level, message)
        if self._on_progress:
            self._on_progress(message)

    def get_current_version(self) -> Any:
        """Return the committed version, or the base version if none.

        Raises:
            UnknownVersionError: If the store holds a value outside the set.
        """
        value = self.store.get_version(self.name)
        if value is None:
            return self.versions.base
        return self.versions.get(value)

    def set_current_version(self, version: Any) -> None:
        """Commit ``version`` as current without running any step.

        Raises:
            UnknownVersionError: If ``version`` is not in the set.
        """
        member = self.versions.get(version)
        self.store.set_version(self.name, int(member))

    def get_pending_versions(self) -> list[Any]:
        """Versions a run would visit, assuming no step jumps ahead."""
        pending: list[Any] = []
        current = self.get_current_version()
        while self.versions.exists(self.versions.successor(current)):
            current = self.versions.get(self.versions.successor(current))
            pending.append(current)
        return pending

    def get_status(self) -> dict[str, Any]:
        """Get current upgrade status.

        Returns:
            Dictionary with status information.
        """
        current = self.get_current_version()
        pending = self.get_pending_versions()

        return {
            "name": self.name,
            "current_version": int(current),
            "current_label": format_version(current),
            "latest_version": int(self.versions.latest),
            "pending_count": len(pending),
            "pending_versions": [
                {"version": int(v), "label": format_version(v)} for v in pending
            ],
        }

    def _resolve_jump(self, pending: Any, target: Any) -> Any:
        """Validate a jump target and return its version member."""
        member = self.versions.get(target)
        if int(member) < int(pending):
            raise InvalidJumpError(int(pending), int(member))
        return member

    def _resolve(self, pending: Any, outcome: Outcome) -> tuple[Any, list[Any], list[Any]]:
        """Interpret a step's outcome.

        Returns:
            Tuple of (version reached, fatal errors, non-fatal errors).
        """
        if isinstance(outcome, Success):
            return pending, [], []

        if isinstance(outcome, FatalError):
            return pending, [outcome.error], []

        if isinstance(outcome, NonFatalError):
            return pending, [], [outcome.error]

        if isinstance(outcome, JumpTo):
            reached = self._resolve_jump(pending, outcome.target)
            fatal, non_fatal = classify(outcome.outcomes)
            return reached, fatal, non_fatal

        if isinstance(outcome, Batch):
            fatal, non_fatal = classify(outcome.outcomes)
            return pending, fatal, non_fatal

        raise InvalidOutcomeError(
            f"Step for version {format_version(pending)} returned "
            f"{type(outcome).__name__}, expected an Outcome"
        )

    def run(self, steps: StepProvider) -> UpgradeReport:
        """Run every pending step in order.

        Args:
            steps: Provides the step for each version.

        Returns:
            UpgradeReport describing how the run ended.

        Raises:
            MissingStepError: If a pending version has no step.
            InvalidOutcomeError: If a step returns a malformed outcome.
            InvalidJumpError: If a step jumps behind its own version.
            UnknownVersionError: If the stored or jump version is unknown.
        """
        start = self.get_current_version()
        current = start
        applied: list[Any] = []
        non_fatal_errors: list[Any] = []

        self._log(f"Upgrading {self.name!r} from version {format_version(start)}")

        while self.versions.exists(self.versions.successor(current)):
            pending = self.versions.get(self.versions.successor(current))
            step = steps.lookup(pending)

            self._log(f"  Upgrading to version {format_version(pending)}")
            outcome = step()
            applied.append(pending)

            reached, fatal, non_fatal = self._resolve(pending, outcome)

            for error in non_fatal:
                self._log(f"    [NON-FATAL] {error!r}", logging.WARNING)
            non_fatal_errors.extend(non_fatal)

            if fatal:
                for error in fatal:
                    self._log(f"    [FATAL] {error!r}", logging.ERROR)
                self._log(
                    f"Upgrade of {self.name!r} canceled at version {format_version(pending)}",
                    logging.ERROR,
                )
                return UpgradeReport(
                    name=self.name,
                    state=UpgradeState.HALTED_FATAL,
                    from_version=start,
                    to_version=current,
                    applied=applied,
                    error=UpgradeCanceled(pending, fatal, non_fatal_errors),
                )

            if int(reached) != int(pending):
                self._log(f"    Jumped to version {format_version(reached)}")

            self.store.set_version(self.name, int(reached))
            current = reached

        if non_fatal_errors:
            self._log(
                f"Upgrade of {self.name!r} completed at version {format_version(current)} "
                f"with {len(non_fatal_errors)} error(s)",
                logging.WARNING,
            )
            return UpgradeReport(
                name=self.name,
                state=UpgradeState.COMPLETED_WITH_ERRORS,
                from_version=start,
                to_version=current,
                applied=applied,
                error=UpgradeCompletedWithErrors(non_fatal_errors),
            )

        if applied:
            self._log(f"Upgrade of {self.name!r} completed at version {format_version(current)}")
        else:
            self._log(f"{self.name!r} is up to date")

        return UpgradeReport(
            name=self.name,
            state=UpgradeState.COMPLETED_CLEAN,
            from_version=start,
            to_version=current,
            applied=applied,
        )

    def upgrade(self, steps: StepProvider) -> UpgradeReport:
        """Run every pending step and raise if the run was not clean.

        Raises:
            UpgradeCanceled: If a fatal error stopped the run.
            UpgradeCompletedWithErrors: If non-fatal errors were recorded.
        """
        return self.run(steps).raise_for_status()
