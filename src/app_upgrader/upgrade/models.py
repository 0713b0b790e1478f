"""Data models for the upgrade system.

This module defines the outcomes an upgrade step can return, the
states a run moves through, and the report produced at the end of a run.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from app_upgrader.upgrade.errors import UpgradeError


class Outcome:
    """Base class for everything an upgrade step may return."""

    __slots__ = ()

    def jump(self, target: Any) -> "JumpTo":
        """Mark ``target`` as the version reached by this step.

        Lets one step do the work of several versions; the versions in
        between are skipped.
        """
        return JumpTo([self], target)


@dataclass(frozen=True)
class Success(Outcome):
    """The step completed without errors."""


@dataclass(frozen=True)
class NonFatalError(Outcome):
    """The step hit a recoverable error; the run continues.

    Attributes:
        error: The error reported by the step, usually an exception.
    """

    error: Any


@dataclass(frozen=True)
class FatalError(Outcome):
    """The step hit an unrecoverable error; the run stops.

    Attributes:
        error: The error reported by the step, usually an exception.
    """

    error: Any


@dataclass(frozen=True)
class Batch(Outcome):
    """Several sub-outcomes reported by a single step.

    Only ``Success``, ``NonFatalError`` and ``FatalError`` may appear
    inside a batch.
    """

    outcomes: tuple[Outcome, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "outcomes", tuple(self.outcomes))

    def jump(self, target: Any) -> "JumpTo":
        return JumpTo(self.outcomes, target)


@dataclass(frozen=True)
class JumpTo(Outcome):
    """A batch that also names the version reached by the step.

    Attributes:
        outcomes: Sub-outcomes, same rules as ``Batch``.
        target: Version to record as reached.
    """

    outcomes: tuple[Outcome, ...]
    target: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "outcomes", tuple(self.outcomes))

    def jump(self, target: Any) -> "JumpTo":
        return JumpTo(self.outcomes, target)


def batch(outcomes: Iterable[Outcome]) -> Batch:
    """Collect outcomes produced one by one into a ``Batch``."""
    return Batch(tuple(outcomes))


class UpgradeState(str, Enum):
    """States of an upgrade run."""

    RUNNING = "running"
    HALTED_FATAL = "halted_fatal"
    COMPLETED_CLEAN = "completed_clean"
    COMPLETED_WITH_ERRORS = "completed_with_errors"


@dataclass
class UpgradeReport:
    """Result of an upgrade run.

    Attributes:
        name: Name of the version slot that was upgraded.
        state: Final state of the run.
        from_version: Version recorded when the run started.
        to_version: Version recorded when the run ended.
        applied: Versions whose steps ran, in order. Includes the
            version that halted the run, if any.
        error: ``UpgradeCanceled`` or ``UpgradeCompletedWithErrors``,
            or None for a clean run.
    """

    name: str
    state: UpgradeState
    from_version: Any
    to_version: Any
    applied: list[Any] = field(default_factory=list)
    error: UpgradeError | None = None

    @property
    def ok(self) -> bool:
        """True unless the run was halted by a fatal error."""
        return self.state != UpgradeState.HALTED_FATAL

    def raise_for_status(self) -> "UpgradeReport":
        """Raise the run's error, if any.

        Returns:
            The report itself, for chaining.

        Raises:
            UpgradeCanceled: If a fatal error stopped the run.
            UpgradeCompletedWithErrors: If non-fatal errors were recorded.
        """
        if self.error is not None:
            raise self.error
        return self
