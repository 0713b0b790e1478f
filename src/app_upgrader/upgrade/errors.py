"""Exception classes for the upgrade system.

Two families share the ``UpgraderError`` base:

- ``UpgradeError`` and its subclasses report how a run ended. They are
  returned inside an ``UpgradeReport`` and raised by
  ``UpgradeReport.raise_for_status()``.
- The remaining classes signal programmer errors (bad version sets,
  missing steps, malformed outcomes) and always propagate.
"""

from typing import Any


class UpgraderError(Exception):
    """Base exception for all upgrader errors."""

    pass


class UpgradeError(UpgraderError):
    """Base exception for a run that did not complete cleanly."""

    pass


class UpgradeCanceled(UpgradeError):
    """A fatal error stopped the run.

    Attributes:
        at_version: Version whose step produced the fatal error(s).
        fatal_errors: Fatal errors reported by that step.
        non_fatal_errors: Non-fatal errors accumulated before halting.
    """

    def __init__(
        self,
        at_version: int,
        fatal_errors: list[Any],
        non_fatal_errors: list[Any],
    ) -> None:
        self.at_version = at_version
        self.fatal_errors = list(fatal_errors)
        self.non_fatal_errors = list(non_fatal_errors)
        super().__init__(
            f"Upgrade canceled at version {at_version}: "
            f"{len(self.fatal_errors)} fatal error(s), "
            f"{len(self.non_fatal_errors)} non-fatal error(s)"
        )


class UpgradeCompletedWithErrors(UpgradeError):
    """The run reached the latest version but recorded non-fatal errors.

    Attributes:
        errors: Non-fatal errors in the order they were reported.
    """

    def __init__(self, errors: list[Any]) -> None:
        self.errors = list(errors)
        super().__init__(f"Upgrade completed with {len(self.errors)} error(s)")


class UnknownVersionError(UpgraderError, ValueError):
    """Raised when a value is not a member of the version set."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Unknown version: {value!r}")


class MissingStepError(UpgraderError, LookupError):
    """Raised when no upgrade step is registered for an existing version."""

    def __init__(self, version: Any) -> None:
        self.version = version
        super().__init__(f"No upgrade step registered for version {version!r}")


class InvalidOutcomeError(UpgraderError, TypeError):
    """Raised when a step returns something the classifier cannot accept."""

    pass


class InvalidJumpError(UpgraderError, ValueError):
    """Raised when a step asks to jump behind the version being processed."""

    def __init__(self, pending: int, target: int) -> None:
        self.pending = pending
        self.target = target
        super().__init__(
            f"Jump target {target} is behind the version being upgraded ({pending})"
        )
