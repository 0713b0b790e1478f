"""Registry of upgrade steps, one per version."""

import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

from app_upgrader.upgrade.errors import MissingStepError
from app_upgrader.upgrade.models import Outcome
from app_upgrader.upgrade.versions import VersionSet

Step = Callable[[], Outcome]


class StepProvider(Protocol):
    """Anything that can hand out the step for reaching a version."""

    def lookup(self, version: Any) -> Step: ...


class StepRegistry:
    """Maps each version to the step that upgrades to it.

    The registry also carries the version set it covers, so a single
    object describes everything an application needs to upgrade.

    Example:
        ```python
        steps = StepRegistry(VersionSet(MyAppVersion))

        @steps.register(MyAppVersion.V1_0)
        def initial_launch() -> Outcome:
            return Success()
        ```
    """

    def __init__(self, versions: VersionSet) -> None:
        self.versions = versions
        self._steps: dict[int, Step] = {}

    @classmethod
    def from_mapping(cls, versions: VersionSet, steps: Mapping[Any, Step]) -> "StepRegistry":
        """Build a registry from a ``{version: step}`` mapping."""
        registry = cls(versions)
        for version, step in steps.items():
            registry.add(version, step)
        return registry

    def add(self, version: Any, step: Step) -> None:
        """Register ``step`` as the upgrade to ``version``.

        Raises:
            UnknownVersionError: If ``version`` is not in the version set.
            ValueError: If a step is already registered for ``version``.
        """
        member = self.versions.get(version)
        value = operator.index(member)
        if value in self._steps:
            raise ValueError(f"A step is already registered for version {member!r}")
        self._steps[value] = step

    def register(self, version: Any) -> Callable[[Step], Step]:
        """Decorator form of ``add()``."""

        def decorator(step: Step) -> Step:
            self.add(version, step)
            return step

        return decorator

    def lookup(self, version: Any) -> Step:
        """Return the step for ``version``.

        Raises:
            MissingStepError: If no step is registered for ``version``.
        """
        try:
            return self._steps[operator.index(version)]
        except (KeyError, TypeError):
            raise MissingStepError(version) from None

    def missing(self, versions: Iterable[Any] | None = None) -> list[Any]:
        """Versions that have no registered step.

        Args:
            versions: Versions to check. Defaults to every version above
                the base version, which is never upgraded to.
        """
        if versions is None:
            versions = self.versions.after(self.versions.base)
        return [v for v in versions if operator.index(v) not in self._steps]

    def __contains__(self, version: object) -> bool:
        try:
            return operator.index(version) in self._steps  # type: ignore[arg-type]
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._steps)
