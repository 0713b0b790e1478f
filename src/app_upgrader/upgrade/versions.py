"""Closed, ordered sets of integer-backed versions."""

import operator
from collections.abc import Iterable, Iterator
from enum import IntEnum
from typing import Any

from app_upgrader.upgrade.errors import UnknownVersionError


class VersionSet:
    """An ordered set of known versions.

    Members are usually the values of an ``IntEnum``; plain ints are
    accepted too. Ordering and lookups use the integer value of each
    member, and versions are expected to be gap-free: the walk from one
    version to the next stops at the first missing integer. Values must
    be non-negative integers; floats and strings are rejected.

    Example:
        ```python
        class MyAppVersion(IntEnum):
            V0_0 = 0
            V1_0 = 1
            V1_1 = 2

        versions = VersionSet(MyAppVersion)
        versions.successor(MyAppVersion.V1_0)  # 2
        versions.exists(3)  # False
        ```
    """

    def __init__(self, members: Iterable[Any]) -> None:
        self._by_value: dict[int, Any] = {}
        for member in members:
            value = operator.index(member)
            if value < 0:
                raise ValueError(f"Version values must be non-negative, got {value}")
            if value in self._by_value:
                raise ValueError(f"Duplicate version value: {value}")
            self._by_value[value] = member

        if not self._by_value:
            raise ValueError("A version set needs at least one version")

        self._ordered = sorted(self._by_value)

    @classmethod
    def from_range(cls, stop: int, start: int = 0) -> "VersionSet":
        """Build a set of plain int versions ``start..stop`` inclusive."""
        return cls(range(start, stop + 1))

    @property
    def base(self) -> Any:
        """The lowest version, assumed applied when nothing was recorded."""
        return self._by_value[self._ordered[0]]

    @property
    def latest(self) -> Any:
        return self._by_value[self._ordered[-1]]

    @property
    def enum_class(self) -> type[IntEnum] | None:
        """The IntEnum the members come from, if any."""
        first = self.base
        return type(first) if isinstance(first, IntEnum) else None

    def exists(self, value: Any) -> bool:
        """Check whether a version with this integer value is known."""
        try:
            return operator.index(value) in self._by_value
        except TypeError:
            return False

    def get(self, value: Any) -> Any:
        """Return the member for an integer value.

        Raises:
            UnknownVersionError: If no member has that value.
        """
        try:
            return self._by_value[operator.index(value)]
        except (KeyError, TypeError):
            raise UnknownVersionError(value) from None

    def successor(self, version: Any) -> int:
        """Integer value of the version that follows ``version``.

        The returned value may not exist; check with ``exists()``.
        """
        return operator.index(version) + 1

    def after(self, version: Any) -> list[Any]:
        """All known versions strictly greater than ``version``, in order."""
        value = operator.index(version)
        return [self._by_value[v] for v in self._ordered if v > value]

    def __iter__(self) -> Iterator[Any]:
        return (self._by_value[v] for v in self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, value: object) -> bool:
        return self.exists(value)

    def __repr__(self) -> str:
        return f"VersionSet({self._ordered[0]}..{self._ordered[-1]}, {len(self)} versions)"


def format_version(version: Any) -> str:
    """Human-readable label for a version, e.g. ``V1_1 (2)`` or ``2``."""
    if isinstance(version, IntEnum):
        return f"{version.name} ({int(version)})"
    return str(int(version))
