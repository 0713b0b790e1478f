"""Flattening of batched step outcomes into fatal and non-fatal errors."""

from collections.abc import Iterable
from typing import Any, NamedTuple

from app_upgrader.upgrade.errors import InvalidOutcomeError
from app_upgrader.upgrade.models import Batch, FatalError, JumpTo, NonFatalError, Outcome, Success


class Classification(NamedTuple):
    """Errors found in a batch, each list in reporting order."""

    fatal: list[Any]
    non_fatal: list[Any]


def classify(outcomes: Iterable[Outcome]) -> Classification:
    """Split the outcomes of a ``Batch`` or ``JumpTo`` into error buckets.

    Args:
        outcomes: Sub-outcomes of a single step.

    Returns:
        Classification with fatal and non-fatal errors.

    Raises:
        InvalidOutcomeError: If a batch is nested inside the batch, or an
            item is not an outcome at all.
    """
    fatal: list[Any] = []
    non_fatal: list[Any] = []

    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, FatalError):
            fatal.append(outcome.error)
        elif isinstance(outcome, NonFatalError):
            non_fatal.append(outcome.error)
        elif isinstance(outcome, Success):
            continue
        elif isinstance(outcome, (Batch, JumpTo)):
            raise InvalidOutcomeError(
                f"Nested {type(outcome).__name__} at position {index}; "
                "batches may only contain Success, NonFatalError and FatalError"
            )
        else:
            raise InvalidOutcomeError(
                f"Expected an Outcome at position {index}, got {type(outcome).__name__}"
            )

    return Classification(fatal=fatal, non_fatal=non_fatal)
