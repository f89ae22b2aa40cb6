"""Exceptions raised by the flicker engine.

Execution failures, execution-state misuse and assertion failures are kept
in disjoint classes so callers can tell a transition that could not run
apart from one that ran and misbehaved.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flicker.assertions.models import AssertionFailure
    from flicker.result import FlickerResult


class FlickerError(Exception):
    pass


class ExecutionStateError(FlickerError, RuntimeError):
    """Raised when an operation needs an execution state the test is not in."""


class TransitionExecutionError(FlickerError, RuntimeError):
    """Raised by ``Flicker.execute`` when a phase command or monitor failed."""

    def __init__(self, message: str, result: FlickerResult) -> None:
        super().__init__(message)
        self.result = result


class InvalidTagError(FlickerError, ValueError):
    pass


class FlickerAssertionError(AssertionError):
    def __init__(self, failures: Sequence[AssertionFailure]) -> None:
        self.failures = list(failures)
        super().__init__("\n".join(failure.formatted() for failure in self.failures))


__all__ = [
    "ExecutionStateError",
    "FlickerAssertionError",
    "FlickerError",
    "InvalidTagError",
    "TransitionExecutionError",
]
