"""Assertion evaluation over captured runs.

Every assertion is evaluated independently and never short-circuits the
others; evaluating the same assertion twice over the same runs yields the
same failures since checks only read the immutable run data.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from flicker.assertions.models import AssertionData, AssertionFailure
from flicker.constants import ASSERTION_SCOPE_RESULT
from flicker.trace.models import TraceArtifact

if TYPE_CHECKING:
    from flicker.result import FlickerRunResult

logger = logging.getLogger(__name__)


def _invoke(assertion: AssertionData, subject: Any) -> str | None:
    try:
        outcome = assertion.check(subject)
    except AssertionError as exc:
        return str(exc) or "assertion failed"
    except Exception as exc:
        logger.warning("Assertion %s raised %s", assertion.name, type(exc).__name__)
        return f"check raised {type(exc).__name__}: {exc}"
    if outcome is False:
        return "check returned False"
    return None


def evaluate_assertion(
    assertion: AssertionData,
    runs: Sequence[FlickerRunResult],
) -> list[AssertionFailure]:
    """Return the failures of ``assertion`` over ``runs``; empty means it passed."""
    if assertion.scope == ASSERTION_SCOPE_RESULT:
        message = _invoke(assertion, tuple(runs))
        if message is None:
            return []
        return [AssertionFailure(assertion_name=assertion.name, message=message, flaky=assertion.flaky)]

    failures: list[AssertionFailure] = []
    for run in runs:
        message = _invoke(assertion, run)
        if message is not None:
            failures.append(
                AssertionFailure(
                    assertion_name=assertion.name,
                    message=message,
                    run_index=run.index,
                    flaky=assertion.flaky,
                )
            )
    return failures


def evaluate_assertions(
    assertions: Iterable[AssertionData],
    runs: Sequence[FlickerRunResult],
) -> list[AssertionFailure]:
    failures: list[AssertionFailure] = []
    for assertion in assertions:
        failures.extend(evaluate_assertion(assertion, runs))
    return failures


def select_assertions(assertions: Iterable[AssertionData], only_flaky: bool) -> list[AssertionData]:
    if only_flaky:
        return [assertion for assertion in assertions if assertion.flaky]
    return list(assertions)


def assert_all_states(
    trace: TraceArtifact,
    predicate: Callable[[Any], bool],
    description: str,
) -> None:
    violation = trace.first_violation(predicate)
    if violation is not None:
        raise AssertionError(f"[{trace.monitor_name}] {violation.describe(description)}")


def assert_any_state(
    trace: TraceArtifact,
    predicate: Callable[[Any], bool],
    description: str,
) -> None:
    if any(predicate(entry.state) for entry in trace.entries):
        return
    raise AssertionError(
        f"[{trace.monitor_name}] {description} never held across {len(trace.entries)} entries"
    )


__all__ = [
    "assert_all_states",
    "assert_any_state",
    "evaluate_assertion",
    "evaluate_assertions",
    "select_assertions",
]
