from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from flicker.assertions.engine import evaluate_assertions, select_assertions
from flicker.assertions.models import AssertionData, AssertionFailure
from flicker.errors import ExecutionStateError
from flicker.trace.models import TraceArtifact

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FlickerRunResult:
    """Outcome of one repetition: its traces, tags and optional error."""

    index: int
    traces: Mapping[str, TraceArtifact] = field(default_factory=dict)
    tags: Mapping[str, Mapping[str, TraceArtifact]] = field(default_factory=dict)
    error: Exception | None = None
    jank_count: int | None = None
    artifact_paths: tuple[Path, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def is_janky(self) -> bool:
        return bool(self.jank_count)

    def trace(self, monitor_name: str) -> TraceArtifact:
        try:
            return self.traces[monitor_name]
        except KeyError:
            known = ", ".join(sorted(self.traces)) or "none"
            raise KeyError(f"No trace from monitor `{monitor_name}` in run {self.index} (have: {known})") from None

    def tag(self, tag: str) -> Mapping[str, TraceArtifact]:
        try:
            return self.tags[tag]
        except KeyError:
            raise KeyError(f"No tag `{tag}` in run {self.index}") from None

    def delete_artifacts(self) -> int:
        deleted = 0
        for path in self.artifact_paths:
            if path.exists():
                path.unlink()
                deleted += 1
        return deleted

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "traces": {name: str(trace.path) if trace.path else None for name, trace in sorted(self.traces.items())},
            "tags": sorted(self.tags),
            "jank_count": self.jank_count,
            "error": None if self.error is None else f"{type(self.error).__name__}: {self.error}",
        }


@dataclass(slots=True, frozen=True)
class FlickerResult:
    """Aggregated runs of one execution cycle.

    A result is never mutated: re-executing or cleaning up a test replaces
    it with a new instance.
    """

    runs: tuple[FlickerRunResult, ...] = ()
    error: Exception | None = None
    skip_janky_runs: bool = False

    def is_empty(self) -> bool:
        return not self.runs and self.error is None

    @property
    def is_executed(self) -> bool:
        return bool(self.runs) and self.error is None

    @property
    def janky_runs(self) -> tuple[FlickerRunResult, ...]:
        return tuple(run for run in self.runs if run.is_janky)

    @property
    def evaluated_runs(self) -> tuple[FlickerRunResult, ...]:
        if not self.skip_janky_runs:
            return self.runs
        return tuple(run for run in self.runs if not run.is_janky)

    def check_is_executed(self) -> None:
        if self.error is not None:
            raise ExecutionStateError(f"Transition failed to execute: {self.error}")
        if not self.runs:
            raise ExecutionStateError("Transition was not executed")

    def check_assertions(
        self,
        assertions: Iterable[AssertionData],
        only_flaky: bool = False,
    ) -> list[AssertionFailure]:
        self.check_is_executed()
        runs = self.evaluated_runs
        if not runs:
            raise ExecutionStateError(f"All {len(self.runs)} run(s) were janky; nothing to assert on")
        if len(runs) != len(self.runs):
            logger.info("Skipping %d janky run(s)", len(self.runs) - len(runs))
        selected = select_assertions(assertions, only_flaky)
        failures = evaluate_assertions(selected, runs)
        logger.info("Evaluated %d assertion(s): %d failure(s)", len(selected), len(failures))
        return failures

    def clean_up(self, failures: Sequence[AssertionFailure] = ()) -> list[FlickerRunResult]:
        """Delete the artifacts of runs without failures; return the retained runs."""
        cross_run_failure = any(failure.run_index is None for failure in failures)
        failed_indices = {failure.run_index for failure in failures}
        retained: list[FlickerRunResult] = []
        for run in self.runs:
            if cross_run_failure or run.index in failed_indices or run.error is not None:
                retained.append(run)
                continue
            deleted = run.delete_artifacts()
            logger.debug("Deleted %d artifact(s) of run %d", deleted, run.index)
        for run in retained:
            logger.warning("Keeping artifacts of run %d for inspection", run.index)
        return retained


__all__ = ["FlickerResult", "FlickerRunResult"]
