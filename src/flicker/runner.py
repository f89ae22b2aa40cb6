"""Transition executor.

Runs the setup, transition and teardown phases of a test ``repetitions``
times, keeping trace monitors running around the transition phase only,
and records one ``FlickerRunResult`` per repetition.

Phase order for repetition ``i``::

    test_setup      (only when i == 0)
    run_setup
    start trace monitors, then the frame stats monitor
    transitions     (tags may be created here)
    stop monitors   (always, even if a transition command raised)
    run_teardown
    test_teardown   (only when i == repetitions - 1)

The first failing phase aborts the remaining phases of its run and every
later repetition.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING

from flicker.errors import ExecutionStateError, InvalidTagError
from flicker.monitor.interfaces import TraceMonitor
from flicker.result import FlickerResult, FlickerRunResult
from flicker.trace.io import write_run_meta, write_trace_artifact
from flicker.trace.models import TraceArtifact
from flicker.trace.naming import artifact_stem, run_meta_path, trace_path, validate_tag

if TYPE_CHECKING:
    from flicker.flicker import Command, Flicker, FlickerConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _RunInProgress:
    index: int
    monitors_running: bool = False
    traces: dict[str, TraceArtifact] = field(default_factory=dict)
    tags: dict[str, dict[str, TraceArtifact]] = field(default_factory=dict)
    jank_count: int | None = None
    paths: list[Path] = field(default_factory=list)


class TransitionRunner:
    def __init__(self) -> None:
        self._current: _RunInProgress | None = None

    @property
    def is_running(self) -> bool:
        return self._current is not None

    def execute(self, flicker: Flicker) -> FlickerResult:
        config = flicker.config
        self.clean_up()
        config.output_dir.mkdir(parents=True, exist_ok=True)
        runs: list[FlickerRunResult] = []
        logger.info("Executing %s (%d repetition(s))", config.test_name, config.repetitions)
        try:
            for index in range(config.repetitions):
                if index == 0:
                    self._run_commands(flicker, config.test_setup, "test setup")
                run = self._execute_run(flicker, index)
                runs.append(run)
                if run.error is not None:
                    logger.error(
                        "Repetition %d/%d of %s failed: %s",
                        index + 1,
                        config.repetitions,
                        config.test_name,
                        run.error,
                    )
                    return self._result(config, runs, run.error)
                if index == config.repetitions - 1:
                    self._run_commands(flicker, config.test_teardown, "test teardown")
        except Exception as exc:
            logger.error("Execution of %s aborted after %d run(s): %s", config.test_name, len(runs), exc)
            return self._result(config, runs, exc)
        return self._result(config, runs, None)

    def _result(
        self,
        config: FlickerConfig,
        runs: Sequence[FlickerRunResult],
        error: Exception | None,
    ) -> FlickerResult:
        return FlickerResult(
            runs=tuple(runs),
            error=error,
            skip_janky_runs=config.skip_janky_runs,
        )

    def _run_commands(self, flicker: Flicker, commands: Sequence[Command], phase: str) -> None:
        if not commands:
            return
        logger.debug("Running %d %s command(s)", len(commands), phase)
        for command in commands:
            command(flicker)

    def _execute_run(self, flicker: Flicker, index: int) -> FlickerRunResult:
        config = flicker.config
        progress = _RunInProgress(index=index)
        self._current = progress
        error: Exception | None = None
        logger.info("Starting repetition %d/%d of %s", index + 1, config.repetitions, config.test_name)
        try:
            self._run_commands(flicker, config.run_setup, "run setup")
            self._run_transition(flicker, progress)
            self._run_commands(flicker, config.run_teardown, "run teardown")
        except Exception as exc:
            error = exc
        finally:
            self._current = None

        meta_path = run_meta_path(config.output_dir, config.test_name, index)
        run = FlickerRunResult(
            index=index,
            traces=dict(progress.traces),
            tags={tag: dict(snapshots) for tag, snapshots in progress.tags.items()},
            error=error,
            jank_count=progress.jank_count,
            artifact_paths=(*progress.paths, meta_path),
        )
        write_run_meta(
            meta_path,
            {**run.to_dict(), "test_name": config.test_name, "files": [str(path) for path in progress.paths]},
        )
        if run.is_janky:
            logger.warning("Repetition %d of %s had %d janky frame(s)", index, config.test_name, run.jank_count)
        return run

    def _run_transition(self, flicker: Flicker, progress: _RunInProgress) -> None:
        config = flicker.config
        started: list[TraceMonitor] = []
        frame_stats_started = False
        try:
            for monitor in config.trace_monitors:
                monitor.start()
                started.append(monitor)
                logger.debug("Started monitor %s", monitor.name)
            if config.frame_stats_monitor is not None:
                config.frame_stats_monitor.start()
                frame_stats_started = True
            progress.monitors_running = True
            self._run_commands(flicker, config.transitions, "transition")
        finally:
            progress.monitors_running = False
            stop_error = self._stop_monitors(flicker.config, progress, started, frame_stats_started)
        # Only reached when the transition itself succeeded.
        if stop_error is not None:
            raise stop_error

    def _stop_monitors(
        self,
        config: FlickerConfig,
        progress: _RunInProgress,
        started: Sequence[TraceMonitor],
        frame_stats_started: bool,
    ) -> Exception | None:
        first_error: Exception | None = None
        if frame_stats_started and config.frame_stats_monitor is not None:
            try:
                progress.jank_count = int(config.frame_stats_monitor.stop())
            except Exception as exc:
                logger.warning("Frame stats monitor failed to stop: %s", exc)
                first_error = exc

        stem = artifact_stem(config.test_name, progress.index)
        for monitor in started:
            try:
                artifact = monitor.stop()
                path = trace_path(config.output_dir, stem, monitor.name)
                progress.traces[monitor.name] = write_trace_artifact(path, artifact)
                progress.paths.append(path)
                logger.debug("Stopped monitor %s", monitor.name)
            except Exception as exc:
                logger.warning("Monitor %s failed to stop: %s", monitor.name, exc)
                if first_error is None:
                    first_error = exc
        return first_error

    def _taggable_run(self, tag: str) -> _RunInProgress:
        validate_tag(tag)
        progress = self._current
        if progress is None or not progress.monitors_running:
            raise ExecutionStateError("Tags can only be created while a transition is running")
        if tag in progress.tags:
            raise InvalidTagError(f"Tag `{tag}` was already used in run {progress.index}")
        return progress

    def check_tag(self, tag: str) -> None:
        """Raise unless ``tag`` can be created in the current run."""
        self._taggable_run(tag)

    def create_tag(self, flicker: Flicker, tag: str) -> dict[str, TraceArtifact]:
        progress = self._taggable_run(tag)
        config = flicker.config
        stem = artifact_stem(config.test_name, progress.index, tag)
        snapshots: dict[str, TraceArtifact] = {}
        for monitor in config.trace_monitors:
            artifact = monitor.snapshot(tag)
            if artifact.tag is None:
                artifact = replace(artifact, tag=tag)
            path = trace_path(config.output_dir, stem, monitor.name)
            snapshots[monitor.name] = write_trace_artifact(path, artifact)
            progress.paths.append(path)
        progress.tags[tag] = snapshots
        logger.info("Created tag %s in run %d", tag, progress.index)
        return snapshots

    def clean_up(self) -> None:
        self._current = None


__all__ = ["TransitionRunner"]
