"""Test facade bundling the configuration of a transition test.

A ``Flicker`` executes its transition through a ``TransitionRunner``, keeps
the resulting ``FlickerResult`` and checks its assertions against it::

    flicker = builder.build()
    flicker.execute()
    flicker.check_assertions()
    flicker.clean_up()
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from flicker.assertions.models import AssertionData, AssertionFailure
from flicker.errors import FlickerAssertionError, TransitionExecutionError
from flicker.monitor.interfaces import FrameStatsMonitor, StateSyncHelper, TraceMonitor
from flicker.result import FlickerResult
from flicker.runner import TransitionRunner
from flicker.trace.models import TraceArtifact
from flicker.trace.naming import validate_test_name

logger = logging.getLogger(__name__)

Command = Callable[["Flicker"], Any]


class FlickerState(enum.Enum):
    NOT_EXECUTED = "not_executed"
    EXECUTING = "executing"
    EXECUTED_OK = "executed_ok"
    EXECUTED_WITH_ERROR = "executed_with_error"


@dataclass(slots=True, frozen=True)
class FlickerConfig:
    device: Any
    output_dir: Path
    test_name: str
    repetitions: int = 1
    frame_stats_monitor: FrameStatsMonitor | None = None
    trace_monitors: tuple[TraceMonitor, ...] = ()
    test_setup: tuple[Command, ...] = ()
    run_setup: tuple[Command, ...] = ()
    run_teardown: tuple[Command, ...] = ()
    test_teardown: tuple[Command, ...] = ()
    transitions: tuple[Command, ...] = ()
    assertions: tuple[AssertionData, ...] = ()
    runner: TransitionRunner = field(default_factory=TransitionRunner)
    state_sync: StateSyncHelper | None = None
    skip_janky_runs: bool = False

    def __post_init__(self) -> None:
        if self.repetitions < 1:
            raise ValueError(f"repetitions must be >= 1; got: {self.repetitions}")
        validate_test_name(self.test_name)
        names = [monitor.name for monitor in self.trace_monitors]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Trace monitor names must be unique; duplicated: {', '.join(duplicates)}")


class Flicker:
    def __init__(self, config: FlickerConfig) -> None:
        self._config = config
        self._result = FlickerResult()
        self._failures: tuple[AssertionFailure, ...] = ()
        self._executing = False

    @property
    def config(self) -> FlickerConfig:
        return self._config

    @property
    def device(self) -> Any:
        return self._config.device

    @property
    def output_dir(self) -> Path:
        return self._config.output_dir

    @property
    def test_name(self) -> str:
        return self._config.test_name

    @property
    def repetitions(self) -> int:
        return self._config.repetitions

    @property
    def assertions(self) -> tuple[AssertionData, ...]:
        return self._config.assertions

    @property
    def state_sync(self) -> StateSyncHelper | None:
        return self._config.state_sync

    @property
    def runner(self) -> TransitionRunner:
        return self._config.runner

    @property
    def result(self) -> FlickerResult:
        return self._result

    @property
    def state(self) -> FlickerState:
        if self._executing:
            return FlickerState.EXECUTING
        if self._result.is_empty():
            return FlickerState.NOT_EXECUTED
        if self._result.error is not None:
            return FlickerState.EXECUTED_WITH_ERROR
        return FlickerState.EXECUTED_OK

    def execute(self) -> Flicker:
        """Execute the transition and store its result.

        :raises TransitionExecutionError: if a phase command or monitor failed
        """
        self._executing = True
        try:
            result = self.runner.execute(self)
        finally:
            self._executing = False
        self._result = result
        self._failures = ()
        if result.error is not None:
            raise TransitionExecutionError("Unable to execute transition", result) from result.error
        return self

    def check_is_executed(self) -> None:
        self._result.check_is_executed()

    def check_assertions(self, only_flaky: bool = False) -> None:
        """Run the assertions on the traces, executing the transition first if needed.

        :param only_flaky: run only the assertions marked as flaky
        :raises FlickerAssertionError: if any assertion failed
        :raises TransitionExecutionError: if the transition could not be executed
        """
        if self._result.is_empty():
            self.execute()
        self._failures = ()
        failures = self._result.check_assertions(self.assertions, only_flaky)
        self._failures = tuple(failures)
        if failures:
            raise FlickerAssertionError(failures)

    @property
    def last_failures(self) -> tuple[AssertionFailure, ...]:
        return self._failures

    def clean_up(self) -> None:
        """Delete the traces of runs without assertion failures and reset the result."""
        self.runner.clean_up()
        self._result.clean_up(self._failures)
        self._result = FlickerResult()
        self._failures = ()

    def with_tag(self, tag: str, commands: Command | None = None) -> dict[str, TraceArtifact]:
        """Run ``commands`` and then snapshot every running trace monitor as ``tag``.

        :raises InvalidTagError: if ``tag`` cannot be used as a file name, before running anything
        """
        self.runner.check_tag(tag)
        if commands is not None:
            commands(self)
        return self.runner.create_tag(self, tag)

    def create_tag(self, tag: str) -> dict[str, TraceArtifact]:
        return self.with_tag(tag)

    def copy(self, new_assertion: AssertionData | None = None, new_name: str = "") -> Flicker:
        name = new_name if new_name else self.test_name
        assertions = (new_assertion,) if new_assertion is not None else ()
        return Flicker(replace(self._config, test_name=name, assertions=assertions))

    def __str__(self) -> str:
        return self.test_name

    def __repr__(self) -> str:
        return f"Flicker(test_name={self.test_name!r}, repetitions={self.repetitions}, state={self.state.name})"


__all__ = ["Command", "Flicker", "FlickerConfig", "FlickerState"]
