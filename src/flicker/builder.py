from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from flicker.assertions.models import AssertionData, AssertionScope
from flicker.flicker import Command, Flicker, FlickerConfig
from flicker.monitor.interfaces import FrameStatsMonitor, StateSyncHelper, TraceMonitor
from flicker.runner import TransitionRunner

if TYPE_CHECKING:
    from flicker.config import HarnessSettings


class SetupBuilder:
    """Registers setup commands. Each method returns the command so it can be used as a decorator."""

    def __init__(self) -> None:
        self._test: list[Command] = []
        self._each_run: list[Command] = []

    @property
    def test_commands(self) -> tuple[Command, ...]:
        return tuple(self._test)

    @property
    def each_run_commands(self) -> tuple[Command, ...]:
        return tuple(self._each_run)

    def test(self, command: Command) -> Command:
        """Run once, before the first repetition."""
        self._test.append(command)
        return command

    def each_run(self, command: Command) -> Command:
        """Run before every repetition, before the monitors start."""
        self._each_run.append(command)
        return command


class TeardownBuilder:
    def __init__(self) -> None:
        self._each_run: list[Command] = []
        self._test: list[Command] = []

    @property
    def each_run_commands(self) -> tuple[Command, ...]:
        return tuple(self._each_run)

    @property
    def test_commands(self) -> tuple[Command, ...]:
        return tuple(self._test)

    def each_run(self, command: Command) -> Command:
        """Run after every repetition, after the monitors stop."""
        self._each_run.append(command)
        return command

    def test(self, command: Command) -> Command:
        """Run once, after the last repetition."""
        self._test.append(command)
        return command


class FlickerBuilder:
    def __init__(
        self,
        device: Any = None,
        *,
        output_dir: Path,
        test_name: str,
        runner: TransitionRunner | None = None,
    ) -> None:
        self._device = device
        self._output_dir = output_dir
        self._test_name = test_name
        self._runner = runner or TransitionRunner()
        self._repetitions = 1
        self._frame_stats_monitor: FrameStatsMonitor | None = None
        self._trace_monitors: list[TraceMonitor] = []
        self._state_sync: StateSyncHelper | None = None
        self._skip_janky_runs = False
        self._transitions: list[Command] = []
        self._assertions: list[AssertionData] = []
        self.setup = SetupBuilder()
        self.teardown = TeardownBuilder()

    @classmethod
    def from_settings(
        cls,
        settings: HarnessSettings,
        *,
        test_name: str,
        device: Any = None,
    ) -> FlickerBuilder:
        builder = cls(device, output_dir=settings.output_dir, test_name=test_name)
        builder.repeat(settings.repetitions)
        builder.skip_janky_runs(settings.skip_janky_runs)
        return builder

    @property
    def test_name(self) -> str:
        return self._test_name

    def with_device(self, device: Any) -> FlickerBuilder:
        self._device = device
        return self

    def with_test_name(self, test_name: str) -> FlickerBuilder:
        self._test_name = test_name
        return self

    def repeat(self, repetitions: int) -> FlickerBuilder:
        if repetitions < 1:
            raise ValueError(f"repetitions must be >= 1; got: {repetitions}")
        self._repetitions = repetitions
        return self

    def with_frame_stats_monitor(self, monitor: FrameStatsMonitor | None) -> FlickerBuilder:
        self._frame_stats_monitor = monitor
        return self

    def with_trace_monitor(self, monitor: TraceMonitor) -> FlickerBuilder:
        self._trace_monitors.append(monitor)
        return self

    def with_state_sync(self, helper: StateSyncHelper | None) -> FlickerBuilder:
        self._state_sync = helper
        return self

    def skip_janky_runs(self, enabled: bool = True) -> FlickerBuilder:
        self._skip_janky_runs = enabled
        return self

    def transitions(self, command: Command) -> Command:
        self._transitions.append(command)
        return command

    def assertion(
        self,
        name: str,
        check: Callable[[Any], Any],
        *,
        flaky: bool = False,
        scope: AssertionScope = "run",
    ) -> FlickerBuilder:
        self._assertions.append(AssertionData(name=name, check=check, flaky=flaky, scope=scope))
        return self

    def build(self) -> Flicker:
        return Flicker(
            FlickerConfig(
                device=self._device,
                output_dir=self._output_dir,
                test_name=self._test_name,
                repetitions=self._repetitions,
                frame_stats_monitor=self._frame_stats_monitor,
                trace_monitors=tuple(self._trace_monitors),
                test_setup=self.setup.test_commands,
                run_setup=self.setup.each_run_commands,
                run_teardown=self.teardown.each_run_commands,
                test_teardown=self.teardown.test_commands,
                transitions=tuple(self._transitions),
                assertions=tuple(self._assertions),
                runner=self._runner,
                state_sync=self._state_sync,
                skip_janky_runs=self._skip_janky_runs,
            )
        )


__all__ = ["FlickerBuilder", "SetupBuilder", "TeardownBuilder"]
