from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from flicker.builder import FlickerBuilder
from flicker.trace.models import TraceArtifact, TraceEntry


class FakeTraceMonitor:
    def __init__(self, name: str, events: list[str], fail_on_stop: bool = False) -> None:
        self._name = name
        self._events = events
        self._entries: list[TraceEntry] = []
        self.fail_on_stop = fail_on_stop
        self.running = False

    @property
    def name(self) -> str:
        return self._name

    def record(self, state: object) -> None:
        self._entries.append(TraceEntry(timestamp_ms=len(self._entries), state=state))

    def start(self) -> None:
        self._events.append(f"start:{self._name}")
        self.running = True
        self._entries = []
        self.record({"phase": "start"})

    def snapshot(self, tag: str) -> TraceArtifact:
        assert self.running
        self._events.append(f"snapshot:{self._name}:{tag}")
        return TraceArtifact(
            monitor_name=self._name,
            entries=(TraceEntry(timestamp_ms=len(self._entries), state={"tag": tag}),),
        )

    def stop(self) -> TraceArtifact:
        self._events.append(f"stop:{self._name}")
        self.running = False
        if self.fail_on_stop:
            raise RuntimeError(f"{self._name} could not be stopped")
        self.record({"phase": "stop"})
        return TraceArtifact(monitor_name=self._name, entries=tuple(self._entries))


class FakeFrameStatsMonitor:
    def __init__(self, events: list[str], jank_counts: list[int]) -> None:
        self._events = events
        self._jank_counts = list(jank_counts)

    def start(self) -> None:
        self._events.append("start:frames")

    def stop(self) -> int:
        self._events.append("stop:frames")
        return self._jank_counts.pop(0) if self._jank_counts else 0


def _append(events: list[str], label: str) -> Callable[[object], None]:
    def _command(_flicker: object) -> None:
        events.append(label)

    return _command


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def trace_monitor(events: list[str]) -> FakeTraceMonitor:
    return FakeTraceMonitor("wm", events)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "traces"


@pytest.fixture
def make_builder(
    output_dir: Path,
    events: list[str],
    trace_monitor: FakeTraceMonitor,
) -> Callable[..., FlickerBuilder]:
    """Builder with one trace monitor and every phase logging into ``events``."""

    def _make(test_name: str = "open_app", repetitions: int = 1) -> FlickerBuilder:
        builder = FlickerBuilder("device", output_dir=output_dir, test_name=test_name)
        builder.repeat(repetitions).with_trace_monitor(trace_monitor)
        builder.setup.test(_append(events, "test_setup"))
        builder.setup.each_run(_append(events, "run_setup"))
        builder.transitions(_append(events, "transition"))
        builder.teardown.each_run(_append(events, "run_teardown"))
        builder.teardown.test(_append(events, "test_teardown"))
        return builder

    return _make


@pytest.fixture
def make_monitor(events: list[str]) -> Callable[..., FakeTraceMonitor]:
    def _make(name: str, fail_on_stop: bool = False) -> FakeTraceMonitor:
        return FakeTraceMonitor(name, events, fail_on_stop=fail_on_stop)

    return _make


@pytest.fixture
def make_frame_stats(events: list[str]) -> Callable[[list[int]], FakeFrameStatsMonitor]:
    def _make(jank_counts: list[int]) -> FakeFrameStatsMonitor:
        return FakeFrameStatsMonitor(events, jank_counts)

    return _make
