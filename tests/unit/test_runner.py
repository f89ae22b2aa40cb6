from __future__ import annotations

from pathlib import Path

import pytest

from flicker.runner import TransitionRunner
from flicker.trace.io import read_run_meta, read_trace_artifact


def test_execute_runs_phases_in_order_around_monitors(make_builder, events) -> None:
    flicker = make_builder(repetitions=2).build()

    result = flicker.runner.execute(flicker)

    assert result.error is None
    assert events == [
        "test_setup",
        "run_setup",
        "start:wm",
        "transition",
        "stop:wm",
        "run_teardown",
        "run_setup",
        "start:wm",
        "transition",
        "stop:wm",
        "run_teardown",
        "test_teardown",
    ]


def test_execute_produces_one_trace_per_monitor_per_run(make_builder, make_monitor, output_dir: Path) -> None:
    builder = make_builder(repetitions=3)
    builder.with_trace_monitor(make_monitor("layers"))
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert [run.index for run in result.runs] == [0, 1, 2]
    for run in result.runs:
        assert sorted(run.traces) == ["layers", "wm"]
        assert run.traces["wm"].path == output_dir / f"open_app_{run.index}.wm.trace.jsonl"
        assert run.traces["layers"].path == output_dir / f"open_app_{run.index}.layers.trace.jsonl"
        assert run.traces["wm"].path.exists()

    stored = read_trace_artifact(output_dir / "open_app_1.wm.trace.jsonl")
    assert stored.monitor_name == "wm"
    assert stored.states == [{"phase": "start"}, {"phase": "stop"}]


def test_frame_stats_monitor_wraps_transition_and_records_jank(make_builder, make_frame_stats, events) -> None:
    builder = make_builder(repetitions=2)
    builder.with_frame_stats_monitor(make_frame_stats([0, 4]))
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert events[2:6] == ["start:wm", "start:frames", "transition", "stop:frames"]
    assert [run.jank_count for run in result.runs] == [0, 4]
    assert [run.index for run in result.janky_runs] == [1]


def test_transition_failure_stops_monitors_and_aborts_later_repetitions(
    make_builder, events, output_dir: Path
) -> None:
    builder = make_builder(repetitions=3)
    calls = {"count": 0}

    def _flaky_transition(_flicker) -> None:
        calls["count"] += 1
        if calls["count"] == 2:
            raise RuntimeError("app did not open")

    builder.transitions(_flaky_transition)
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert isinstance(result.error, RuntimeError)
    assert len(result.runs) == 2
    assert result.runs[0].succeeded
    assert result.runs[1].error is result.error
    assert events.count("start:wm") == events.count("stop:wm") == 2
    assert events.count("run_teardown") == 1
    assert "test_teardown" not in events
    assert (output_dir / "open_app_1.wm.trace.jsonl").exists()
    assert not (output_dir / "open_app_2.wm.trace.jsonl").exists()


def test_setup_failure_before_any_run_sets_global_error(make_builder, events) -> None:
    builder = make_builder(repetitions=2)

    def _broken_setup(_flicker) -> None:
        raise OSError("device offline")

    builder.setup.test(_broken_setup)
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert result.runs == ()
    assert isinstance(result.error, OSError)
    assert not result.is_empty()
    assert not result.is_executed
    assert "start:wm" not in events


def test_run_setup_failure_is_recorded_on_the_run_without_starting_monitors(make_builder, events) -> None:
    builder = make_builder(repetitions=2)

    def _broken_run_setup(_flicker) -> None:
        raise RuntimeError("launcher missing")

    builder.setup.each_run(_broken_run_setup)
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert len(result.runs) == 1
    assert result.runs[0].traces == {}
    assert isinstance(result.runs[0].error, RuntimeError)
    assert "start:wm" not in events


def test_monitor_stop_failure_becomes_run_error(make_builder, make_monitor, events) -> None:
    builder = make_builder(repetitions=2)
    builder.with_trace_monitor(make_monitor("broken", fail_on_stop=True))
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert len(result.runs) == 1
    assert "could not be stopped" in str(result.error)
    assert "wm" in result.runs[0].traces
    assert "broken" not in result.runs[0].traces
    assert "run_teardown" not in events


def test_test_teardown_failure_keeps_runs_and_sets_error(make_builder) -> None:
    builder = make_builder(repetitions=2)

    def _broken_teardown(_flicker) -> None:
        raise RuntimeError("cannot go home")

    builder.teardown.test(_broken_teardown)
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    assert len(result.runs) == 2
    assert all(run.succeeded for run in result.runs)
    assert isinstance(result.error, RuntimeError)


def test_run_meta_summarizes_each_run(make_builder, make_frame_stats, output_dir: Path) -> None:
    builder = make_builder(repetitions=1)
    builder.with_frame_stats_monitor(make_frame_stats([2]))
    flicker = builder.build()

    result = flicker.runner.execute(flicker)

    meta_path = output_dir / "open_app_0.meta.json"
    assert meta_path in result.runs[0].artifact_paths
    meta = read_run_meta(meta_path)
    assert meta["index"] == 0
    assert meta["test_name"] == "open_app"
    assert meta["jank_count"] == 2
    assert meta["error"] is None
    assert meta["files"] == [str(output_dir / "open_app_0.wm.trace.jsonl")]


def test_commands_receive_the_flicker_facade(make_builder) -> None:
    builder = make_builder()
    seen = []
    builder.transitions(lambda flicker: seen.append((flicker.test_name, flicker.device)))
    flicker = builder.build()

    flicker.runner.execute(flicker)

    assert seen == [("open_app", "device")]


def test_runner_is_idle_outside_execution(make_builder) -> None:
    builder = make_builder()
    states = []
    builder.transitions(lambda flicker: states.append(flicker.runner.is_running))
    flicker = builder.build()
    runner: TransitionRunner = flicker.runner

    runner.execute(flicker)

    assert states == [True]
    assert not runner.is_running


@pytest.mark.parametrize("repetitions", [1, 2, 5])
def test_repetitions_produce_matching_run_count(make_builder, repetitions: int) -> None:
    flicker = make_builder(repetitions=repetitions).build()

    result = flicker.runner.execute(flicker)

    assert len(result.runs) == repetitions
    assert result.is_executed
