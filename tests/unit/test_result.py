from __future__ import annotations

from pathlib import Path

import pytest

from flicker.assertions.models import AssertionData, AssertionFailure
from flicker.errors import ExecutionStateError
from flicker.result import FlickerResult, FlickerRunResult
from flicker.trace.models import TraceArtifact


def _run_with_file(tmp_path: Path, index: int, jank_count: int | None = None, error: Exception | None = None):
    path = tmp_path / f"t_{index}.wm.trace.jsonl"
    path.write_text("{}\n", encoding="utf-8")
    return FlickerRunResult(
        index=index,
        traces={"wm": TraceArtifact(monitor_name="wm", path=path)},
        jank_count=jank_count,
        error=error,
        artifact_paths=(path,),
    )


def test_empty_result() -> None:
    result = FlickerResult()

    assert result.is_empty()
    assert not result.is_executed
    with pytest.raises(ExecutionStateError, match="not executed"):
        result.check_is_executed()


def test_result_with_error_is_not_executed(tmp_path: Path) -> None:
    result = FlickerResult(runs=(_run_with_file(tmp_path, 0),), error=RuntimeError("boom"))

    assert not result.is_empty()
    assert not result.is_executed
    with pytest.raises(ExecutionStateError, match="boom"):
        result.check_is_executed()
    with pytest.raises(ExecutionStateError):
        result.check_assertions([AssertionData(name="x", check=lambda run: None)])


def test_janky_runs_are_skipped_when_requested(tmp_path: Path) -> None:
    runs = (_run_with_file(tmp_path, 0, jank_count=0), _run_with_file(tmp_path, 1, jank_count=3))
    seen: list[int] = []

    def _record(run: FlickerRunResult) -> None:
        seen.append(run.index)

    assertion = AssertionData(name="record", check=_record)
    FlickerResult(runs=runs).check_assertions([assertion])
    FlickerResult(runs=runs, skip_janky_runs=True).check_assertions([assertion])

    assert seen == [0, 1, 0]


def test_all_janky_runs_cannot_be_asserted(tmp_path: Path) -> None:
    result = FlickerResult(runs=(_run_with_file(tmp_path, 0, jank_count=1),), skip_janky_runs=True)

    with pytest.raises(ExecutionStateError, match="janky"):
        result.check_assertions([])


def test_clean_up_deletes_runs_without_failures(tmp_path: Path) -> None:
    runs = tuple(_run_with_file(tmp_path, index) for index in range(3))
    result = FlickerResult(runs=runs)

    retained = result.clean_up([AssertionFailure(assertion_name="a", message="m", run_index=2)])

    assert [run.index for run in retained] == [2]
    assert [path.exists() for run in runs for path in run.artifact_paths] == [False, False, True]


def test_clean_up_keeps_everything_after_cross_run_failure(tmp_path: Path) -> None:
    runs = tuple(_run_with_file(tmp_path, index) for index in range(2))

    retained = FlickerResult(runs=runs).clean_up([AssertionFailure(assertion_name="a", message="m")])

    assert len(retained) == 2
    assert all(path.exists() for run in runs for path in run.artifact_paths)


def test_clean_up_keeps_runs_with_errors(tmp_path: Path) -> None:
    runs = (_run_with_file(tmp_path, 0), _run_with_file(tmp_path, 1, error=RuntimeError("x")))

    retained = FlickerResult(runs=runs, error=runs[1].error).clean_up()

    assert [run.index for run in retained] == [1]


def test_run_trace_lookup_names_known_monitors(tmp_path: Path) -> None:
    run = _run_with_file(tmp_path, 0)

    with pytest.raises(KeyError, match="have: wm"):
        run.trace("layers")
    with pytest.raises(KeyError, match="No tag `mid`"):
        run.tag("mid")
