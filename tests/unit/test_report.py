"""PYTEST_DONT_REWRITE"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from flicker.errors import FlickerAssertionError
from flicker.report import build_report, render_markdown, report_paths, write_reports


def test_report_for_failing_assertions(make_builder, output_dir: Path) -> None:
    def _first_run_only(run) -> None:
        assert run.index == 0, "focus lost"

    flicker = make_builder(repetitions=2).assertion("focus", _first_run_only, flaky=True).build()
    with pytest.raises(FlickerAssertionError) as info:
        flicker.check_assertions()

    report = build_report(flicker, info.value.failures)

    assert report["status"] == "fail"
    assert report["test_name"] == "open_app"
    assert [run["index"] for run in report["runs"]] == [0, 1]
    assert report["failures"] == [{"assertion": "focus", "message": "focus lost", "flaky": True, "run_index": 1}]
    assert report["assertions"] == [{"name": "focus", "flaky": True, "scope": "run"}]

    markdown = render_markdown(report)
    assert "## Flicker Report: open_app" in markdown
    assert "- Status: **FAIL**" in markdown
    assert "- `focus` (run 1) [flaky]: focus lost" in markdown

    json_path, md_path = report_paths(output_dir, flicker.test_name)
    write_reports(report, json_path, md_path)
    assert json.loads(json_path.read_text(encoding="utf-8"))["status"] == "fail"
    assert md_path.read_text(encoding="utf-8") == markdown


def test_report_for_passing_run(make_builder) -> None:
    flicker = make_builder().build()
    flicker.execute()

    report = build_report(flicker, [])

    assert report["status"] == "pass"
    assert report["error"] is None
    assert "No failures." in render_markdown(report)


def test_report_for_execution_error(make_builder) -> None:
    builder = make_builder()

    def _crash(_flicker) -> None:
        raise RuntimeError("device lost")

    builder.transitions(_crash)
    flicker = builder.build()
    with pytest.raises(Exception):
        flicker.execute()

    report = build_report(flicker, [])

    assert report["status"] == "error"
    assert report["error"] == "RuntimeError: device lost"
    assert "Execution error: `RuntimeError: device lost`" in render_markdown(report)
