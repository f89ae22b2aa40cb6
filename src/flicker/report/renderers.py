from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from flicker.assertions.models import AssertionFailure
from flicker.constants import REPORT_JSON_SUFFIX, REPORT_MD_SUFFIX
from flicker.flicker import Flicker

REPORT_SCHEMA_VERSION = "1"


def build_report(
    flicker: Flicker,
    failures: Sequence[AssertionFailure],
    error: str | None = None,
) -> dict[str, Any]:
    """Summarize the last execution of ``flicker``.

    ``error`` describes a failure that happened after the transition ran, e.g.
    no run left to check; the execution error of the result takes precedence.
    """
    result = flicker.result
    if result.error is not None:
        error = f"{type(result.error).__name__}: {result.error}"
    if error is not None:
        status = "error"
    elif failures:
        status = "fail"
    else:
        status = "pass"
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "test_name": flicker.test_name,
        "repetitions": flicker.repetitions,
        "status": status,
        "error": error,
        "runs": [run.to_dict() for run in result.runs],
        "janky_runs": [run.index for run in result.janky_runs],
        "assertions": [
            {"name": assertion.name, "flaky": assertion.flaky, "scope": assertion.scope}
            for assertion in flicker.assertions
        ],
        "failures": [failure.to_dict() for failure in failures],
    }


def render_markdown(report: dict[str, Any]) -> str:
    lines: list[str] = []
    lines.append(f"## Flicker Report: {report['test_name']}")
    lines.append("")
    lines.append(f"- Status: **{report['status'].upper()}**")
    lines.append(f"- Repetitions: **{report['repetitions']}** (recorded: {len(report['runs'])})")
    if report.get("error"):
        lines.append(f"- Execution error: `{report['error']}`")
    janky = report.get("janky_runs") or []
    if janky:
        lines.append(f"- Janky runs: {', '.join(str(index) for index in janky)}")

    lines.append("")
    lines.append("### Runs")
    lines.append("")
    if not report["runs"]:
        lines.append("No runs recorded.")
    else:
        lines.append("| Run | Traces | Tags | Jank | Error |")
        lines.append("|---:|---|---|---:|---|")
        for run in report["runs"]:
            traces = ", ".join(sorted(run["traces"])) or "-"
            tags = ", ".join(run["tags"]) or "-"
            jank = "-" if run["jank_count"] is None else str(run["jank_count"])
            error = run["error"] or "-"
            lines.append(f"| {run['index']} | {traces} | {tags} | {jank} | {error} |")

    lines.append("")
    lines.append("### Failures")
    lines.append("")
    if not report["failures"]:
        lines.append("No failures.")
    else:
        for failure in report["failures"]:
            location = f" (run {failure['run_index']})" if "run_index" in failure else ""
            flaky = " [flaky]" if failure.get("flaky") else ""
            lines.append(f"- `{failure['assertion']}`{location}{flaky}: {failure['message']}")

    lines.append("")
    return "\n".join(lines)


def report_paths(output_dir: Path, test_name: str) -> tuple[Path, Path]:
    return (
        output_dir / f"{test_name}{REPORT_JSON_SUFFIX}",
        output_dir / f"{test_name}{REPORT_MD_SUFFIX}",
    )


def write_reports(report: dict[str, Any], json_path: Path, md_path: Path) -> None:
    json_path.parent.mkdir(parents=True, exist_ok=True)
    md_path.parent.mkdir(parents=True, exist_ok=True)
    json_path.write_text(json.dumps(report, indent=2, sort_keys=True), encoding="utf-8")
    md_path.write_text(render_markdown(report), encoding="utf-8")
