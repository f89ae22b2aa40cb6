from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import typer

from flicker.cli.engine import CommandOutcome, configure_logging, read_report, run_target
from flicker.config import resolve_settings
from flicker.constants import EXIT_ASSERTION_FAILURE, EXIT_INTERNAL_ERROR, EXIT_SUCCESS


def _version_callback(value: bool) -> None:
    if value:
        from flicker import __version__

        typer.echo(f"flicker {__version__}")
        raise typer.Exit()


app = typer.Typer(add_completion=False, help="Repeat UI transitions and assert on the captured traces")


@app.callback(invoke_without_command=True)
def _main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print version and exit."
    ),
) -> None:
    pass


def _emit_outcome(outcome: CommandOutcome) -> None:
    for error in outcome.errors:
        typer.echo(f"ERROR: {error}", err=True)
    for failure in outcome.failures:
        typer.echo(f"FAIL: {failure.formatted()}", err=True)

    if outcome.report_md is not None and outcome.report_md.exists():
        typer.echo(f"Report: {outcome.report_md}")
    if outcome.retained_runs and outcome.exit_code != EXIT_SUCCESS:
        retained = ", ".join(str(index) for index in outcome.retained_runs)
        typer.echo(f"Artifacts kept for run(s): {retained}", err=True)

    if outcome.exit_code == EXIT_SUCCESS:
        typer.echo(f"{outcome.test_name}: all assertions passed")
    elif outcome.exit_code == EXIT_ASSERTION_FAILURE:
        typer.echo(f"{outcome.test_name}: {len(outcome.failures)} assertion failure(s)", err=True)
    raise typer.Exit(outcome.exit_code)


@app.command()
def run(
    target: str = typer.Argument(..., help="Test factory as `module:function`"),
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    config: Path | None = typer.Option(None, "--config", help="Settings file (default: flicker.yaml)"),
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Directory for trace artifacts"),
    repetitions: int | None = typer.Option(None, "--repetitions", "-n", min=1, help="Override repetitions"),
    test_name: str | None = typer.Option(None, "--name", help="Test name used for artifact files"),
    only_flaky: bool = typer.Option(False, "--only-flaky", help="Check only the flaky assertions"),
    keep_artifacts: bool | None = typer.Option(
        None, "--keep-artifacts/--clean-artifacts", help="Keep trace files of passing runs"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
) -> None:
    """Execute a transition test, check its assertions and write a report."""
    try:
        settings = resolve_settings(project_root.resolve(), config)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(EXIT_INTERNAL_ERROR) from exc

    overrides: dict[str, Any] = {}
    if output_dir is not None:
        overrides["output_dir"] = output_dir.resolve()
    if repetitions is not None:
        overrides["repetitions"] = repetitions
    if keep_artifacts is not None:
        overrides["keep_artifacts"] = keep_artifacts
    if verbose:
        overrides["log_level"] = "INFO"
    settings = replace(settings, **overrides)
    configure_logging(settings.log_level)

    # Targets are imported relative to the project root.
    project_path = str(project_root.resolve())
    if project_path not in sys.path:
        sys.path.insert(0, project_path)

    outcome = run_target(target, settings, test_name=test_name, only_flaky=only_flaky)
    _emit_outcome(outcome)


@app.command()
def report(
    test_name: str = typer.Argument(..., help="Test name the report was written for"),
    project_root: Path = typer.Option(Path("."), "--project-root", help="Project root"),
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Directory holding the report"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of Markdown"),
) -> None:
    """Print the report of a previous run."""
    try:
        directory = output_dir if output_dir is not None else resolve_settings(project_root.resolve()).output_dir
        content = read_report(directory, test_name, as_json=as_json)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}. Run `flicker run` first to generate a report.", err=True)
        raise typer.Exit(EXIT_INTERNAL_ERROR) from exc

    if as_json:
        typer.echo(json.dumps(json.loads(content), indent=2, sort_keys=True))
    else:
        typer.echo(content)
    raise typer.Exit(EXIT_SUCCESS)
