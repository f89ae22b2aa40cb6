"""Orchestration behind the ``flicker`` commands."""
from __future__ import annotations

import importlib
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from flicker.assertions.models import AssertionFailure
from flicker.builder import FlickerBuilder
from flicker.config import HarnessSettings
from flicker.constants import EXIT_ASSERTION_FAILURE, EXIT_INTERNAL_ERROR, EXIT_SUCCESS
from flicker.errors import ExecutionStateError, FlickerAssertionError, TransitionExecutionError
from flicker.report import build_report, report_paths, write_reports

logger = logging.getLogger(__name__)

_TARGET_RE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$")


@dataclass(slots=True)
class CommandOutcome:
    exit_code: int
    test_name: str | None = None
    failures: list[AssertionFailure] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    retained_runs: list[int] = field(default_factory=list)
    report_json: Path | None = None
    report_md: Path | None = None


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_target(target: str) -> Callable[[FlickerBuilder], Any]:
    """Resolve ``package.module:function`` to the function it names."""
    if not _TARGET_RE.match(target):
        raise ValueError(f"Target must look like `module:function`; got: {target}")
    module_name, attribute = target.split(":", 1)
    module = importlib.import_module(module_name)
    factory = getattr(module, attribute, None)
    if factory is None or not callable(factory):
        raise ValueError(f"`{attribute}` in module `{module_name}` is not callable")
    return factory


def run_target(
    target: str,
    settings: HarnessSettings,
    *,
    test_name: str | None = None,
    only_flaky: bool = False,
) -> CommandOutcome:
    try:
        factory = load_target(target)
    except (ImportError, ValueError) as exc:
        return CommandOutcome(exit_code=EXIT_INTERNAL_ERROR, errors=[str(exc)])

    name = test_name or target.split(":", 1)[1]
    builder = FlickerBuilder.from_settings(settings, test_name=name)
    try:
        returned = factory(builder)
        if isinstance(returned, FlickerBuilder):
            builder = returned
        flicker = builder.build()
    except ValueError as exc:
        return CommandOutcome(exit_code=EXIT_INTERNAL_ERROR, test_name=name, errors=[str(exc)])
    except Exception as exc:
        logger.debug("Test factory %s failed", target, exc_info=True)
        return CommandOutcome(
            exit_code=EXIT_INTERNAL_ERROR,
            test_name=name,
            errors=[f"Test factory `{target}` failed: {type(exc).__name__}: {exc}"],
        )

    outcome = CommandOutcome(exit_code=EXIT_SUCCESS, test_name=flicker.test_name)
    try:
        flicker.check_assertions(only_flaky=only_flaky)
    except TransitionExecutionError as exc:
        cause = exc.__cause__
        outcome.exit_code = EXIT_INTERNAL_ERROR
        outcome.errors.append(f"{exc}: {cause}" if cause is not None else str(exc))
    except ExecutionStateError as exc:
        outcome.exit_code = EXIT_INTERNAL_ERROR
        outcome.errors.append(str(exc))
    except FlickerAssertionError as exc:
        outcome.exit_code = EXIT_ASSERTION_FAILURE
        outcome.failures = list(exc.failures)

    report = build_report(flicker, outcome.failures, error=outcome.errors[0] if outcome.errors else None)
    json_path, md_path = report_paths(flicker.output_dir, flicker.test_name)
    write_reports(report, json_path, md_path)
    outcome.report_json = json_path
    outcome.report_md = md_path

    if outcome.exit_code == EXIT_INTERNAL_ERROR or settings.keep_artifacts:
        outcome.retained_runs = [run.index for run in flicker.result.runs]
        logger.info("Keeping all artifacts under %s", flicker.output_dir)
    else:
        failed = {failure.run_index for failure in outcome.failures}
        if None in failed:
            outcome.retained_runs = [run.index for run in flicker.result.runs]
        else:
            outcome.retained_runs = sorted(index for index in failed if index is not None)
        flicker.clean_up()
    return outcome


def read_report(output_dir: Path, test_name: str, *, as_json: bool = False) -> str:
    json_path, md_path = report_paths(output_dir, test_name)
    target = json_path if as_json else md_path
    if not target.exists():
        raise FileNotFoundError(f"No report found at {target}")
    return target.read_text(encoding="utf-8")


__all__ = [
    "CommandOutcome",
    "configure_logging",
    "load_target",
    "read_report",
    "run_target",
]
