from __future__ import annotations

from pathlib import Path

STATE_DIR = Path(".flicker")
TRACES_DIR = STATE_DIR / "traces"
CONFIG_FILE_NAME = "flicker.yaml"

TRACE_SUFFIX = ".trace.jsonl"
RUN_META_SUFFIX = ".meta.json"
REPORT_JSON_SUFFIX = ".report.json"
REPORT_MD_SUFFIX = ".report.md"

ASSERTION_SCOPE_RUN = "run"
ASSERTION_SCOPE_RESULT = "result"

ENV_OUTPUT_DIR = "FLICKER_OUTPUT_DIR"
ENV_REPETITIONS = "FLICKER_REPETITIONS"
ENV_SKIP_JANKY_RUNS = "FLICKER_SKIP_JANKY_RUNS"
ENV_LOG_LEVEL = "FLICKER_LOG_LEVEL"

EXIT_SUCCESS = 0
EXIT_ASSERTION_FAILURE = 1
EXIT_INTERNAL_ERROR = 2
