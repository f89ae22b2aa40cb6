from __future__ import annotations

import re
from pathlib import Path

from flicker.constants import RUN_META_SUFFIX, TRACE_SUFFIX
from flicker.errors import InvalidTagError

_TAG_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_UNSAFE_NAME_RE = re.compile(r"[/\\\x00]")


def validate_tag(tag: str) -> str:
    if not tag:
        raise InvalidTagError("Tag name cannot be empty")
    if tag in {".", ".."} or not _TAG_RE.match(tag):
        raise InvalidTagError(
            f"Invalid tag `{tag}`. Use only letters, numbers, dot, underscore, or dash."
        )
    return tag


def validate_test_name(name: str) -> str:
    if not name.strip():
        raise ValueError("Test name cannot be empty")
    if name in {".", ".."} or _UNSAFE_NAME_RE.search(name):
        raise ValueError(f"Test name `{name}` cannot be used as a file name")
    return name


def validate_monitor_name(name: str) -> str:
    if not name or name in {".", ".."} or not _TAG_RE.match(name):
        raise ValueError(
            f"Invalid monitor name `{name}`. Use only letters, numbers, dot, underscore, or dash."
        )
    return name


def artifact_stem(test_name: str, index: int, tag: str | None = None) -> str:
    if tag is None:
        return f"{test_name}_{index}"
    return f"{test_name}_{index}_{tag}"


def trace_path(output_dir: Path, stem: str, monitor_name: str) -> Path:
    return output_dir / f"{stem}.{monitor_name}{TRACE_SUFFIX}"


def run_meta_path(output_dir: Path, test_name: str, index: int) -> Path:
    return output_dir / f"{artifact_stem(test_name, index)}{RUN_META_SUFFIX}"


__all__ = [
    "artifact_stem",
    "run_meta_path",
    "trace_path",
    "validate_monitor_name",
    "validate_tag",
    "validate_test_name",
]
