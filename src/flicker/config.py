from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from flicker.constants import (
    CONFIG_FILE_NAME,
    ENV_LOG_LEVEL,
    ENV_OUTPUT_DIR,
    ENV_REPETITIONS,
    ENV_SKIP_JANKY_RUNS,
    TRACES_DIR,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(slots=True, frozen=True)
class HarnessSettings:
    output_dir: Path = TRACES_DIR
    repetitions: int = 1
    skip_janky_runs: bool = False
    keep_artifacts: bool = False
    log_level: str = "WARNING"


def _load_yaml(path: Path) -> dict[str, Any]:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must be a mapping: {path}")
    return loaded


def _parse_repetitions(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"repetitions must be an integer; got: {raw!r}") from None
    if value < 1:
        raise ValueError(f"repetitions must be >= 1; got: {value}")
    return value


def _parse_bool(raw: Any, *, field_name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    normalized = str(raw).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{field_name} must be a boolean; got: {raw!r}")


def _parse_log_level(raw: Any) -> str:
    level = str(raw).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"log_level must be one of {'|'.join(sorted(_LOG_LEVELS))}; got: {raw}")
    return level


def _resolve_dir(raw: Any, base: Path) -> Path:
    path = Path(str(raw))
    if path.is_absolute():
        return path
    return (base / path).resolve()


def parse_settings(raw: Mapping[str, Any], *, base_dir: Path) -> HarnessSettings:
    unknown = sorted(set(raw) - {item.name for item in fields(HarnessSettings)})
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    defaults = HarnessSettings()
    return HarnessSettings(
        output_dir=_resolve_dir(raw.get("output_dir", defaults.output_dir), base_dir),
        repetitions=_parse_repetitions(raw.get("repetitions", defaults.repetitions)),
        skip_janky_runs=_parse_bool(raw.get("skip_janky_runs", False), field_name="skip_janky_runs"),
        keep_artifacts=_parse_bool(raw.get("keep_artifacts", False), field_name="keep_artifacts"),
        log_level=_parse_log_level(raw.get("log_level", defaults.log_level)),
    )


def load_settings(path: Path) -> HarnessSettings:
    settings = parse_settings(_load_yaml(path), base_dir=path.parent.resolve())
    logger.debug("Loaded settings from %s", path)
    return settings


def apply_env_overrides(settings: HarnessSettings, env: Mapping[str, str] | None = None) -> HarnessSettings:
    source = os.environ if env is None else env
    updated = settings
    if ENV_OUTPUT_DIR in source:
        updated = replace(updated, output_dir=Path(source[ENV_OUTPUT_DIR]))
    if ENV_REPETITIONS in source:
        updated = replace(updated, repetitions=_parse_repetitions(source[ENV_REPETITIONS]))
    if ENV_SKIP_JANKY_RUNS in source:
        updated = replace(
            updated,
            skip_janky_runs=_parse_bool(source[ENV_SKIP_JANKY_RUNS], field_name=ENV_SKIP_JANKY_RUNS),
        )
    if ENV_LOG_LEVEL in source:
        updated = replace(updated, log_level=_parse_log_level(source[ENV_LOG_LEVEL]))
    return updated


def resolve_settings(
    project_root: Path,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> HarnessSettings:
    """Load ``flicker.yaml`` (or ``config_path``) and apply environment overrides.

    Without a config file the defaults are used, with ``output_dir`` relative
    to ``project_root``.
    """
    candidate = config_path if config_path is not None else project_root / CONFIG_FILE_NAME
    if candidate.exists():
        settings = load_settings(candidate)
    elif config_path is not None:
        raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        settings = HarnessSettings(output_dir=(project_root / TRACES_DIR).resolve())
    return apply_env_overrides(settings, env)


__all__ = [
    "HarnessSettings",
    "apply_env_overrides",
    "load_settings",
    "parse_settings",
    "resolve_settings",
]
