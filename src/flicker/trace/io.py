from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from flicker.trace.models import TraceArtifact, TraceEntry

logger = logging.getLogger(__name__)


def _dumps(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=repr)


def write_trace_artifact(path: Path, artifact: TraceArtifact) -> TraceArtifact:
    """Write ``artifact`` as JSONL and return a copy pointing at ``path``.

    The first line is a header carrying the monitor name, tag and metadata;
    each following line is one entry.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    header = {
        "monitor": artifact.monitor_name,
        "tag": artifact.tag,
        "metadata": artifact.metadata,
    }
    with path.open("w", encoding="utf-8") as handle:
        handle.write(_dumps(header))
        handle.write("\n")
        for entry in artifact.entries:
            handle.write(_dumps(entry.to_dict()))
            handle.write("\n")
    logger.debug("Wrote %d trace entries to %s", len(artifact.entries), path)
    return artifact.with_path(path)


def read_trace_artifact(path: Path) -> TraceArtifact:
    header: dict[str, Any] | None = None
    entries: list[TraceEntry] = []
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped:
                continue
            payload = json.loads(stripped)
            if not isinstance(payload, dict):
                raise ValueError(f"Trace line must be an object: {path}")
            if header is None:
                header = payload
                continue
            entries.append(
                TraceEntry(
                    timestamp_ms=int(payload.get("timestamp_ms", 0)),
                    state=payload.get("state"),
                )
            )
    if header is None:
        raise ValueError(f"Trace file is empty: {path}")
    return TraceArtifact(
        monitor_name=str(header.get("monitor", "")),
        entries=tuple(entries),
        tag=header.get("tag"),
        path=path,
        metadata=dict(header.get("metadata") or {}),
    )


def write_run_meta(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, sort_keys=True, indent=2, default=repr), encoding="utf-8")


def read_run_meta(path: Path) -> dict[str, Any]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Run meta payload must be an object")
    return raw


__all__ = [
    "read_run_meta",
    "read_trace_artifact",
    "write_run_meta",
    "write_trace_artifact",
]
