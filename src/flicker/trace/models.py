from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any


@dataclass(slots=True, frozen=True)
class TraceEntry:
    timestamp_ms: int
    state: Any

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp_ms": self.timestamp_ms, "state": self.state}


@dataclass(slots=True, frozen=True)
class TraceViolation:
    entry_index: int
    entry: TraceEntry

    def describe(self, description: str) -> str:
        return (
            f"{description} violated at entry {self.entry_index} "
            f"(t={self.entry.timestamp_ms}ms): {self.entry.state!r}"
        )


@dataclass(slots=True, frozen=True)
class TraceArtifact:
    """Time-ordered state snapshots produced by one monitor."""

    monitor_name: str
    entries: tuple[TraceEntry, ...] = ()
    tag: str | None = None
    path: Path | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def states(self) -> list[Any]:
        return [entry.state for entry in self.entries]

    @property
    def first(self) -> TraceEntry | None:
        return self.entries[0] if self.entries else None

    @property
    def last(self) -> TraceEntry | None:
        return self.entries[-1] if self.entries else None

    def first_violation(self, predicate: Callable[[Any], bool]) -> TraceViolation | None:
        for index, entry in enumerate(self.entries):
            if not predicate(entry.state):
                return TraceViolation(entry_index=index, entry=entry)
        return None

    def with_path(self, path: Path) -> TraceArtifact:
        return replace(self, path=path)


__all__ = ["TraceArtifact", "TraceEntry", "TraceViolation"]
