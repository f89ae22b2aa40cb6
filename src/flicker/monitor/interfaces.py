"""Capabilities the engine consumes from device-side collaborators."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from flicker.trace.models import TraceArtifact


@runtime_checkable
class TraceMonitor(Protocol):
    """Captures a trace between ``start`` and ``stop``.

    ``snapshot`` is only called while the monitor is running and must not
    interrupt the ongoing capture.
    """

    @property
    def name(self) -> str: ...

    def start(self) -> None: ...

    def stop(self) -> TraceArtifact: ...

    def snapshot(self, tag: str) -> TraceArtifact: ...


@runtime_checkable
class FrameStatsMonitor(Protocol):
    """Counts janky frames between ``start`` and ``stop``."""

    def start(self) -> None: ...

    def stop(self) -> int: ...


@runtime_checkable
class StateSyncHelper(Protocol):
    def wait_for_idle(self) -> None: ...


__all__ = ["FrameStatsMonitor", "StateSyncHelper", "TraceMonitor"]
