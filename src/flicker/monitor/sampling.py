from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from flicker.errors import ExecutionStateError
from flicker.trace.models import TraceArtifact, TraceEntry
from flicker.trace.naming import validate_monitor_name

logger = logging.getLogger(__name__)


class StateSamplingMonitor:
    """Trace monitor that records whatever ``probe`` returns.

    A sample is taken on ``start``, on every ``sample()`` call and on
    ``stop``. Phase commands or a state-sync helper call ``sample()`` to add
    intermediate points to the trace.
    """

    def __init__(
        self,
        name: str,
        probe: Callable[[], Any],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._name = validate_monitor_name(name)
        self._probe = probe
        self._clock = clock
        self._origin: float | None = None
        self._entries: list[TraceEntry] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._origin is not None

    def _take(self) -> TraceEntry:
        if self._origin is None:
            raise ExecutionStateError(f"Monitor `{self._name}` is not running")
        elapsed_ms = int((self._clock() - self._origin) * 1000)
        return TraceEntry(timestamp_ms=elapsed_ms, state=self._probe())

    def start(self) -> None:
        if self._origin is not None:
            raise ExecutionStateError(f"Monitor `{self._name}` is already running")
        self._origin = self._clock()
        try:
            first = self._take()
        except Exception:
            self._origin = None
            raise
        self._entries = [first]
        logger.debug("Monitor %s started", self._name)

    def sample(self) -> TraceEntry:
        entry = self._take()
        self._entries.append(entry)
        return entry

    def snapshot(self, tag: str) -> TraceArtifact:
        return TraceArtifact(monitor_name=self._name, entries=(self._take(),), tag=tag)

    def stop(self) -> TraceArtifact:
        try:
            self._entries.append(self._take())
            entries = tuple(self._entries)
        finally:
            self._origin = None
            self._entries = []
        logger.debug("Monitor %s stopped with %d entries", self._name, len(entries))
        return TraceArtifact(monitor_name=self._name, entries=entries)


__all__ = ["StateSamplingMonitor"]
