"""Flicker: run UI transitions repeatedly and assert on the captured traces."""
from __future__ import annotations

from flicker.assertions import AssertionData, AssertionFailure, assert_all_states, assert_any_state
from flicker.builder import FlickerBuilder
from flicker.errors import (
    ExecutionStateError,
    FlickerAssertionError,
    FlickerError,
    InvalidTagError,
    TransitionExecutionError,
)
from flicker.flicker import Flicker, FlickerConfig, FlickerState
from flicker.result import FlickerResult, FlickerRunResult
from flicker.runner import TransitionRunner
from flicker.trace import TraceArtifact, TraceEntry

__version__ = "0.1.0"

__all__ = [
    "AssertionData",
    "AssertionFailure",
    "ExecutionStateError",
    "Flicker",
    "FlickerAssertionError",
    "FlickerBuilder",
    "FlickerConfig",
    "FlickerError",
    "FlickerResult",
    "FlickerRunResult",
    "FlickerState",
    "InvalidTagError",
    "TraceArtifact",
    "TraceEntry",
    "TransitionExecutionError",
    "TransitionRunner",
    "__version__",
    "assert_all_states",
    "assert_any_state",
]
