from flicker.assertions.engine import (
    assert_all_states,
    assert_any_state,
    evaluate_assertion,
    evaluate_assertions,
    select_assertions,
)
from flicker.assertions.models import AssertionData, AssertionFailure, AssertionScope

__all__ = [
    "AssertionData",
    "AssertionFailure",
    "AssertionScope",
    "assert_all_states",
    "assert_any_state",
    "evaluate_assertion",
    "evaluate_assertions",
    "select_assertions",
]
