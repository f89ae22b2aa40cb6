from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from flicker.constants import ASSERTION_SCOPE_RESULT, ASSERTION_SCOPE_RUN

if TYPE_CHECKING:
    from flicker.result import FlickerRunResult

AssertionScope = Literal["run", "result"]

RunCheck = Callable[["FlickerRunResult"], Any]
ResultCheck = Callable[[tuple["FlickerRunResult", ...]], Any]


@dataclass(slots=True, frozen=True)
class AssertionData:
    """A named check over captured traces.

    ``scope="run"`` checks receive one run at a time; ``scope="result"``
    checks receive every evaluated run at once, e.g. to compare repetitions.
    A check rejects by raising ``AssertionError`` or returning ``False``.
    """

    name: str
    check: Callable[[Any], Any]
    flaky: bool = False
    scope: AssertionScope = "run"

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Assertion name cannot be empty")
        if self.scope not in {ASSERTION_SCOPE_RUN, ASSERTION_SCOPE_RESULT}:
            raise ValueError(f"Assertion scope must be one of run|result; got: {self.scope}")
        if not callable(self.check):
            raise ValueError(f"Assertion `{self.name}` check must be callable")


@dataclass(slots=True, frozen=True)
class AssertionFailure:
    assertion_name: str
    message: str
    run_index: int | None = None
    flaky: bool = False

    def formatted(self) -> str:
        if self.run_index is None:
            return f"{self.assertion_name}: {self.message}"
        return f"{self.assertion_name} (run {self.run_index}): {self.message}"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "assertion": self.assertion_name,
            "message": self.message,
            "flaky": self.flaky,
        }
        if self.run_index is not None:
            payload["run_index"] = self.run_index
        return payload


__all__ = [
    "AssertionData",
    "AssertionFailure",
    "AssertionScope",
    "ResultCheck",
    "RunCheck",
]
