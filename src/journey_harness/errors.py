"""Exception types raised by the journey harness."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ToolError(Exception):
    """Raised when a control cannot be resolved or an interaction fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class JourneyAssertionError(AssertionError):
    """Expected UI state never materialised.

    The message always carries the literal expected value together with what
    was actually observed on the page.
    """


class SubmissionError(JourneyAssertionError):
    """Submission produced neither a confirmation landmark nor a page change."""


class JourneyStepError(Exception):
    """A step of a ``JourneyBuilder`` pipeline raised."""

    def __init__(self, step_number: int, cause: BaseException) -> None:
        self.step_number = step_number
        self.cause = cause
        super().__init__(f"Journey failed at step {step_number}: {cause}")
