"""
Uniform result shape shared by every action contract.

Action contracts never raise past their boundary: every outcome, including
driver exceptions, is reported as an ActionResult whose message carries
enough context (selector, timeout, URL) to diagnose the failure without
re-running the step.
"""

from dataclasses import dataclass
from typing import Any

UNKNOWN_ERROR = "Unknown error"


@dataclass
class ActionResult:
    """
    Outcome of one action contract.

    Attributes:
        success: Whether the action achieved its goal
        message: Human-readable summary (the error description on failure)
        data: Optional payload (extracted records, waited duration, ...)
        pages_visited: Pages walked, set only by actions that move between pages
    """

    success: bool
    message: str
    data: Any = None
    pages_visited: int | None = None

    @classmethod
    def ok(cls, message: str, data: Any = None, **kwargs: Any) -> "ActionResult":
        return cls(success=True, message=message, data=data, **kwargs)

    @classmethod
    def fail(cls, message: str, data: Any = None, **kwargs: Any) -> "ActionResult":
        return cls(success=False, message=message, data=data, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.pages_visited is not None:
            result["pages_visited"] = self.pages_visited
        return result


def describe_error(error: object) -> str:
    """
    Turn anything that was raised into a non-empty message.

    Exceptions with a message keep it. Exceptions without one, and raised
    values that are not exceptions at all, become "Unknown error".

    Examples:
        >>> describe_error(ValueError("Invalid selector"))
        'Invalid selector'
        >>> describe_error(RuntimeError())
        'Unknown error (RuntimeError)'
        >>> describe_error("boom")
        'Unknown error'
    """
    if isinstance(error, BaseException):
        message = str(error).strip()
        if message:
            return message
        return f"{UNKNOWN_ERROR} ({type(error).__name__})"
    return UNKNOWN_ERROR
