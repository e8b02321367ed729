"""
Action contracts for workflow steps.

Every contract takes a validated step model and a page and returns an
ActionResult; driver failures never escape as exceptions.

Public API:
    - ActionResult: Uniform step outcome
    - parse_step: Validate a raw step declaration into its model
    - execute_action: Run a parsed step
    - execute_raw_step: Validate and run a raw step
"""

from .dispatch import execute_action, execute_raw_step
from .results import ActionResult, describe_error
from .schema import (
    ACTION_KINDS,
    ActionStep,
    ClickStep,
    ExtractField,
    ExtractStep,
    FillStep,
    NavigateBackStep,
    NavigateStep,
    PaginateStep,
    SessionCheckStep,
    SessionLoadStep,
    SessionSaveStep,
    WaitStep,
    parse_step,
)

__all__ = [
    "ACTION_KINDS",
    "ActionResult",
    "ActionStep",
    "ClickStep",
    "ExtractField",
    "ExtractStep",
    "FillStep",
    "NavigateBackStep",
    "NavigateStep",
    "PaginateStep",
    "SessionCheckStep",
    "SessionLoadStep",
    "SessionSaveStep",
    "WaitStep",
    "describe_error",
    "execute_action",
    "execute_raw_step",
    "parse_step",
]
