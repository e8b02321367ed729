"""
Action dispatch.

execute_action() maps each step model to its contract with an exhaustive
match over the closed ActionStep union. execute_raw_step() validates a raw
declaration first and reports validation problems as a failed result.
"""

import logging
from typing import Any, assert_never

from ..exceptions import StepValidationError
from ..retry import RetryOptions
from ..session import SessionManager
from .click import click
from .extract import extract
from .fill import fill
from .navigate import navigate, navigate_back
from .paginate import paginate
from .results import ActionResult, describe_error
from .schema import (
    ActionStep,
    ClickStep,
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
from .session_actions import session_check, session_load, session_save
from .wait import wait

logger = logging.getLogger(__name__)


async def execute_action(
    step: ActionStep,
    page: Any,
    *,
    session_manager: SessionManager | None = None,
    retry_options: RetryOptions | None = None,
) -> ActionResult:
    """
    Run one validated step against a page.

    Args:
        step: Parsed step model
        page: Playwright Page
        session_manager: Manager used by session_* steps
        retry_options: Retry policy applied to navigation

    Returns:
        ActionResult of the step's contract
    """
    try:
        match step:
            case NavigateStep():
                return await navigate(step, page, retry_options)
            case NavigateBackStep():
                return await navigate_back(step, page)
            case WaitStep():
                return await wait(step, page)
            case ClickStep():
                return await click(step, page)
            case FillStep():
                return await fill(step, page)
            case ExtractStep():
                return await extract(step, page)
            case PaginateStep():
                return await paginate(step, page)
            case SessionLoadStep():
                return await session_load(step, page, session_manager)
            case SessionSaveStep():
                return await session_save(step, page, session_manager)
            case SessionCheckStep():
                return await session_check(step, page, session_manager)
            case _:
                assert_never(step)
    except Exception as e:
        # Contracts handle their own failures; this catches dispatch bugs
        logger.error(f"Unhandled error in {type(step).__name__}: {e}", exc_info=True)
        return ActionResult.fail(f"{type(step).__name__} failed: {describe_error(e)}")


async def execute_raw_step(
    raw: Any,
    page: Any,
    *,
    session_manager: SessionManager | None = None,
    retry_options: RetryOptions | None = None,
) -> ActionResult:
    """Validate a raw step declaration, then execute it."""
    try:
        step = parse_step(raw)
    except StepValidationError as e:
        return ActionResult.fail(str(e))

    return await execute_action(
        step, page, session_manager=session_manager, retry_options=retry_options
    )
