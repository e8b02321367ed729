"""
Session contracts: session_load, session_save and session_check.

A manager passed by the caller is used as-is. Without one, the shared
manager for the step's sessions_dir (or the default directory) is taken
from the session registry.
"""

import logging
from typing import Any

from ..config.constants import DEFAULT_SESSIONS_DIR
from ..session import SessionManager, get_session_manager
from .results import ActionResult, describe_error
from .schema import SessionCheckStep, SessionLoadStep, SessionSaveStep

logger = logging.getLogger(__name__)


def _resolve_manager(
    step: SessionLoadStep | SessionSaveStep | SessionCheckStep,
    session_manager: SessionManager | None,
) -> SessionManager:
    if session_manager is not None:
        return session_manager
    return get_session_manager(step.sessions_dir or DEFAULT_SESSIONS_DIR)


async def session_load(
    step: SessionLoadStep,
    page: Any,
    session_manager: SessionManager | None = None,
) -> ActionResult:
    """Load a named session into the page's browser context."""
    try:
        manager = _resolve_manager(step, session_manager)
        loaded = await manager.load_session(page.context, step.session_name)
    except Exception as e:
        return ActionResult.fail(
            f'Loading session "{step.session_name}" failed: {describe_error(e)}'
        )

    if not loaded:
        return ActionResult.fail(
            f'Session "{step.session_name}" not found, expired or empty '
            f"in {manager.sessions_dir}"
        )
    return ActionResult.ok(f'Session "{step.session_name}" loaded')


async def session_save(
    step: SessionSaveStep,
    page: Any,
    session_manager: SessionManager | None = None,
) -> ActionResult:
    """Save the page's browser context as a named session."""
    try:
        manager = _resolve_manager(step, session_manager)
        path = await manager.save_session(step.session_name, page.context)
    except Exception as e:
        return ActionResult.fail(
            f'Saving session "{step.session_name}" failed: {describe_error(e)}'
        )
    return ActionResult.ok(f'Session "{step.session_name}" saved', data={"path": path})


async def session_check(
    step: SessionCheckStep,
    page: Any,
    session_manager: SessionManager | None = None,
) -> ActionResult:
    """Succeed when a valid session exists. The page is not touched."""
    try:
        manager = _resolve_manager(step, session_manager)
        valid = manager.has_valid_session(step.session_name)
    except Exception as e:
        return ActionResult.fail(
            f'Checking session "{step.session_name}" failed: {describe_error(e)}'
        )

    if valid:
        return ActionResult.ok(f'Session "{step.session_name}" is valid')
    return ActionResult.fail(f'Session "{step.session_name}" is invalid or expired')
