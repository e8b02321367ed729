"""
Navigation contracts: navigate and navigate_back.

These are the raw network-bound calls of a workflow, so navigate accepts
RetryOptions and wraps page.goto() in with_retry(). Transient failures
(timeouts, connection resets) are retried; the last error still ends up as
a failed ActionResult, never as an exception.
"""

import logging
from typing import Any

from ..retry import RetryOptions, with_retry
from .results import ActionResult, describe_error
from .schema import NavigateBackStep, NavigateStep

logger = logging.getLogger(__name__)


async def navigate(
    step: NavigateStep,
    page: Any,
    retry_options: RetryOptions | None = None,
) -> ActionResult:
    """
    Load a URL and wait for the configured load state.

    Args:
        step: Navigate parameters
        page: Playwright Page
        retry_options: When given, retry transient failures of page.goto()

    Returns:
        ActionResult (never raises)
    """

    async def goto():
        return await page.goto(step.url, wait_until=step.wait_until, timeout=step.timeout)

    try:
        if retry_options is not None:
            await with_retry(goto, retry_options)
        else:
            await goto()
    except Exception as e:
        logger.warning(f"Navigation to {step.url} failed: {describe_error(e)}")
        return ActionResult.fail(
            f"Navigation to {step.url} failed (timeout {step.timeout}ms): {describe_error(e)}"
        )

    return ActionResult.ok(f"Navigated to {step.url}")


async def navigate_back(step: NavigateBackStep, page: Any) -> ActionResult:
    """Go back count entries in the page history, one at a time."""
    done = 0
    try:
        for _ in range(step.count):
            await page.go_back(wait_until="networkidle", timeout=step.timeout)
            done += 1
    except Exception as e:
        return ActionResult.fail(
            f"Navigate back failed after {done}/{step.count} page(s) "
            f"(timeout {step.timeout}ms): {describe_error(e)}"
        )

    return ActionResult.ok(f"Navigated back {step.count} page(s)")
