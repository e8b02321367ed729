"""Wait contract: fixed delay or selector state."""

import asyncio
import logging
from typing import Any

from .results import ActionResult, describe_error
from .schema import WaitStep

logger = logging.getLogger(__name__)


async def wait(step: WaitStep, page: Any, *, sleep=asyncio.sleep) -> ActionResult:
    """
    Suspend for a duration, or until a selector reaches a state.

    duration wins over selector when both are set, and the page is not
    queried at all in that case. With neither, the result is a failure and
    the page is left untouched. A selector timeout is a failed result.

    Args:
        step: Wait parameters
        page: Playwright Page
        sleep: Async sleep taking seconds (injectable for tests)
    """
    if step.duration is not None:
        await sleep(step.duration / 1000)
        return ActionResult.ok(
            f"Waited {step.duration}ms", data={"waited_ms": step.duration}
        )

    if step.selector is None:
        return ActionResult.fail("Either selector or duration is required")

    try:
        await page.wait_for_selector(step.selector, state=step.state, timeout=step.timeout)
    except Exception as e:
        logger.debug(f"wait failed on {step.selector}: {e}")
        return ActionResult.fail(
            f'Wait for selector "{step.selector}" to be {step.state} failed '
            f"(timeout {step.timeout}ms): {describe_error(e)}"
        )

    return ActionResult.ok(f'Selector "{step.selector}" is {step.state}')
