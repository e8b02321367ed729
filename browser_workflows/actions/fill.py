"""Fill contract: set the value of a form field."""

import logging
from typing import Any

from .results import ActionResult, describe_error
from .schema import FillStep

logger = logging.getLogger(__name__)


async def fill(step: FillStep, page: Any) -> ActionResult:
    """
    Locate a field by selector and set its value.

    A missing element is a failed result stating the field was not found.
    With clear=False the value is appended to the field's current content.
    Driver errors become failed results carrying the selector and timeout.

    Args:
        step: Fill parameters
        page: Playwright Page

    Returns:
        ActionResult (never raises)
    """
    selector = step.selector
    try:
        element = await page.query_selector(selector)
        if element is None:
            return ActionResult.fail(f'Field "{selector}" not found')

        if step.clear:
            await element.fill(step.value, timeout=step.timeout)
        else:
            current = await element.input_value(timeout=step.timeout)
            await element.fill(f"{current}{step.value}", timeout=step.timeout)

        return ActionResult.ok(f'Filled field "{selector}"')
    except Exception as e:
        logger.debug(f"fill failed on {selector}: {e}", exc_info=True)
        return ActionResult.fail(
            f'Failed to fill "{selector}" (timeout {step.timeout}ms): {describe_error(e)}'
        )
