"""Click contract, tolerant of absent elements."""

import logging
import re
from typing import Any

from .results import ActionResult, describe_error
from .schema import ClickStep

logger = logging.getLogger(__name__)

# Recorded selectors like "[role=button Sign in]" are not valid CSS
ROLE_SELECTOR = re.compile(r"^\[role=(\w+)\s+(.*)\]$")


async def click(step: ClickStep, page: Any) -> ActionResult:
    """
    Click the element matching selector.

    An absent element is not an error: the click is skipped and the result
    is a success. "[role=<role> <name>]" selectors are resolved through
    page.get_by_role() with a case-insensitive name match.
    """
    selector = step.selector
    try:
        role_match = ROLE_SELECTOR.match(selector)
        if role_match:
            role, name = role_match.groups()
            locator = page.get_by_role(role, name=re.compile(re.escape(name), re.IGNORECASE))
            await locator.click(timeout=step.timeout, force=True)
            return ActionResult.ok(f'Clicked "{selector}"')

        element = await page.query_selector(selector)
        if element is None:
            logger.info(f"Click target {selector} not found, skipping")
            return ActionResult.ok(f'Element "{selector}" not found, click skipped')

        await element.click(timeout=step.timeout)
        return ActionResult.ok(f'Clicked "{selector}"')
    except Exception as e:
        logger.debug(f"click failed on {selector}: {e}", exc_info=True)
        return ActionResult.fail(
            f'Failed to click "{selector}" (timeout {step.timeout}ms): {describe_error(e)}'
        )
