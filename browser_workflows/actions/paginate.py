"""Paginate contract: extract, follow the next-page control, repeat."""

import logging
from typing import Any

from .extract import extract_records
from .results import ActionResult, describe_error
from .schema import PaginateStep

logger = logging.getLogger(__name__)


async def paginate(step: PaginateStep, page: Any) -> ActionResult:
    """
    Walk up to max_pages pages, concatenating extracted records.

    On each page the declared fields are extracted from item_selector
    containers (the whole body when item_selector is omitted), then the
    next-page control is clicked. Pagination stops when the control is
    absent or max_pages pages were visited. On failure the records gathered
    so far are returned with the failed result.
    """
    records: list[dict] = []
    pages = 0
    container_selector = step.item_selector or "body"

    try:
        while pages < step.max_pages:
            pages += 1
            if step.fields:
                records.extend(await extract_records(page, container_selector, step.fields))

            if pages >= step.max_pages:
                break

            next_button = await page.query_selector(step.selector)
            if next_button is None:
                logger.debug(f"No next-page control {step.selector} on page {pages}, stopping")
                break

            await next_button.click(timeout=step.timeout)
            await page.wait_for_load_state("networkidle", timeout=step.timeout)
    except Exception as e:
        logger.debug(f"paginate failed on page {pages}: {e}", exc_info=True)
        return ActionResult.fail(
            f'Pagination with "{step.selector}" failed on page {pages} '
            f"(timeout {step.timeout}ms): {describe_error(e)}",
            data=records or None,
            pages_visited=pages,
        )

    return ActionResult.ok(
        f"Extracted {len(records)} record(s) over {pages} page(s)",
        data=records,
        pages_visited=pages,
    )
