"""Extract contract: one record per matched container."""

import logging
from typing import Any

from .results import ActionResult, describe_error
from .schema import ExtractField, ExtractStep

logger = logging.getLogger(__name__)


async def _read_field(container: Any, field: ExtractField) -> str | None:
    target = await container.query_selector(field.selector)
    if target is None:
        return None
    if field.attribute:
        return await target.get_attribute(field.attribute)
    text = await target.text_content()
    return text.strip() if text is not None else None


async def extract_records(
    page: Any, selector: str, fields: list[ExtractField]
) -> list[dict[str, str | None]]:
    """
    Build one record per element matching selector.

    Every declared field appears in every record. A field whose
    sub-selector matches nothing is None.

    Raises:
        Whatever the driver raises for an invalid selector
    """
    containers = await page.query_selector_all(selector)
    records = []
    for container in containers:
        records.append({field.name: await _read_field(container, field) for field in fields})
    return records


async def extract(step: ExtractStep, page: Any) -> ActionResult:
    """
    Extract records from repeated elements.

    Zero matches is a success with an empty list. Only a failing query
    (malformed selector, detached page) produces a failed result.
    """
    try:
        records = await extract_records(page, step.selector, step.fields)
    except Exception as e:
        logger.debug(f"extract failed on {step.selector}: {e}", exc_info=True)
        return ActionResult.fail(
            f'Extraction with "{step.selector}" failed: {describe_error(e)}'
        )

    return ActionResult.ok(f"Extracted {len(records)} record(s)", data=records)
