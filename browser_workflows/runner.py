"""
Workflow runner.

Executes one workflow definition inside an isolated Playwright browser
context: opens a page, restores the declared session, navigates to the
start URL (unless the first step is itself a navigate step) and runs each
step strictly in order. A failing step is recorded and the run continues
with the next step; only a missing session aborts the run, flagging that
re-authentication is required.

Extracted records from every step are concatenated into WorkflowResult.data.

Example:
    >>> runner = WorkflowRunner(session_manager=manager, retry_options=RetryOptions())
    >>> definition = WorkflowDefinition.model_validate({
    ...     "name": "github-stars",
    ...     "url": "https://github.com/stars",
    ...     "session": "github",
    ...     "steps": [{"action": "extract", "selector": ".repo", "fields": [...]}],
    ... })
    >>> result = await runner.run(definition, context)
    >>> result.record_count
    30
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .actions import ActionResult, execute_action, parse_step
from .actions.results import describe_error
from .config.settings import Settings
from .exceptions import StepValidationError
from .retry import RetryOptions
from .session import SessionManager, get_session_manager
from .utils.logging import log_with_context
from .utils.time import utc_timestamp

logger = logging.getLogger(__name__)

# Step kinds whose timeout falls back to the runner's default_timeout_ms
TIMEOUT_DEFAULTED_ACTIONS = ("navigate", "fill", "wait")


def _opens_with_navigate(steps: list[dict[str, Any]]) -> bool:
    return bool(steps) and isinstance(steps[0], Mapping) and steps[0].get("action") == "navigate"


class Viewport(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class WorkflowDefinition(BaseModel):
    """
    Declarative workflow.

    Attributes:
        name: Workflow identifier (used in logs and result filenames)
        url: Start URL, loaded before the first step unless that step navigates
        steps: Raw step declarations (see actions.schema)
        session: Optional session name restored before navigating
        viewport: Optional page viewport size
    """

    name: str
    url: str
    steps: list[dict[str, Any]] = Field(default_factory=list)
    session: str | None = None
    viewport: Viewport | None = None

    @field_validator("name", "url")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or v.isspace():
            raise ValueError("cannot be empty")
        return v


@dataclass
class StepError:
    """A failed step. step is the 0-based index, -1 for run-level failures."""

    step: int
    action: str
    message: str


@dataclass
class WorkflowResult:
    name: str
    url: str
    started_at: str
    completed_at: str = ""
    duration_ms: int = 0
    success: bool = True
    page_count: int = 0
    record_count: int = 0
    data: list[dict[str, Any]] = field(default_factory=list)
    errors: list[StepError] = field(default_factory=list)
    reauthentication_required: bool = False

    def add_error(self, step: int, action: str, message: str) -> None:
        self.errors.append(StepError(step=step, action=action, message=message))
        self.success = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class WorkflowRunner:
    """
    Runs workflow definitions step by step.

    Args:
        session_manager: Manager used for the workflow session and for
            session_* steps (defaults to the shared manager for ./sessions)
        retry_options: Retry policy for navigation; None disables retry
        default_timeout_ms: Timeout applied to navigate, fill and wait steps
            that declare none (None keeps each step's own default)
    """

    def __init__(
        self,
        session_manager: SessionManager | None = None,
        retry_options: RetryOptions | None = None,
        default_timeout_ms: int | None = None,
    ):
        self.session_manager = session_manager or get_session_manager()
        self.retry_options = retry_options
        self.default_timeout_ms = default_timeout_ms

    @classmethod
    def from_settings(cls, settings: Settings) -> "WorkflowRunner":
        """Build a runner from loaded Settings (session store, retry, timeouts)."""
        return cls(
            session_manager=get_session_manager(
                settings.sessions_dir, settings.session_max_age_seconds
            ),
            retry_options=settings.retry_options(),
            default_timeout_ms=settings.default_timeout_ms,
        )

    async def run(self, definition: WorkflowDefinition, context: Any) -> WorkflowResult:
        """
        Execute a workflow in the given browser context.

        Never raises for step or driver failures: they are recorded in
        WorkflowResult.errors. The page opened for the run is always closed.
        """
        result = WorkflowResult(
            name=definition.name, url=definition.url, started_at=utc_timestamp()
        )
        start = time.monotonic()
        page = None

        log_with_context(
            logger,
            logging.INFO,
            f"Starting workflow with {len(definition.steps)} step(s)",
            context={"url": definition.url, "session": definition.session},
            workflow=definition.name,
        )

        try:
            page = await context.new_page()
            if definition.viewport is not None:
                await page.set_viewport_size(definition.viewport.model_dump())

            if definition.session and not await self._restore_session(
                definition, context, result
            ):
                return result

            # Workflows that open with their own navigate step load the page there
            if not _opens_with_navigate(definition.steps):
                start_step = parse_step(
                    self._apply_default_timeout({"action": "navigate", "url": definition.url})
                )
                opened = await self._execute(start_step, page, index=-1, result=result)
                if opened is not None:
                    result.page_count = 1

            for index, raw in enumerate(definition.steps):
                await self._run_step(index, raw, page, result)
        except Exception as e:
            logger.error(f"Workflow {definition.name} aborted: {e}", exc_info=True)
            result.add_error(-1, "runner", f"Fatal error: {describe_error(e)}")
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as e:
                    logger.debug(f"Failed to close workflow page: {e}")
            result.completed_at = utc_timestamp()
            result.duration_ms = int((time.monotonic() - start) * 1000)

        log_with_context(
            logger,
            logging.INFO if result.success else logging.WARNING,
            f"Workflow finished: {result.record_count} record(s), {len(result.errors)} error(s)",
            context={"duration_ms": result.duration_ms, "success": result.success},
            workflow=definition.name,
        )
        return result

    async def _restore_session(
        self, definition: WorkflowDefinition, context: Any, result: WorkflowResult
    ) -> bool:
        if await self.session_manager.load_session(context, definition.session):
            return True

        result.reauthentication_required = True
        result.add_error(
            -1,
            "session_load",
            f'No valid session "{definition.session}" in '
            f"{self.session_manager.sessions_dir}; re-authentication required",
        )
        log_with_context(
            logger,
            logging.WARNING,
            "Session unavailable, re-authentication required",
            context={"session": definition.session},
            workflow=definition.name,
        )
        return False

    def _apply_default_timeout(self, raw: Any) -> Any:
        """Fill in default_timeout_ms for a raw step that declares no timeout."""
        if self.default_timeout_ms is None or not isinstance(raw, Mapping):
            return raw
        if raw.get("action") not in TIMEOUT_DEFAULTED_ACTIONS:
            return raw

        if set(raw) <= {"action", "params"} and isinstance(raw.get("params"), Mapping):
            params = dict(raw["params"])
            params.setdefault("timeout", self.default_timeout_ms)
            return {**raw, "params": params}

        return {"timeout": self.default_timeout_ms, **raw}

    async def _run_step(self, index: int, raw: Any, page: Any, result: WorkflowResult) -> None:
        try:
            step = parse_step(self._apply_default_timeout(raw))
        except StepValidationError as e:
            result.add_error(index, e.action or "unknown", str(e))
            return

        action_result = await self._execute(step, page, index=index, result=result)
        if action_result is None:
            return

        if action_result.pages_visited:
            result.page_count += action_result.pages_visited - 1
        elif step.action == "navigate":
            result.page_count += 1

        if isinstance(action_result.data, list):
            result.data.extend(action_result.data)
            result.record_count += len(action_result.data)

    async def _execute(
        self, step: Any, page: Any, *, index: int, result: WorkflowResult
    ) -> ActionResult | None:
        """Run a step; record and return None on failure."""
        action_result = await execute_action(
            step,
            page,
            session_manager=self.session_manager,
            retry_options=self.retry_options,
        )
        if action_result.success:
            logger.debug(f"Step {index} ({step.action}) succeeded: {action_result.message}")
            return action_result

        log_with_context(
            logger,
            logging.WARNING,
            f"Step {index} ({step.action}) failed: {action_result.message}",
            workflow=result.name,
        )
        result.add_error(index, step.action, action_result.message)
        return None
