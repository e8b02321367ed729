"""
Step declaration models for workflow actions.

Every workflow step names one action kind and supplies that action's
parameters. Each kind is a Pydantic model carrying a literal `action` tag;
together they form the closed discriminated union ActionStep. Unknown
fields are rejected, so a misspelt parameter surfaces as a validation
failure instead of a silent no-op.

Two declaration shapes are accepted by parse_step():

    {"action": "fill", "selector": "#email", "value": "me@example.com"}
    {"action": "fill", "params": {"selector": "#email", "value": "me@example.com"}}

camelCase spellings (waitUntil, itemSelector, sessionName, sessionsDir) are
accepted alongside the snake_case names.

Models:
    NavigateStep, NavigateBackStep, WaitStep, ClickStep, FillStep,
    ExtractStep, PaginateStep, SessionLoadStep, SessionSaveStep,
    SessionCheckStep, ExtractField
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ..config.constants import (
    DEFAULT_ACTION_TIMEOUT_MS,
    DEFAULT_INTERACTION_TIMEOUT_MS,
    DEFAULT_MAX_PAGES,
)
from ..exceptions import StepValidationError


class _StepModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    @field_validator("selector", "url", "session_name", check_fields=False)
    @classmethod
    def validate_not_blank(cls, v: str | None) -> str | None:
        """Reject empty or whitespace-only selectors, URLs and session names."""
        if v is not None and (not v or v.isspace()):
            raise ValueError("cannot be empty")
        return v


class ExtractField(_StepModel):
    """
    One field of an extracted record.

    Attributes:
        name: Key in the output record
        selector: Sub-selector, relative to each matched container
        attribute: Attribute to read; None means the trimmed text content
    """

    name: str
    selector: str
    attribute: str | None = None


class NavigateStep(_StepModel):
    action: Literal["navigate"] = "navigate"
    url: str
    timeout: int = Field(default=DEFAULT_ACTION_TIMEOUT_MS, gt=0)
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle", alias="waitUntil"
    )


class NavigateBackStep(_StepModel):
    action: Literal["navigate_back"] = "navigate_back"
    count: int = Field(default=1, ge=1)
    timeout: int = Field(default=DEFAULT_INTERACTION_TIMEOUT_MS, gt=0)


class WaitStep(_StepModel):
    """
    Wait for a fixed duration or for a selector to reach a state.

    duration takes priority when both are given. Neither is a valid
    declaration; the contract reports it as a failed result.
    """

    action: Literal["wait"] = "wait"
    selector: str | None = None
    duration: int | None = Field(default=None, ge=0)
    timeout: int = Field(default=DEFAULT_ACTION_TIMEOUT_MS, gt=0)
    state: Literal["visible", "hidden", "attached", "detached"] = "visible"


class ClickStep(_StepModel):
    action: Literal["click"] = "click"
    selector: str
    timeout: int = Field(default=DEFAULT_INTERACTION_TIMEOUT_MS, gt=0)


class FillStep(_StepModel):
    action: Literal["fill"] = "fill"
    selector: str
    value: str
    timeout: int = Field(default=DEFAULT_ACTION_TIMEOUT_MS, gt=0)
    clear: bool = True


class ExtractStep(_StepModel):
    action: Literal["extract"] = "extract"
    selector: str
    fields: list[ExtractField] = Field(min_length=1)


class PaginateStep(_StepModel):
    """
    Follow a "next page" control, extracting records on every page visited.

    Attributes:
        selector: The next-page control; pagination stops when it is absent
        max_pages: Upper bound on pages visited, the first page included
        item_selector: Containers to extract from ("body" when omitted)
        fields: Fields to extract; without them pages are only walked
    """

    action: Literal["paginate"] = "paginate"
    selector: str
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=1, alias="maxPages")
    item_selector: str | None = Field(default=None, alias="itemSelector")
    fields: list[ExtractField] | None = None
    timeout: int = Field(default=DEFAULT_INTERACTION_TIMEOUT_MS, gt=0)


class _SessionStep(_StepModel):
    session_name: str = Field(alias="sessionName")
    sessions_dir: str | None = Field(default=None, alias="sessionsDir")


class SessionLoadStep(_SessionStep):
    action: Literal["session_load"] = "session_load"


class SessionSaveStep(_SessionStep):
    action: Literal["session_save"] = "session_save"


class SessionCheckStep(_SessionStep):
    action: Literal["session_check"] = "session_check"


ActionStep = Annotated[
    NavigateStep
    | NavigateBackStep
    | WaitStep
    | ClickStep
    | FillStep
    | ExtractStep
    | PaginateStep
    | SessionLoadStep
    | SessionSaveStep
    | SessionCheckStep,
    Field(discriminator="action"),
]

ACTION_KINDS = (
    "navigate",
    "navigate_back",
    "wait",
    "click",
    "fill",
    "extract",
    "paginate",
    "session_load",
    "session_save",
    "session_check",
)

_STEP_ADAPTER: TypeAdapter = TypeAdapter(ActionStep)


def _flatten(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Merge the {"action": ..., "params": {...}} shape into one mapping."""
    data = dict(raw)
    params = data.get("params")
    if isinstance(params, Mapping) and set(data) <= {"action", "params"}:
        return {"action": data.get("action"), **params}
    return data


def parse_step(raw: Any) -> ActionStep:
    """
    Validate a step declaration into its typed model.

    Args:
        raw: Step mapping (flat or {"action", "params"}), or an already
            parsed step model

    Returns:
        The matching step model

    Raises:
        StepValidationError: If the action kind is unknown or any parameter
            is missing, unknown or of the wrong type. Every problem is listed.

    Example:
        >>> parse_step({"action": "wait", "duration": 500})
        WaitStep(action='wait', selector=None, duration=500, timeout=30000, state='visible')
    """
    if isinstance(raw, BaseModel) and getattr(raw, "action", None) in ACTION_KINDS:
        return raw

    if not isinstance(raw, Mapping):
        raise StepValidationError(
            f"Step must be a mapping with an 'action' key, got: {type(raw).__name__}"
        )

    data = _flatten(raw)
    action = data.get("action")

    try:
        return _STEP_ADAPTER.validate_python(data)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc = list(error["loc"])
            # Discriminated unions prefix locations with the tag
            if loc and loc[0] == action:
                loc = loc[1:]
            field = ".".join(str(x) for x in loc) or "action"
            problems.append(f"{field}: {error['msg']}")

        label = action if isinstance(action, str) else "<missing>"
        raise StepValidationError(
            f"Invalid '{label}' step:\n" + "\n".join(f"  - {p}" for p in problems),
            action=action if isinstance(action, str) else None,
            problems=problems,
        ) from e
