"""
Runtime settings for Browser Workflows.

Settings come from BROWSER_WORKFLOWS_* environment variables on top of the
defaults in config.constants, validated by a Pydantic model:

    BROWSER_WORKFLOWS_SESSIONS_DIR=./sessions
    BROWSER_WORKFLOWS_SESSION_MAX_AGE_SECONDS=86400   # "none" disables expiry
    BROWSER_WORKFLOWS_RESULTS_DIR=./results
    BROWSER_WORKFLOWS_DEFAULT_TIMEOUT_MS=30000
    BROWSER_WORKFLOWS_RETRY_MAX_ATTEMPTS=3
    BROWSER_WORKFLOWS_RETRY_BASE_DELAY_MS=1000
    BROWSER_WORKFLOWS_RETRY_BACKOFF_FACTOR=2.0
    BROWSER_WORKFLOWS_RETRY_MAX_DELAY_MS=30000
    BROWSER_WORKFLOWS_VERBOSE=false

Credentials are never read here.
"""

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigValidationError
from ..retry import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_MS,
    RetryOptions,
)
from .constants import (
    DEFAULT_ACTION_TIMEOUT_MS,
    DEFAULT_RESULTS_DIR,
    DEFAULT_SESSION_MAX_AGE,
    DEFAULT_SESSIONS_DIR,
    ENV_PREFIX,
)

_NONE_VALUES = {"", "none", "null", "0"}


class Settings(BaseModel):
    """
    Validated runtime settings.

    Attributes:
        sessions_dir: Directory of named session records
        session_max_age_seconds: Lifetime stamped on saved sessions (None = no expiry)
        results_dir: Directory for workflow result JSON
        default_timeout_ms: Timeout for navigation, fill and wait steps
        retry_*: Retry policy for navigation
        verbose: DEBUG logging
    """

    sessions_dir: str = DEFAULT_SESSIONS_DIR
    session_max_age_seconds: int | None = Field(default=DEFAULT_SESSION_MAX_AGE, gt=0)
    results_dir: str = DEFAULT_RESULTS_DIR
    default_timeout_ms: int = Field(default=DEFAULT_ACTION_TIMEOUT_MS, gt=0)
    retry_max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    retry_base_delay_ms: float = Field(default=DEFAULT_BASE_DELAY_MS, ge=0)
    retry_backoff_factor: float = Field(default=DEFAULT_BACKOFF_FACTOR, ge=1)
    retry_max_delay_ms: float = Field(default=DEFAULT_MAX_DELAY_MS, ge=0)
    verbose: bool = False

    @field_validator("sessions_dir", "results_dir")
    @classmethod
    def validate_directory(cls, v: str) -> str:
        """Validate directory paths are non-empty."""
        if not v or v.isspace():
            raise ValueError("directory cannot be empty")
        return v

    @field_validator("session_max_age_seconds", mode="before")
    @classmethod
    def parse_max_age(cls, v):
        """Accept "none" (and friends) as no expiry."""
        if isinstance(v, str) and v.strip().lower() in _NONE_VALUES:
            return None
        return v

    def retry_options(self) -> RetryOptions:
        """Build the navigation retry policy."""
        return RetryOptions(
            max_attempts=self.retry_max_attempts,
            base_delay_ms=self.retry_base_delay_ms,
            backoff_factor=self.retry_backoff_factor,
            max_delay_ms=self.retry_max_delay_ms,
        )


def load_settings(
    environ: Mapping[str, str] | None = None, **overrides
) -> Settings:
    """
    Load settings from environment variables.

    Args:
        environ: Mapping to read (defaults to os.environ)
        **overrides: Explicit values (e.g., from CLI flags) taking precedence
            over the environment; None values are ignored

    Returns:
        Validated Settings

    Raises:
        ConfigValidationError: If any value is invalid. Every failing field
            is listed.

    Example:
        >>> load_settings({"BROWSER_WORKFLOWS_RETRY_MAX_ATTEMPTS": "5"}).retry_max_attempts
        5
    """
    environ = os.environ if environ is None else environ

    raw: dict[str, object] = {}
    for name in Settings.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in environ:
            raw[name] = environ[key]

    raw.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        raise ConfigValidationError(
            "Settings validation failed:\n" + "\n".join(error_messages)
        ) from e
