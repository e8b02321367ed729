"""
Structured JSON logging for Browser Workflows.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps with timezone info
- Structured context fields
- Secret redaction (session cookies and tokens are never logged in full)
- Component-based logger creation

All logs use Python's standard logging module with custom formatting.
Log level defaults to INFO, use setup_logging(verbose=True) for DEBUG.

Examples:
    >>> from browser_workflows.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("session.manager")
    >>> logger.info("Session saved", extra={"context": {"session": "github"}})

Security:
    - NEVER log cookie values or localStorage values in full
    - Only stderr is used (stdout reserved for CLI output)
"""

import json
import logging
import re
import sys
from typing import Any

from browser_workflows.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs logs as JSON with structured fields.

    Each log record is formatted as a JSON object with:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level (INFO, WARNING, ERROR, DEBUG)
    - component: Module/component name (from logger name)
    - message: Human-readable log message
    - context: Additional structured data (from 'context' in extra)
    - workflow: Current workflow name (from 'workflow' in extra, if available)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if hasattr(record, "workflow"):
            log_entry["workflow"] = record.workflow

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class SecretRedactingFilter(logging.Filter):
    """
    Logging filter that redacts potential secrets from log records.

    Prevents accidental logging of:
    - Session cookie values and auth tokens
    - Authorization headers / bearer tokens
    - Any long opaque token-like string

    Free text keeps the last 4 characters of a redacted token:
    "Bearer abc123xyz789abc123xyz789" -> "Bearer ***z789"

    Context values under sensitive keys (value, password, token, ...) are
    replaced entirely.
    """

    SECRET_PATTERNS = [
        (re.compile(r"\bBearer\s+[a-zA-Z0-9_.-]{20,}"), "Bearer ***{last4}"),
        (re.compile(r"\b[a-zA-Z0-9_-]{32,}\b"), "***{last4}"),
    ]

    SENSITIVE_KEYS = frozenset(
        {"value", "password", "pass", "token", "cookie", "cookies", "authorization"}
    )

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._redact_secrets(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self._redact_secrets(str(v)) for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self._redact_secrets(str(arg)) for arg in record.args
                )

        if hasattr(record, "context") and isinstance(record.context, dict):
            record.context = self._redact_dict(record.context)

        return True

    def _redact_secrets(self, text: str) -> str:
        for pattern, template in self.SECRET_PATTERNS:

            def redact_match(match: re.Match) -> str:
                matched = match.group(0)
                return template.format(last4=matched[-4:])

            text = pattern.sub(redact_match, text)

        return text

    def _redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        result = {}
        for key, value in data.items():
            if key.lower() in self.SENSITIVE_KEYS:
                result[key] = "***"
            elif isinstance(value, str):
                result[key] = self._redact_secrets(value)
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self._redact_secrets(v) if isinstance(v, str) else v for v in value
                ]
            else:
                result[key] = value
        return result


def setup_logging(verbose: bool = False) -> None:
    """
    Configure structured JSON logging for the application.

    Sets up a single stderr handler on the root logger with the JSON
    formatter and the secret redacting filter. Existing handlers are removed
    to prevent duplicate logs when called more than once.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use INFO.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(SecretRedactingFilter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """Get a logger instance for a specific component."""
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    workflow: str | None = None,
) -> None:
    """
    Log a message with structured context and optional workflow name.

    Equivalent to logger.log(level, message, extra={'context': {...}, 'workflow': '...'})

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data
        workflow: Optional workflow name to include in log

    Example:
        >>> log_with_context(
        ...     logger,
        ...     logging.INFO,
        ...     "Step completed",
        ...     context={"step": 2, "action": "fill"},
        ...     workflow="github-stars",
        ... )
    """
    extra = {}

    if context is not None:
        extra["context"] = context

    if workflow is not None:
        extra["workflow"] = workflow

    logger.log(level, message, extra=extra if extra else None)
