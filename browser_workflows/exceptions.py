"""
Custom exceptions for Browser Workflows.

This module provides a hierarchy of exceptions that enable type-safe error
handling throughout the application. All exceptions inherit from the base
BrowserWorkflowError for consistent catching.

Action contracts never raise these past their boundary: they convert every
failure into an ActionResult. The exceptions below are for operator-level
problems (bad configuration, unusable session storage) and for step
declarations that cannot be understood.

Exception Hierarchy:
    BrowserWorkflowError (base)
    ├── ConfigurationError
    │   └── ConfigValidationError
    ├── SessionError
    │   ├── SessionStorageError
    │   ├── SessionSaveError
    │   └── CookieFileNotFoundError
    └── WorkflowError
        └── StepValidationError

Usage:
    from browser_workflows.exceptions import CookieFileNotFoundError

    try:
        await manager.import_cookies(context, "cookies.json")
    except CookieFileNotFoundError as e:
        logger.error(f"Cookie file missing: {e}")
"""


class BrowserWorkflowError(Exception):
    """
    Base exception for all Browser Workflows errors.

    All custom exceptions in this application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BrowserWorkflowError):
    """
    Base class for configuration-related errors.

    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration values are invalid (schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("  - retry_max_attempts: must be >= 1")
    """

    pass


# ============================================================================
# Session Errors
# ============================================================================


class SessionError(BrowserWorkflowError):
    """
    Base class for session persistence errors.

    A missing or expired session is NOT an error: load_session() returns
    False for those. These exceptions cover storage and capture failures.
    """

    pass


class SessionStorageError(SessionError):
    """
    Session directory cannot be created or a record cannot be written.

    Example:
        raise SessionStorageError("Cannot create sessions directory './sessions': Permission denied")
    """

    pass


class SessionSaveError(SessionError):
    """
    Capturing state from the live browser context failed.

    Raised when context.cookies() or context.storage_state() fails, for
    example because the context was already closed. Nothing is written.

    Attributes:
        session_name: Name of the session that could not be saved
    """

    def __init__(self, message: str, session_name: str | None = None):
        super().__init__(message)
        self.session_name = session_name


class CookieFileNotFoundError(SessionError):
    """
    Cookie file passed to import_cookies() does not exist.

    Example:
        raise CookieFileNotFoundError("Cookie file not found: ./cookies.json")
    """

    pass


# ============================================================================
# Workflow Errors
# ============================================================================


class WorkflowError(BrowserWorkflowError):
    """Base class for workflow declaration errors."""

    pass


class StepValidationError(WorkflowError):
    """
    A workflow step declaration is invalid.

    Raised by parse_step() for unknown action kinds, missing required
    parameters and unknown parameters. The runner turns it into a failed
    ActionResult.

    Attributes:
        action: Declared action kind, if one could be read
        problems: One human-readable line per invalid field
    """

    def __init__(
        self,
        message: str,
        action: str | None = None,
        problems: list[str] | None = None,
    ):
        super().__init__(message)
        self.action = action
        self.problems = problems or []
