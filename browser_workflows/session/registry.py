"""
Shared SessionManager instances.

Components that need a session manager should receive one by injection.
SessionManagerRegistry exists for composing code (the CLI, session actions
run without an injected manager) that must hand out exactly one manager per
sessions directory and lifetime, so two callers in the same process never
race on the same records through different instances.
"""

import logging
from pathlib import Path

from ..config.constants import DEFAULT_SESSION_MAX_AGE, DEFAULT_SESSIONS_DIR
from .manager import SessionManager

logger = logging.getLogger(__name__)


class SessionManagerRegistry:
    """
    Lazily creates and caches one SessionManager per (directory, max_age).

    Directories are resolved to absolute paths so "./sessions" and
    "sessions" share an instance.
    """

    def __init__(self):
        self._managers: dict[tuple[str, int | None], SessionManager] = {}

    def get(
        self,
        sessions_dir: str | Path = DEFAULT_SESSIONS_DIR,
        max_age: int | None = DEFAULT_SESSION_MAX_AGE,
    ) -> SessionManager:
        key = (str(Path(sessions_dir).resolve()), max_age)
        manager = self._managers.get(key)
        if manager is None:
            manager = SessionManager(sessions_dir, max_age=max_age)
            self._managers[key] = manager
            logger.debug(f"Created session manager for {key[0]} (max_age={max_age})")
        return manager

    def clear(self) -> None:
        self._managers.clear()

    def __len__(self) -> int:
        return len(self._managers)


_default_registry = SessionManagerRegistry()


def get_session_manager(
    sessions_dir: str | Path = DEFAULT_SESSIONS_DIR,
    max_age: int | None = DEFAULT_SESSION_MAX_AGE,
) -> SessionManager:
    """
    Return the process-wide manager for a sessions directory.

    Repeated calls with the same directory and max_age return the same
    instance.

    Example:
        >>> get_session_manager("./sessions") is get_session_manager("sessions")
        True
    """
    return _default_registry.get(sessions_dir, max_age)


def reset_session_managers() -> None:
    """Forget every shared manager (used by tests)."""
    _default_registry.clear()
