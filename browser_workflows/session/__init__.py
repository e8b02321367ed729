"""Named session persistence: cookies and per-origin localStorage on disk."""

from .manager import SessionManager
from .models import Cookie, LocalStorageEntry, OriginState, SessionState
from .registry import SessionManagerRegistry, get_session_manager, reset_session_managers

__all__ = [
    "Cookie",
    "LocalStorageEntry",
    "OriginState",
    "SessionManager",
    "SessionManagerRegistry",
    "SessionState",
    "get_session_manager",
    "reset_session_managers",
]
