"""
Session manager: durable, validated persistence of authentication state.

Each named session is one JSON record in the sessions directory holding the
cookie jar and per-origin localStorage of a browser context. The manager
saves records from a live Playwright BrowserContext, re-hydrates them into a
fresh context, checks validity without touching any browser, and sweeps
expired records.

Key behaviours:
- save_session() captures first and writes atomically: a failed capture or
  write never leaves a partial record behind
- load_session() and has_valid_session() answer False (never raise) for
  missing, expired, empty-cookie or corrupt records
- cleanup_expired_sessions() removes only records whose expiresAt passed
  and is idempotent
- the sessions directory is created lazily on the first write

Concurrency:
    No cross-process locking. The design assumes a single writer per named
    session. Use SessionManagerRegistry (or get_session_manager) to share
    one manager per directory inside a process.

Example:
    >>> manager = SessionManager("./sessions", max_age=3600)
    >>> await manager.save_session("github", context)
    './sessions/github.json'
    >>> manager.has_valid_session("github")
    True
    >>> await manager.load_session(fresh_context, "github")
    True
"""

import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..config.constants import DEFAULT_SESSION_MAX_AGE, DEFAULT_SESSIONS_DIR
from ..exceptions import (
    CookieFileNotFoundError,
    SessionSaveError,
    SessionStorageError,
)
from ..storage.layout import SESSION_FILE_SUFFIX, get_session_filename
from ..storage.writer import ensure_directory, read_json, write_json
from ..utils.time import utc_now
from .models import Cookie, OriginState, SessionState

logger = logging.getLogger(__name__)

# Runs inside the page: copies a {key: value} mapping into localStorage.
# Individual setItem failures (quota, disabled storage) are ignored.
RESTORE_LOCAL_STORAGE_JS = """
(entries) => {
  for (const [key, value] of Object.entries(entries)) {
    try {
      window.localStorage.setItem(key, value);
    } catch (e) {}
  }
}
"""

_COOKIE_LIST = TypeAdapter(list[Cookie])

# Sentinel distinguishing "use the manager default" from an explicit None (no expiry)
_DEFAULT_MAX_AGE: Any = object()


class SessionManager:
    """
    Persists and validates named authentication sessions.

    Attributes:
        sessions_dir: Directory holding one {name}.json record per session
        max_age: Default lifetime in seconds stamped as expiresAt on save;
            None writes records without expiry
    """

    def __init__(
        self,
        sessions_dir: str | Path = DEFAULT_SESSIONS_DIR,
        max_age: int | None = DEFAULT_SESSION_MAX_AGE,
    ):
        if max_age is not None and max_age <= 0:
            raise ValueError(f"max_age must be positive or None, got: {max_age}")
        self.sessions_dir = Path(sessions_dir)
        self.max_age = max_age

    def __repr__(self) -> str:
        return f"SessionManager(sessions_dir={str(self.sessions_dir)!r}, max_age={self.max_age!r})"

    def session_path(self, session_name: str) -> Path:
        """Location of a session record (the file may not exist)."""
        return self.sessions_dir / get_session_filename(session_name)

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    async def save_session(
        self,
        session_name: str,
        context: Any,
        max_age: int | None = _DEFAULT_MAX_AGE,
    ) -> str:
        """
        Capture the cookies and localStorage of a live context and persist them.

        Args:
            session_name: Session name (file is {session_name}.json)
            context: Playwright BrowserContext (anything with async
                cookies() and storage_state())
            max_age: Lifetime override in seconds; None means no expiry.
                Defaults to the manager's max_age.

        Returns:
            Path of the written record

        Raises:
            SessionSaveError: If capturing state from the context fails
            SessionStorageError: If the directory or record cannot be written
        """
        path = self.session_path(session_name)
        ttl = self.max_age if max_age is _DEFAULT_MAX_AGE else max_age

        try:
            cookies = await context.cookies()
            storage_state = await context.storage_state()
            now = utc_now()
            state = SessionState(
                cookies=_COOKIE_LIST.validate_python(cookies),
                origins=[
                    OriginState.model_validate(origin)
                    for origin in (storage_state or {}).get("origins", [])
                ],
                saved_at=now,
                expires_at=now + timedelta(seconds=ttl) if ttl is not None else None,
            )
        except ValidationError as e:
            logger.error(f"Captured state for session '{session_name}' is malformed: {e}")
            raise SessionSaveError(
                f"Failed to save session '{session_name}': captured state is malformed: {e}",
                session_name=session_name,
            ) from e
        except Exception as e:
            logger.error(f"Failed to capture state for session '{session_name}': {e}")
            raise SessionSaveError(
                f"Failed to save session '{session_name}': {e}",
                session_name=session_name,
            ) from e

        self._write_record(path, state.to_record())

        logger.info(
            f"Saved session '{session_name}' to {path}",
            extra={
                "context": {
                    "session": session_name,
                    "cookie_count": len(state.cookies),
                    "origin_count": len(state.origins),
                }
            },
        )
        return str(path)

    async def load_session(self, context: Any, session_name: str) -> bool:
        """
        Re-hydrate a saved session into a live context.

        Injects the cookie set, then replays each origin's localStorage by
        opening a temporary page on that origin. A failing origin is logged
        and skipped.

        Args:
            context: Playwright BrowserContext (add_cookies(), new_page())
            session_name: Session name

        Returns:
            True when the session was valid and injected; False when it is
            missing, expired, has no cookies, is corrupt, or the cookies
            could not be injected
        """
        state = self._read_quietly(session_name)
        if state is None:
            logger.warning(f"Session not found: {self.session_path(session_name)}")
            return False

        if state.is_expired():
            logger.warning(f"Session expired: {session_name} (expiresAt={state.expires_at})")
            return False

        if not state.cookies:
            logger.warning(f"Session has no cookies, treating as unusable: {session_name}")
            return False

        try:
            await context.add_cookies(state.playwright_cookies())
        except Exception as e:
            logger.error(f"Failed to inject cookies for session '{session_name}': {e}")
            return False

        for origin in state.origins:
            await self._restore_origin(context, origin)

        logger.info(
            f"Loaded session '{session_name}'",
            extra={
                "context": {
                    "session": session_name,
                    "cookie_count": len(state.cookies),
                    "origin_count": len(state.origins),
                }
            },
        )
        return True

    async def _restore_origin(self, context: Any, origin: OriginState) -> None:
        if not origin.local_storage:
            return

        page = None
        try:
            page = await context.new_page()
            await page.goto(origin.origin, wait_until="commit")
            await page.evaluate(RESTORE_LOCAL_STORAGE_JS, origin.as_mapping())
        except Exception as e:
            logger.warning(f"Failed to restore localStorage for {origin.origin}: {e}")
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as e:
                    logger.debug(f"Failed to close restore page for {origin.origin}: {e}")

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def read_session(self, session_name: str) -> SessionState | None:
        """
        Read a session record without judging its validity.

        Returns:
            The parsed SessionState, or None when no record exists

        Raises:
            SessionStorageError: If the record exists but cannot be parsed
        """
        path = self.session_path(session_name)
        try:
            raw = read_json(path)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise SessionStorageError(f"Cannot read session record '{path}': {e}") from e

        try:
            return SessionState.model_validate(raw)
        except ValidationError as e:
            raise SessionStorageError(f"Invalid session record '{path}': {e}") from e

    def _read_quietly(self, session_name: str) -> SessionState | None:
        try:
            return self.read_session(session_name)
        except SessionStorageError as e:
            logger.warning(str(e))
            return None

    def has_valid_session(self, session_name: str) -> bool:
        """
        Check whether a usable session exists. Touches no browser state.

        A session is valid when its record exists, parses, has not passed
        expiresAt and holds at least one cookie. Names that are not valid
        session names (empty, path components) are never valid.
        """
        try:
            state = self._read_quietly(session_name)
        except ValueError as e:
            logger.warning(str(e))
            return False
        return state is not None and state.is_usable()

    def list_sessions(self) -> list[str]:
        """
        Enumerate stored session names (sorted).

        Returns an empty list when the sessions directory does not exist.
        """
        if not self.sessions_dir.is_dir():
            return []
        return sorted(
            path.name[: -len(SESSION_FILE_SUFFIX)]
            for path in self.sessions_dir.glob(f"*{SESSION_FILE_SUFFIX}")
            if path.is_file() and not path.name.startswith(".")
        )

    def list_files(self) -> list[str]:
        """Alias of list_sessions()."""
        return self.list_sessions()

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def delete_session(self, session_name: str) -> bool:
        """
        Remove a session record.

        Returns:
            True if a record existed and was removed, False otherwise
        """
        path = self.session_path(session_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Deleted session '{session_name}'")
        return True

    def cleanup_expired_sessions(self) -> int:
        """
        Delete every session whose expiresAt has passed.

        Corrupt records are logged and left in place. Running the sweep twice
        in a row removes nothing the second time.

        Returns:
            Number of records removed
        """
        now = utc_now()
        cleaned = 0

        for session_name in self.list_sessions():
            try:
                state = self.read_session(session_name)
            except SessionStorageError as e:
                logger.warning(f"Skipping unreadable session during cleanup: {e}")
                continue

            if state is not None and state.is_expired(now):
                if self.delete_session(session_name):
                    cleaned += 1

        if cleaned > 0:
            logger.info(f"Removed {cleaned} expired session(s) from {self.sessions_dir}")
        return cleaned

    # ------------------------------------------------------------------
    # Raw cookie transfer
    # ------------------------------------------------------------------

    async def export_cookies(self, context: Any, output_path: str | Path) -> str:
        """
        Write the context's cookie jar as a JSON list, for external tooling.

        Returns:
            The output path

        Raises:
            SessionStorageError: If the file cannot be written
        """
        cookies = await context.cookies()
        self._write_record(Path(output_path), list(cookies), create_dir=False)
        logger.info(f"Exported {len(cookies)} cookie(s) to {output_path}")
        return str(output_path)

    async def import_cookies(self, context: Any, input_path: str | Path) -> int:
        """
        Add cookies from a JSON list file into the context.

        Returns:
            Number of cookies imported

        Raises:
            CookieFileNotFoundError: If input_path does not exist
            SessionStorageError: If the file is not a valid cookie list
        """
        path = Path(input_path)
        if not path.exists():
            raise CookieFileNotFoundError(f"Cookie file not found: {path}")

        try:
            cookies = _COOKIE_LIST.validate_python(read_json(path))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise SessionStorageError(f"Invalid cookie file '{path}': {e}") from e

        await context.add_cookies([cookie.to_record() for cookie in cookies])
        logger.info(f"Imported {len(cookies)} cookie(s) from {path}")
        return len(cookies)

    # ------------------------------------------------------------------

    def _write_record(self, path: Path, data: dict | list, create_dir: bool = True) -> None:
        try:
            if create_dir:
                ensure_directory(path.parent)
            write_json(path, data)
        except OSError as e:
            raise SessionStorageError(str(e)) from e
