"""
CLI entrypoint for Browser Workflows.

Provides operator commands for the session store and for saved workflow
results, with human-friendly (Rich) or agent-friendly (JSON) output.

Commands:
    sessions list: Show stored sessions and their validity
    sessions check NAME: Exit 0 when NAME is usable, 2 otherwise
    sessions show NAME: Show a session's metadata (never cookie values)
    sessions delete NAME: Remove a session record
    sessions cleanup: Remove every expired session
    results list: Show saved workflow result files

Exit codes:
    0: Success
    1: Configuration error (invalid BROWSER_WORKFLOWS_* settings, unusable directory)
    2: Session not found or invalid

Examples:
    browser-workflows sessions list
    browser-workflows sessions check github --format json
    browser-workflows sessions cleanup --sessions-dir ./sessions
"""

from pathlib import Path

import typer
from rich.traceback import install as install_rich_traceback

from browser_workflows import __version__
from browser_workflows.config.settings import Settings, load_settings
from browser_workflows.exceptions import ConfigurationError, SessionStorageError
from browser_workflows.session import SessionManager, get_session_manager
from browser_workflows.storage.writer import list_results, load_result
from browser_workflows.utils.console import (
    error,
    info,
    output_mode,
    print_sessions_table,
    success,
    warning,
)
from browser_workflows.utils.logging import setup_logging

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0  # Command succeeded
EXIT_CONFIG_ERROR = 1  # Settings invalid or storage unusable
EXIT_SESSION_INVALID = 2  # Session missing, expired, empty or corrupt

app = typer.Typer(
    name="browser-workflows",
    help="Run declarative browser workflows and manage their sessions",
    add_completion=False,
)

sessions_app = typer.Typer(help="Inspect and maintain stored sessions")
app.add_typer(sessions_app, name="sessions")

results_app = typer.Typer(help="Inspect saved workflow results")
app.add_typer(results_app, name="results")


FORMAT_OPTION = typer.Option("text", "--format", "-f", help="Output format: 'text' or 'json'")
SESSIONS_DIR_OPTION = typer.Option(
    None, "--sessions-dir", "-d", help="Sessions directory (default: BROWSER_WORKFLOWS_SESSIONS_DIR or ./sessions)"
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging")


@app.callback(invoke_without_command=True)
def main(
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """Browser Workflows command-line interface."""
    if version:
        typer.echo(f"browser-workflows {__version__}")
        raise typer.Exit(EXIT_SUCCESS)


def _setup(format: str, verbose: bool, **overrides) -> Settings:
    """Apply output mode and logging, then load settings (exit 1 on failure)."""
    if format not in ("text", "json"):
        output_mode.reset("text")
        error(f"Invalid format: {format}. Must be 'text' or 'json'")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    output_mode.reset(format)

    try:
        settings = load_settings(**overrides)
    except ConfigurationError as e:
        error(str(e))
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    setup_logging(verbose=verbose or settings.verbose)
    return settings


def _manager(settings: Settings) -> SessionManager:
    return get_session_manager(settings.sessions_dir, settings.session_max_age_seconds)


def _describe_session(manager: SessionManager, name: str) -> dict:
    """Summarise a session for display. Cookie values are never included."""
    try:
        state = manager.read_session(name)
    except SessionStorageError as e:
        return {
            "name": name,
            "valid": False,
            "status": "corrupt",
            "cookies": None,
            "saved_at": None,
            "expires_at": None,
            "error": str(e),
        }

    if state is None:
        return {"name": name, "valid": False, "status": "missing"}

    if state.is_expired():
        status = "expired"
    elif not state.cookies:
        status = "empty"
    else:
        status = "valid"

    record = state.to_record()
    return {
        "name": name,
        "valid": status == "valid",
        "status": status,
        "cookies": len(state.cookies),
        "saved_at": record["savedAt"],
        "expires_at": record.get("expiresAt"),
    }


@sessions_app.command("list")
def sessions_list(
    format: str = FORMAT_OPTION,
    sessions_dir: str = SESSIONS_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    List stored sessions with their validity.

    Examples:
      browser-workflows sessions list
      browser-workflows sessions list --format json
    """
    settings = _setup(format, verbose, sessions_dir=sessions_dir)
    manager = _manager(settings)

    sessions = [_describe_session(manager, name) for name in manager.list_sessions()]
    print_sessions_table(sessions)
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@sessions_app.command("check")
def sessions_check(
    name: str = typer.Argument(..., help="Session name"),
    format: str = FORMAT_OPTION,
    sessions_dir: str = SESSIONS_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """
    Check whether a session is usable.

    Exit codes:
      0: Session exists, has not expired and holds cookies
      2: Session missing, expired, empty or corrupt
    """
    settings = _setup(format, verbose, sessions_dir=sessions_dir)
    manager = _manager(settings)

    try:
        manager.session_path(name)
    except ValueError as e:
        error(str(e))
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    valid = manager.has_valid_session(name)

    if output_mode.is_agent():
        output_mode.add_json("session", name)
        output_mode.add_json("valid", valid)

    if valid:
        success(f"Session '{name}' is valid")
        output_mode.flush_json()
        raise typer.Exit(EXIT_SUCCESS)

    error(f"Session '{name}' is missing, expired or empty")
    output_mode.flush_json()
    raise typer.Exit(EXIT_SESSION_INVALID)


@sessions_app.command("show")
def sessions_show(
    name: str = typer.Argument(..., help="Session name"),
    format: str = FORMAT_OPTION,
    sessions_dir: str = SESSIONS_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Show a session's metadata: cookie names and domains, origins, timestamps."""
    settings = _setup(format, verbose, sessions_dir=sessions_dir)
    manager = _manager(settings)

    try:
        state = manager.read_session(name)
    except (SessionStorageError, ValueError) as e:
        error(str(e))
        output_mode.flush_json()
        raise typer.Exit(EXIT_SESSION_INVALID)

    if state is None:
        error(f"Session not found: {manager.session_path(name)}")
        output_mode.flush_json()
        raise typer.Exit(EXIT_SESSION_INVALID)

    summary = _describe_session(manager, name)
    cookies = [{"name": c.name, "domain": c.domain, "path": c.path} for c in state.cookies]
    origins = [
        {"origin": o.origin, "keys": [entry.name for entry in o.local_storage]}
        for o in state.origins
    ]

    if output_mode.is_agent():
        output_mode.add_json("session", summary)
        output_mode.add_json("path", str(manager.session_path(name)))
        output_mode.add_json("cookies", cookies)
        output_mode.add_json("origins", origins)
        output_mode.flush_json()
    else:
        info(f"Session: {name} ({summary['status']})")
        info(f"Path: {manager.session_path(name)}")
        info(f"Saved: {summary['saved_at']}")
        info(f"Expires: {summary['expires_at'] or 'never'}")
        for cookie in cookies:
            info(f"Cookie: {cookie['name']} @ {cookie['domain']}{cookie['path']}")
        for origin in origins:
            info(f"Origin: {origin['origin']} ({len(origin['keys'])} localStorage key(s))")

    raise typer.Exit(EXIT_SUCCESS)


@sessions_app.command("delete")
def sessions_delete(
    name: str = typer.Argument(..., help="Session name"),
    format: str = FORMAT_OPTION,
    sessions_dir: str = SESSIONS_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Delete a session record (exit 2 when it does not exist)."""
    settings = _setup(format, verbose, sessions_dir=sessions_dir)
    manager = _manager(settings)

    try:
        deleted = manager.delete_session(name)
    except (OSError, ValueError) as e:
        error(f"Cannot delete session '{name}': {e}")
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    if output_mode.is_agent():
        output_mode.add_json("session", name)
        output_mode.add_json("deleted", deleted)

    if not deleted:
        error(f"Session not found: {manager.session_path(name)}")
        output_mode.flush_json()
        raise typer.Exit(EXIT_SESSION_INVALID)

    success(f"Deleted session '{name}'")
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@sessions_app.command("cleanup")
def sessions_cleanup(
    format: str = FORMAT_OPTION,
    sessions_dir: str = SESSIONS_DIR_OPTION,
    verbose: bool = VERBOSE_OPTION,
):
    """Remove every session whose expiry has passed."""
    settings = _setup(format, verbose, sessions_dir=sessions_dir)
    manager = _manager(settings)

    try:
        removed = manager.cleanup_expired_sessions()
    except OSError as e:
        error(f"Cleanup failed: {e}")
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    if output_mode.is_agent():
        output_mode.add_json("removed", removed)

    if removed:
        success(f"Removed {removed} expired session(s)")
    else:
        success("No expired sessions")
    output_mode.flush_json()
    raise typer.Exit(EXIT_SUCCESS)


@results_app.command("list")
def results_list(
    format: str = FORMAT_OPTION,
    results_dir: str = typer.Option(
        None, "--results-dir", "-r", help="Results directory (default: ./results)"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """List saved workflow results, newest last."""
    settings = _setup(format, verbose, results_dir=results_dir)

    summaries = []
    for filename in list_results(settings.results_dir):
        path = Path(settings.results_dir) / filename
        try:
            result = load_result(path)
        except (OSError, ValueError) as e:
            warning(f"Skipping unreadable result {filename}: {e}")
            continue
        summaries.append(
            {
                "file": filename,
                "name": result.get("name"),
                "success": result.get("success"),
                "record_count": result.get("record_count"),
                "errors": len(result.get("errors", [])),
            }
        )

    if output_mode.is_agent():
        output_mode.add_json("results", summaries)
        output_mode.add_json("count", len(summaries))
        output_mode.flush_json()
    elif not summaries:
        info(f"No results in {settings.results_dir}")
    else:
        for s in summaries:
            status = "ok" if s["success"] else f"{s['errors']} error(s)"
            info(f"{s['file']}: {s['record_count']} record(s), {status}")

    raise typer.Exit(EXIT_SUCCESS)
