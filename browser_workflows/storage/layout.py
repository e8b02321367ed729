"""
File naming conventions and path utilities for Browser Workflows.

This module defines consistent naming conventions for session records and
workflow result files. All storage operations use these functions to ensure
a predictable file structure for both humans and programmatic access.

Output structure:
    sessions/
        {session_name}.json
    results/
        {workflow_name}-{YYYY-MM-DDTHH-MM-SS}.json

Example:
    >>> get_session_filename("github")
    'github.json'
    >>> get_result_filename("github-stars", "2025-11-02T08:00:00.000Z")
    'github-stars-2025-11-02T08-00-00.json'
"""

import os

from ..utils.time import parse_timestamp, timestamp_slug

SESSION_FILE_SUFFIX = ".json"


def validate_session_name(session_name: str) -> str:
    """
    Ensure a session name maps to a single file inside the sessions directory.

    Names keep their case. Path separators and relative components are
    rejected so a name can never escape the sessions directory.

    Args:
        session_name: Logical session name (e.g., "github", "LinkedIn")

    Returns:
        The unchanged session name

    Raises:
        ValueError: If the name is empty or contains path components
    """
    if not session_name or session_name.isspace():
        raise ValueError("Session name cannot be empty")
    if "/" in session_name or "\\" in session_name or session_name in {".", ".."}:
        raise ValueError(f"Invalid session name '{session_name}': path components are not allowed")
    return session_name


def get_session_filename(session_name: str) -> str:
    """
    Get filename for a named session record.

    Example:
        >>> get_session_filename("LinkedIn")
        'LinkedIn.json'
    """
    return f"{validate_session_name(session_name)}{SESSION_FILE_SUFFIX}"


def get_session_path(sessions_dir: str, session_name: str) -> str:
    """Get full path to a named session record (does NOT create anything)."""
    return os.path.join(sessions_dir, get_session_filename(session_name))


def get_result_filename(workflow_name: str, started_at: str) -> str:
    """
    Get filename for a workflow result JSON.

    Args:
        workflow_name: Workflow identifier
        started_at: ISO 8601 start timestamp of the run

    Returns:
        Filename like "{workflow_name}-{YYYY-MM-DDTHH-MM-SS}.json"

    Example:
        >>> get_result_filename("shop", "2025-11-02T08:30:45.123Z")
        'shop-2025-11-02T08-30-45.json'
    """
    slug = timestamp_slug(parse_timestamp(started_at))
    return f"{workflow_name}-{slug}.json"
