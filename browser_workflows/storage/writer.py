"""
File writing utilities for Browser Workflows.

This module handles file I/O for session records, exported cookies and
workflow results. It provides a clean abstraction over filesystem operations
with proper error handling.

Key features:
- UTF-8 encoding for all text files
- Pretty-printed JSON (indent=2)
- Atomic writes: temp file in the same directory, then os.replace()
- Directory creation with parents
- Uses naming conventions from storage.layout

Example:
    >>> ensure_directory("./results")
    >>> path = save_result(result.to_dict(), "./results")
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .layout import get_result_filename

logger = logging.getLogger(__name__)


def ensure_directory(directory: str | Path) -> str:
    """
    Create a directory (and parents) if it does not exist.

    Args:
        directory: Directory path

    Returns:
        The directory path as a string

    Raises:
        PermissionError: If insufficient permissions to create directory
        OSError: If directory cannot be created (disk full, file in the way)
    """
    path = Path(directory)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        logger.error(f"Permission denied creating directory: {path}", exc_info=True)
        raise PermissionError(
            f"Cannot create directory '{path}': Permission denied. "
            f"Check directory permissions."
        ) from e
    except OSError as e:
        logger.error(f"Failed to create directory: {path}", exc_info=True)
        raise OSError(
            f"Cannot create directory '{path}': {e}. Check disk space and permissions."
        ) from e
    return str(path)


def write_json(filepath: str | Path, data: dict | list) -> None:
    """
    Write data to a JSON file atomically with UTF-8 encoding.

    Data is serialised to a temporary file next to the target, flushed, then
    moved over the target with os.replace(). Readers see either the previous
    content or the new content, never a partial file.

    Args:
        filepath: Full path to JSON file to write
        data: Dictionary or list to serialize

    Raises:
        OSError: If file cannot be written (permissions, disk full)
        TypeError: If data is not JSON-serializable
    """
    filepath = Path(filepath)

    try:
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    except TypeError as e:
        logger.error(f"Cannot serialize data to JSON: {e}", exc_info=True)
        raise TypeError(
            f"Cannot write JSON to '{filepath}': Data is not JSON-serializable. {e}"
        ) from e

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, filepath)
        tmp_path = None
        logger.debug(f"Wrote JSON file: {filepath}")
    except OSError as e:
        logger.error(f"Failed to write JSON file: {filepath}", exc_info=True)
        raise OSError(
            f"Cannot write JSON file '{filepath}': {e}. "
            f"Check disk space and permissions."
        ) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def read_json(filepath: str | Path) -> Any:
    """
    Read and decode a UTF-8 JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the content is not valid JSON
    """
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def save_result(result: dict, output_dir: str = "./results") -> str:
    """
    Save a workflow result as pretty-printed JSON.

    The filename is derived from the workflow name and its start time
    (see storage.layout.get_result_filename). The output directory is
    created if needed.

    Args:
        result: Serialised WorkflowResult (WorkflowResult.to_dict())
        output_dir: Results directory

    Returns:
        Path of the written file
    """
    ensure_directory(output_dir)
    filename = get_result_filename(result["name"], result["started_at"])
    filepath = os.path.join(output_dir, filename)
    write_json(filepath, result)
    logger.info(f"Saved workflow result: {filepath}")
    return filepath


def list_results(output_dir: str = "./results") -> list[str]:
    """List result filenames (sorted); empty when the directory does not exist."""
    directory = Path(output_dir)
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.glob("*.json"))


def load_result(filepath: str | Path) -> dict:
    """Load a saved workflow result."""
    return read_json(filepath)
