"""
Rich console utilities for dual-mode CLI output.

Human Mode (--format text):
    - Colored status lines and tables

Agent Mode (--format json):
    - Structured JSON buffered and written to stdout by flush_json()
    - No ANSI codes

Examples:
    >>> from browser_workflows.utils.console import output_mode, success
    >>> output_mode.format = "json"
    >>> success("Session deleted")
    >>> output_mode.flush_json()
    {"status": "success", "message": "Session deleted"}
"""

from __future__ import annotations

import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        _json_buffer: Internal buffer for JSON output in agent mode
    """

    def __init__(self, format_type: str = "text"):
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Add key-value pair to the JSON buffer (written by flush_json)."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear buffer.

        Only outputs in agent mode. In human mode, this is a no-op.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2, default=str)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()

    def reset(self, format_type: str = "text") -> None:
        """Switch format and drop anything buffered."""
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")
        self.format = format_type
        self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

# Global Rich console instances for human mode
console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


def success(message: str) -> None:
    """
    Print a success message.

    Human mode: Green checkmark with message
    Agent mode: Buffer to JSON
    """
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {message}")
    elif output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    """
    Print an error message.

    Human mode: Red X with message to stderr
    Agent mode: Buffer to JSON
    """
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}", style="red")
    elif output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def warning(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")
    elif output_mode.is_agent():
        output_mode.add_json("warning", message)


def info(message: str) -> None:
    """Print an info message (human mode only)."""
    if output_mode.is_human():
        console.print(f"[blue]ℹ[/blue] {message}")


def print_sessions_table(sessions: list[dict]) -> None:
    """
    Print stored sessions.

    Human mode: Rich table with colored validity
    Agent mode: Buffer sessions as JSON array

    Expected dict keys:
    - name (str): Session name
    - valid (bool): Whether the session is usable
    - cookies (int | None): Cookie count (None when unreadable)
    - saved_at (str | None): Capture timestamp
    - expires_at (str | None): Expiry timestamp
    - status (str): "valid", "expired", "empty", or "corrupt"
    """
    if output_mode.is_agent():
        output_mode.add_json("sessions", sessions)
        output_mode.add_json("count", len(sessions))
        return

    if not sessions:
        info("No sessions stored")
        return

    table = Table(title="Sessions", box=box.ROUNDED)

    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Cookies", justify="right")
    table.add_column("Saved", style="magenta")
    table.add_column("Expires")
    table.add_column("Status", justify="center")

    for session in sessions:
        status = session.get("status", "unknown")
        if status == "valid":
            status_str = "[green]valid[/green]"
        elif status == "corrupt":
            status_str = "[red]corrupt[/red]"
        else:
            status_str = f"[yellow]{status}[/yellow]"

        cookies = session.get("cookies")
        table.add_row(
            session.get("name", ""),
            "-" if cookies is None else str(cookies),
            session.get("saved_at") or "-",
            session.get("expires_at") or "never",
            status_str,
        )

    console.print(table)
