"""
Entry point for running Browser Workflows as a module.

Enables execution via:
    python -m browser_workflows [command] [options]

This is equivalent to running the installed CLI:
    browser-workflows [command] [options]
"""

from browser_workflows.cli import app

if __name__ == "__main__":
    app()
