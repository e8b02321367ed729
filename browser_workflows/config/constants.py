"""
Configuration constants for Browser Workflows.

This module contains global defaults used across the application
to avoid tight coupling between modules.
"""

# Where named session records live
DEFAULT_SESSIONS_DIR = "./sessions"

# Session lifetime in seconds (24h); None disables expiry
DEFAULT_SESSION_MAX_AGE = 86400

# Where workflow results are written
DEFAULT_RESULTS_DIR = "./results"

# Timeout for navigation, fill and wait contracts (milliseconds)
DEFAULT_ACTION_TIMEOUT_MS = 30000

# Timeout for click, paginate and navigate_back contracts (milliseconds)
DEFAULT_INTERACTION_TIMEOUT_MS = 10000

# Upper bound on pages visited by paginate
DEFAULT_MAX_PAGES = 10

# Prefix for environment variables read by load_settings()
ENV_PREFIX = "BROWSER_WORKFLOWS_"
