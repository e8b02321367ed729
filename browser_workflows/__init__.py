"""
Browser Workflows: declarative browser automation with retry and session persistence.

Public API:
    - WorkflowRunner, WorkflowDefinition, WorkflowResult: run workflows
    - SessionManager, get_session_manager: persist authentication state
    - with_retry, RetryOptions: retry transient failures
    - ActionResult, parse_step, execute_action: action contracts
"""

__version__ = "0.1.0"
