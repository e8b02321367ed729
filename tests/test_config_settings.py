"""Tests for config.settings - environment-driven settings."""

import pytest

from browser_workflows.config.settings import Settings, load_settings
from browser_workflows.exceptions import ConfigValidationError
from browser_workflows.retry import RetryOptions


class TestLoadSettings:
    def test_defaults_with_empty_environment(self):
        """Test defaults with no environment variables."""
        settings = load_settings({})

        assert settings.sessions_dir == "./sessions"
        assert settings.session_max_age_seconds == 86400
        assert settings.results_dir == "./results"
        assert settings.default_timeout_ms == 30000
        assert settings.retry_max_attempts == 3
        assert settings.verbose is False

    def test_reads_prefixed_variables(self):
        """Test that BROWSER_WORKFLOWS_* variables are read."""
        settings = load_settings(
            {
                "BROWSER_WORKFLOWS_SESSIONS_DIR": "/var/lib/sessions",
                "BROWSER_WORKFLOWS_SESSION_MAX_AGE_SECONDS": "3600",
                "BROWSER_WORKFLOWS_RETRY_MAX_ATTEMPTS": "5",
                "BROWSER_WORKFLOWS_RETRY_BACKOFF_FACTOR": "1.5",
                "BROWSER_WORKFLOWS_VERBOSE": "true",
                "UNRELATED": "ignored",
            }
        )

        assert settings.sessions_dir == "/var/lib/sessions"
        assert settings.session_max_age_seconds == 3600
        assert settings.retry_max_attempts == 5
        assert settings.retry_backoff_factor == 1.5
        assert settings.verbose is True

    @pytest.mark.parametrize("value", ["none", "NONE", "null", "0", ""])
    def test_max_age_can_be_disabled(self, value):
        """Test that "none"-like values disable session expiry."""
        settings = load_settings({"BROWSER_WORKFLOWS_SESSION_MAX_AGE_SECONDS": value})
        assert settings.session_max_age_seconds is None

    def test_overrides_win_over_environment(self):
        """Test that explicit overrides win over the environment."""
        settings = load_settings(
            {"BROWSER_WORKFLOWS_SESSIONS_DIR": "/env"}, sessions_dir="/flag", results_dir=None
        )
        assert settings.sessions_dir == "/flag"
        assert settings.results_dir == "./results"

    def test_every_invalid_field_listed(self):
        """Test that every invalid field is listed in the error."""
        with pytest.raises(ConfigValidationError) as exc_info:
            load_settings(
                {
                    "BROWSER_WORKFLOWS_RETRY_MAX_ATTEMPTS": "0",
                    "BROWSER_WORKFLOWS_DEFAULT_TIMEOUT_MS": "soon",
                }
            )

        message = str(exc_info.value)
        assert "retry_max_attempts" in message
        assert "default_timeout_ms" in message

    def test_blank_directory_rejected(self):
        """Test that a blank directory is rejected."""
        with pytest.raises(ConfigValidationError, match="results_dir"):
            load_settings({"BROWSER_WORKFLOWS_RESULTS_DIR": "  "})

    def test_reads_os_environ_by_default(self, monkeypatch):
        """Test that os.environ is read by default."""
        monkeypatch.setenv("BROWSER_WORKFLOWS_RESULTS_DIR", "/tmp/results")
        assert load_settings().results_dir == "/tmp/results"


class TestRetryOptions:
    def test_built_from_settings(self):
        """Test that retry options are built from settings."""
        options = Settings(
            retry_max_attempts=4,
            retry_base_delay_ms=250,
            retry_backoff_factor=3,
            retry_max_delay_ms=5000,
        ).retry_options()

        assert isinstance(options, RetryOptions)
        assert options.max_attempts == 4
        assert options.base_delay_ms == 250
        assert options.backoff_factor == 3
        assert options.max_delay_ms == 5000
