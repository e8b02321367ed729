"""Tests for session.registry - one shared manager per directory and lifetime."""

import pytest

from browser_workflows.session import (
    SessionManager,
    SessionManagerRegistry,
    get_session_manager,
    reset_session_managers,
)


@pytest.fixture(autouse=True)
def clean_registry():
    reset_session_managers()
    yield
    reset_session_managers()


class TestSessionManagerRegistry:
    def test_same_directory_same_instance(self, tmp_path):
        """Test that one directory maps to one manager."""
        registry = SessionManagerRegistry()
        first = registry.get(tmp_path / "sessions")
        second = registry.get(str(tmp_path / "sessions"))

        assert first is second
        assert len(registry) == 1

    def test_relative_and_absolute_paths_share_instance(self, tmp_path, monkeypatch):
        """Test that relative and absolute paths share a manager."""
        monkeypatch.chdir(tmp_path)
        registry = SessionManagerRegistry()

        assert registry.get("./sessions") is registry.get(tmp_path / "sessions")

    def test_different_max_age_different_instance(self, tmp_path):
        """Test that a different max age gives a different manager."""
        registry = SessionManagerRegistry()
        short = registry.get(tmp_path, max_age=60)
        long = registry.get(tmp_path, max_age=3600)

        assert short is not long
        assert short.max_age == 60
        assert long.max_age == 3600

    def test_different_directories(self, tmp_path):
        """Test that different directories give different managers."""
        registry = SessionManagerRegistry()
        assert registry.get(tmp_path / "a") is not registry.get(tmp_path / "b")

    def test_clear(self, tmp_path):
        """Test that clear drops every manager."""
        registry = SessionManagerRegistry()
        first = registry.get(tmp_path)
        registry.clear()

        assert len(registry) == 0
        assert registry.get(tmp_path) is not first

    def test_does_not_create_directory(self, tmp_path):
        """Test that getting a manager does not create its directory."""
        SessionManagerRegistry().get(tmp_path / "sessions")
        assert not (tmp_path / "sessions").exists()


class TestGetSessionManager:
    def test_returns_shared_instance(self, tmp_path):
        """Test that the module-level factory shares managers."""
        manager = get_session_manager(tmp_path)

        assert isinstance(manager, SessionManager)
        assert get_session_manager(tmp_path) is manager

    def test_default_max_age(self, tmp_path):
        """Test that the default max age is applied."""
        assert get_session_manager(tmp_path).max_age == 86400

    def test_reset(self, tmp_path):
        """Test that reset_session_managers drops shared managers."""
        manager = get_session_manager(tmp_path)
        reset_session_managers()
        assert get_session_manager(tmp_path) is not manager
