"""Tests for actions.schema - step declaration parsing."""

import pytest

from browser_workflows.actions.schema import (
    ClickStep,
    ExtractStep,
    FillStep,
    NavigateStep,
    PaginateStep,
    SessionLoadStep,
    WaitStep,
    parse_step,
)
from browser_workflows.exceptions import StepValidationError


class TestParseStep:
    def test_flat_mapping(self):
        """Test parsing a flat step mapping."""
        step = parse_step({"action": "fill", "selector": "#email", "value": "me@example.com"})

        assert isinstance(step, FillStep)
        assert step.selector == "#email"
        assert step.timeout == 30000
        assert step.clear is True

    def test_params_shape(self):
        """Test parsing the action/params step shape."""
        step = parse_step({"action": "click", "params": {"selector": "button.next"}})

        assert isinstance(step, ClickStep)
        assert step.timeout == 10000

    def test_defaults(self):
        """Test default parameter values."""
        navigate = parse_step({"action": "navigate", "url": "https://example.com"})
        assert isinstance(navigate, NavigateStep)
        assert navigate.timeout == 30000
        assert navigate.wait_until == "networkidle"

        wait = parse_step({"action": "wait", "duration": 500})
        assert isinstance(wait, WaitStep)
        assert wait.state == "visible"
        assert wait.timeout == 30000

        paginate = parse_step({"action": "paginate", "selector": ".next"})
        assert isinstance(paginate, PaginateStep)
        assert paginate.max_pages == 10
        assert paginate.timeout == 10000

    def test_camel_case_aliases(self):
        """Test camelCase parameter aliases."""
        step = parse_step(
            {"action": "session_load", "params": {"sessionName": "github", "sessionsDir": "/s"}}
        )
        assert isinstance(step, SessionLoadStep)
        assert step.session_name == "github"
        assert step.sessions_dir == "/s"

        paginate = parse_step(
            {"action": "paginate", "selector": ".next", "itemSelector": ".item", "maxPages": 3}
        )
        assert paginate.item_selector == ".item"
        assert paginate.max_pages == 3

    def test_extract_fields(self):
        """Test parsing extract field descriptors."""
        step = parse_step(
            {
                "action": "extract",
                "selector": ".item",
                "fields": [
                    {"name": "title", "selector": "h2"},
                    {"name": "link", "selector": "a", "attribute": "href"},
                ],
            }
        )
        assert isinstance(step, ExtractStep)
        assert [f.attribute for f in step.fields] == [None, "href"]

    def test_wait_without_selector_or_duration_is_valid(self):
        """Test that a bare wait step parses."""
        step = parse_step({"action": "wait"})
        assert step.selector is None
        assert step.duration is None

    def test_parsed_step_passes_through(self):
        """Test that an already parsed step is returned as-is."""
        step = FillStep(selector="#q", value="x")
        assert parse_step(step) is step


class TestParseStepErrors:
    def test_unknown_action(self):
        """Test that an unknown action is rejected."""
        with pytest.raises(StepValidationError) as exc_info:
            parse_step({"action": "scroll", "selector": "body"})

        assert exc_info.value.action == "scroll"
        assert exc_info.value.problems

    def test_missing_action(self):
        """Test that a step without action is rejected."""
        with pytest.raises(StepValidationError) as exc_info:
            parse_step({"selector": "body"})

        assert exc_info.value.action is None
        assert "<missing>" in str(exc_info.value)

    def test_missing_required_parameter(self):
        """Test that a missing required parameter is named."""
        with pytest.raises(StepValidationError) as exc_info:
            parse_step({"action": "fill", "selector": "#email"})

        assert exc_info.value.action == "fill"
        assert any(p.startswith("value:") for p in exc_info.value.problems)

    def test_unknown_parameter(self):
        """Test that an unknown parameter is named."""
        with pytest.raises(StepValidationError) as exc_info:
            parse_step({"action": "click", "selector": "#go", "delay": 100})

        assert any(p.startswith("delay:") for p in exc_info.value.problems)

    def test_every_problem_listed(self):
        """Test that every invalid field is listed."""
        with pytest.raises(StepValidationError) as exc_info:
            parse_step({"action": "fill", "timeout": -1, "colour": "red"})

        fields = {p.split(":")[0] for p in exc_info.value.problems}
        assert {"selector", "value", "timeout", "colour"} <= fields

    @pytest.mark.parametrize("selector", ["", "   "])
    def test_blank_selector(self, selector):
        """Test that a blank selector is rejected."""
        with pytest.raises(StepValidationError, match="selector"):
            parse_step({"action": "click", "selector": selector})

    def test_empty_extract_fields(self):
        """Test that extract requires at least one field."""
        with pytest.raises(StepValidationError, match="fields"):
            parse_step({"action": "extract", "selector": ".item", "fields": []})

    def test_invalid_wait_state(self):
        """Test that an unknown wait state is rejected."""
        with pytest.raises(StepValidationError, match="state"):
            parse_step({"action": "wait", "selector": "#x", "state": "gone"})

    @pytest.mark.parametrize("raw", [None, "fill", ["fill"]])
    def test_not_a_mapping(self, raw):
        """Test that non-mapping steps are rejected."""
        with pytest.raises(StepValidationError, match="mapping"):
            parse_step(raw)
