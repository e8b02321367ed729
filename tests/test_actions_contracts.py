"""
Tests for the fill, wait and extract contracts.

Pages and elements are AsyncMock doubles of the Playwright calls each
contract makes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from browser_workflows.actions.extract import extract
from browser_workflows.actions.fill import fill
from browser_workflows.actions.schema import ExtractField, ExtractStep, FillStep, WaitStep
from browser_workflows.actions.wait import wait


def make_element(text=None, attributes=None, children=None, value=""):
    """Fake ElementHandle. children maps sub-selectors to child elements."""
    element = MagicMock()
    element.fill = AsyncMock()
    element.input_value = AsyncMock(return_value=value)
    element.text_content = AsyncMock(return_value=text)
    element.get_attribute = AsyncMock(side_effect=lambda name: (attributes or {}).get(name))
    element.query_selector = AsyncMock(side_effect=lambda sel: (children or {}).get(sel))
    return element


def make_page(element=None, containers=None):
    page = MagicMock()
    page.query_selector = AsyncMock(return_value=element)
    page.query_selector_all = AsyncMock(return_value=containers or [])
    page.wait_for_selector = AsyncMock()
    return page


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


# ============================================================================
# fill
# ============================================================================


class TestFill:
    """Tests for fill contract."""

    @pytest.mark.asyncio
    async def test_fills_field(self):
        """Test that an existing field is filled."""
        element = make_element()
        page = make_page(element)

        result = await fill(FillStep(selector="#email", value="me@example.com"), page)

        assert result.success is True
        page.query_selector.assert_awaited_once_with("#email")
        element.fill.assert_awaited_once_with("me@example.com", timeout=30000)

    @pytest.mark.asyncio
    async def test_missing_field(self):
        """Test that a missing field fails with "not found"."""
        result = await fill(FillStep(selector="#nope", value="x"), make_page(None))

        assert result.success is False
        assert "not found" in result.message
        assert "#nope" in result.message

    @pytest.mark.asyncio
    async def test_append_without_clear(self):
        """Test that clear=False appends to the current value."""
        element = make_element(value="hello")
        page = make_page(element)

        result = await fill(
            FillStep(selector="#q", value=" world", clear=False, timeout=5000), page
        )

        assert result.success is True
        element.fill.assert_awaited_once_with("hello world", timeout=5000)

    @pytest.mark.asyncio
    async def test_driver_error_becomes_failure(self):
        """Test that driver errors become failures naming selector and timeout."""
        element = make_element()
        element.fill.side_effect = RuntimeError("Element is not an <input>")

        result = await fill(FillStep(selector="#q", value="x", timeout=1234), make_page(element))

        assert result.success is False
        assert "Element is not an <input>" in result.message
        assert "#q" in result.message
        assert "1234ms" in result.message

    @pytest.mark.asyncio
    async def test_empty_error_message_normalised(self):
        """Test that an empty error message becomes "Unknown error"."""
        page = make_page()
        page.query_selector.side_effect = RuntimeError()

        result = await fill(FillStep(selector="#q", value="x"), page)

        assert result.success is False
        assert "Unknown error" in result.message


# ============================================================================
# wait
# ============================================================================


class TestWait:
    """Tests for wait contract."""

    @pytest.mark.asyncio
    async def test_duration(self):
        """Test that a duration sleeps for that many milliseconds."""
        sleep = SleepRecorder()
        page = make_page()

        result = await wait(WaitStep(duration=1500), page, sleep=sleep)

        assert result.success is True
        assert result.data == {"waited_ms": 1500}
        assert sleep.delays == [1.5]

    @pytest.mark.asyncio
    async def test_duration_takes_priority_over_selector(self):
        """Test that a duration wins over a selector."""
        sleep = SleepRecorder()
        page = make_page()

        result = await wait(WaitStep(selector="#never", duration=200), page, sleep=sleep)

        assert result.success is True
        assert sleep.delays == [0.2]
        page.wait_for_selector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_selector(self):
        """Test waiting for a selector state."""
        page = make_page()

        result = await wait(WaitStep(selector="#ready", state="attached", timeout=5000), page)

        assert result.success is True
        page.wait_for_selector.assert_awaited_once_with("#ready", state="attached", timeout=5000)

    @pytest.mark.asyncio
    async def test_selector_timeout_is_failure(self):
        """Test that a selector timeout fails naming selector and timeout."""
        page = make_page()
        page.wait_for_selector.side_effect = TimeoutError("Timeout 5000ms exceeded.")

        result = await wait(WaitStep(selector="#ready", timeout=5000), page)

        assert result.success is False
        assert "#ready" in result.message
        assert "5000ms" in result.message

    @pytest.mark.asyncio
    async def test_neither_selector_nor_duration(self):
        """Test that a wait without selector or duration fails untouched."""
        page = make_page()
        sleep = SleepRecorder()

        result = await wait(WaitStep(), page, sleep=sleep)

        assert result.success is False
        assert "selector or duration" in result.message
        assert page.method_calls == []
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_duration(self):
        """Test that a zero duration is a valid wait."""
        sleep = SleepRecorder()
        result = await wait(WaitStep(duration=0), make_page(), sleep=sleep)

        assert result.success is True
        assert sleep.delays == [0]


# ============================================================================
# extract
# ============================================================================


class TestExtract:
    """Tests for extract contract."""

    FIELDS = [
        ExtractField(name="title", selector="h2"),
        ExtractField(name="link", selector="a", attribute="href"),
    ]

    @pytest.mark.asyncio
    async def test_two_containers(self):
        """Test one record per matched container."""
        containers = [
            make_element(
                children={
                    "h2": make_element(text="  First  "),
                    "a": make_element(attributes={"href": "/1"}),
                }
            ),
            make_element(
                children={
                    "h2": make_element(text="Second"),
                    "a": make_element(attributes={"href": "/2"}),
                }
            ),
        ]
        page = make_page(containers=containers)

        result = await extract(ExtractStep(selector=".item", fields=self.FIELDS), page)

        assert result.success is True
        assert result.data == [
            {"title": "First", "link": "/1"},
            {"title": "Second", "link": "/2"},
        ]
        page.query_selector_all.assert_awaited_once_with(".item")

    @pytest.mark.asyncio
    async def test_every_record_has_title_key(self):
        """Test that every record carries every declared field."""
        containers = [
            make_element(children={"h2": make_element(text="A")}),
            make_element(children={"h2": make_element(text="B")}),
        ]
        result = await extract(
            ExtractStep(selector=".item", fields=[ExtractField(name="title", selector="h2")]),
            make_page(containers=containers),
        )

        assert len(result.data) == 2
        assert all("title" in record for record in result.data)

    @pytest.mark.asyncio
    async def test_missing_sub_element_is_none(self):
        """Test that a missing sub-element extracts as None."""
        containers = [make_element(children={"h2": make_element(text="Only title")})]

        result = await extract(
            ExtractStep(selector=".item", fields=self.FIELDS), make_page(containers=containers)
        )

        assert result.data == [{"title": "Only title", "link": None}]

    @pytest.mark.asyncio
    async def test_missing_attribute_is_none(self):
        """Test that a missing attribute extracts as None."""
        containers = [
            make_element(children={"h2": make_element(text="T"), "a": make_element()})
        ]

        result = await extract(
            ExtractStep(selector=".item", fields=self.FIELDS), make_page(containers=containers)
        )

        assert result.data == [{"title": "T", "link": None}]

    @pytest.mark.asyncio
    async def test_zero_matches_is_success(self):
        """Test that zero matches is a success with no records."""
        result = await extract(
            ExtractStep(selector=".item", fields=self.FIELDS), make_page(containers=[])
        )

        assert result.success is True
        assert result.data == []

    @pytest.mark.asyncio
    async def test_query_error_is_failure(self):
        """Test that an invalid selector fails naming the selector."""
        page = make_page()
        page.query_selector_all.side_effect = RuntimeError("Unexpected token \"]\" while parsing selector")

        result = await extract(ExtractStep(selector=".item]", fields=self.FIELDS), page)

        assert result.success is False
        assert ".item]" in result.message
        assert "while parsing selector" in result.message
