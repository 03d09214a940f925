"""
Tests for Pipeline — Widget composition and failure isolation

These tests validate:
- Separators only between consecutive non-empty slots
- A failing widget renders inline and does not affect its neighbors
- The line always ends with a style reset
"""

import io
import logging

from statusline.pipeline import Pipeline, WidgetOutcome
from statusline.presentation.renderer import Renderer, StyledText, RESET
from statusline.widgets.base import Widget


class StaticWidget(Widget):
    name = "static"

    def __init__(self, *contents):
        super().__init__()
        self.contents = contents

    def render(self, context):
        return [StyledText(c) for c in self.contents]


class FailingWidget(Widget):
    name = "failing"

    def render(self, context):
        raise RuntimeError("probe exploded")


def _run(widgets):
    out = io.StringIO()
    outcomes = Pipeline(widgets, Renderer(out)).run(context=None)
    return out.getvalue(), outcomes


class TestSeparators:

    def test_between_all_slots(self):
        text, _ = _run([StaticWidget("a"), StaticWidget("b"), StaticWidget("c")])
        assert text.count(" | ") == 2

    def test_empty_slot_skipped(self):
        text, _ = _run([StaticWidget("a"), StaticWidget(), StaticWidget("c")])
        assert text.count(" | ") == 1

    def test_leading_empty_slot(self):
        text, _ = _run([StaticWidget(), StaticWidget("b")])
        assert " | " not in text

    def test_all_empty(self):
        text, outcomes = _run([StaticWidget(), StaticWidget()])
        assert text == RESET
        assert all(o.is_empty for o in outcomes)

    def test_custom_separator(self):
        out = io.StringIO()
        Pipeline([StaticWidget("a"), StaticWidget("b")], Renderer(out), StyledText(" :: ")).run(None)
        assert out.getvalue().count(" :: ") == 1


class TestFailureIsolation:
    """One widget failing leaves the others intact."""

    def test_middle_widget_throws(self):
        text, outcomes = _run([StaticWidget("first"), FailingWidget(), StaticWidget("third")])

        assert "first" in text
        assert "[RuntimeError] " in text
        assert "probe exploded" in text
        assert "third" in text
        assert text.count(" | ") == 2
        assert text.index("first") < text.index("probe exploded") < text.index("third")

    def test_outcomes(self):
        _, outcomes = _run([StaticWidget("a"), FailingWidget()])
        assert [o.failed for o in outcomes] == [False, True]
        assert isinstance(outcomes[1].error, RuntimeError)
        assert outcomes[1].units == []

    def test_failure_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="statusline.pipeline"):
            _run([FailingWidget()])
        assert "Widget failing failed" in caplog.text

    def test_ends_with_reset(self):
        text, _ = _run([FailingWidget()])
        assert text.endswith(RESET)


class TestWidgetOutcome:

    def test_error_is_not_empty(self):
        assert not WidgetOutcome(name="x", error=ValueError()).is_empty

    def test_units_for_error(self):
        pipeline = Pipeline([], Renderer(io.StringIO()))
        units = pipeline.units_for(WidgetOutcome(name="x", error=ValueError("bad")))
        assert [u.content for u in units] == ["[ValueError] ", "bad"]
