"""
Tests for ProgressBar — Cell filling and gradient themes
"""

import pytest

from statusline.presentation.colors import Color, GRAY, LIGHT_SEA_GREEN
from statusline.presentation.progress import (
    ProgressBarSpec, cells, cell_position, red_ramp, green_to_red, THEMES,
)


class TestCells:
    """Which cells are filled."""

    def test_sixty_percent_of_five(self):
        bar = cells(ProgressBarSpec(value=0.6, width=5, fill_glyph="#", empty_glyph="-"))
        assert [c.content for c in bar] == ["#", "#", "#", "-", "-"]

    def test_empty_bar_fills_first_cell(self):
        """Position 0 is always <= value."""
        bar = cells(ProgressBarSpec(value=0.0, width=4, fill_glyph="#", empty_glyph="-"))
        assert [c.content for c in bar] == ["#", "-", "-", "-"]

    def test_full_bar(self):
        bar = cells(ProgressBarSpec(value=1.0, width=3, fill_glyph="#", empty_glyph="-"))
        assert [c.content for c in bar] == ["#", "#", "#"]

    def test_width_one(self):
        bar = cells(ProgressBarSpec(value=0.5, width=1, fill_glyph="#"))
        assert [c.content for c in bar] == ["#"]
        assert cell_position(0, 1) == 0.0

    def test_value_clamped(self):
        assert ProgressBarSpec(value=3.0).value == 1.0
        assert ProgressBarSpec(value=-1.0).value == 0.0

    def test_zero_width_rejected(self):
        with pytest.raises(ValueError):
            ProgressBarSpec(width=0)


class TestColors:

    def test_fill_color_without_gradient(self):
        bar = cells(ProgressBarSpec(value=0.0, width=2, fill_color=LIGHT_SEA_GREEN, opacity=0.7))
        assert bar[0].foreground == LIGHT_SEA_GREEN
        assert bar[1].foreground == GRAY
        assert all(c.opacity == 0.7 for c in bar)

    def test_gradient_by_position(self):
        bar = cells(ProgressBarSpec(value=1.0, width=3, gradient=green_to_red))
        assert [c.foreground for c in bar] == [
            Color(160, 255, 0), Color(160, 130, 0), Color(160, 5, 0),
        ]


class TestThemes:

    def test_red_ramp(self):
        assert red_ramp(0.0) == Color(50, 10, 10)
        assert red_ramp(1.0) == Color(250, 10, 10)

    def test_green_to_red(self):
        assert green_to_red(0.0) == Color(160, 255, 0)
        assert green_to_red(1.0) == Color(160, 5, 0)

    def test_registry(self):
        assert THEMES["green_to_red"] is green_to_red
