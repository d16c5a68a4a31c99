"""Tests for chart scaling."""

from __future__ import annotations

import math

from bandtop.charts import (
    BAR_GLYPHS,
    CHART_MAX_TICKS,
    CHART_VALUE_CEILING,
    HIGH_COLOR,
    LOW_COLOR,
    bar_level,
    history_to_bars,
    history_to_line,
    level_color,
    render_bars,
    render_line,
    scale_max,
    window,
)


class TestBarScaling:
    """Test bar levels and headroom."""

    def test_all_zero_history_is_baseline(self):
        """Zero samples still render at level 1 and the scale falls back to 1.0."""
        assert scale_max([0.0, 0.0, 0.0], global_max=0.0) == 1.0
        bars = history_to_bars([0.0, 0.0, 0.0], width=3, global_max=0.0)
        assert [bar.level for bar in bars] == [1, 1, 1]

    def test_own_max_used_without_global(self):
        assert math.isclose(scale_max([10.0, 5.0]), 11.0)

    def test_global_max_wins_when_positive(self):
        assert math.isclose(scale_max([10.0], global_max=100.0), 110.0)

    def test_peak_sample_with_headroom(self):
        """The largest sample lands just under the top because of headroom."""
        bars = history_to_bars([10.0], width=1)
        assert bars[0].level == 7

    def test_shared_scale_shrinks_small_rows(self):
        bars = history_to_bars([50.0], width=1, global_max=100.0)
        assert bars[0].level == 4

    def test_levels_are_clamped(self):
        assert bar_level(-5.0, 1.0) == 1
        assert bar_level(1e9, 1.0) == CHART_MAX_TICKS - 1
        for value in (0.0, 0.3, 0.6, 0.9, 1.0):
            assert 1 <= bar_level(value, 1.0) <= CHART_MAX_TICKS

    def test_non_finite_values_saturate(self):
        """NaN counts as zero and infinity is clamped, never propagated."""
        assert bar_level(float("nan"), 1.0) == 1
        assert math.isclose(scale_max([float("inf")]), CHART_VALUE_CEILING * 1.1)
        bars = history_to_bars([float("inf"), float("nan")], width=2)
        assert [bar.level for bar in bars] == [7, 1]


class TestColors:
    """Test the color gradient."""

    def test_endpoints(self):
        assert level_color(1) == LOW_COLOR
        assert level_color(CHART_MAX_TICKS) == HIGH_COLOR

    def test_gradient_is_monotonic_in_red(self):
        reds = [level_color(level)[0] for level in range(1, CHART_MAX_TICKS + 1)]
        assert reds == sorted(reds)

    def test_bars_carry_level_color(self):
        bar = history_to_bars([0.0], width=1)[0]
        assert bar.color == LOW_COLOR


class TestWindow:
    """Test fitting history into the available width."""

    def test_short_history_is_left_padded(self):
        assert window([1.0, 2.0], 4) == [0.0, 0.0, 1.0, 2.0]

    def test_long_history_keeps_recent_samples(self):
        assert window([float(i) for i in range(10)], 3) == [7.0, 8.0, 9.0]

    def test_zero_width(self):
        assert window([1.0], 0) == []
        assert history_to_bars([1.0], width=0) == []

    def test_bars_span_width(self):
        assert len(history_to_bars([5.0], width=12)) == 12


class TestLineChart:
    """Test the line-chart variant."""

    def test_empty_history_is_flat_line(self):
        chart = history_to_line([])
        assert chart.points == [(0.0, 0.0), (1.0, 0.0)]
        assert chart.x_bound == 1.0
        assert chart.y_bound == 1.0

    def test_bounds(self):
        chart = history_to_line([3.0, 8.0, 2.0])
        assert chart.points == [(0.0, 3.0), (1.0, 8.0), (2.0, 2.0)]
        assert chart.x_bound == 2.0
        assert chart.y_bound == 8.0

    def test_small_values_keep_unit_bounds(self):
        chart = history_to_line([0.25])
        assert chart.x_bound == 1.0
        assert chart.y_bound == 1.0


class TestRendering:
    """Test rendering to rich text."""

    def test_render_bars_baseline(self):
        text = render_bars([], 5)
        assert text.plain == BAR_GLYPHS[0] * 5

    def test_render_bars_peak(self):
        text = render_bars([0.0, 10.0], 2)
        assert text.plain == BAR_GLYPHS[0] + BAR_GLYPHS[6]

    def test_render_line_fills_width(self):
        assert render_line([], 4).plain == BAR_GLYPHS[0] * 4
        text = render_line([0.0, 4.0], 3)
        assert text.plain == BAR_GLYPHS[0] * 2 + BAR_GLYPHS[-1]
