"""Scale bandwidth history into bar levels, colors and line-chart points."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.color import Color
from rich.style import Style
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

CHART_HEADROOM = 1.1
CHART_MAX_TICKS = 8
CHART_VALUE_CEILING = float(2**64 - 1)
BAR_GLYPHS = "▁▂▃▄▅▆▇█"

LOW_COLOR = (0, 175, 255)
HIGH_COLOR = (255, 60, 60)

RGB = tuple[int, int, int]


def saturate(value: float) -> float:
    """Clamp a sample into ``[0, CHART_VALUE_CEILING]``, mapping NaN to 0."""
    if math.isnan(value) or value <= 0.0:
        return 0.0
    return min(value, CHART_VALUE_CEILING)


def window(history: Sequence[float], width: int) -> list[float]:
    """Fit ``history`` into exactly ``width`` slots.

    Short histories are left-padded with zeros, long ones keep only the
    most recent samples.
    """
    if width <= 0:
        return []
    values = [saturate(value) for value in history]
    if len(values) >= width:
        return values[len(values) - width :]
    return [0.0] * (width - len(values)) + values


def scale_max(history: Iterable[float], global_max: float = 0.0) -> float:
    """Top of the chart scale, with headroom.

    The cross-row ``global_max`` wins when positive so rows share a scale;
    otherwise the row's own maximum is used.
    """
    basis = saturate(global_max)
    if basis <= 0.0:
        basis = max((saturate(value) for value in history), default=0.0)
    if basis <= 0.0:
        return 1.0
    return basis * CHART_HEADROOM


def bar_level(value: float, top: float) -> int:
    """Map a sample to a bar level in ``1..CHART_MAX_TICKS``; zero keeps a baseline."""
    ratio = min(max(saturate(value) / top, 0.0), 1.0)
    level = math.ceil(ratio * (CHART_MAX_TICKS - 1))
    return min(max(level, 1), CHART_MAX_TICKS)


def level_color(level: int, low: RGB = LOW_COLOR, high: RGB = HIGH_COLOR) -> RGB:
    """Interpolate between ``low`` and ``high`` for a bar level."""
    t = (min(max(level, 1), CHART_MAX_TICKS) - 1) / (CHART_MAX_TICKS - 1)
    return (
        round(low[0] + (high[0] - low[0]) * t),
        round(low[1] + (high[1] - low[1]) * t),
        round(low[2] + (high[2] - low[2]) * t),
    )


@dataclass(frozen=True)
class Bar:
    level: int
    color: RGB


def history_to_bars(history: Sequence[float], width: int, global_max: float = 0.0) -> list[Bar]:
    """Turn the last ``width`` samples of ``history`` into colored bars."""
    top = scale_max(history, global_max)
    values = window(history, width)
    bars = []
    for value in values:
        level = bar_level(value, top)
        bars.append(Bar(level=level, color=level_color(level)))
    return bars


@dataclass(frozen=True)
class LineChart:
    """Points and axis bounds for the line-chart variant."""

    points: list[tuple[float, float]]
    x_bound: float
    y_bound: float


def history_to_line(history: Sequence[float]) -> LineChart:
    """Plot samples against their index."""
    values = [saturate(value) for value in history]
    if not values:
        return LineChart(points=[(0.0, 0.0), (1.0, 0.0)], x_bound=1.0, y_bound=1.0)
    points = [(float(index), value) for index, value in enumerate(values)]
    return LineChart(
        points=points,
        x_bound=float(max(len(values) - 1, 1)),
        y_bound=max(max(values), 1.0),
    )


def render_bars(history: Sequence[float], width: int, global_max: float = 0.0) -> Text:
    """Render a bar chart as a single line of colored block glyphs."""
    text = Text(no_wrap=True, overflow="crop")
    for bar in history_to_bars(history, width, global_max):
        text.append(BAR_GLYPHS[bar.level - 1], style=Style(color=Color.from_rgb(*bar.color)))
    return text


def render_line(history: Sequence[float], width: int, color: str = "cyan") -> Text:
    """Render the line-chart variant squeezed into one text row."""
    if width <= 0:
        return Text()
    chart = history_to_line(window(history, width) if history else [])
    glyphs = []
    for _, value in chart.points[-width:]:
        step = round(value / chart.y_bound * (CHART_MAX_TICKS - 1))
        glyphs.append(BAR_GLYPHS[min(max(step, 0), CHART_MAX_TICKS - 1)])
    return Text("".join(glyphs).rjust(width, BAR_GLYPHS[0]), style=color, no_wrap=True)
