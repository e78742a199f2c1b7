# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (C) 2024 Jonathan Lee
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License version 3
# as published by the Free Software Foundation.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.
# See the GNU Affero General Public License for more details.
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see https://www.gnu.org/licenses/.

"""
Pointer resolution and tooltip content.

Pointer coordinates are surface coordinates (relative to the chart
container); plot coordinates subtract the frame margins.  Line charts
resolve the nearest record of every series with a bisection search;
the other charts hit-test their marks directly.
"""

import math
import re
from bisect import bisect_left
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from html import escape
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .marks import Mark
from .paths import TAU
from .records import Aggregate, SeriesGroup, TidyRecord, TvSample
from .scales import Frame

# --- Events and tooltip state ---

@dataclass(frozen=True)
class PointerEvent:
    """Pointer position relative to the chart container."""
    x: float
    y: float

@dataclass(frozen=True)
class Tooltip:
    visible: bool = False
    html: str = ''
    left: float = 0.0
    top: float = 0.0

@dataclass
class HoverResult:
    """Tooltip plus the plot-space position of each series' focus marker."""
    tooltip: Tooltip
    focus: Dict[str, Tuple[float, float]] = field(default_factory=dict)

def hidden_tooltip() -> Tooltip:
    return Tooltip()

def show_tooltip(event: PointerEvent, html: str, offset: Tuple[float, float]) -> Tooltip:
    return Tooltip(True, html, event.x + offset[0], event.y + offset[1])

def move_tooltip(tooltip: Tooltip, event: PointerEvent, offset: Tuple[float, float]) -> Tooltip:
    return Tooltip(tooltip.visible, tooltip.html, event.x + offset[0], event.y + offset[1])

def to_plot(frame: Frame, event: PointerEvent) -> Tuple[float, float]:
    return event.x - frame.margin['left'], event.y - frame.margin['top']

def in_plot_bounds(frame: Frame, x: float, y: float) -> bool:
    return 0 <= x <= frame.inner_width and 0 <= y <= frame.inner_height

def in_surface(frame: Frame, event: PointerEvent) -> bool:
    return 0 <= event.x <= frame.width and 0 <= event.y <= frame.height

# --- Nearest point ---

def nearest_index(values: Sequence[Any], hovered: Any, key: Callable[[Any], Any] = lambda v: v) -> Optional[int]:
    """Index of the element of the sorted *values* closest to *hovered*.

    Equal distances resolve to the later element.
    """
    if not values:
        return None
    i = bisect_left(values, hovered, key=key)
    if i <= 0:
        return 0
    if i >= len(values):
        return len(values) - 1
    before = hovered - key(values[i - 1])
    after = key(values[i]) - hovered
    return i if before >= after else i - 1

def nearest_record(records: Sequence[TidyRecord], hovered: Any) -> Optional[TidyRecord]:
    index = nearest_index(records, hovered, key=lambda r: r.x)
    return None if index is None else records[index]

def resolve_series_hover(
    event: PointerEvent,
    frame: Frame,
    series: SeriesGroup,
    categories: Iterable[str],
    x_scale,
    y_scale,
    offset: Tuple[float, float],
) -> HoverResult:
    """Nearest record of every series under the pointer, as tooltip rows and focus positions."""
    px, py = to_plot(frame, event)
    if not in_plot_bounds(frame, px, py):
        return HoverResult(hidden_tooltip())

    hovered = x_scale.invert(px)
    rows = []
    focus = {}
    header = None
    for category in categories:
        datum = nearest_record(series.get(category, []), hovered)
        if datum is None:
            continue
        focus[category] = (x_scale(datum.x), y_scale(datum.value))
        rows.append((category, datum.value))
        if header is None:
            header = datum.x

    if not rows:
        return HoverResult(hidden_tooltip())
    html = line_tooltip_html(header if header is not None else hovered, rows)
    return HoverResult(show_tooltip(event, html, offset), focus)

# --- Hit testing ---

def hit_rect(attrs: Dict[str, Any], x: float, y: float) -> bool:
    return (attrs['x'] <= x <= attrs['x'] + attrs['width']
            and attrs['y'] <= y <= attrs['y'] + attrs['height'])

def hit_circle(attrs: Dict[str, Any], x: float, y: float) -> bool:
    return (x - attrs['cx']) ** 2 + (y - attrs['cy']) ** 2 <= attrs['r'] ** 2

def hit_arc(attrs: Dict[str, Any], x: float, y: float) -> bool:
    dx = x - attrs.get('cx', 0.0)
    dy = y - attrs.get('cy', 0.0)
    radius = math.hypot(dx, dy)
    if not attrs['inner_radius'] <= radius <= attrs['outer_radius']:
        return False
    angle = math.atan2(dx, -dy) % TAU
    return attrs['start_angle'] <= angle < attrs['end_angle']

_HIT_TESTS = {
    'rect': hit_rect,
    'circle': hit_circle,
    'arc': hit_arc,
}

def hit_test(marks: Sequence[Mark], x: float, y: float, now: Optional[float] = None) -> Optional[Mark]:
    """Top-most mark under (x, y) in plot coordinates, using the geometry as drawn at *now*."""
    for mark in reversed(list(marks)):
        test = _HIT_TESTS.get(mark.kind)
        if test is not None and test(mark.current_attrs(now), x, y):
            return mark
    return None

# --- Formatting ---

def _half_up(value: float, decimals: int) -> Decimal:
    """Round exact halves away from zero, as the web page's number formatting does."""
    return Decimal(repr(float(value))).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)

def format_thousands(value: float, decimals: int = 0) -> str:
    return f"{_half_up(value, decimals):,.{decimals}f}"

def format_year(value: datetime) -> str:
    return f"{value.year:04d}"

def format_star(value: Optional[float]) -> str:
    if value is None:
        return ''
    return re.sub(r'\.?0+$', '', f"{_half_up(value, 2):.2f}")

def format_count(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)

def format_key(value: Any) -> str:
    return format_year(value) if isinstance(value, datetime) else str(value)

def share(value: float, total: float) -> float:
    return value / total * 100 if total else 0.0

# --- Tooltip content ---

def line_tooltip_html(header: Any, rows: List[Tuple[str, float]]) -> str:
    body = ''.join(f"<div><strong>{escape(c)}</strong>: ${format_thousands(v)}</div>" for c, v in rows)
    return f"<strong>{format_key(header)}</strong>{body}"

def bar_tooltip_html(aggregate: Aggregate) -> str:
    return (f"<strong>{escape(aggregate.category)}</strong><br>"
            f"{format_thousands(aggregate.value)} kWh per year on average<br>"
            f"{format_count(aggregate.weight)} models analysed")

def donut_tooltip_html(aggregate: Aggregate, total: float,
                       measure: str = 'average consumption', whole: str = 'combined mean') -> str:
    return (f"<strong>{escape(aggregate.category)}</strong><br>"
            f"{format_thousands(aggregate.value)} kWh {measure}<br>"
            f"{format_thousands(share(aggregate.value, total), 1)}% of {whole}")

def scatter_tooltip_html(sample: TvSample) -> str:
    return (f"<strong>{escape(sample.brand)}</strong><br>"
            f"{escape(sample.tech)} ({format_count(sample.count)} models)<br>"
            f"{format_star(sample.star_rating)} stars - {format_thousands(sample.annual_kwh, 1)} kWh/yr")
