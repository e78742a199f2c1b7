#!/usr/bin/env python3
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
Tests for nearest-point resolution, hit testing and tooltip formatting.
"""

import math
import sys
from datetime import datetime

from energy_charts.interaction import (
    PointerEvent,
    bar_tooltip_html,
    donut_tooltip_html,
    format_star,
    format_thousands,
    hit_arc,
    hit_circle,
    hit_rect,
    hit_test,
    line_tooltip_html,
    nearest_index,
    nearest_record,
    resolve_series_hover,
    scatter_tooltip_html,
    show_tooltip,
)
from energy_charts.legend import build_legend, kwh_label, legend_html, model_count_label
from energy_charts.marks import MarkReconciler
from energy_charts.records import Aggregate, TidyRecord, TvSample
from energy_charts.scales import ColorScale, LinearScale, TimeScale, compute_frame

MARGIN = {'top': 10, 'right': 10, 'bottom': 10, 'left': 10}

def yearly(category, values, start=2019):
    return [TidyRecord(x=float(start + i), category=category, value=v) for i, v in enumerate(values)]

def test_nearest_rounds_to_closer_point():
    records = yearly('A', [1, 2, 3, 4])
    assert nearest_record(records, 2020.6).x == 2021
    assert nearest_record(records, 2020.4).x == 2020

def test_nearest_tie_goes_to_later_point():
    records = yearly('A', [1, 2, 3, 4])
    assert nearest_record(records, 2020.5).x == 2021

def test_nearest_clamps_to_ends():
    records = yearly('A', [1, 2, 3])
    assert nearest_record(records, 1900).x == 2019
    assert nearest_record(records, 2100).x == 2021
    assert nearest_record([], 2020) is None
    assert nearest_index([5], 0) == 0

def test_resolve_series_hover():
    frame = compute_frame(220, MARGIN, aspect=0.5)
    series = {'A': yearly('A', [10, 20, 30]), 'B': yearly('B', [5, 6])}
    x_scale = LinearScale([2019, 2021], [0, frame.inner_width])
    y_scale = LinearScale([0, 40], [frame.inner_height, 0])

    # 2020.6 in plot space, shifted by the left margin
    px = x_scale(2020.6) + MARGIN['left']
    result = resolve_series_hover(PointerEvent(px, 20), frame, series, ['A', 'B'], x_scale, y_scale, (16, -20))
    assert result.tooltip.visible
    assert result.tooltip.left == px + 16
    assert result.tooltip.top == 0
    assert result.focus['A'] == (x_scale(2021), y_scale(30))
    assert result.focus['B'] == (x_scale(2020), y_scale(6))
    assert '<strong>A</strong>: $30' in result.tooltip.html

def test_resolve_series_hover_outside_plot():
    frame = compute_frame(220, MARGIN, aspect=0.5)
    series = {'A': yearly('A', [10, 20, 30])}
    x_scale = LinearScale([2019, 2021], [0, frame.inner_width])
    y_scale = LinearScale([0, 40], [frame.inner_height, 0])
    result = resolve_series_hover(PointerEvent(2, 20), frame, series, ['A'], x_scale, y_scale, (16, -20))
    assert not result.tooltip.visible
    assert result.focus == {}

def test_hit_rect_and_circle():
    assert hit_rect({'x': 10, 'y': 10, 'width': 20, 'height': 40}, 15, 49)
    assert not hit_rect({'x': 10, 'y': 10, 'width': 20, 'height': 40}, 31, 20)
    assert hit_circle({'cx': 0, 'cy': 0, 'r': 5}, 3, 4)
    assert not hit_circle({'cx': 0, 'cy': 0, 'r': 5}, 4, 4)

def test_hit_arc_angles_run_clockwise_from_noon():
    ring = {'start_angle': 0, 'end_angle': math.pi / 2, 'inner_radius': 5, 'outer_radius': 10}
    assert hit_arc(ring, 1, -7)
    assert hit_arc(ring, 7, -1)
    assert not hit_arc(ring, -7, -1)
    assert not hit_arc(ring, 7, 1)
    assert not hit_arc(ring, 1, -2)

def test_hit_test_prefers_top_mark():
    layer = MarkReconciler('circle', clock=lambda: 0)
    layer.join(['under', 'over'], key=lambda d: d, attrs=lambda d: {'cx': 0, 'cy': 0, 'r': 5})
    assert hit_test(layer.marks, 1, 1).key == 'over'
    assert hit_test(layer.marks, 50, 50) is None

def test_tooltip_offset():
    tooltip = show_tooltip(PointerEvent(100, 50), 'x', (12, -10))
    assert (tooltip.left, tooltip.top) == (112, 40)

def test_format_star():
    assert format_star(5.0) == '5'
    assert format_star(5.5) == '5.5'
    assert format_star(4.25) == '4.25'
    assert format_star(10.0) == '10'
    assert format_star(None) == ''

def test_exact_halves_round_up():
    assert format_thousands(44.5) == '45'
    assert format_thousands(2.5) == '3'
    assert format_thousands(1234.5) == '1,235'
    assert format_thousands(301.25, 1) == '301.3'
    assert line_tooltip_html(datetime(2020, 1, 1), [('Victoria', 44.5)]).endswith('$45</div>')
    assert donut_tooltip_html(Aggregate('LCD', 1, 1), 16) == \
        '<strong>LCD</strong><br>1 kWh average consumption<br>6.3% of combined mean'

def test_tooltip_html():
    assert line_tooltip_html(datetime(2021, 1, 1), [('Victoria', 1234.4)]) == \
        '<strong>2021</strong><div><strong>Victoria</strong>: $1,234</div>'
    assert bar_tooltip_html(Aggregate('OLED', 310, 2)) == \
        '<strong>OLED</strong><br>310 kWh per year on average<br>2 models analysed'
    assert donut_tooltip_html(Aggregate('LCD', 250, 1), 1000) == \
        '<strong>LCD</strong><br>250 kWh average consumption<br>25.0% of combined mean'
    sample = TvSample('Acme & Co', 'OLED', 55, 301.25, 4.5, 3)
    assert scatter_tooltip_html(sample) == \
        '<strong>Acme &amp; Co</strong><br>OLED (3 models)<br>4.5 stars - 301.3 kWh/yr'

def test_legend_follows_category_order():
    aggregates = [Aggregate('LCD', 200, 4), Aggregate('OLED', 310, 2)]
    color = ColorScale(['LCD', 'OLED'])
    first = build_legend(('LCD', 'OLED'), color, model_count_label(aggregates))
    second = build_legend(('LCD', 'OLED'), ColorScale(['LCD', 'OLED']), model_count_label(aggregates))
    assert first == second
    assert [e.label for e in first] == ['LCD (4 models)', 'OLED (2 models)']
    assert build_legend(('OLED',), color, kwh_label(aggregates))[0].label == 'OLED - 310 kWh'
    assert legend_html(first, 'chart-legend bar').startswith('<div class="chart-legend bar"><span')

def test_time_scale_nearest_on_dates():
    records = [TidyRecord(datetime(y, 1, 1), 'A', y) for y in (2019, 2020, 2021)]
    scale = TimeScale([datetime(2019, 1, 1), datetime(2021, 1, 1)], [0, 100])
    hovered = scale.invert(scale(datetime(2020, 1, 1)) + 20)
    assert nearest_record(records, hovered).x == datetime(2020, 1, 1)

def main():
    """Run every test in this module and print a summary."""
    tests = [(name, fn) for name, fn in sorted(globals().items()) if name.startswith('test_') and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"  ✅ {name}")
        except Exception as e:
            failed += 1
            print(f"  ❌ {name}: {e}")
    print(f"\n✅ Passed: {len(tests) - failed}  ❌ Failed: {failed}")
    return failed == 0

if __name__ == "__main__":
    sys.exit(0 if main() else 1)
