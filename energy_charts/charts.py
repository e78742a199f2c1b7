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
The four energy charts.

* ``SpotPriceLineChart``   - wholesale spot price per region over the years
* ``TechnologyBarChart``   - weighted mean kWh of 55-inch TVs per technology
* ``TechnologyDonutChart`` - mean (or total) kWh share per technology
* ``RatingScatterChart``   - star rating vs annual kWh, bubble size by diagonal
"""

import math
from typing import Any, Dict, List, Optional, Tuple, Type

from .config import BAR_CHART, DONUT_CHART, LINE_CHART, SCATTER_CHART, TRANSITION_MS
from .controller import ChartState, ResponsiveController
from .interaction import (
    PointerEvent,
    Tooltip,
    bar_tooltip_html,
    donut_tooltip_html,
    format_thousands,
    format_year,
    resolve_series_hover,
    scatter_tooltip_html,
    share,
)
from .legend import build_legend, kwh_label, model_count_label
from .loader import parse_raw_rows, parse_tv_rows
from .paths import arc_centroid, monotone_path, pie
from .records import Aggregate, TvSample
from .reshape import (
    categories_of,
    group_series,
    parse_year,
    pivot_wide,
    read_preaggregated,
    select_categories,
    sort_aggregates,
    unique_in_order,
    weighted_mean,
    weighted_total,
)
from .scales import (
    BandScale,
    ColorScale,
    Frame,
    LinearScale,
    SqrtScale,
    TimeScale,
    bubble_radius_range,
    extent,
    magnitude_domain,
    round_half_up,
)
from .surface import Axis, Container, Page

# --- Line chart ---

class SpotPriceLineChart(ResponsiveController):
    defaults = LINE_CHART
    parser = staticmethod(parse_raw_rows)

    def prepare(self, rows: List[Dict[str, str]]) -> bool:
        cfg = self.config
        tidy = pivot_wide(rows, cfg['key_column'], parse_year, cfg['aliases'], cfg['unit_suffix'])
        if not tidy:
            return False
        groups = group_series(tidy)
        self.categories = select_categories(groups, cfg['preferred_order'], cfg['min_points'])
        if not self.categories:
            return False
        self.series = {category: groups[category] for category in self.categories}
        self.color = ColorScale(self.categories)
        self.legend = build_legend(self.categories, self.color)
        return True

    def draw(self, frame: Frame) -> ChartState:
        cfg = self.config
        surface = self.surface
        surface.resize(frame)
        iw, ih = frame.inner_width, frame.inner_height

        records = [r for category in self.categories for r in self.series[category]]
        x_scale = TimeScale(extent(r.x for r in records), [0, iw])
        y_scale = LinearScale(magnitude_domain((r.value for r in records), cfg['padding']), [ih, 0]).nice()

        # Horizontal grid lines for easier price comparisons.
        surface.layer('grid', 'line').join(
            y_scale.ticks(cfg['y_ticks']),
            key=lambda tick: tick,
            attrs=lambda tick: {'x1': 0, 'x2': iw, 'y1': y_scale(tick), 'y2': y_scale(tick), 'stroke': '#e5e5e5'},
        )

        surface.set_axis('x', Axis(
            'bottom',
            [(x_scale(t), format_year(t)) for t in x_scale.year_ticks(min(10, iw / 80))],
            length=iw, offset=ih, label=cfg['x_label'],
        ))
        surface.set_axis('y', Axis(
            'left',
            [(y_scale(t), f"${format_thousands(t)}") for t in y_scale.ticks(cfg['y_ticks'])],
            length=ih, label=cfg['y_label'],
        ))

        def line_attrs(category: str) -> Dict[str, Any]:
            points = [(x_scale(r.x), y_scale(r.value)) for r in self.series[category]]
            return {
                'd': monotone_path(points),
                'stroke': self.color(category),
                'stroke_width': cfg['stroke_width'],
                'fill': 'none',
            }

        surface.layer('lines', 'path').join(self.categories, key=lambda c: c, attrs=line_attrs)

        # Focus dots follow the pointer; hidden until the first hover.
        surface.layer('focus', 'circle').join(
            self.categories,
            key=lambda c: c,
            attrs=lambda c: {
                'cx': 0, 'cy': 0, 'r': cfg['focus_radius'], 'fill': self.color(c),
                'stroke': '#fff', 'stroke_width': 1.5, 'opacity': 0,
            },
        )
        return ChartState(frame, {'x': x_scale, 'y': y_scale}, self.categories)

    def on_pointer_move(self, event: PointerEvent, state: ChartState) -> Tooltip:
        result = resolve_series_hover(
            event, state.frame, self.series, state.categories,
            state.scales['x'], state.scales['y'], self.config['tooltip_offset'],
        )
        for mark in self.surface.layers['focus'].marks:
            position = result.focus.get(mark.key)
            if position is None:
                mark.set(opacity=0)
            else:
                mark.set(cx=position[0], cy=position[1], opacity=1)
        return result.tooltip

    def on_pointer_leave(self, state: ChartState) -> None:
        for mark in self.surface.layers['focus'].marks:
            mark.set(opacity=0)

# --- Bar chart ---

class TechnologyBarChart(ResponsiveController):
    defaults = BAR_CHART
    parser = staticmethod(parse_tv_rows)
    hover_layer = 'bars'

    def prepare(self, samples: List[TvSample]) -> bool:
        cfg = self.config
        # Only rows for the configured screen size with usable energy data.
        filtered = [
            s for s in samples
            if s.diagonal_inch is not None
            and abs(s.diagonal_inch - cfg['screen_size']) < cfg['size_tolerance']
            and s.annual_kwh is not None
            and s.count > 0
        ]
        self.aggregates = sort_aggregates(weighted_mean(filtered, 'tech', 'annual_kwh', 'count'))
        if not self.aggregates:
            return False
        self.categories = categories_of(self.aggregates)
        self.color = ColorScale(self.categories)
        self.legend = build_legend(self.categories, self.color, model_count_label(self.aggregates))
        return True

    def draw(self, frame: Frame) -> ChartState:
        cfg = self.config
        surface = self.surface
        surface.resize(frame)
        iw, ih = frame.inner_width, frame.inner_height

        x_scale = BandScale(self.categories, [0, iw], cfg['band_padding'])
        y_scale = LinearScale(magnitude_domain((a.value for a in self.aggregates), cfg['padding']), [ih, 0])
        fmt = y_scale.tick_format(cfg['y_ticks'])

        surface.set_axis('x', Axis(
            'bottom',
            [(x_scale(c) + x_scale.bandwidth / 2, c) for c in self.categories],
            length=iw, offset=ih, label=cfg['x_label'], label_rotation=cfg['label_rotation'],
        ))
        surface.set_axis('y', Axis(
            'left', [(y_scale(t), fmt(t)) for t in y_scale.ticks(cfg['y_ticks'])],
            length=ih, label=cfg['y_label'],
        ))

        def bar_attrs(aggregate: Aggregate) -> Dict[str, Any]:
            top = min(y_scale(aggregate.value), ih)
            return {
                'x': x_scale(aggregate.category),
                'width': x_scale.bandwidth,
                'y': top,
                'height': max(0.0, ih - top),
                'fill': self.color(aggregate.category),
            }

        def bar_baseline(aggregate: Aggregate) -> Dict[str, Any]:
            return dict(bar_attrs(aggregate), y=ih, height=0)

        surface.layer('bars', 'rect').join(
            self.aggregates,
            key=lambda a: a.category,
            attrs=bar_attrs,
            enter_attrs=bar_baseline,
            duration=TRANSITION_MS,
        )
        return ChartState(frame, {'x': x_scale, 'y': y_scale}, self.categories)

    def tooltip_html(self, event: PointerEvent, datum: Aggregate) -> str:
        return bar_tooltip_html(datum)

# --- Donut chart ---

class TechnologyDonutChart(ResponsiveController):
    defaults = DONUT_CHART
    hover_layer = 'slices'

    def __init__(self, container: Optional[Container], source: Any = None,
                 config: Optional[Dict[str, Any]] = None, clock=None):
        super().__init__(container, source, config, clock)
        self.totals = self.config['aggregate'] == 'weighted_total'
        self.parser = parse_tv_rows if self.totals else parse_raw_rows

    def prepare(self, samples: List[Any]) -> bool:
        cfg = self.config
        if self.totals:
            usable = [s for s in samples if s.annual_kwh is not None and s.count > 0]
            aggregates = weighted_total(usable, 'tech', 'annual_kwh', 'count')
        else:
            aggregates = read_preaggregated(samples, cfg['category_column'], cfg['value_column'])
        self.aggregates = sort_aggregates(aggregates, descending=True)
        if not self.aggregates:
            return False
        self.total = sum(a.value for a in self.aggregates)
        self.categories = categories_of(self.aggregates)
        self.color = ColorScale(self.categories)
        self.legend = build_legend(self.categories, self.color, kwh_label(self.aggregates))
        return True

    def draw(self, frame: Frame) -> ChartState:
        cfg = self.config
        surface = self.surface
        surface.resize(frame, origin=(frame.width / 2, frame.height / 2))
        radius = max(0.0, min(frame.width, frame.height) / 2 - cfg['ring_inset'])
        inner_radius = radius * cfg['inner_ratio']

        slices = list(zip(self.aggregates, pie([a.value for a in self.aggregates])))

        def slice_attrs(item: Tuple[Aggregate, Tuple[float, float]]) -> Dict[str, Any]:
            aggregate, (start, end) = item
            return {
                'cx': 0.0, 'cy': 0.0,
                'start_angle': start, 'end_angle': end,
                'inner_radius': inner_radius, 'outer_radius': radius,
                'corner_radius': cfg['corner_radius'],
                'fill': self.color(aggregate.category), 'stroke': '#fff', 'stroke_width': 1.5,
            }

        def label_attrs(item: Tuple[Aggregate, Tuple[float, float]]) -> Dict[str, Any]:
            aggregate, (start, end) = item
            x, y = arc_centroid(start, end, inner_radius, radius)
            return {'x': x, 'y': y, 'text': f"{round_half_up(share(aggregate.value, self.total))}%"}

        surface.layer('slices', 'arc').join(slices, key=lambda item: item[0].category, attrs=slice_attrs)
        surface.layer('labels', 'text').join(slices, key=lambda item: item[0].category, attrs=label_attrs)
        return ChartState(frame, {'radius': radius, 'inner_radius': inner_radius}, self.categories)

    def tooltip_html(self, event: PointerEvent, datum: Tuple[Aggregate, Tuple[float, float]]) -> str:
        if self.totals:
            return donut_tooltip_html(datum[0], self.total, 'per year in total', 'combined total')
        return donut_tooltip_html(datum[0], self.total)

# --- Scatter plot ---

def point_keys(samples: List[TvSample]) -> List[Tuple[Any, ...]]:
    """Composite keys; repeated rows get an occurrence suffix so every point stays distinct."""
    seen: Dict[Tuple[Any, ...], int] = {}
    keys = []
    for s in samples:
        base = (s.brand, s.tech, s.diagonal_inch, s.star_rating, s.annual_kwh)
        occurrence = seen.get(base, 0)
        seen[base] = occurrence + 1
        keys.append(base + (occurrence,))
    return keys

class RatingScatterChart(ResponsiveController):
    defaults = SCATTER_CHART
    parser = staticmethod(parse_tv_rows)
    hover_layer = 'dots'

    def prepare(self, samples: List[TvSample]) -> bool:
        # A point needs every plotted field.
        data = [
            s for s in samples
            if s.star_rating is not None and s.annual_kwh is not None
            and s.diagonal_inch is not None and s.count > 0
        ]
        if not data:
            return False
        self.points = list(zip(point_keys(data), data))
        self.categories = unique_in_order(s.tech for s in data)
        self.color = ColorScale(self.categories)
        self.legend = build_legend(self.categories, self.color)
        return True

    def draw(self, frame: Frame) -> ChartState:
        cfg = self.config
        surface = self.surface
        surface.resize(frame)
        iw, ih = frame.inner_width, frame.inner_height
        samples = [s for _, s in self.points]

        star_min, star_max = extent(s.star_rating for s in samples)
        x_scale = LinearScale(
            [max(0, math.floor(star_min - cfg['x_pad'])), math.ceil(star_max + cfg['x_pad'])], [0, iw])
        y_scale = LinearScale(magnitude_domain((s.annual_kwh for s in samples), cfg['padding']), [ih, 0])
        r_scale = SqrtScale(extent(s.diagonal_inch for s in samples), bubble_radius_range(iw, cfg['min_radius']))

        y_format = y_scale.tick_format(cfg['ticks'])
        surface.set_axis('x', Axis(
            'bottom', [(x_scale(t), f"{t:.2f}") for t in x_scale.ticks(cfg['ticks'])],
            length=iw, offset=ih, label=cfg['x_label'],
        ))
        surface.set_axis('y', Axis(
            'left', [(y_scale(t), y_format(t)) for t in y_scale.ticks(cfg['ticks'])],
            length=ih, label=cfg['y_label'],
        ))

        surface.layer('dots', 'circle').join(
            self.points,
            key=lambda point: point[0],
            attrs=lambda point: {
                'cx': x_scale(point[1].star_rating),
                'cy': y_scale(point[1].annual_kwh),
                'r': r_scale(point[1].diagonal_inch),
                'fill': self.color(point[1].tech),
                'fill_opacity': cfg['fill_opacity'],
                'stroke': 'white',
                'stroke_width': 1,
            },
        )
        return ChartState(frame, {'x': x_scale, 'y': y_scale, 'r': r_scale}, self.categories)

    def tooltip_html(self, event: PointerEvent, datum: Tuple[Any, TvSample]) -> str:
        return scatter_tooltip_html(datum[1])

# --- Registry ---

CHART_TYPES: Dict[str, Type[ResponsiveController]] = {
    'line': SpotPriceLineChart,
    'bar': TechnologyBarChart,
    'donut': TechnologyDonutChart,
    'scatter': RatingScatterChart,
}

def mount_charts(page: Page, sources: Optional[Dict[str, Any]] = None) -> Dict[str, ResponsiveController]:
    """Mount every chart whose container is on *page*; absent containers are skipped."""
    sources = sources or {}
    mounted = {}
    for name, chart_class in CHART_TYPES.items():
        container = page.select(chart_class.defaults['element_id'])
        if container is None:
            continue
        chart = chart_class(container, source=sources.get(name))
        chart.mount()
        mounted[name] = chart
    return mounted
