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

"""Static configuration shared by the chart controllers."""

from typing import Dict, Any, List, Optional

# --- Layout ---

MIN_WIDTH = 320
TRANSITION_MS = 600

# d3.schemeTableau10
TABLEAU10: List[str] = [
    '#4e79a7', '#f28e2c', '#e15759', '#76b7b2', '#59a14f',
    '#edc949', '#af7aa1', '#ff9da7', '#9c755f', '#bab0ab',
]

NA_MARKERS = ['na', 'Na', 'NA', 'n/a', 'N/A', '', 'null', 'None']

# --- Spot price line chart ---

SPOT_PRICE_ALIASES: Dict[str, str] = {
    'Queensland ($ per megawatt hour)': 'Queensland',
    'New South Wales ($ per megawatt hour)': 'New South Wales',
    'Victoria ($ per megawatt hour)': 'Victoria',
    'South Australia ($ per megawatt hour)': 'South Australia',
    'Tasmania ($ per megawatt hour)': 'Tasmania',
    'Snowy ($ per megawatt hour)': 'Snowy',
    'Average Price (notTas-Snowy)': 'NEM average',
}

SPOT_PRICE_ORDER: List[str] = [
    'Queensland', 'New South Wales', 'Victoria', 'South Australia', 'Tasmania', 'NEM average',
]

# --- Per-chart defaults ---

LINE_CHART: Dict[str, Any] = {
    'element_id': 'line-chart',
    'source': 'data/Ex5_ARE_Spot_Prices.csv',
    'key_column': 'Year',
    'aliases': SPOT_PRICE_ALIASES,
    'preferred_order': SPOT_PRICE_ORDER,
    'unit_suffix': r'\s*\(\$ per megawatt hour\)',
    'min_points': 3,
    'margin': {'top': 32, 'right': 32, 'bottom': 56, 'left': 72},
    'aspect': 0.65,
    'min_height': 360,
    'padding': 1.1,
    'y_ticks': 6,
    'stroke_width': 2.5,
    'focus_radius': 4,
    'tooltip_offset': (16, -20),
    'x_label': 'Year',
    'y_label': 'Wholesale price ($/MWh)',
    'legend_class': 'chart-legend line',
}

BAR_CHART: Dict[str, Any] = {
    'element_id': 'bar-chart',
    'source': 'data/Ex5_TV_energy.csv',
    'screen_size': 55,
    'size_tolerance': 0.5,
    'margin': {'top': 24, 'right': 20, 'bottom': 64, 'left': 80},
    'aspect': 0.65,
    'min_height': 320,
    'padding': 1.15,
    'band_padding': 0.3,
    'y_ticks': 6,
    'tooltip_offset': (12, -10),
    'x_label': 'Screen technology',
    'y_label': 'Average annual energy use (kWh)',
    'label_rotation': -25,
    'legend_class': 'chart-legend bar',
}

DONUT_CHART: Dict[str, Any] = {
    'element_id': 'donut-chart',
    'source': 'data/Ex5_TV_energy_Allsizes_byScreenType.csv',
    # 'preaggregated' reads category_column/value_column directly;
    # 'weighted_total' sums annual_kwh x count per technology from the raw TV file.
    'aggregate': 'preaggregated',
    'category_column': 'Screen_Tech',
    'value_column': 'Mean(Labelled energy consumption (kWh/year))',
    'aspect': 0.7,
    'min_height': 260,
    'ring_inset': 12,
    'inner_ratio': 0.55,
    'corner_radius': 6,
    'tooltip_offset': (12, -10),
    'legend_class': 'chart-legend donut',
}

SCATTER_CHART: Dict[str, Any] = {
    'element_id': 'scatter-chart',
    'source': 'data/Ex5_TV_energy.csv',
    'margin': {'top': 40, 'right': 24, 'bottom': 56, 'left': 72},
    'aspect': 0.6,
    'min_height': 300,
    'padding': 1.1,
    'x_pad': 0.3,
    'ticks': 6,
    'min_radius': 3,
    'fill_opacity': 0.8,
    'tooltip_offset': (12, -10),
    'x_label': 'Star rating (higher is better)',
    'y_label': 'Annual energy use (kWh)',
    'legend_class': 'chart-legend scatter',
}

# --- Export ---

EXPORT_CONFIG: Dict[str, Any] = {
    'displayModeBar': True,
    'displaylogo': False,
    'modeBarButtonsToRemove': ['select2d', 'lasso2d'],
}

def merge_config(defaults: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Returns a copy of *defaults* with *overrides* applied on top."""
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged
