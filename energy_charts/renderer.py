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

import json
import os
import sys
import tempfile
import webbrowser
from typing import Any, Dict, List, Optional

import plotly.graph_objects as go

from .charts import CHART_TYPES
from .config import EXPORT_CONFIG, NA_MARKERS
from .controller import ResponsiveController
from .loader import to_frame
from .surface import Container

CHART_ALIASES: Dict[str, str] = {
    'doughnut': 'donut',
    'bubble': 'scatter',
}

TV_COLUMNS = ['brand', 'screen_tech', 'screensize', 'energy_consumpt', 'star2', 'count']

REQUIRED_COLUMNS: Dict[str, List[str]] = {
    'line': [CHART_TYPES['line'].defaults['key_column']],
    'bar': ['screen_tech', 'screensize', 'energy_consumpt', 'count'],
    'donut': [CHART_TYPES['donut'].defaults['category_column'], CHART_TYPES['donut'].defaults['value_column']],
    'scatter': TV_COLUMNS,
}

# --- Core Logic & Public API ---

def _resolve_chart_name(chart_name: str) -> str:
    name = CHART_ALIASES.get(chart_name, chart_name)
    if name not in CHART_TYPES:
        raise ValueError(f"Unknown or unsupported chart type '{chart_name}'. Available: {get_available_charts()}")
    return name

def _create_chart(chart_name: str, source: Any, width: Optional[float],
                  config: Optional[Dict[str, Any]] = None) -> ResponsiveController:
    """Mount the named chart in a detached container of the given width."""
    chart_class = CHART_TYPES[_resolve_chart_name(chart_name)]
    container = Container(chart_class.defaults['element_id'], width)
    chart = chart_class(container, source=source, config=config)
    if not chart.mount():
        print(f"DEBUG: '{chart_name}' has nothing to draw", file=sys.stderr)
    return chart

def _create_figure(chart_name: str, source: Any, width: Optional[float],
                   config: Optional[Dict[str, Any]] = None) -> go.Figure:
    return _create_chart(chart_name, source, width, config).to_figure()

def render_chart(chart_name: str, source: Any = None, width: Optional[float] = 1000,
                 config: Optional[Dict[str, Any]] = None) -> str:
    """Renders a chart to Plotly JSON; an unusable source yields an empty figure."""
    return _create_figure(chart_name, source, width, config).to_json()

def save_chart_as_html(chart_name: str, source: Any, output_path: str, width: Optional[float] = 1200,
                       config: Optional[Dict[str, Any]] = None) -> str:
    """Renders a chart to a standalone HTML file."""
    fig = _create_figure(chart_name, source, width, config)
    fig.write_html(output_path, config=EXPORT_CONFIG, include_plotlyjs='cdn')
    return output_path

def create_temp_html_chart(chart_name: str, source: Any, width: Optional[float] = 1200) -> str:
    """Creates a temporary HTML file for the chart."""
    fd, temp_path = tempfile.mkstemp(suffix=f"_{chart_name}.html")
    os.close(fd)
    save_chart_as_html(chart_name, source, temp_path, width)
    return temp_path

def open_chart_in_browser(chart_name: str, source: Any, width: Optional[float] = 1200) -> str:
    """Creates a chart HTML file and opens it in the default browser."""
    html_path = create_temp_html_chart(chart_name, source, width)
    webbrowser.open(f'file://{os.path.abspath(html_path)}')
    return html_path

def get_available_charts() -> list:
    """Returns a list of all available chart types."""
    return sorted(set(CHART_TYPES) | set(CHART_ALIASES))

def validate_chart_source(chart_name: str, data: Any) -> Dict[str, Any]:
    """Checks that *data* carries the columns the chart needs and flags sparse columns."""
    errors = []
    warnings = []
    try:
        name = _resolve_chart_name(chart_name)
    except ValueError as e:
        return {'valid': False, 'errors': [str(e)], 'warnings': []}

    try:
        df = to_frame(data)
    except Exception as e:
        return {'valid': False, 'errors': [f"Could not read data: {e}"], 'warnings': []}

    if df.empty:
        errors.append("Dataset is empty")

    for col in REQUIRED_COLUMNS[name]:
        if col not in df.columns:
            errors.append(f"Column '{col}' not found in data")
            continue
        if df.empty:
            continue
        col_data = df[col].astype(str).str.strip()
        missing_pct = col_data.isin(NA_MARKERS).sum() / len(col_data) * 100
        if missing_pct > 50:
            warnings.append(f"Column '{col}' has {missing_pct:.1f}% missing values")
        na_count = col_data.isin([m for m in NA_MARKERS if m]).sum()
        if na_count > 0:
            warnings.append(f"Column '{col}' has {na_count} 'na' string values that will be ignored")

    if name == 'line' and not errors and len(df.columns) < 2:
        errors.append("Line chart requires at least one value column besides the key column")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings,
    }

def create_sample_data(chart_name: str) -> Dict[str, Any]:
    """Create sample data for trying out each chart type."""
    name = _resolve_chart_name(chart_name)
    if name == 'line':
        return {
            'Year': ['2019', '2020', '2021', '2022'],
            'Queensland ($ per megawatt hour)': ['71', '44', '58', '137'],
            'Victoria ($ per megawatt hour)': ['110', '58', '44', '128'],
            'Average Price (notTas-Snowy)': ['89', '51', '57', '141'],
        }
    if name == 'donut':
        return {
            'Screen_Tech': ['LCD (LED)', 'OLED', 'LCD'],
            'Mean(Labelled energy consumption (kWh/year))': ['236.4', '332.9', '285.1'],
        }
    return {
        'brand': ['Acme', 'Acme', 'Borel', 'Borel', 'Cyan'],
        'screen_tech': ['LCD (LED)', 'OLED', 'LCD (LED)', 'OLED', 'LCD'],
        'screensize': ['55', '55', '55', '65', '55'],
        'energy_consumpt': ['190', '310', '230', '402', '275'],
        'star2': ['5.5', '4', '5', '3.5', '4.5'],
        'count': ['3', '2', '1', '4', '2'],
    }

# Entry point for a quick smoke run
if __name__ == "__main__":
    print("Energy Chart Renderer")
    print(f"Available charts: {get_available_charts()}")

    for chart in sorted(CHART_TYPES):
        try:
            result = render_chart(chart, json.dumps(create_sample_data(chart)), width=800)
            print(f"✅ {chart}: {len(result)} bytes of figure JSON")
        except Exception as e:
            print(f"❌ {chart}: {e}")
