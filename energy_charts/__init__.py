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
Interactive energy and price charts.

Loads tabular energy/price datasets, reshapes them into series and
per-category aggregates, and keeps a responsive, keyed set of marks
(lines, bars, donut slices, bubbles) with pointer-driven tooltips.
"""

from .charts import (
    CHART_TYPES,
    RatingScatterChart,
    SpotPriceLineChart,
    TechnologyBarChart,
    TechnologyDonutChart,
    mount_charts,
)
from .renderer import (
    create_sample_data,
    get_available_charts,
    render_chart,
    save_chart_as_html,
    validate_chart_source,
)
from .surface import Card, Container, Page

__version__ = "0.1.0"
