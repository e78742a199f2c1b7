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

"""Legend swatches derived from the chart's category set."""

from dataclasses import dataclass
from html import escape
from typing import Callable, Dict, List, Optional

from .records import Aggregate, CategorySet
from .scales import ColorScale
from .interaction import format_count, format_thousands

@dataclass(frozen=True)
class LegendEntry:
    key: str
    label: str
    color: str

def build_legend(categories: CategorySet, color: ColorScale,
                 label: Optional[Callable[[str], str]] = None) -> List[LegendEntry]:
    """One entry per category, in CategorySet order, coloured by the shared scale."""
    label = label or (lambda category: category)
    return [LegendEntry(category, label(category), color(category)) for category in categories]

def model_count_label(aggregates: List[Aggregate]) -> Callable[[str], str]:
    """``"tech (N models)"`` labels for weighted-mean bars."""
    by_category: Dict[str, Aggregate] = {a.category: a for a in aggregates}
    return lambda category: f"{category} ({format_count(by_category[category].weight)} models)"

def kwh_label(aggregates: List[Aggregate]) -> Callable[[str], str]:
    """``"tech - N kWh"`` labels for donut slices."""
    by_category: Dict[str, Aggregate] = {a.category: a for a in aggregates}
    return lambda category: f"{category} - {format_thousands(by_category[category].value)} kWh"

def legend_html(entries: List[LegendEntry], css_class: str) -> str:
    spans = ''.join(
        f'<span style="--swatch-color: {e.color}">{escape(e.label)}</span>' for e in entries
    )
    return f'<div class="{css_class}">{spans}</div>'
