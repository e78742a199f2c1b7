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
Reshaping loaded rows into chart-ready series and aggregates.

Two families live here: the wide-to-tidy pivot used by the line chart,
and the per-category weighted aggregations used by the bar and donut
charts.
"""

import re
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .loader import coerce_numeric, column_or_blank, to_frame
from .records import Aggregate, CategorySet, RawRow, SeriesGroup, TidyRecord

_YEAR_RE = re.compile(r'\d{1,4}')

# --- Keys ---

def parse_year(value: Any) -> Optional[datetime]:
    """Parse a year cell into January 1st of that year, or None."""
    text = str(value).strip() if value is not None else ''
    if not _YEAR_RE.fullmatch(text):
        return None
    year = int(text)
    return datetime(year, 1, 1) if year >= 1 else None

# --- Wide-to-tidy pivot ---

def display_category(column: str, aliases: Dict[str, str], unit_suffix: Optional[str] = None) -> str:
    """Map a column header to its display label, dropping the unit suffix."""
    label = aliases.get(column, column)
    if unit_suffix:
        label = re.sub(unit_suffix, '', label, count=1)
    return label.strip()

def pivot_wide(
    rows: List[RawRow],
    key_column: str,
    parse_key: Callable[[Any], Any] = parse_year,
    aliases: Optional[Dict[str, str]] = None,
    unit_suffix: Optional[str] = None,
) -> List[TidyRecord]:
    """Melt wide rows (one column per category) into TidyRecords.

    Rows whose key does not parse are skipped entirely; blank or
    non-finite cells are skipped individually.
    """
    aliases = aliases or {}
    if not rows:
        return []
    frame = to_frame(rows).reset_index(drop=True)
    keys = [parse_key(v) for v in column_or_blank(frame, key_column)]

    values = frame.drop(columns=[key_column], errors='ignore')
    if values.empty:
        return []
    long = values.melt(var_name='column', value_name='raw', ignore_index=False)
    numbers = coerce_numeric(long['raw'])

    labels = {column: display_category(column, aliases, unit_suffix) for column in values.columns}
    records = []
    for row_index, column, value in zip(long.index, long['column'], numbers):
        x = keys[row_index]
        if x is None or value is None:
            continue
        records.append(TidyRecord(x=x, category=labels[column], value=value))
    return records

def group_series(records: Iterable[TidyRecord]) -> SeriesGroup:
    """Group records by category, each group sorted ascending by x."""
    groups: SeriesGroup = {}
    for record in records:
        groups.setdefault(record.category, []).append(record)
    for values in groups.values():
        values.sort(key=lambda r: r.x)
    return groups

def order_categories(categories: Iterable[str], preferred_order: Sequence[str] = ()) -> CategorySet:
    """Preferred labels first in list order, then the rest alphabetically."""
    present = list(dict.fromkeys(categories))
    listed = [c for c in preferred_order if c in present]
    rest = sorted(c for c in present if c not in preferred_order)
    return tuple(listed + rest)

def select_categories(groups: SeriesGroup, preferred_order: Sequence[str] = (), min_points: int = 3) -> CategorySet:
    """Categories with at least *min_points* records, in display order."""
    kept = [category for category, values in groups.items() if len(values) >= min_points]
    return order_categories(kept, preferred_order)

# --- Aggregation ---

def _aggregate_frame(samples: Sequence[Any], category: str, value: str, weight: str) -> pd.DataFrame:
    """Per-category sums of value x weight and of weight, in first-appearance order."""
    frame = pd.DataFrame({
        'category': [getattr(s, category) for s in samples],
        'value': [getattr(s, value) for s in samples],
        'weight': [getattr(s, weight) for s in samples],
    })
    frame = frame.dropna(subset=['value', 'weight'])
    if frame.empty:
        return frame
    frame['product'] = frame['value'].astype(float) * frame['weight'].astype(float)
    return frame.groupby('category', sort=False).agg(
        total=('product', 'sum'),
        weight=('weight', 'sum'),
    )

def weighted_mean(samples: Sequence[Any], category: str, value: str, weight: str) -> List[Aggregate]:
    """Σ(value x weight) / Σweight per category; zero-weight groups are dropped."""
    if not samples:
        return []
    grouped = _aggregate_frame(samples, category, value, weight)
    aggregates = []
    for name, row in grouped.iterrows():
        if not row['weight'] > 0:
            continue
        aggregates.append(Aggregate(category=str(name), value=float(row['total'] / row['weight']), weight=float(row['weight'])))
    return aggregates

def weighted_total(samples: Sequence[Any], category: str, value: str, weight: str) -> List[Aggregate]:
    """Σ(value x weight) per category; non-positive totals are dropped."""
    if not samples:
        return []
    grouped = _aggregate_frame(samples, category, value, weight)
    return [
        Aggregate(category=str(name), value=float(row['total']), weight=float(row['weight']))
        for name, row in grouped.iterrows()
        if row['total'] > 0
    ]

def read_preaggregated(rows: List[RawRow], category_column: str, value_column: str) -> List[Aggregate]:
    """One Aggregate per row with a non-empty category and a finite value."""
    if not rows:
        return []
    frame = to_frame(rows)
    categories = [str(c).strip() for c in column_or_blank(frame, category_column)]
    values = coerce_numeric(column_or_blank(frame, value_column))
    return [
        Aggregate(category=c, value=v, weight=1.0)
        for c, v in zip(categories, values)
        if c and v is not None
    ]

def sort_aggregates(aggregates: Iterable[Aggregate], descending: bool = False) -> List[Aggregate]:
    """Stable sort by value (ascending for bars, descending for donut slices)."""
    return sorted(aggregates, key=lambda a: a.value, reverse=descending)

def categories_of(aggregates: Iterable[Aggregate]) -> CategorySet:
    return tuple(dict.fromkeys(a.category for a in aggregates))

def unique_in_order(values: Iterable[str]) -> CategorySet:
    return tuple(dict.fromkeys(values))
