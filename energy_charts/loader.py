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
Tabular source loading and typed coercion.

Every cell is read as a string; numeric fields are coerced with the
finite-or-None rule.  Load failures never propagate: they are echoed to
stderr and reported through ``LoadResult.error``.
"""

import json
import math
import sys
import traceback
from typing import Any, Callable, Iterable, List, Optional

import pandas as pd

from .records import LoadResult, RawRow, TvSample

# --- Helper Functions ---

def _clean_numeric_data(series: pd.Series) -> pd.Series:
    """Convert a string series to floats; non-numeric and non-finite cells become NaN."""
    cleaned = series.astype(str).str.strip()
    numeric = pd.to_numeric(cleaned, errors='coerce').astype(float)
    return numeric.replace([float('inf'), float('-inf')], float('nan'))

def _cell_text(value: Any) -> str:
    """Render one cell as text; missing cells become '' and integral floats lose their '.0'."""
    if value is None or value is pd.NA or (isinstance(value, float) and math.isnan(value)):
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def to_frame(source: Any) -> pd.DataFrame:
    """Normalise any supported source into a DataFrame of strings.

    Records and dicts are built without type inference so one missing cell
    never turns a whole column into floats.
    """
    if isinstance(source, pd.DataFrame):
        frame = source.astype(object)
    elif isinstance(source, (list, tuple)):
        frame = pd.DataFrame(list(source), dtype=object)
    elif isinstance(source, dict):
        frame = pd.DataFrame(source, dtype=object)
    elif isinstance(source, str) and source.lstrip()[:1] in ('[', '{'):
        return to_frame(json.loads(source))
    else:
        # Path or file-like object
        return pd.read_csv(source, dtype=str, keep_default_na=False)

    return pd.DataFrame(
        {column: frame[column].map(_cell_text) for column in frame.columns},
        index=frame.index,
        columns=frame.columns,
    )

def column_or_blank(frame: pd.DataFrame, name: str) -> pd.Series:
    """Returns the named column, or a blank column when the source lacks it."""
    if name in frame.columns:
        return frame[name]
    return pd.Series([''] * len(frame), index=frame.index, dtype=object)

# --- Public API ---

def coerce_number(value: Any) -> Optional[float]:
    """Coerce a single cell with the finite-or-None rule."""
    return coerce_numeric([value])[0]

def coerce_numeric(values: Iterable[Any]) -> List[Optional[float]]:
    """Coerce cells to floats; blank, missing, non-numeric or non-finite cells become None."""
    series = pd.Series(list(values), dtype=object).where(lambda s: s.notna(), '')
    numeric = _clean_numeric_data(series)
    return [None if pd.isna(v) else float(v) for v in numeric]

def fetch_rows(source: Any) -> List[RawRow]:
    """Read a CSV path, file object, JSON string, list of dicts or DataFrame into RawRows."""
    frame = to_frame(source)
    return frame.to_dict(orient='records')

def parse_raw_rows(rows: List[RawRow]) -> List[RawRow]:
    """Identity parser for charts that reshape the raw rows themselves."""
    return [dict(row) for row in rows]

def parse_tv_rows(rows: List[RawRow]) -> List[TvSample]:
    """Coerce rows of the television energy file into TvSamples."""
    if not rows:
        return []
    frame = to_frame(rows)
    diagonal = coerce_numeric(column_or_blank(frame, 'screensize'))
    energy = coerce_numeric(column_or_blank(frame, 'energy_consumpt'))
    stars = coerce_numeric(column_or_blank(frame, 'star2'))
    counts = coerce_numeric(column_or_blank(frame, 'count'))

    samples = []
    for i, (brand, tech) in enumerate(zip(column_or_blank(frame, 'brand'), column_or_blank(frame, 'screen_tech'))):
        count = counts[i]
        samples.append(TvSample(
            brand=str(brand),
            tech=str(tech),
            diagonal_inch=diagonal[i],
            annual_kwh=energy[i],
            star_rating=stars[i],
            count=count if count is not None and count > 0 else 0,
        ))
    return samples

def load(source: Any, parser: Callable[[List[RawRow]], List[Any]] = parse_raw_rows) -> LoadResult:
    """Fetch and parse a source; failures yield an empty result carrying the error message."""
    try:
        rows = fetch_rows(source)
        samples = parser(rows)
    except Exception as e:
        print(f"Error in load: {str(e)}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return LoadResult(samples=[], error=str(e))
    print(f"DEBUG: loaded {len(samples)} rows", file=sys.stderr)
    return LoadResult(samples=samples)
