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
Typed records flowing through the chart pipeline.

Rows arrive as string-keyed dicts of strings and are coerced once by the
loader into the frozen dataclasses below.  Missing numeric fields are
modelled as ``None`` (never ``NaN``); downstream code receives them
read-only.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

RawRow = Dict[str, str]

# Ordered category labels; drives colour, legend order and mark keys.
CategorySet = Tuple[str, ...]

@dataclass(frozen=True)
class TvSample:
    """One row of the television energy dataset.

    ``count`` is the number of registered models the row stands for and
    doubles as the aggregation weight; it is ``0`` whenever the source
    cell is blank, non-numeric or not positive.
    """
    brand: str
    tech: str
    diagonal_inch: Optional[float]
    annual_kwh: Optional[float]
    star_rating: Optional[float]
    count: float

@dataclass(frozen=True)
class TidyRecord:
    """One long-format observation: key ``x``, ``category`` and a finite ``value``."""
    x: Any
    category: str
    value: float

@dataclass(frozen=True)
class Aggregate:
    """Per-category summary (weighted mean, weighted total or a pre-aggregated value)."""
    category: str
    value: float
    weight: float

SeriesGroup = Dict[str, List[TidyRecord]]

@dataclass(frozen=True)
class LoadResult:
    """Outcome of a load; ``error`` is set when the source could not be read."""
    samples: List[Any]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
