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
Scales mapping data domains onto pixel ranges.

Tick and nice rules follow the d3-scale conventions so that axes read
the same as the web charts they replace.  Construction never raises: a
degenerate domain maps every value to the middle of the range.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from .config import MIN_WIDTH, TABLEAU10

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)
_EPOCH = datetime(1970, 1, 1)

def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)

# --- Frame ---

@dataclass(frozen=True)
class Frame:
    """Surface size, margins and the inner plotting extents."""
    width: float
    height: float
    margin: Dict[str, float]
    inner_width: float
    inner_height: float

def compute_frame(width: Optional[float], margin: Optional[Dict[str, float]] = None,
                  aspect: float = 0.65, min_height: float = 0) -> Frame:
    """Size a chart from its container width.

    A missing, zero or negative width falls back to ``MIN_WIDTH``; inner
    extents never go below zero.
    """
    margin = dict(margin or {'top': 0, 'right': 0, 'bottom': 0, 'left': 0})
    if not width or width <= 0 or math.isnan(width):
        width = MIN_WIDTH
    height = max(min_height, round_half_up(width * aspect))
    inner_width = max(0, width - margin['left'] - margin['right'])
    inner_height = max(0, height - margin['top'] - margin['bottom'])
    return Frame(width, height, margin, inner_width, inner_height)

# --- Tick helpers ---

def tick_increment(start: float, stop: float, count: float) -> float:
    """d3 tickIncrement: positive step, or negative inverse step below 1."""
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / math.pow(10, power)
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        return -math.pow(10, -power) / factor
    return factor * math.pow(10, power)

def _tick_spec(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / math.pow(10, power)
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = math.pow(10, -power) / factor
        i1 = round_half_up(start * inc)
        i2 = round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = math.pow(10, power) * factor
        i1 = round_half_up(start / inc)
        i2 = round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc

def ticks(start: float, stop: float, count: float) -> List[float]:
    """Evenly spaced round values covering [start, stop]."""
    if not count > 0:
        return []
    if start == stop:
        return [start]
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    i1, i2, inc = _tick_spec(lo, hi, count)
    if not i2 >= i1:
        return []
    if inc < 0:
        values = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        values = [(i1 + i) * inc for i in range(i2 - i1 + 1)]
    return values[::-1] if reverse else values

def _step_size(start: float, stop: float, count: float) -> float:
    inc = tick_increment(start, stop, count)
    return 1 / -inc if inc < 0 else inc

def default_tick_format(step: float):
    """d3's default linear tick format: grouped thousands, precision from the step."""
    precision = 0
    if step > 0:
        precision = max(0, -math.floor(math.log10(step) + 1e-12))
    return lambda v: f"{v:,.{precision}f}"

# --- Continuous scales ---

class LinearScale:
    kind = 'linear'

    def __init__(self, domain: Sequence[float], range_: Sequence[float]):
        self.domain = [float(domain[0]), float(domain[1])]
        self.range = [float(range_[0]), float(range_[1])]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        t = (value - d0) / span if span else 0.5
        return r0 + t * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = r1 - r0
        t = (pixel - r0) / span if span else 0.5
        return d0 + t * (d1 - d0)

    def nice(self, count: int = 10) -> 'LinearScale':
        """Extend the domain outward to round tick boundaries."""
        start, stop = self.domain
        reverse = stop < start
        if reverse:
            start, stop = stop, start
        if not stop > start or not all(map(math.isfinite, (start, stop))):
            return self
        prestep = None
        for _ in range(10):
            step = tick_increment(start, stop, count)
            if step == prestep:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            prestep = step
        self.domain = [stop, start] if reverse else [start, stop]
        return self

    def ticks(self, count: int = 10) -> List[float]:
        d0, d1 = self.domain
        if not all(map(math.isfinite, (d0, d1))):
            return []
        return ticks(d0, d1, count)

    def tick_format(self, count: int = 10):
        d0, d1 = self.domain
        if d0 == d1:
            return default_tick_format(0)
        return default_tick_format(_step_size(min(d0, d1), max(d0, d1), count))

class TimeScale(LinearScale):
    """Linear scale over datetimes, stored as seconds since the epoch."""
    kind = 'time'

    def __init__(self, domain: Sequence[datetime], range_: Sequence[float]):
        super().__init__([self.to_number(domain[0]), self.to_number(domain[1])], range_)

    @staticmethod
    def to_number(value: datetime) -> float:
        return (value - _EPOCH).total_seconds()

    @staticmethod
    def to_datetime(seconds: float) -> datetime:
        return _EPOCH + timedelta(seconds=seconds)

    def __call__(self, value: datetime) -> float:
        return super().__call__(self.to_number(value))

    def invert(self, pixel: float) -> datetime:
        return self.to_datetime(super().invert(pixel))

    def year_ticks(self, count: float = 10) -> List[datetime]:
        """January 1st ticks at a round step of whole years."""
        start = self.to_datetime(min(self.domain))
        stop = self.to_datetime(max(self.domain))
        first = start.year if (start.month, start.day, start.hour, start.minute, start.second) == (1, 1, 0, 0, 0) else start.year + 1
        last = stop.year
        if last < first:
            return []
        step = max(1, int(_step_size(first, last, count))) if last > first and count > 0 else 1
        first = int(math.ceil(first / step) * step)
        return [datetime(year, 1, 1) for year in range(first, last + 1, step)]

class SqrtScale(LinearScale):
    """Square-root scale: area, not radius, grows linearly with the value."""
    kind = 'sqrt'

    @staticmethod
    def _transform(value: float) -> float:
        return math.copysign(math.sqrt(abs(value)), value)

    def __call__(self, value: float) -> float:
        d0, d1 = (self._transform(d) for d in self.domain)
        r0, r1 = self.range
        span = d1 - d0
        t = (self._transform(value) - d0) / span if span else 0.5
        return r0 + t * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = (self._transform(d) for d in self.domain)
        r0, r1 = self.range
        span = r1 - r0
        t = (pixel - r0) / span if span else 0.5
        root = d0 + t * (d1 - d0)
        return math.copysign(root * root, root)

# --- Categorical scales ---

class BandScale:
    """Contiguous bands with equal inner and outer padding, centred in the range."""
    kind = 'band'

    def __init__(self, domain: Iterable[Hashable], range_: Sequence[float], padding: float = 0.0):
        self.domain = list(dict.fromkeys(domain))
        self.range = [float(range_[0]), float(range_[1])]
        self.padding = padding
        self._index = {key: i for i, key in enumerate(self.domain)}
        n = len(self.domain)
        start, stop = self.range
        reverse = stop < start
        if reverse:
            start, stop = stop, start
        self.step = (stop - start) / max(1, n - padding + padding * 2)
        start += (stop - start - self.step * (n - padding)) * 0.5
        self.bandwidth = self.step * (1 - padding)
        positions = [start + self.step * i for i in range(n)]
        self._positions = positions[::-1] if reverse else positions

    def __call__(self, key: Hashable) -> Optional[float]:
        i = self._index.get(key)
        return None if i is None else self._positions[i]

class ColorScale:
    """Ordinal category -> colour mapping; unseen keys extend the domain."""
    kind = 'ordinal'

    def __init__(self, domain: Iterable[str] = (), palette: Sequence[str] = TABLEAU10):
        self.palette = list(palette)
        self.domain: List[str] = []
        self._colors: Dict[str, str] = {}
        for key in domain:
            self(key)

    def __call__(self, key: str) -> str:
        if key not in self._colors:
            self._colors[key] = self.palette[len(self.domain) % len(self.palette)]
            self.domain.append(key)
        return self._colors[key]

# --- Domain helpers ---

def extent(values: Iterable[float]) -> Optional[Tuple[float, float]]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return min(present), max(present)

def magnitude_domain(values: Iterable[float], padding: float = 1.0) -> Tuple[float, float]:
    """[0, max x padding] for value axes that need headroom above the tallest mark."""
    bounds = extent(values)
    top = bounds[1] if bounds else 0.0
    return 0.0, top * padding

def bubble_radius_range(inner_width: float, min_radius: float = 3) -> Tuple[float, float]:
    """Marker radii; the upper bound shrinks with narrow layouts."""
    return min_radius, max(8, min(14, inner_width / 30))
