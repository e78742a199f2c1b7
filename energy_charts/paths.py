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
Path geometry: monotone line paths, pie layout and arc helpers.

Angles follow the pie convention: radians, clockwise, zero at twelve
o'clock.
"""

import math
from typing import List, Optional, Sequence, Tuple

Point = Tuple[float, Optional[float]]

TAU = 2 * math.pi

# --- Line paths ---

def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip('0').rstrip('.')
    return '0' if text in ('', '-0') else text

def _secant_tangent(p0, p1, p2) -> float:
    """Fritsch-Carlson tangent at p1; zero at local extrema so the curve never overshoots."""
    h0 = p1[0] - p0[0]
    h1 = p2[0] - p1[0]
    if h0 <= 0 or h1 <= 0:
        return 0.0
    s0 = (p1[1] - p0[1]) / h0
    s1 = (p2[1] - p1[1]) / h1
    p = (s0 * h1 + s1 * h0) / (h0 + h1)
    sign0 = -1 if s0 < 0 else 1
    sign1 = -1 if s1 < 0 else 1
    return (sign0 + sign1) * min(abs(s0), abs(s1), 0.5 * abs(p))

def _end_tangent(p0, p1, t: float) -> float:
    h = p1[0] - p0[0]
    return (3 * (p1[1] - p0[1]) / h - t) / 2 if h else t

def _segment_path(points: Sequence[Tuple[float, float]]) -> str:
    first = points[0]
    parts = [f"M{_fmt(first[0])},{_fmt(first[1])}"]
    n = len(points)
    if n == 1:
        return parts[0]
    if n == 2:
        parts.append(f"L{_fmt(points[1][0])},{_fmt(points[1][1])}")
        return ''.join(parts)

    tangents = [0.0] * n
    for i in range(1, n - 1):
        tangents[i] = _secant_tangent(points[i - 1], points[i], points[i + 1])
    tangents[0] = _end_tangent(points[0], points[1], tangents[1])
    tangents[-1] = _end_tangent(points[-2], points[-1], tangents[-2])

    for i in range(n - 1):
        x0, y0 = points[i]
        x1, y1 = points[i + 1]
        dx = (x1 - x0) / 3
        parts.append(
            f"C{_fmt(x0 + dx)},{_fmt(y0 + dx * tangents[i])},"
            f"{_fmt(x1 - dx)},{_fmt(y1 - dx * tangents[i + 1])},"
            f"{_fmt(x1)},{_fmt(y1)}"
        )
    return ''.join(parts)

def split_segments(points: Sequence[Point]) -> List[List[Tuple[float, float]]]:
    """Runs of consecutive defined points; a None y closes the current run."""
    segments: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    for x, y in points:
        if y is None or x is None:
            if current:
                segments.append(current)
                current = []
            continue
        current.append((x, y))
    if current:
        segments.append(current)
    return segments

def monotone_path(points: Sequence[Point]) -> str:
    """SVG path through *points* (sorted by x) using monotone cubic interpolation."""
    return ''.join(_segment_path(segment) for segment in split_segments(points))

# --- Pie and arcs ---

def pie(values: Sequence[float], start_angle: float = 0.0, end_angle: float = TAU) -> List[Tuple[float, float]]:
    """(start, end) angles per value in input order; non-positive values get an empty span."""
    total = sum(v for v in values if v > 0)
    span = end_angle - start_angle
    k = span / total if total else 0
    angles = []
    current = start_angle
    for value in values:
        width = value * k if value > 0 else 0
        angles.append((current, current + width))
        current += width
    return angles

def arc_centroid(start: float, end: float, inner_radius: float, outer_radius: float) -> Tuple[float, float]:
    """Midpoint of the slice, relative to the pie centre."""
    r = (inner_radius + outer_radius) / 2
    a = (start + end) / 2 - math.pi / 2
    return math.cos(a) * r, math.sin(a) * r

def polar_point(angle: float, radius: float) -> Tuple[float, float]:
    return math.sin(angle) * radius, -math.cos(angle) * radius

def arc_outline(start: float, end: float, inner_radius: float, outer_radius: float,
                steps_per_radian: float = 24) -> List[Tuple[float, float]]:
    """Closed polygon approximating an annular slice, relative to the centre."""
    steps = max(2, int(math.ceil(abs(end - start) * steps_per_radian)))
    angles = [start + (end - start) * i / steps for i in range(steps + 1)]
    outer = [polar_point(a, outer_radius) for a in angles]
    inner = [polar_point(a, inner_radius) for a in reversed(angles)]
    ring = outer + inner
    ring.append(ring[0])
    return ring
