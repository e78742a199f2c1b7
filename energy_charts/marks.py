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
Keyed reconciliation of visual marks between renders.

A ``MarkReconciler`` owns one collection of marks (bars, slices, dots,
line paths...).  Each ``join`` diffs the keys of the incoming data
against the marks it already holds:

* enter  - new key: the mark is created, optionally at a neutral
  geometry with a timed transition towards its final attributes;
* update - known key: the existing ``Mark`` object is mutated in place;
  a transition still in flight is retargeted, never restarted;
* exit   - key no longer present: the mark is removed.
"""

import time
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

AttrFn = Callable[[Any], Dict[str, Any]]

def ease_cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2

def _monotonic_ms() -> float:
    return time.monotonic() * 1000

class Transition:
    """Timed interpolation of numeric attributes from ``start`` to ``end``."""

    def __init__(self, start: Dict[str, Any], end: Dict[str, Any], started_at: float, duration: float):
        self.start = dict(start)
        self.end = dict(end)
        self.started_at = started_at
        self.duration = duration

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.started_at) / self.duration))

    def done(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def attrs_at(self, now: float) -> Dict[str, Any]:
        t = ease_cubic_in_out(self.progress(now))
        attrs = dict(self.end)
        for name, target in self.end.items():
            origin = self.start.get(name)
            if isinstance(origin, (int, float)) and isinstance(target, (int, float)):
                attrs[name] = origin + (target - origin) * t
        return attrs

class Mark:
    """A visual primitive bound to one datum by a stable key."""

    def __init__(self, key: Hashable, kind: str, attrs: Dict[str, Any], datum: Any = None):
        self.key = key
        self.kind = kind
        self.attrs = dict(attrs)
        self.datum = datum
        self.transition: Optional[Transition] = None

    def set(self, **attrs) -> 'Mark':
        self.attrs.update(attrs)
        return self

    def current_attrs(self, now: Optional[float] = None) -> Dict[str, Any]:
        """Attributes as drawn at *now*, accounting for an entrance transition."""
        if self.transition is None:
            return dict(self.attrs)
        now = _monotonic_ms() if now is None else now
        if self.transition.done(now):
            return dict(self.attrs)
        return self.transition.attrs_at(now)

    def __repr__(self) -> str:
        return f"Mark({self.kind!r}, key={self.key!r}, attrs={self.attrs!r})"

class MarkReconciler:
    """Owns one keyed collection of marks for a single chart instance."""

    def __init__(self, kind: str, clock: Optional[Callable[[], float]] = None):
        self.kind = kind
        self.clock = clock or _monotonic_ms
        self._marks: Dict[Hashable, Mark] = {}

    def __len__(self) -> int:
        return len(self._marks)

    def __iter__(self):
        return iter(list(self._marks.values()))

    @property
    def marks(self) -> List[Mark]:
        return list(self._marks.values())

    def get(self, key: Hashable) -> Optional[Mark]:
        return self._marks.get(key)

    def join(
        self,
        data: Iterable[Any],
        key: Callable[[Any], Hashable],
        attrs: AttrFn,
        enter_attrs: Optional[AttrFn] = None,
        duration: Optional[float] = None,
    ) -> List[Mark]:
        """Reconcile the collection against *data* and return marks in data order.

        Duplicate keys keep the first datum.
        """
        incoming: Dict[Hashable, Any] = {}
        for datum in data:
            incoming.setdefault(key(datum), datum)

        entering = [k for k in incoming if k not in self._marks]
        updating = [k for k in incoming if k in self._marks]
        exiting = [k for k in self._marks if k not in incoming]

        now = self.clock()
        for k in entering:
            datum = incoming[k]
            final = attrs(datum)
            mark = Mark(k, self.kind, final, datum)
            if enter_attrs is not None and duration:
                mark.transition = Transition(enter_attrs(datum), final, now, duration)
            self._marks[k] = mark

        for k in updating:
            mark = self._marks[k]
            mark.datum = incoming[k]
            final = attrs(mark.datum)
            mark.attrs.update(final)
            if mark.transition is not None:
                if mark.transition.done(now):
                    mark.transition = None
                else:
                    mark.transition.end.update(final)

        for k in exiting:
            del self._marks[k]

        self._marks = {k: self._marks[k] for k in incoming}
        return self.marks

    def clear(self) -> None:
        self._marks.clear()

    def snapshot(self) -> List[Tuple[Hashable, str, Tuple[Tuple[str, Any], ...]]]:
        """Settled state of the collection, comparable across renders."""
        return [(m.key, m.kind, tuple(sorted(m.attrs.items()))) for m in self._marks.values()]
