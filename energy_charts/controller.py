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
Render lifecycle shared by every chart.

``mount`` loads and prepares the data once (category set, colour scale,
legend), then renders.  ``render`` recomputes the frame and scales from
the current container width, reconciles the marks and stores a fresh
``ChartState`` that the pointer handlers read, so a handler never sees
scales from a previous size.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import plotly.graph_objects as go

from .config import merge_config
from .interaction import (
    PointerEvent,
    Tooltip,
    hidden_tooltip,
    hit_test,
    in_surface,
    move_tooltip,
    show_tooltip,
)
from .legend import LegendEntry
from .loader import load, parse_raw_rows
from .marks import Mark
from .records import CategorySet
from .scales import ColorScale, Frame, compute_frame
from .surface import Container, DrawingSurface

@dataclass
class ChartState:
    """Everything a render produced that pointer handling needs."""
    frame: Frame
    scales: Dict[str, Any] = field(default_factory=dict)
    categories: CategorySet = ()

class ResponsiveController:
    """Base class for the charts; subclasses implement ``prepare`` and ``draw``."""

    defaults: Dict[str, Any] = {}
    parser: Callable = staticmethod(parse_raw_rows)
    # Layer whose marks are hit-tested for tooltips, if any.
    hover_layer: Optional[str] = None

    def __init__(self, container: Optional[Container], source: Any = None,
                 config: Optional[Dict[str, Any]] = None, clock: Optional[Callable[[], float]] = None):
        self.config = merge_config(self.defaults, config)
        self.container = container
        self.source = source if source is not None else self.config.get('source')
        self.clock = clock
        self.surface: Optional[DrawingSurface] = None
        self.state: Optional[ChartState] = None
        self.categories: CategorySet = ()
        self.color: Optional[ColorScale] = None
        self.legend: List[LegendEntry] = []
        self.load_error: Optional[str] = None
        self.ready = False
        self._hovered: Optional[Mark] = None

    # --- Lifecycle ---

    def mount(self) -> bool:
        """Load, prepare and render once; False when there is nothing to draw."""
        if self.container is None:
            return False
        result = load(self.source, self.parser)
        self.load_error = result.error
        if not result.samples or not self.prepare(result.samples):
            return False

        self.surface = DrawingSurface(clock=self.clock)
        self.container.surface = self.surface
        self.container.parent.legends[self.config['legend_class']] = self.legend
        self.ready = True
        self.render()
        return True

    def render(self) -> None:
        if not self.ready:
            return
        self._hovered = None
        self.surface.tooltip = hidden_tooltip()
        frame = compute_frame(
            self.container.width,
            self.config.get('margin'),
            aspect=self.config['aspect'],
            min_height=self.config['min_height'],
        )
        self.state = self.draw(frame)

    def resize(self, width: Optional[float]) -> None:
        """New container width; re-renders without reloading data."""
        if self.container is None:
            return
        self.container.width = width
        self.render()

    # --- Pointer events ---

    def pointer_move(self, x: float, y: float) -> Tooltip:
        if not self.ready:
            return hidden_tooltip()
        event = PointerEvent(x, y)
        if not in_surface(self.state.frame, event):
            return self.pointer_leave()
        self.surface.tooltip = self.on_pointer_move(event, self.state)
        return self.surface.tooltip

    def pointer_leave(self) -> Tooltip:
        if not self.ready:
            return hidden_tooltip()
        self._hovered = None
        self.on_pointer_leave(self.state)
        self.surface.tooltip = hidden_tooltip()
        return self.surface.tooltip

    def on_pointer_move(self, event: PointerEvent, state: ChartState) -> Tooltip:
        """Default behaviour: tooltip for the mark under the pointer."""
        layer = self.surface.layers.get(self.hover_layer)
        if layer is None:
            return hidden_tooltip()
        ox, oy = self.surface.origin
        now = layer.clock()
        mark = hit_test(layer.marks, event.x - ox, event.y - oy, now)
        offset = self.config['tooltip_offset']
        if mark is None:
            self._hovered = None
            return hidden_tooltip()
        if mark is self._hovered and self.surface.tooltip.visible:
            return move_tooltip(self.surface.tooltip, event, offset)
        self._hovered = mark
        return show_tooltip(event, self.tooltip_html(event, mark.datum), offset)

    def on_pointer_leave(self, state: ChartState) -> None:
        pass

    # --- Hooks ---

    def prepare(self, samples: List[Any]) -> bool:
        raise NotImplementedError

    def draw(self, frame: Frame) -> ChartState:
        raise NotImplementedError

    def tooltip_html(self, event: PointerEvent, datum: Any) -> str:
        raise NotImplementedError

    # --- Export ---

    def hover_text(self, mark: Mark) -> Optional[str]:
        layer = self.surface.layers.get(self.hover_layer)
        if layer is None or layer.get(mark.key) is not mark:
            return None
        return self.tooltip_html(PointerEvent(0, 0), mark.datum)

    def to_figure(self) -> go.Figure:
        if not self.ready:
            return go.Figure()
        return self.surface.to_figure(legend=self.legend, hover=self.hover_text)
