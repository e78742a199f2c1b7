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
Host page model and the drawing surface charts draw into.

The surface is headless: it keeps one ``MarkReconciler`` per layer, the
axes and the tooltip state.  ``to_figure`` turns the current contents
into a Plotly figure laid out in pixel units so the exported chart
matches the computed geometry one to one.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import plotly.graph_objects as go

from .interaction import Tooltip
from .legend import LegendEntry
from .marks import Mark, MarkReconciler
from .paths import arc_outline
from .scales import Frame

# --- Host page ---

@dataclass
class Card:
    """The container's parent element; legends are attached here."""
    legends: Dict[str, List[LegendEntry]] = field(default_factory=dict)

class Container:
    """A uniquely identified element with a measurable width."""

    def __init__(self, element_id: str, width: Optional[float] = None, parent: Optional[Card] = None):
        self.element_id = element_id
        self.width = width
        self.parent = parent if parent is not None else Card()
        self.surface: Optional['DrawingSurface'] = None

class Page:
    def __init__(self, containers: List[Container] = ()):
        self._containers = {c.element_id: c for c in containers}

    def select(self, element_id: str) -> Optional[Container]:
        """The container with *element_id*, or None when the page lacks it."""
        return self._containers.get(element_id)

# --- Surface ---

@dataclass(frozen=True)
class Axis:
    orient: str
    ticks: List[Tuple[float, str]]
    length: float
    offset: float = 0.0
    label: str = ''
    label_rotation: float = 0.0

class DrawingSurface:
    """Layers of marks, axes and tooltip for one chart instance."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock
        self.frame: Optional[Frame] = None
        self.origin: Tuple[float, float] = (0.0, 0.0)
        self.layers: Dict[str, MarkReconciler] = {}
        self.axes: Dict[str, Axis] = {}
        self.tooltip = Tooltip()

    def resize(self, frame: Frame, origin: Optional[Tuple[float, float]] = None) -> None:
        self.frame = frame
        self.origin = origin if origin is not None else (frame.margin['left'], frame.margin['top'])

    def layer(self, name: str, kind: str) -> MarkReconciler:
        """The named mark collection; layers draw in creation order."""
        if name not in self.layers:
            self.layers[name] = MarkReconciler(kind, clock=self.clock)
        return self.layers[name]

    def set_axis(self, name: str, axis: Axis) -> None:
        self.axes[name] = axis

    def snapshot(self) -> Dict[str, Any]:
        return {
            'size': (self.frame.width, self.frame.height) if self.frame else None,
            'origin': self.origin,
            'layers': {name: layer.snapshot() for name, layer in self.layers.items()},
            'axes': dict(self.axes),
        }

    # --- Plotly export ---

    def to_figure(self, legend: Optional[List[LegendEntry]] = None,
                  hover: Optional[Callable[[Mark], Optional[str]]] = None) -> go.Figure:
        """Export the settled marks as a pixel-space Plotly figure."""
        fig = go.Figure()
        if self.frame is None:
            return fig
        ox, oy = self.origin
        hover = hover or (lambda mark: None)
        shapes = []
        annotations = []

        for layer in self.layers.values():
            for mark in layer.marks:
                _export_mark(fig, shapes, annotations, mark, hover(mark))

        for axis in self.axes.values():
            _export_axis(shapes, annotations, axis)

        for entry in legend or []:
            fig.add_trace(go.Scatter(
                x=[None], y=[None], mode='markers', name=entry.label,
                marker=dict(color=entry.color, symbol='square', size=12),
                showlegend=True,
            ))

        if self.tooltip.visible:
            annotations.append(dict(
                x=self.tooltip.left - ox, y=self.tooltip.top - oy,
                xanchor='left', yanchor='top', showarrow=False, align='left',
                text=_plotly_text(self.tooltip.html),
                bgcolor='rgba(255,255,255,0.95)', bordercolor='#c7c7c7', borderwidth=1,
            ))

        # Legend gets its own band above the plot so pixel units stay 1:1
        legend_band = 40 if legend else 0
        fig.update_layout(
            width=self.frame.width,
            height=self.frame.height + legend_band,
            autosize=False,
            margin=dict(l=0, r=0, t=legend_band, b=0),
            legend=dict(orientation='h', x=0, y=1, xanchor='left', yanchor='bottom'),
            template='plotly_white',
            xaxis=dict(range=[-ox, self.frame.width - ox], visible=False, fixedrange=True),
            yaxis=dict(range=[self.frame.height - oy, -oy], visible=False, fixedrange=True),
            shapes=shapes,
            annotations=annotations,
            showlegend=bool(legend),
            hovermode='closest',
        )
        return fig

# --- Export helpers ---

def _plotly_text(html: str) -> str:
    """Plotly annotations understand <b> and <br> only."""
    text = html.replace('<strong>', '<b>').replace('</strong>', '</b>')
    text = re.sub(r'<div>', '', text)
    text = re.sub(r'</div>', '<br>', text)
    return text

def _polygon_trace(points, color: str, name: str, text: Optional[str], opacity: float = 1.0) -> go.Scatter:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return go.Scatter(
        x=xs, y=ys, mode='lines', fill='toself', fillcolor=color,
        line=dict(width=0, color=color), opacity=opacity, name=name,
        hoveron='fills', hoverinfo='text' if text else 'skip',
        text=_plotly_text(text) if text else None, showlegend=False,
    )

def _export_mark(fig: go.Figure, shapes: list, annotations: list, mark: Mark, text: Optional[str]) -> None:
    a = mark.attrs
    name = str(mark.key)
    if mark.kind == 'rect':
        x0, y0 = a['x'], a['y']
        x1, y1 = x0 + a['width'], y0 + a['height']
        fig.add_trace(_polygon_trace([(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)], a['fill'], name, text))
    elif mark.kind == 'arc':
        cx, cy = a.get('cx', 0.0), a.get('cy', 0.0)
        ring = arc_outline(a['start_angle'], a['end_angle'], a['inner_radius'], a['outer_radius'])
        fig.add_trace(_polygon_trace([(cx + x, cy + y) for x, y in ring], a['fill'], name, text))
    elif mark.kind == 'circle':
        fig.add_trace(go.Scatter(
            x=[a['cx']], y=[a['cy']], mode='markers', name=name,
            marker=dict(size=2 * a['r'], color=a['fill'], opacity=a.get('opacity', 1.0) * a.get('fill_opacity', 1.0),
                        line=dict(color=a.get('stroke', '#fff'), width=a.get('stroke_width', 1))),
            hoverinfo='text' if text else 'skip', text=_plotly_text(text) if text else None,
            showlegend=False,
        ))
    elif mark.kind == 'path':
        if a.get('d'):
            shapes.append(dict(type='path', path=a['d'], line=dict(color=a['stroke'], width=a.get('stroke_width', 1)),
                               xref='x', yref='y'))
    elif mark.kind == 'line':
        shapes.append(dict(type='line', x0=a['x1'], x1=a['x2'], y0=a['y1'], y1=a['y2'],
                           line=dict(color=a.get('stroke', '#e5e5e5'), width=a.get('stroke_width', 1)),
                           xref='x', yref='y', layer='below'))
    elif mark.kind == 'text':
        annotations.append(dict(x=a['x'], y=a['y'], text=a['text'], showarrow=False,
                                xref='x', yref='y', font=dict(size=a.get('font_size', 12))))

def _export_axis(shapes: list, annotations: list, axis: Axis) -> None:
    if axis.orient == 'bottom':
        shapes.append(dict(type='line', x0=0, x1=axis.length, y0=axis.offset, y1=axis.offset, xref='x', yref='y'))
        for position, label in axis.ticks:
            annotations.append(dict(x=position, y=axis.offset + 6, text=label, showarrow=False,
                                    yanchor='top', textangle=axis.label_rotation, xref='x', yref='y'))
        if axis.label:
            annotations.append(dict(x=axis.length / 2, y=axis.offset + 40, text=axis.label,
                                    showarrow=False, yanchor='top', xref='x', yref='y'))
    else:
        shapes.append(dict(type='line', x0=axis.offset, x1=axis.offset, y0=0, y1=axis.length, xref='x', yref='y'))
        for position, label in axis.ticks:
            annotations.append(dict(x=axis.offset - 6, y=position, text=label, showarrow=False,
                                    xanchor='right', xref='x', yref='y'))
        if axis.label:
            annotations.append(dict(x=axis.offset - 52, y=axis.length / 2, text=axis.label,
                                    showarrow=False, textangle=-90, xref='x', yref='y'))
