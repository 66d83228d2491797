"""Plotly rendering of a :class:`~function_visualizer.graph.GraphRender`.

The figure reproduces the screen-space layout of the render: a framed square
plotting region, tick grid lines with labels in the margin, emphasized zero
guides and one line trace per drawn curve. Coordinates are the render's
screen coordinates, so the y axis is reversed (screen ``y`` grows downward).

Strokes of one curve share a single trace, separated by ``None`` with
``connectgaps=False`` so discontinuities stay open.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import plotly.graph_objects as go

from .graph import CurveRender, GraphRender

__all__ = ["curve_trace", "build_figure"]

GRID_COLOR = "#e0e0e0"
AXIS_COLOR = "#333"
LABEL_COLOR = "#666"
TICK_HALF_LENGTH = 5
LINE_WIDTH = 2


def _line(x0: float, y0: float, x1: float, y1: float, color: str, width: float) -> Dict[str, Any]:
    return dict(
        type="line",
        xref="x",
        yref="y",
        x0=x0,
        y0=y0,
        x1=x1,
        y1=y1,
        line=dict(color=color, width=width),
        layer="below",
    )


def curve_trace(curve: CurveRender) -> go.Scatter:
    """Return one line trace holding every stroke of ``curve``."""
    xs: List[Optional[float]] = []
    ys: List[Optional[float]] = []
    for stroke in curve.strokes:
        if xs:
            xs.append(None)
            ys.append(None)
        for sx, sy in stroke:
            xs.append(sx)
            ys.append(sy)
    return go.Scatter(
        x=xs,
        y=ys,
        mode="lines",
        name=curve.title or curve.id,
        line=dict(color=curve.color or None, width=LINE_WIDTH),
        connectgaps=False,
        hoverinfo="skip",
    )


def build_figure(render: GraphRender, *, title: Optional[str] = None) -> go.Figure:
    """Build a Plotly figure from render data.

    Parameters
    ----------
    render : GraphRender
        Output of :func:`function_visualizer.graph.render_graph`.
    title : str, optional
        Figure title.

    Returns
    -------
    plotly.graph_objects.Figure
        One trace per drawn curve; failed or empty curves are omitted.
    """
    geometry = render.geometry
    lo = geometry.margin
    hi = geometry.margin + geometry.plot_size
    total = geometry.total_size

    shapes: List[Dict[str, Any]] = []
    annotations: List[Dict[str, Any]] = []

    for tick in render.x_ticks:
        shapes.append(_line(tick.position, lo, tick.position, hi, GRID_COLOR, 1))
        shapes.append(
            _line(tick.position, hi - TICK_HALF_LENGTH, tick.position, hi + TICK_HALF_LENGTH, AXIS_COLOR, LINE_WIDTH)
        )
        annotations.append(
            dict(x=tick.position, y=hi + 20, text=tick.label, showarrow=False, xanchor="center",
                 font=dict(size=12, color=LABEL_COLOR))
        )

    for tick in render.y_ticks:
        shapes.append(_line(lo, tick.position, hi, tick.position, GRID_COLOR, 1))
        shapes.append(
            _line(lo - TICK_HALF_LENGTH, tick.position, lo + TICK_HALF_LENGTH, tick.position, AXIS_COLOR, LINE_WIDTH)
        )
        annotations.append(
            dict(x=lo - 10, y=tick.position, text=tick.label, showarrow=False, xanchor="right",
                 font=dict(size=12, color=LABEL_COLOR))
        )

    if render.zero_x is not None:
        shapes.append(_line(render.zero_x, lo, render.zero_x, hi, AXIS_COLOR, LINE_WIDTH))
    if render.zero_y is not None:
        shapes.append(_line(lo, render.zero_y, hi, render.zero_y, AXIS_COLOR, LINE_WIDTH))

    frame = dict(
        type="rect",
        xref="x",
        yref="y",
        x0=lo,
        y0=lo,
        x1=hi,
        y1=hi,
        line=dict(color=AXIS_COLOR, width=LINE_WIDTH),
        fillcolor="rgba(0,0,0,0)",
    )
    shapes.append(frame)

    fig = go.Figure(data=[curve_trace(curve) for curve in render.drawn_curves])
    fig.update_layout(
        title=title,
        width=total,
        height=total,
        margin=dict(l=0, r=0, t=40 if title else 0, b=0),
        plot_bgcolor="white",
        paper_bgcolor="white",
        showlegend=bool(render.drawn_curves),
        shapes=shapes,
        annotations=annotations,
        xaxis=dict(range=[0, total], visible=False, fixedrange=True),
        yaxis=dict(range=[total, 0], visible=False, fixedrange=True, scaleanchor="x"),
    )
    return fig
