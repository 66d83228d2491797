"""Render pass over a list of function definitions.

Purpose
-------
Turns ``(definitions, coefficients, axis limits)`` into plain render data:
one :class:`CurveRender` per function (compiler verdict plus screen-space
path), the two tick lists and the optional zero-axis guides. Nothing here
draws pixels; :mod:`function_visualizer.plotly_export` or any other front end
consumes the result.

Architecture notes
------------------
- Every curve is independent. A formula that fails to compile, or a sampler
  failure, leaves that curve with an empty path and is logged; other curves
  and the ticks are unaffected.
- The pass is a pure function of its inputs. :func:`render_curve_cached`
  memoizes per-curve work by value equality for front ends that re-render on
  every keystroke.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

from .compiler import ParseResult, compile_formula
from .errors import ErrorKind
from .functions import FunctionDefinition, normalize_color
from .geometry import DEFAULT_GEOMETRY, AxisLimits, PlotGeometry
from .sampling import SAMPLE_STEPS, PathCommand, path_to_svg, sample_curve, split_strokes
from .ticks import Tick, generate_ticks, zero_guide

__all__ = [
    "CurveRender",
    "GraphRender",
    "render_curve",
    "render_curve_cached",
    "render_axes",
    "render_graph",
]

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class CurveRender:
    """Render data for one function.

    Parameters
    ----------
    result : ParseResult
        Compiler verdict, for the function's diagnostic panel.
    path : tuple[PathCommand, ...]
        Screen-space drawing commands; empty when nothing is drawable.
    id, title, color : str
        Copied from the function definition (empty for standalone renders).
    """

    result: ParseResult
    path: Tuple[PathCommand, ...]
    id: str = ""
    title: str = ""
    color: str = ""

    @property
    def drawn(self) -> bool:
        """Return True when the curve has at least one drawable point."""
        return bool(self.path)

    @property
    def strokes(self) -> Tuple[Tuple[Tuple[float, float], ...], ...]:
        return split_strokes(self.path)

    @property
    def svg_path(self) -> str:
        return path_to_svg(self.path)


@dataclass(frozen=True)
class GraphRender:
    """Everything a front end needs to draw one graph."""

    limits: AxisLimits
    geometry: PlotGeometry
    curves: Tuple[CurveRender, ...]
    x_ticks: Tuple[Tick, ...]
    y_ticks: Tuple[Tick, ...]
    zero_x: Optional[float]
    zero_y: Optional[float]

    @property
    def drawn_curves(self) -> Tuple[CurveRender, ...]:
        """Return only the curves with a non-empty path."""
        return tuple(curve for curve in self.curves if curve.drawn)


def render_curve(
    definition: str,
    coefficients: Optional[Mapping[str, Any]],
    limits: AxisLimits,
    geometry: PlotGeometry = DEFAULT_GEOMETRY,
    *,
    steps: int = SAMPLE_STEPS,
) -> CurveRender:
    """Compile one formula and sample it.

    Never raises: compile failures are reported in ``result`` and sampling
    failures give an empty path.

    Examples
    --------
    >>> curve = render_curve("1/x", None, AxisLimits(-5, 5, -10, 10))
    >>> curve.result.success, len(curve.strokes)
    (True, 2)
    """
    result = compile_formula(definition, coefficients)
    if not result.success or result.compiled is None:
        return CurveRender(result=result, path=())

    try:
        fn = result.compiled.bind(coefficients)
        path = sample_curve(fn, limits, geometry, steps=steps)
    except Exception:
        logger.warning("Sampling failed for formula %r", definition, exc_info=True)
        path = ()
    return CurveRender(result=result, path=path)


@lru_cache(maxsize=128)
def _render_curve_cached(
    definition: str,
    coefficient_items: Tuple[Tuple[str, Any], ...],
    limits: AxisLimits,
    geometry: PlotGeometry,
    steps: int,
) -> CurveRender:
    return render_curve(definition, dict(coefficient_items), limits, geometry, steps=steps)


def render_curve_cached(
    definition: str,
    coefficients: Optional[Mapping[str, Any]],
    limits: AxisLimits,
    geometry: PlotGeometry = DEFAULT_GEOMETRY,
    *,
    steps: int = SAMPLE_STEPS,
) -> CurveRender:
    """Memoized :func:`render_curve`, keyed by value equality of its inputs."""
    items = tuple(sorted((coefficients or {}).items()))
    try:
        return _render_curve_cached(definition, items, limits, geometry, int(steps))
    except TypeError:
        return render_curve(definition, coefficients, limits, geometry, steps=steps)


render_curve_cached.cache_clear = _render_curve_cached.cache_clear  # type: ignore[attr-defined]


def render_axes(
    limits: AxisLimits,
    geometry: PlotGeometry = DEFAULT_GEOMETRY,
) -> tuple[Tuple[Tick, ...], Tuple[Tick, ...], Optional[float], Optional[float]]:
    """Return ``(x_ticks, y_ticks, zero_x, zero_y)`` for ``limits``."""

    def scale_x(value: float) -> float:
        return geometry.scale_x(value, limits)

    def scale_y(value: float) -> float:
        return geometry.scale_y(value, limits)

    return (
        generate_ticks(limits.min_x, limits.max_x, scale_x),
        generate_ticks(limits.min_y, limits.max_y, scale_y),
        zero_guide(limits.min_x, limits.max_x, scale_x),
        zero_guide(limits.min_y, limits.max_y, scale_y),
    )


def render_graph(
    functions: Iterable[FunctionDefinition],
    limits: AxisLimits,
    geometry: PlotGeometry = DEFAULT_GEOMETRY,
    *,
    steps: int = SAMPLE_STEPS,
    cached: bool = False,
) -> GraphRender:
    """Render every function plus the axes.

    Parameters
    ----------
    functions : iterable of FunctionDefinition
        Functions to draw, in drawing order.
    limits : AxisLimits
        Shared axis bounds.
    geometry : PlotGeometry, optional
        Plotting region.
    steps : int, optional
        Sampling steps per curve.
    cached : bool, optional
        Use :func:`render_curve_cached` for per-curve work.

    Returns
    -------
    GraphRender
    """
    render_one = render_curve_cached if cached else render_curve
    curves = []
    for function in functions:
        try:
            curve = render_one(function.definition, function.coefficients, limits, geometry, steps=steps)
        except Exception:
            logger.warning("Could not render function %r", function.id, exc_info=True)
            curve = CurveRender(result=ParseResult.failure(ErrorKind.UNINTERPRETABLE), path=())
        if curve.result.success and not curve.drawn:
            logger.debug("Function %r has no drawable points in %s", function.id, limits)
        curves.append(
            CurveRender(
                result=curve.result,
                path=curve.path,
                id=function.id,
                title=function.title,
                color=normalize_color(function.color),
            )
        )

    x_ticks, y_ticks, zero_x, zero_y = render_axes(limits, geometry)
    return GraphRender(
        limits=limits,
        geometry=geometry,
        curves=tuple(curves),
        x_ticks=x_ticks,
        y_ticks=y_ticks,
        zero_x=zero_x,
        zero_y=zero_y,
    )
