"""Curve sampling into drawable strokes.

:func:`sample_curve` evaluates a function at ``SAMPLE_STEPS + 1`` evenly
spaced points across the x-range and emits screen-space drawing commands.
A point is drawable when its value is finite, lies within the y-range and its
``x`` lies within the x-range. Consecutive drawable points form one stroke;
any other point (including a failed evaluation) ends the stroke, so poles,
domain edges and out-of-range excursions produce gaps rather than false
connecting segments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Tuple

import numpy as np

from .geometry import DEFAULT_GEOMETRY, AxisLimits, PlotGeometry

__all__ = [
    "SAMPLE_STEPS",
    "PathCommand",
    "sample_points",
    "sample_curve",
    "split_strokes",
    "path_to_svg",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SAMPLE_STEPS = 200

Point = Tuple[float, float]


@dataclass(frozen=True)
class PathCommand:
    """One drawing command in screen space.

    ``kind`` is ``"M"`` (move: start a new stroke) or ``"L"`` (line: extend
    the current stroke).
    """

    kind: Literal["M", "L"]
    sx: float
    sy: float

    def to_svg(self) -> str:
        return f"{self.kind} {self.sx:g} {self.sy:g}"


def _evaluate_samples(fn: Callable[[Any], Any], xs: np.ndarray) -> np.ndarray:
    """Evaluate ``fn`` on all samples; failing samples become ``nan``.

    The vectorized call is tried first. If it raises or returns something of
    the wrong shape, each sample is evaluated on its own.
    """
    try:
        with np.errstate(all="ignore"):
            ys = np.asarray(fn(xs), dtype=float)
        if ys.ndim == 0:
            ys = np.full(xs.shape, float(ys))
        if ys.shape == xs.shape:
            return ys
    except Exception:
        logger.debug("Vectorized evaluation failed; sampling point by point", exc_info=True)

    ys = np.empty(xs.shape, dtype=float)
    for i, x in enumerate(xs):
        try:
            ys[i] = float(fn(float(x)))
        except Exception:
            ys[i] = np.nan
    return ys


def sample_points(
    fn: Callable[[Any], Any],
    limits: AxisLimits,
    *,
    steps: int = SAMPLE_STEPS,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(xs, ys, drawable)`` arrays for the x-range of ``limits``.

    ``xs`` holds ``steps + 1`` points from ``min_x`` to ``max_x`` inclusive.
    An invalid x-range yields empty arrays.
    """
    if not limits.has_valid_x or steps < 1:
        empty = np.empty(0, dtype=float)
        return empty, empty, np.empty(0, dtype=bool)

    xs = np.linspace(limits.min_x, limits.max_x, int(steps) + 1)
    ys = _evaluate_samples(fn, xs)
    with np.errstate(invalid="ignore"):
        drawable = (
            np.isfinite(ys)
            & (ys >= limits.min_y)
            & (ys <= limits.max_y)
            & (xs >= limits.min_x)
            & (xs <= limits.max_x)
        )
    return xs, ys, drawable


def sample_curve(
    fn: Callable[[Any], Any],
    limits: AxisLimits,
    geometry: PlotGeometry = DEFAULT_GEOMETRY,
    *,
    steps: int = SAMPLE_STEPS,
) -> tuple[PathCommand, ...]:
    """Sample ``fn`` over the x-range and return screen-space drawing commands.

    Parameters
    ----------
    fn : callable
        ``f(x)`` accepting a float (and ideally a NumPy array).
    limits : AxisLimits
        Data-space bounds. Degenerate or inverted ranges give an empty path.
    geometry : PlotGeometry, optional
        Screen-space plotting region.
    steps : int, optional
        Number of equal steps; ``steps + 1`` points are evaluated.

    Returns
    -------
    tuple[PathCommand, ...]

    Examples
    --------
    >>> path = sample_curve(lambda x: 1 / x, AxisLimits(-5, 5, -10, 10))  # doctest: +SKIP
    >>> len(split_strokes(path))  # doctest: +SKIP
    2
    """
    if not (limits.has_valid_x and limits.has_valid_y):
        return ()

    xs, ys, drawable = sample_points(fn, limits, steps=steps)
    sxs = geometry.scale_x(xs, limits)
    with np.errstate(all="ignore"):
        sys_values = geometry.scale_y(ys, limits)

    commands: list[PathCommand] = []
    drawing = False
    for sx, sy, ok in zip(sxs, sys_values, drawable):
        if not ok:
            drawing = False
            continue
        commands.append(PathCommand("L" if drawing else "M", float(sx), float(sy)))
        drawing = True
    return tuple(commands)


def split_strokes(path: Iterable[PathCommand]) -> tuple[tuple[Point, ...], ...]:
    """Group a path into strokes; each stroke starts at an ``"M"`` command."""
    strokes: list[list[Point]] = []
    for command in path:
        if command.kind == "M" or not strokes:
            strokes.append([])
        strokes[-1].append((command.sx, command.sy))
    return tuple(tuple(stroke) for stroke in strokes)


def path_to_svg(path: Iterable[PathCommand]) -> str:
    """Return SVG path data, e.g. ``"M 50 450 L 52 448"``."""
    return " ".join(command.to_svg() for command in path)
