"""Axis limits and the data-space to screen-space mapping.

The plotting region is a fixed square of ``plot_size`` logical pixels with a
``margin`` on every side reserved for ticks and labels. Screen ``y`` grows
downward, so larger data values map to smaller screen ``y``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .InputConvert import coerce_number

__all__ = ["AxisLimits", "PlotGeometry", "DEFAULT_AXIS_LIMITS", "DEFAULT_GEOMETRY"]


@dataclass(frozen=True)
class AxisLimits:
    """Data-space bounds of the plot.

    Parameters
    ----------
    min_x, max_x, min_y, max_y : float
        Axis bounds. ``min < max`` is needed for a meaningful plot, but
        degenerate and inverted ranges are accepted; they simply render
        nothing.
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @classmethod
    def from_inputs(cls, min_x: Any, max_x: Any, min_y: Any, max_y: Any) -> "AxisLimits":
        """Build limits from text-field style inputs.

        Each bound that cannot be read as a number becomes ``0``.

        Examples
        --------
        >>> AxisLimits.from_inputs("-5", "5", "", "abc")
        AxisLimits(min_x=-5.0, max_x=5.0, min_y=0.0, max_y=0.0)
        """
        return cls(
            min_x=coerce_number(min_x),
            max_x=coerce_number(max_x),
            min_y=coerce_number(min_y),
            max_y=coerce_number(max_y),
        )

    @property
    def x_range(self) -> tuple[float, float]:
        return (self.min_x, self.max_x)

    @property
    def y_range(self) -> tuple[float, float]:
        return (self.min_y, self.max_y)

    @property
    def has_valid_x(self) -> bool:
        """Return True when the x-range is finite and strictly increasing."""
        return _is_valid_range(self.min_x, self.max_x)

    @property
    def has_valid_y(self) -> bool:
        """Return True when the y-range is finite and strictly increasing."""
        return _is_valid_range(self.min_y, self.max_y)


def _is_valid_range(lo: float, hi: float) -> bool:
    return math.isfinite(lo) and math.isfinite(hi) and lo < hi


DEFAULT_AXIS_LIMITS = AxisLimits(min_x=0.0, max_x=10.0, min_y=0.0, max_y=10.0)


@dataclass(frozen=True)
class PlotGeometry:
    """Logical size of the square plotting region.

    Parameters
    ----------
    plot_size : float
        Side length of the plotting square.
    margin : float
        Space reserved around the square for ticks and labels.
    """

    plot_size: float = 400.0
    margin: float = 50.0

    @property
    def total_size(self) -> float:
        return self.plot_size + 2 * self.margin

    def scale_x(self, x: Any, limits: AxisLimits) -> Any:
        """Map data ``x`` (scalar or array) to screen ``x``."""
        return self.margin + (x - limits.min_x) / (limits.max_x - limits.min_x) * self.plot_size

    def scale_y(self, y: Any, limits: AxisLimits) -> Any:
        """Map data ``y`` (scalar or array) to screen ``y``; larger ``y`` is higher."""
        return (
            self.total_size
            - self.margin
            - (y - limits.min_y) / (limits.max_y - limits.min_y) * self.plot_size
        )


DEFAULT_GEOMETRY = PlotGeometry()
