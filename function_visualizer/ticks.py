"""Axis tick generation and zero-axis guides."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

__all__ = ["Tick", "tick_count", "format_tick_label", "generate_ticks", "zero_guide"]

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class Tick:
    """One axis tick: data value, screen position and display label."""

    value: float
    position: float
    label: str


def tick_count(span: float) -> int:
    """Return the number of tick intervals for an axis of length ``span``.

    ``span <= 2`` gives four ticks per unit, ``span <= 10`` one per unit,
    ``span <= 50`` gives ``10`` and anything wider gives ``8``. Fractional
    counts round up and the result is at least 1.

    Examples
    --------
    >>> tick_count(10), tick_count(10.0001), tick_count(60), tick_count(0.5)
    (10, 10, 8, 2)
    """
    if span <= 2:
        raw = 4 * span
    elif span <= 10:
        raw = span
    elif span <= 50:
        raw = 10
    else:
        raw = 8
    return max(1, math.ceil(raw))


def format_tick_label(value: float) -> str:
    """Format integers bare and everything else with one decimal digit.

    Ties round away from zero on the exact binary value (``0.25`` gives
    ``0.3``, ``-0.25`` gives ``-0.3``). Magnitudes of
    ``1e21`` and above use exponent notation (``1e+21``).

    Examples
    --------
    >>> format_tick_label(2.0), format_tick_label(2.25), format_tick_label(-0.25)
    ('2', '2.3', '-0.3')
    >>> format_tick_label(-0.0), format_tick_label(1e22)
    ('0', '1e+22')
    """
    value = float(value)
    if abs(value) >= 1e21:
        return repr(value)
    if value.is_integer():
        return str(int(value))
    return str(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def generate_ticks(lo: float, hi: float, scale: Callable[[float], float]) -> tuple[Tick, ...]:
    """Return evenly spaced ticks from ``lo`` to ``hi`` inclusive.

    Parameters
    ----------
    lo, hi : float
        Axis bounds.
    scale : callable
        Maps a data value to its screen position.

    Returns
    -------
    tuple[Tick, ...]
        ``tick_count(hi - lo) + 1`` ticks, or none when the range is empty,
        inverted or not finite.
    """
    span = hi - lo
    if not math.isfinite(span) or span <= 0:
        return ()

    count = tick_count(span)
    ticks = []
    for i in range(count + 1):
        value = lo + span * i / count
        ticks.append(Tick(value=value, position=float(scale(value)), label=format_tick_label(value)))
    return tuple(ticks)


def zero_guide(lo: float, hi: float, scale: Callable[[float], float]) -> Optional[float]:
    """Return the screen position of the zero line when ``0`` is within range."""
    if lo <= 0 <= hi and lo < hi:
        return float(scale(0.0))
    return None
