"""Coefficient discovery and coefficient-value bookkeeping.

A coefficient is any name in a formula other than ``x`` and the reserved
words. The discovered names are deduplicated and sorted lexicographically;
that order is the order in which coefficient inputs are presented and the
order of the extra arguments in the generated function signature.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Dict, Tuple

from .InputConvert import coerce_number
from .tokenizer import NAME, RESERVED_WORDS, Token, scan_names

__all__ = [
    "discover_coefficients",
    "coefficients_from_tokens",
    "reconcile_coefficients",
    "coerce_coefficient_values",
]


def _sorted_unique(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted({name for name in names if name not in RESERVED_WORDS}))


def coefficients_from_tokens(tokens: Iterable[Token]) -> Tuple[str, ...]:
    """Return the sorted coefficient names referenced by a token stream."""
    return _sorted_unique(token.text for token in tokens if token.kind == NAME)


def discover_coefficients(text: str) -> Tuple[str, ...]:
    """Find the free coefficient names of a formula.

    Whitespace is ignored and characters outside the formula alphabet are
    skipped, so this also gives a best-effort answer for formulas that fail
    validation.

    Parameters
    ----------
    text : str
        Raw or normalized formula text.

    Returns
    -------
    tuple[str, ...]
        Names sorted lexicographically, reserved words excluded.

    Examples
    --------
    >>> discover_coefficients("b + a x")
    ('a', 'b')
    >>> discover_coefficients("log(x) + pow(x, 2)")
    ()
    """
    if not text:
        return ()
    return _sorted_unique(scan_names("".join(text.split())))


def reconcile_coefficients(
    names: Iterable[str],
    values: Mapping[str, Any] | None = None,
) -> Dict[str, float]:
    """Return a coefficient mapping that matches ``names`` exactly.

    Existing values are kept (coerced to float), newly discovered names start
    at ``0.0`` and names no longer used by the formula are dropped.

    Examples
    --------
    >>> reconcile_coefficients(("a", "c"), {"a": 2, "b": 5})
    {'a': 2.0, 'c': 0.0}
    """
    values = values or {}
    return {name: coerce_number(values.get(name, 0.0)) for name in names}


def coerce_coefficient_values(raw: Mapping[str, Any]) -> Dict[str, float]:
    """Coerce text or numeric coefficient inputs to floats.

    Empty or non-numeric entries become ``0.0`` rather than raising.
    """
    return {str(name): coerce_number(value) for name, value in raw.items()}
