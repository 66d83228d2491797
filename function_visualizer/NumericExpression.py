"""Numeric expression wrappers with frozen coefficient bindings.

A compiled formula is a tree plus an ordered tuple of coefficient names.
``BoundExpression`` pairs the two with one value per coefficient and is the
``f(x)`` callable handed to the curve sampler.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from .InputConvert import coerce_number
from .expression_tree import Node, evaluate


def _coerce_bound_values(
    source: Mapping[str, Any] | None,
    coefficients: tuple[str, ...],
) -> tuple[float, ...]:
    """Order bound values according to ``coefficients``.

    Names missing from ``source`` are bound to ``0.0``; names that the
    expression does not use are ignored. Values go through the same coercion
    as text inputs, so ``""`` and ``"abc"`` bind as ``0.0``.
    """
    if source is None:
        source = {}
    elif not isinstance(source, Mapping):
        raise TypeError("bind(...) expects a mapping of coefficient name -> value.")
    return tuple(coerce_number(source.get(name, 0.0)) for name in coefficients)


@dataclass(frozen=True)
class BoundExpression:
    """Expression with fixed coefficient bindings for deterministic evaluation."""

    tree: Node
    coefficients: tuple[str, ...]
    bound_values: tuple[float, ...]

    @classmethod
    def from_mapping(
        cls,
        tree: Node,
        coefficients: tuple[str, ...],
        values: Mapping[str, Any] | None = None,
    ) -> "BoundExpression":
        return cls(tree=tree, coefficients=coefficients, bound_values=_coerce_bound_values(values, coefficients))

    @property
    def values(self) -> dict[str, float]:
        """Return the bindings as a ``name -> value`` dict."""
        return dict(zip(self.coefficients, self.bound_values))

    def __call__(self, x: Any) -> Any:
        """Evaluate at ``x``; scalars give a float, arrays an array of the same shape."""
        result = evaluate(self.tree, x, self.values)
        if np.ndim(x) == 0:
            return float(np.asarray(result).reshape(()))
        return np.broadcast_to(np.asarray(result, dtype=float), np.shape(x))

    def bind(self, values: Mapping[str, Any] | None) -> "BoundExpression":
        """Rebind this expression with new coefficient values."""
        return BoundExpression.from_mapping(self.tree, self.coefficients, values)
