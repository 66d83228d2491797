"""Property-based checks for the formula compiler.

Compiled evaluation is compared against SymPy evaluation of the same tree,
and coefficient discovery is checked for formatting independence.
"""

from __future__ import annotations

import math

import numpy as np
import pytest
import sympy as sp

from function_visualizer.coefficients import discover_coefficients
from function_visualizer.compiler import compile_formula
from function_visualizer.InputConvert import coerce_number

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


SMALL_INTS = st.integers(min_value=-5, max_value=5)
INTS = st.integers(min_value=-9, max_value=9)
COEFFICIENT_NAMES = st.sampled_from(["a", "b", "c", "k", "m2", "theta", "_s"])


def _leaf():
    atom = st.one_of(st.just("x"), INTS.map(lambda n: f"({n})"), COEFFICIENT_NAMES)
    return st.one_of(atom, atom.map(lambda c: f"pow({c},2)"))


def _expr():
    return st.recursive(
        _leaf(),
        lambda children: st.one_of(
            st.tuples(children, st.sampled_from("+-*"), children).map(lambda t: f"({t[0]}{t[1]}{t[2]})"),
            children.map(lambda c: f"-{c}"),
        ),
        max_leaves=8,
    )


@given(formula=_expr(), x=SMALL_INTS, a=SMALL_INTS)
def test_compiled_evaluation_matches_sympy(formula: str, x: int, a: int) -> None:
    """Tree evaluation should agree with SymPy substitution of the same tree.

    Integer inputs keep every intermediate value exact in both backends.
    """
    result = compile_formula(formula)
    assert result.success, formula

    values = {name: a for name in result.coefficients}
    got = result.compiled.evaluate(x, values)

    subs = {sp.Symbol("x"): x, **{sp.Symbol(name): a for name in result.coefficients}}
    expected = float(result.compiled.symbolic.subs(subs))
    assert got == expected


@given(
    names=st.lists(COEFFICIENT_NAMES, min_size=1, max_size=4),
    spaces=st.lists(st.sampled_from(["", " ", "  ", "\t"]), min_size=8, max_size=8),
)
def test_discovery_ignores_formatting(names: list[str], spaces: list[str]) -> None:
    """Inserting whitespace between terms never changes the discovered names."""
    compact = "+".join(f"{name}*x" for name in names)
    spaced = "+".join(f"{spaces[i % 8]}{name}{spaces[(i + 1) % 8]}*x" for i, name in enumerate(names))
    assert discover_coefficients(compact) == discover_coefficients(spaced) == tuple(sorted(set(names)))


@given(formula=_expr())
def test_compile_is_deterministic(formula: str) -> None:
    assert compile_formula(formula) == compile_formula(formula)


@given(value=st.floats(allow_nan=True, allow_infinity=True, width=64))
def test_coerce_number_always_finite(value: float) -> None:
    result = coerce_number(value)
    assert math.isfinite(result)
    if math.isfinite(value):
        assert result == value


@given(x=st.floats(min_value=0.01, max_value=100, allow_nan=False, width=64))
def test_log_matches_numpy(x: float) -> None:
    compiled = compile_formula("log(x)").compiled
    assert compiled.evaluate(x) == pytest.approx(float(np.log(x)))
