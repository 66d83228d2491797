from __future__ import annotations

import math

import numpy as np
import pytest
import sympy as sp

from function_visualizer.compiler import (
    CompiledExpression,
    ParseResult,
    compile_formula,
    compile_formula_cached,
)
from function_visualizer.errors import ErrorKind


def test_linear_formula_with_implicit_multiplication() -> None:
    result = compile_formula("2x+1")
    assert result.success
    assert result.error is None
    assert result.message == ""
    assert result.coefficients == ()
    assert result.compiled.evaluate(1.0) == 3.0


def test_digit_variable_digit_multiplies() -> None:
    result = compile_formula("3x2")
    assert result.success
    assert result.compiled.rewritten == "3*x*2"
    assert result.compiled.evaluate(1.0) == 6.0


def test_coefficients_and_log() -> None:
    values = {"a": 2, "b": 1}
    result = compile_formula("a*log(x)+b", values)
    assert result.success
    assert result.coefficients == ("a", "b")
    assert result.compiled.evaluate(1.0, values) == pytest.approx(1.0)
    assert result.compiled.evaluate(math.e, values) == pytest.approx(3.0)


def test_generated_code_lists_coefficients_in_order() -> None:
    result = compile_formula("b x + a")
    assert result.compiled.signature == "f(x, a, b)"
    assert result.code == "def f(x, a, b):\n    return b*x+a"


def test_missing_coefficients_are_bound_to_zero() -> None:
    result = compile_formula("a*x+b")
    assert result.success
    assert result.compiled.evaluate(5.0) == 0.0
    assert result.compiled.evaluate(5.0, {"a": "2", "b": "junk"}) == 10.0


def test_array_evaluation_keeps_shape() -> None:
    compiled = compile_formula("pow(x,2)").compiled
    xs = np.linspace(-2.0, 2.0, 5)
    np.testing.assert_allclose(compiled.evaluate(xs), xs**2)

    constant = compile_formula("4").compiled
    assert compiled.evaluate(xs).shape == constant.evaluate(xs).shape == (5,)


def test_floating_point_anomalies_are_not_errors() -> None:
    result = compile_formula("1/(x-1)")
    assert result.success
    assert math.isinf(result.compiled.evaluate(1.0))
    assert math.isnan(compile_formula("log(x)").compiled.evaluate(-1.0))


@pytest.mark.parametrize("text", ["", "   ", "\n"])
def test_blank_formula_is_empty(text: str) -> None:
    result = compile_formula(text)
    assert not result.success
    assert result.compiled is None
    assert result.error is ErrorKind.EMPTY
    assert result.message == "Empty function definition"


def test_invalid_characters_still_report_coefficients() -> None:
    result = compile_formula("a x @ b")
    assert result.error is ErrorKind.INVALID_CHARACTERS
    assert result.message == "Invalid characters in function"
    assert result.coefficients == ("a", "b")
    assert result.code == ""


@pytest.mark.parametrize(
    "text",
    ["xx", "(x)(x)", "a(x)", "2log(x)", "log(x,2)", "pow(x)", "Math", "x+", "(x", "x)", "1..2", "*x", "log"],
)
def test_malformed_expressions(text: str) -> None:
    result = compile_formula(text)
    assert not result.success
    assert result.error is ErrorKind.INVALID_EXPRESSION
    assert result.message == "Invalid mathematical expression"


def test_compile_is_deterministic() -> None:
    first = compile_formula("a x + log(x)")
    second = compile_formula("a x + log(x)")
    assert first == second
    assert first.compiled.tree == second.compiled.tree


def test_result_and_compiled_are_immutable() -> None:
    result = compile_formula("x")
    with pytest.raises(AttributeError):
        result.success = False  # type: ignore[misc]
    with pytest.raises(AttributeError):
        result.compiled.source = "y"  # type: ignore[misc]


def test_symbolic_and_latex_views() -> None:
    compiled = compile_formula("a*pow(x,2)").compiled
    a, x = sp.symbols("a x")
    assert sp.simplify(compiled.symbolic - a * x**2) == 0
    assert "x^{2}" in compiled.latex


def test_failure_and_ok_constructors() -> None:
    failed = ParseResult.failure(ErrorKind.UNINTERPRETABLE)
    assert failed.message == "Cannot interpret function"
    assert failed.coefficients == ()

    compiled = compile_formula("x").compiled
    assert isinstance(compiled, CompiledExpression)
    assert ParseResult.ok(compiled).code == "def f(x):\n    return x"


def test_unexpected_internal_errors_become_uninterpretable(monkeypatch) -> None:
    import function_visualizer.compiler as compiler_mod

    def boom(tokens):
        raise RuntimeError("boom")

    monkeypatch.setattr(compiler_mod, "parse_tokens", boom)
    result = compiler_mod.compile_formula("x+1")
    assert result.error is ErrorKind.UNINTERPRETABLE


def test_cached_compile_reuses_results() -> None:
    compile_formula_cached.cache_clear()
    first = compile_formula_cached("a*x", {"a": 1})
    second = compile_formula_cached("a*x", {"a": 1})
    assert first is second
    assert compile_formula_cached.cache_info().hits == 1


def test_cached_compile_handles_unhashable_values() -> None:
    result = compile_formula_cached("a*x", {"a": [1]})
    assert result.success
    assert result.compiled.evaluate(2.0, {"a": 3}) == 6.0


@pytest.mark.parametrize("text", ["(" * 3000 + "x" + ")" * 3000, "-" * 5000 + "x", "pow(" * 2000 + "x" + ",2)" * 2000])
def test_excessive_nesting_is_invalid_expression(text: str) -> None:
    result = compile_formula(text)
    assert not result.success
    assert result.error is ErrorKind.INVALID_EXPRESSION
