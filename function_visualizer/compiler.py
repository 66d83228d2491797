"""
compiler: Compile free-text formulas into safely evaluable functions
====================================================================

Purpose
-------
Turn a formula typed in calculator notation (``2x + 1``, ``a log(x) + b``)
into a :class:`CompiledExpression` that evaluates with NumPy, together with a
:class:`ParseResult` verdict suitable for a diagnostic panel.

Pipeline
--------
1. :func:`~function_visualizer.tokenizer.normalize_formula`: strip
   whitespace, reject blank input and illegal characters.
2. :func:`~function_visualizer.coefficients.discover_coefficients`: sorted
   free names other than ``x`` and reserved words.
3. :func:`~function_visualizer.rewriter.rewrite`: explicit ``*`` and
   qualified function names.
4. :func:`~function_visualizer.expression_tree.parse_tokens`: expression tree.
5. Smoke test: one evaluation at ``x = 1`` with the supplied coefficient
   values (missing ones bound to ``0``).

:func:`compile_formula` never raises. Every failure is reported through
``ParseResult.error``.

Logging
-------
This module uses Python's standard :mod:`logging` library and is silent by
default. Rejected formulas are logged at DEBUG level:

>>> import logging
>>> logging.getLogger("function_visualizer.compiler").setLevel(logging.DEBUG)

Examples
--------
>>> result = compile_formula("a*log(x)+b", {"a": 2, "b": 1})
>>> result.success, result.coefficients
(True, ('a', 'b'))
>>> result.compiled.evaluate(1.0, {"a": 2, "b": 1})
1.0
>>> compile_formula("x@2").error
<ErrorKind.INVALID_CHARACTERS: 'Invalid characters in function'>
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple

import sympy as sp

from .NumericExpression import BoundExpression
from .coefficients import coefficients_from_tokens, discover_coefficients
from .errors import ErrorKind, FormulaError
from .expression_tree import Node, parse_tokens
from .rewriter import render_tokens, rewrite
from .tokenizer import VARIABLE_NAME, Token, normalize_formula, tokenize

__all__ = [
    "CompiledExpression",
    "ParseResult",
    "compile_formula",
    "compile_formula_cached",
    "SMOKE_TEST_X",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SMOKE_TEST_X = 1.0


@dataclass(frozen=True)
class CompiledExpression:
    """Rewritten, evaluable form of one formula.

    Parameters
    ----------
    source : str
        Normalized (whitespace-free) formula text.
    tokens : tuple[Token, ...]
        Rewritten token stream with explicit multiplication.
    tree : Node
        Parsed expression tree.
    coefficients : tuple[str, ...]
        Coefficient names, deduplicated and sorted lexicographically.
    """

    source: str
    tokens: Tuple[Token, ...]
    tree: Node
    coefficients: Tuple[str, ...]

    @property
    def rewritten(self) -> str:
        """Return the rewritten expression text, e.g. ``a*np.log(x)+b``."""
        return render_tokens(self.tokens)

    @property
    def signature(self) -> str:
        """Return the generated function signature, e.g. ``f(x, a, b)``."""
        return f"f({', '.join((VARIABLE_NAME, *self.coefficients))})"

    @property
    def code(self) -> str:
        """Return a human-readable rendering of the generated function."""
        return f"def {self.signature}:\n    return {self.rewritten}"

    @property
    def symbolic(self) -> sp.Expr:
        """Return the expression as SymPy (display only, never evaluated)."""
        return self.tree.to_sympy()

    @property
    def latex(self) -> str:
        """Return a LaTeX rendering of the expression."""
        return sp.latex(self.symbolic)

    def bind(self, values: Optional[Mapping[str, Any]] = None) -> BoundExpression:
        """Return ``f(x)`` with coefficient values frozen (missing ones are 0)."""
        return BoundExpression.from_mapping(self.tree, self.coefficients, values)

    def evaluate(self, x: Any, values: Optional[Mapping[str, Any]] = None) -> Any:
        """Evaluate at ``x`` (scalar or array) with the given coefficient values."""
        return self.bind(values)(x)


@dataclass(frozen=True)
class ParseResult:
    """Compiler verdict for one formula.

    Parameters
    ----------
    success : bool
        Whether the formula compiled and passed the smoke test.
    compiled : CompiledExpression or None
        The compiled form on success.
    error : ErrorKind or None
        Failure category on error.
    coefficients : tuple[str, ...]
        Discovered coefficient names (best effort on failure).
    code : str
        Generated-function rendering on success, empty otherwise.
    """

    success: bool
    compiled: Optional[CompiledExpression]
    error: Optional[ErrorKind]
    coefficients: Tuple[str, ...] = ()
    code: str = ""

    @property
    def message(self) -> str:
        """Return the human-readable error message, or ``""`` on success."""
        return self.error.message if self.error is not None else ""

    @classmethod
    def failure(cls, error: ErrorKind, coefficients: Tuple[str, ...] = ()) -> "ParseResult":
        return cls(success=False, compiled=None, error=error, coefficients=coefficients)

    @classmethod
    def ok(cls, compiled: CompiledExpression) -> "ParseResult":
        return cls(
            success=True,
            compiled=compiled,
            error=None,
            coefficients=compiled.coefficients,
            code=compiled.code,
        )


def _smoke_test(compiled: CompiledExpression, values: Optional[Mapping[str, Any]]) -> None:
    """Evaluate once at ``x = 1``; raise ``FormulaError`` if that fails."""
    try:
        result = compiled.evaluate(SMOKE_TEST_X, values)
    except Exception as exc:
        raise FormulaError(ErrorKind.INVALID_EXPRESSION, f"Smoke test failed: {exc}") from exc
    if not isinstance(result, float):
        raise FormulaError(
            ErrorKind.INVALID_EXPRESSION,
            f"Smoke test returned non-numeric {type(result).__name__}",
        )


def compile_formula(
    definition: str,
    coefficients: Optional[Mapping[str, Any]] = None,
) -> ParseResult:
    """Compile a formula and return the verdict without raising.

    Parameters
    ----------
    definition : str
        Raw formula text.
    coefficients : mapping, optional
        Current coefficient values, used only for the smoke test. Missing
        names are bound to ``0``.

    Returns
    -------
    ParseResult
        ``success=True`` with the compiled expression and generated code, or
        ``success=False`` with an :class:`ErrorKind`. For formulas rejected
        for invalid characters the discoverable coefficient names are still
        reported.
    """
    names: Tuple[str, ...] = ()
    try:
        normalized = normalize_formula(definition)
        names = discover_coefficients(normalized)
        tokens = tokenize(normalized)
        names = coefficients_from_tokens(tokens)
        rewritten = rewrite(tokens, names)
        tree = parse_tokens(rewritten)
        compiled = CompiledExpression(
            source=normalized,
            tokens=rewritten,
            tree=tree,
            coefficients=names,
        )
        _smoke_test(compiled, coefficients)
    except FormulaError as exc:
        if exc.kind is ErrorKind.INVALID_CHARACTERS:
            names = discover_coefficients(definition)
        logger.debug("Rejected formula %r: %s", definition, exc.detail)
        return ParseResult.failure(exc.kind, names)
    except Exception:
        logger.debug("Could not interpret formula %r", definition, exc_info=True)
        return ParseResult.failure(ErrorKind.UNINTERPRETABLE)

    return ParseResult.ok(compiled)


@lru_cache(maxsize=256)
def _compile_cached(definition: str, coefficient_items: Tuple[Tuple[str, Any], ...]) -> ParseResult:
    return compile_formula(definition, dict(coefficient_items))


def compile_formula_cached(
    definition: str,
    coefficients: Optional[Mapping[str, Any]] = None,
) -> ParseResult:
    """Memoized :func:`compile_formula`, keyed by value equality of its inputs.

    Results are immutable, so a cached result is indistinguishable from a
    fresh one. Unhashable inputs fall back to an uncached compile.
    """
    items = tuple(sorted((coefficients or {}).items()))
    try:
        return _compile_cached(definition, items)
    except TypeError:
        return compile_formula(definition, coefficients)


compile_formula_cached.cache_clear = _compile_cached.cache_clear  # type: ignore[attr-defined]
compile_formula_cached.cache_info = _compile_cached.cache_info  # type: ignore[attr-defined]
