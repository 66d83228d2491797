"""Expression tree, recursive-descent parser and tree-walking evaluator.

The rewritten token stream is parsed into a small immutable tree:

- :class:`Number` (numeric literal),
- :class:`Variable` (the independent variable ``x``),
- :class:`Coefficient` (a named scalar supplied by the caller),
- :class:`BinaryOp` (``+ - * /``),
- :class:`Negate` (unary minus),
- :class:`Call` (``np.log`` with one argument, ``np.power`` with two).

Evaluation walks the tree with NumPy ufuncs. Nothing else is reachable from
a formula: there is no ``eval``, no attribute access and no name lookup
outside the explicit coefficient bindings. Floating point anomalies are not
errors; ``1/0`` gives ``inf`` and ``log(-1)`` gives ``nan``, which the curve
sampler turns into gaps.

Grammar
-------
::

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := ("-" | "+") unary | primary
    primary := NUMBER | VARIABLE | NAME
             | FUNCTION "(" expr ("," expr)* ")"
             | "(" expr ")"
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np
import sympy as sp

from .errors import ExpressionSyntaxError
from .tokenizer import (
    COMMA,
    FUNCTION,
    LPAREN,
    NAME,
    NUMBER,
    OPERATOR,
    RESERVED,
    RPAREN,
    VARIABLE,
    VARIABLE_NAME,
    Token,
)

__all__ = [
    "Node",
    "Number",
    "Variable",
    "Coefficient",
    "BinaryOp",
    "Negate",
    "Call",
    "NUMERIC_FUNCTIONS",
    "parse_tokens",
    "evaluate",
    "to_sympy",
]

Bindings = Mapping[str, Any]

# Qualified function name -> (ufunc, arity, sympy constructor)
NUMERIC_FUNCTIONS: Dict[str, tuple[Callable[..., Any], int, Callable[..., sp.Expr]]] = {
    "np.log": (np.log, 1, sp.log),
    "np.power": (np.power, 2, sp.Pow),
}

_BINARY_UFUNCS: Dict[str, Callable[[Any, Any], Any]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
}


class Node:
    """Base class of expression tree nodes."""

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        raise NotImplementedError

    def to_sympy(self) -> sp.Expr:
        raise NotImplementedError


@dataclass(frozen=True)
class Number(Node):
    value: float

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        return np.float64(self.value)

    def to_sympy(self) -> sp.Expr:
        if float(self.value).is_integer():
            return sp.Integer(int(self.value))
        return sp.Float(self.value)


@dataclass(frozen=True)
class Variable(Node):
    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        return x

    def to_sympy(self) -> sp.Expr:
        return sp.Symbol(VARIABLE_NAME)


@dataclass(frozen=True)
class Coefficient(Node):
    name: str

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        # Unbound coefficients evaluate as 0.
        return np.float64(bindings.get(self.name, 0.0))

    def to_sympy(self) -> sp.Expr:
        return sp.Symbol(self.name)


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        ufunc = _BINARY_UFUNCS[self.op]
        return ufunc(self.left.evaluate(x, bindings), self.right.evaluate(x, bindings))

    def to_sympy(self) -> sp.Expr:
        left = self.left.to_sympy()
        right = self.right.to_sympy()
        if self.op == "+":
            return left + right
        if self.op == "-":
            return left - right
        if self.op == "*":
            return left * right
        return left / right


@dataclass(frozen=True)
class Negate(Node):
    operand: Node

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        return np.negative(self.operand.evaluate(x, bindings))

    def to_sympy(self) -> sp.Expr:
        return -self.operand.to_sympy()


@dataclass(frozen=True)
class Call(Node):
    func: str
    args: tuple[Node, ...]

    def evaluate(self, x: np.ndarray, bindings: Bindings) -> Any:
        ufunc = NUMERIC_FUNCTIONS[self.func][0]
        return ufunc(*(arg.evaluate(x, bindings) for arg in self.args))

    def to_sympy(self) -> sp.Expr:
        constructor = NUMERIC_FUNCTIONS[self.func][2]
        return constructor(*(arg.to_sympy() for arg in self.args))


# SECTION: Parser [id: Parser]
# =============================================================================

class _Parser:
    """Recursive-descent parser over a rewritten token stream."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = tuple(tokens)
        self.pos = 0

    def current(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _check(self, kind: str, text: Optional[str] = None) -> bool:
        token = self.current()
        if token is None or token.kind != kind:
            return False
        return text is None or token.text == text

    def expect(self, kind: str) -> Token:
        token = self.current()
        if token is None:
            raise ExpressionSyntaxError(f"Expected {kind}, got end of formula")
        if token.kind != kind:
            raise ExpressionSyntaxError(f"Expected {kind}, got {token.text!r}", token.position)
        return self.advance()

    def parse(self) -> Node:
        if not self.tokens:
            raise ExpressionSyntaxError("Empty expression")
        node = self.parse_expression()
        token = self.current()
        if token is not None:
            raise ExpressionSyntaxError(f"Unexpected token {token.text!r}", token.position)
        return node

    def parse_expression(self) -> Node:
        left = self.parse_term()
        while self._check(OPERATOR, "+") or self._check(OPERATOR, "-"):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_term())
        return left

    def parse_term(self) -> Node:
        left = self.parse_unary()
        while self._check(OPERATOR, "*") or self._check(OPERATOR, "/"):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_unary())
        return left

    def parse_unary(self) -> Node:
        if self._check(OPERATOR, "-"):
            self.advance()
            return Negate(self.parse_unary())
        if self._check(OPERATOR, "+"):
            self.advance()
            return self.parse_unary()
        return self.parse_primary()

    def parse_primary(self) -> Node:
        token = self.current()
        if token is None:
            raise ExpressionSyntaxError("Unexpected end of formula")

        if token.kind == NUMBER:
            self.advance()
            return Number(float(token.text))

        if token.kind == VARIABLE:
            self.advance()
            return Variable()

        if token.kind == NAME:
            self.advance()
            return Coefficient(token.text)

        if token.kind == FUNCTION:
            return self.parse_call()

        if token.kind == LPAREN:
            self.advance()
            node = self.parse_expression()
            self.expect(RPAREN)
            return node

        if token.kind == RESERVED:
            raise ExpressionSyntaxError(f"Reserved word {token.text!r} is not allowed", token.position)

        raise ExpressionSyntaxError(f"Unexpected token {token.text!r}", token.position)

    def parse_call(self) -> Node:
        name_token = self.advance()
        if name_token.text not in NUMERIC_FUNCTIONS:
            raise ExpressionSyntaxError(f"Unknown function {name_token.text!r}", name_token.position)
        arity = NUMERIC_FUNCTIONS[name_token.text][1]

        self.expect(LPAREN)
        args = [self.parse_expression()]
        while self._check(COMMA):
            self.advance()
            args.append(self.parse_expression())
        self.expect(RPAREN)

        if len(args) != arity:
            raise ExpressionSyntaxError(
                f"{name_token.text} expects {arity} argument(s), got {len(args)}",
                name_token.position,
            )
        return Call(name_token.text, tuple(args))


def parse_tokens(tokens: Sequence[Token]) -> Node:
    """Parse a rewritten token stream into an expression tree.

    Raises
    ------
    ExpressionSyntaxError
        If the tokens do not form exactly one expression, or nest
        deeper than the interpreter recursion limit.
    """
    try:
        return _Parser(tokens).parse()
    except RecursionError:
        raise ExpressionSyntaxError("Expression is nested too deeply") from None


def evaluate(node: Node, x: Any, bindings: Bindings | None = None) -> Any:
    """Evaluate ``node`` at ``x`` (scalar or array) with coefficient bindings.

    Floating point warnings are silenced: division by zero, overflow and
    invalid operations produce ``inf``/``nan`` values instead of raising.
    """
    x_values = np.asarray(x, dtype=float)
    with np.errstate(all="ignore"):
        return node.evaluate(x_values, bindings or {})


def to_sympy(node: Node) -> sp.Expr:
    """Return a SymPy rendering of ``node`` for diagnostic display."""
    return node.to_sympy()
