"""Implicit-multiplication rewriting.

Turns calculator notation into an unambiguous token stream: function names
are qualified with the NumPy namespace and ``*`` is inserted between adjacent
operands. The rewrite is one left-to-right pass over token classes, so a
coefficient named ``a`` can never be confused with part of a longer name such
as ``ab``.

Adjacency rules (left token, right token):

- around ``x``: number·x, x·number, ``)``·number, number·``(``, ``)``·x, x·``(``
- around coefficients: number·name, name·number, name·x, x·name

Anything else is left untouched; for example ``(x)(x)`` and ``a(x)`` remain
malformed and are rejected by the parser.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable

from .tokenizer import (
    FUNCTION,
    LPAREN,
    NAME,
    NUMBER,
    OPERATOR,
    RPAREN,
    VARIABLE,
    Token,
)

__all__ = ["QUALIFIED_FUNCTIONS", "rewrite", "render_tokens"]

QUALIFIED_FUNCTIONS: dict[str, str] = {
    "log": "np.log",
    "pow": "np.power",
}

_IMPLICIT_AROUND_X = frozenset(
    {
        (NUMBER, VARIABLE),
        (VARIABLE, NUMBER),
        (RPAREN, NUMBER),
        (NUMBER, LPAREN),
        (RPAREN, VARIABLE),
        (VARIABLE, LPAREN),
    }
)
_IMPLICIT_AROUND_NAME = frozenset(
    {
        (NUMBER, NAME),
        (NAME, NUMBER),
        (NAME, VARIABLE),
        (VARIABLE, NAME),
    }
)


def _needs_multiply(left: Token, right: Token, coefficients: Collection[str]) -> bool:
    pair = (left.kind, right.kind)
    if pair in _IMPLICIT_AROUND_X:
        return True
    if pair in _IMPLICIT_AROUND_NAME:
        name = left.text if left.kind == NAME else right.text
        return name in coefficients
    return False


def rewrite(tokens: Iterable[Token], coefficients: Collection[str]) -> tuple[Token, ...]:
    """Qualify function names and make every multiplication explicit.

    Parameters
    ----------
    tokens : iterable of Token
        Output of :func:`function_visualizer.tokenizer.tokenize`.
    coefficients : collection of str
        Discovered coefficient names. Only these names take part in the
        coefficient adjacency rules.

    Returns
    -------
    tuple[Token, ...]
        The rewritten stream. It is not validated here; malformed input
        surfaces as a parse error.

    Examples
    --------
    >>> from function_visualizer.tokenizer import tokenize
    >>> render_tokens(rewrite(tokenize("3x2+a(x)"), ("a",)))
    '3*x*2+a(x)'
    """
    out: list[Token] = []
    previous: Token | None = None
    for token in tokens:
        if token.kind == FUNCTION:
            token = Token(FUNCTION, QUALIFIED_FUNCTIONS[token.text], token.position)
        if previous is not None and _needs_multiply(previous, token, coefficients):
            out.append(Token(OPERATOR, "*", token.position))
        out.append(token)
        previous = token
    return tuple(out)


def render_tokens(tokens: Iterable[Token]) -> str:
    """Join a token stream back into display text."""
    return "".join(token.text for token in tokens)
