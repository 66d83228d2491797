"""Whitespace normalization, character validation and tokenization.

Formulas are written in loose calculator notation (``2x + 1``, ``a log(x)``).
This module performs the first compilation stage:

- :func:`normalize_formula` collapses whitespace and rejects characters
  outside the accepted alphabet,
- :func:`tokenize` classifies the normalized text into a flat token stream in
  a single left-to-right scan.

Identifier classification
-------------------------
The independent variable ``x`` is always a token of its own, even inside a
longer run of letters: ``ax`` is ``a`` followed by ``x`` and ``x2`` is ``x``
followed by the number ``2``. Every other maximal run of letters, digits and
underscores that starts with a letter or underscore is a name. Names listed in
:data:`RESERVED_WORDS` are never coefficients; ``log`` and ``pow`` become
function tokens and the remaining reserved words are kept as ``RESERVED``
tokens, which the parser rejects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ErrorKind, ExpressionSyntaxError, FormulaError

__all__ = [
    "RESERVED_WORDS",
    "FUNCTION_NAMES",
    "NUMBER",
    "VARIABLE",
    "NAME",
    "FUNCTION",
    "RESERVED",
    "OPERATOR",
    "LPAREN",
    "RPAREN",
    "COMMA",
    "Token",
    "normalize_formula",
    "iter_tokens",
    "tokenize",
    "scan_names",
]

VARIABLE_NAME = "x"
FUNCTION_NAMES = frozenset({"log", "pow"})
RESERVED_WORDS = frozenset({VARIABLE_NAME, "Math", "return", "function"} | FUNCTION_NAMES)

# Token kinds
NUMBER = "NUMBER"
VARIABLE = "VARIABLE"
NAME = "NAME"
FUNCTION = "FUNCTION"
RESERVED = "RESERVED"
OPERATOR = "OPERATOR"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
COMMA = "COMMA"

_WHITESPACE_RE = re.compile(r"\s+")
_ALLOWED_RE = re.compile(r"[0-9A-Za-z_+\-*/().,]*")

# Alternation order matters: numbers before names, and names exclude ``x``.
_TOKEN_RE = re.compile(
    r"""
    (?P<NUMBER>[0-9]+\.?[0-9]*|\.[0-9]+)
    |(?P<VARIABLE>x)
    |(?P<NAME>[A-Za-wyz_][A-Za-wyz0-9_]*)
    |(?P<OPERATOR>[+\-*/])
    |(?P<LPAREN>\()
    |(?P<RPAREN>\))
    |(?P<COMMA>,)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    """One classified run of formula text.

    Parameters
    ----------
    kind : str
        One of the module-level kind constants (``NUMBER``, ``NAME``, ...).
    text : str
        Source text of the token. The rewriter may substitute qualified
        function names (``np.log``) and inserted ``*`` operators.
    position : int
        Offset of the token in the normalized formula; inserted tokens reuse
        the offset of the token they precede.
    """

    kind: str
    text: str
    position: int = 0

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r})"


def normalize_formula(text: str | None) -> str:
    """Strip all whitespace and validate the remaining characters.

    Parameters
    ----------
    text : str or None
        Raw formula as typed by the user.

    Returns
    -------
    str
        The formula without whitespace.

    Raises
    ------
    FormulaError
        ``ErrorKind.EMPTY`` for blank input, ``ErrorKind.INVALID_CHARACTERS``
        when a character outside digits, ASCII letters, ``_``, ``+ - * /``,
        parentheses, ``.`` and ``,`` is present.

    Examples
    --------
    >>> normalize_formula(" 2 x + 1 ")
    '2x+1'
    """
    if text is None or not text.strip():
        raise FormulaError(ErrorKind.EMPTY)

    cleaned = _WHITESPACE_RE.sub("", text)
    if _ALLOWED_RE.fullmatch(cleaned) is None:
        bad = sorted({ch for ch in cleaned if _ALLOWED_RE.fullmatch(ch) is None})
        raise FormulaError(
            ErrorKind.INVALID_CHARACTERS,
            f"Invalid characters in function: {''.join(bad)!r}",
        )
    return cleaned


def _classify_name(text: str) -> str:
    if text in FUNCTION_NAMES:
        return FUNCTION
    if text in RESERVED_WORDS:
        return RESERVED
    return NAME


def iter_tokens(text: str):
    """Yield tokens for ``text``, raising on the first unrecognized character."""
    pos = 0
    end = len(text)
    while pos < end:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ExpressionSyntaxError(f"Unexpected character {text[pos]!r}", pos)
        kind = match.lastgroup
        value = match.group()
        if kind == NAME:
            kind = _classify_name(value)
        yield Token(kind, value, pos)
        pos = match.end()


def tokenize(normalized: str) -> tuple[Token, ...]:
    """Split a normalized formula into tokens.

    Parameters
    ----------
    normalized : str
        Output of :func:`normalize_formula`.

    Returns
    -------
    tuple[Token, ...]

    Raises
    ------
    ExpressionSyntaxError
        If a character cannot start any token (for example a lone ``.``).

    Examples
    --------
    >>> [t.text for t in tokenize("2ax+log(x)")]
    ['2', 'a', 'x', '+', 'log', '(', 'x', ')']
    """
    return tuple(iter_tokens(normalized))


def scan_names(text: str) -> list[str]:
    """Return every identifier run in ``text`` (reserved words included).

    Unlike :func:`tokenize` this never raises: characters that cannot start a
    token are skipped. It is used for best-effort diagnostics on formulas that
    failed validation.
    """
    names: list[str] = []
    pos = 0
    end = len(text)
    while pos < end:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            pos += 1
            continue
        if match.lastgroup == NAME:
            names.append(match.group())
        pos = match.end()
    return names
