# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

import math
from typing import Any, Type, TypeVar

import numpy as np

from .errors import FormulaError
from .expression_tree import evaluate, parse_tokens
from .rewriter import rewrite
from .tokenizer import NAME, RESERVED, VARIABLE, normalize_formula, tokenize

T = TypeVar("T", int, float)


def _evaluate_constant(text: str) -> float:
    """Evaluate constant arithmetic such as ``"1/2"`` or ``"-(3+1)"``.

    Uses the formula parser, so only numbers, ``+ - * /``, parentheses,
    ``log`` and ``pow`` are accepted. ``x`` and coefficient names are rejected.
    """
    tokens = tokenize(normalize_formula(text))
    if any(token.kind in (VARIABLE, NAME, RESERVED) for token in tokens):
        raise ValueError(f"{text!r} is not a constant expression.")
    value = evaluate(parse_tokens(rewrite(tokens, ())), 0.0)
    return float(np.asarray(value).reshape(()))


def InputConvert(obj: Any, dest_type: Type[T] = float, truncate: bool = True) -> T:
    """
    Convert `obj` to `dest_type`.

    Supported destination types:
    - float
    - int

    Rules:
    - If `obj` is a number: cast via dest_type(obj).
    - If `obj` is a string:
        1) try float(s)
        2) else parse it as constant formula arithmetic ("1/2", "pow(2,3)").

    Truncation Rules (`truncate`):
    - When converting Float -> Int:
        - If `truncate=True`: Truncate decimal part (e.g., 3.9 -> 3).
        - If `truncate=False`: Require exact integer (e.g., 3.0 -> 3, 3.1 -> Error).

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If conversion fails or violates truncation rules.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    def _coerce_numeric_value(x: float) -> T:
        if dest_type is float:
            return float(x)  # type: ignore[return-value]

        if not math.isfinite(x):
            raise ValueError(f"Could not convert {x!r} to int: value is not finite.")
        if not float(x).is_integer():
            if not truncate:
                raise ValueError(
                    f"Could not convert {x!r} to int: value is not an exact integer."
                )
            # If truncate=True, int() truncates towards zero
        return int(x)  # type: ignore[return-value]

    # Fast path: numeric types (exclude bool)
    if isinstance(obj, (int, float, np.number)) and not isinstance(obj, bool):
        try:
            return _coerce_numeric_value(float(obj))
        except (TypeError, OverflowError) as e:
            raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e

    # String path
    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")

        # 1) Plain native conversion
        try:
            return _coerce_numeric_value(float(s))
        except ValueError:
            pass

        # 2) Constant formula arithmetic
        try:
            return _coerce_numeric_value(_evaluate_constant(s))
        except (FormulaError, ValueError) as e:
            raise ValueError(
                f"Could not convert {obj!r} to {dest_type.__name__} (neither directly nor as arithmetic)."
            ) from e

    # Fallback: try converting to float generically
    try:
        return _coerce_numeric_value(float(obj))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e


def coerce_number(obj: Any, default: float = 0.0) -> float:
    """Convert user input to a finite float, falling back to ``default``.

    Empty strings, non-numeric text, ``None`` and non-finite values never
    raise; they produce ``default``. Coefficient fields and axis-bound fields
    both use this rule.
    The whole text must be a number or constant expression; a numeric prefix is
    not salvaged, so ``"3abc"`` and ``"2e"`` give ``default``, not 3 or 2.

    Examples
    --------
    >>> coerce_number("2.5")
    2.5
    >>> coerce_number("")
    0.0
    >>> coerce_number("abc")
    0.0
    """
    if obj is None:
        return float(default)
    try:
        value = InputConvert(obj, float)
    except ValueError:
        return float(default)
    if not math.isfinite(value):
        return float(default)
    return value

# === END OF SECTION: InputConvert [id: InputConvert]===
