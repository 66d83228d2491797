"""Error taxonomy for formula compilation.

Compilation stages raise :class:`FormulaError` internally. The public
:func:`function_visualizer.compiler.compile_formula` boundary converts every
failure into a :class:`~function_visualizer.compiler.ParseResult` carrying an
:class:`ErrorKind`, so callers never see these exceptions unless they use the
stage functions directly.
"""

from __future__ import annotations

from enum import Enum

__all__ = ["ErrorKind", "FormulaError", "ExpressionSyntaxError"]


class ErrorKind(Enum):
    """Reason a formula failed to compile.

    The enum value is the human-readable message shown in diagnostics.
    """

    EMPTY = "Empty function definition"
    INVALID_CHARACTERS = "Invalid characters in function"
    INVALID_EXPRESSION = "Invalid mathematical expression"
    UNINTERPRETABLE = "Cannot interpret function"

    @property
    def message(self) -> str:
        return self.value


class FormulaError(ValueError):
    """Raised by a compilation stage when a formula is rejected.

    Parameters
    ----------
    kind : ErrorKind
        Category of the failure.
    detail : str, optional
        Extra context (position, offending token) for logs. Defaults to the
        kind's message.
    """

    def __init__(self, kind: ErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail or kind.message
        super().__init__(self.detail)


class ExpressionSyntaxError(FormulaError):
    """Raised when the rewritten token stream is not a valid expression."""

    def __init__(self, detail: str, position: int | None = None) -> None:
        self.position = position
        if position is not None:
            detail = f"{detail} (at position {position})"
        super().__init__(ErrorKind.INVALID_EXPRESSION, detail)
