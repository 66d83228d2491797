"""Top-level public API for the ``function_visualizer`` package.

This module re-exports the compile-and-render surface so users can import
from a single namespace, for example:

>>> from function_visualizer import AxisLimits, compile_formula, render_curve  # doctest: +SKIP

It exposes the high-level helpers (formula compilation, graph rendering,
Plotly export, the function collection) as well as the lower-level stages
(tokenizer, rewriter, expression tree) for integrations that need them.
"""

from .InputConvert import InputConvert, coerce_number
from .NumericExpression import BoundExpression
from .coefficients import (
    coerce_coefficient_values,
    discover_coefficients,
    reconcile_coefficients,
)
from .compiler import CompiledExpression, ParseResult, compile_formula, compile_formula_cached
from .errors import ErrorKind, ExpressionSyntaxError, FormulaError
from .expression_tree import evaluate, parse_tokens, to_sympy
from .functions import COLOR_OPTIONS, FunctionCollection, FunctionDefinition, normalize_color
from .geometry import DEFAULT_AXIS_LIMITS, DEFAULT_GEOMETRY, AxisLimits, PlotGeometry
from .graph import CurveRender, GraphRender, render_axes, render_curve, render_curve_cached, render_graph
from .plotly_export import build_figure
from .rewriter import render_tokens, rewrite
from .sampling import SAMPLE_STEPS, PathCommand, path_to_svg, sample_curve, split_strokes
from .ticks import Tick, generate_ticks, tick_count, zero_guide
from .tokenizer import RESERVED_WORDS, Token, normalize_formula, tokenize

__all__ = [
    "InputConvert",
    "coerce_number",
    "BoundExpression",
    "coerce_coefficient_values",
    "discover_coefficients",
    "reconcile_coefficients",
    "CompiledExpression",
    "ParseResult",
    "compile_formula",
    "compile_formula_cached",
    "ErrorKind",
    "ExpressionSyntaxError",
    "FormulaError",
    "evaluate",
    "parse_tokens",
    "to_sympy",
    "COLOR_OPTIONS",
    "FunctionCollection",
    "FunctionDefinition",
    "normalize_color",
    "DEFAULT_AXIS_LIMITS",
    "DEFAULT_GEOMETRY",
    "AxisLimits",
    "PlotGeometry",
    "CurveRender",
    "GraphRender",
    "render_axes",
    "render_curve",
    "render_curve_cached",
    "render_graph",
    "build_figure",
    "render_tokens",
    "rewrite",
    "SAMPLE_STEPS",
    "PathCommand",
    "path_to_svg",
    "sample_curve",
    "split_strokes",
    "Tick",
    "generate_ticks",
    "tick_count",
    "zero_guide",
    "RESERVED_WORDS",
    "Token",
    "normalize_formula",
    "tokenize",
]
