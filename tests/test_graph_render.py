from __future__ import annotations

import logging

import plotly.graph_objects as go
import pytest

import function_visualizer.graph as graph_mod
from function_visualizer.errors import ErrorKind
from function_visualizer.functions import COLOR_OPTIONS, FunctionCollection, FunctionDefinition
from function_visualizer.geometry import DEFAULT_AXIS_LIMITS, AxisLimits
from function_visualizer.graph import render_axes, render_curve, render_curve_cached, render_graph
from function_visualizer.plotly_export import build_figure, curve_trace

LIMITS = AxisLimits(-5.0, 5.0, -10.0, 10.0)


def _definition(definition: str, **coefficients: float) -> FunctionDefinition:
    return FunctionDefinition(
        id=definition,
        title=definition,
        color="1976d2",
        definition=definition,
        coefficients=coefficients,
    )


# --- FunctionCollection ------------------------------------------------------


def test_add_assigns_defaults_and_unique_ids() -> None:
    functions = FunctionCollection()
    first = functions.add()
    second = functions.add(definition="a x + b", coefficients={"a": "2"})

    assert first.id != second.id
    assert first.title == "Function 1"
    assert second.title == "Function 2"
    palette = list(COLOR_OPTIONS.values())
    assert (first.color, second.color) == (palette[0], palette[1])
    assert dict(second.coefficients) == {"a": 2.0, "b": 0.0}
    assert list(functions) == [first.id, second.id]


def test_update_reconciles_coefficients_with_definition() -> None:
    functions = FunctionCollection()
    entry = functions.add(definition="a*x+b", coefficients={"a": 1, "b": 2})

    updated = functions.update(entry.id, definition="a*x+c")
    assert dict(updated.coefficients) == {"a": 1.0, "c": 0.0}

    updated = functions.update(entry.id, coefficients={"a": "abc", "c": "1/2"})
    assert dict(updated.coefficients) == {"a": 0.0, "c": 0.5}
    assert functions[entry.id] is updated


def test_update_title_keeps_id_and_coefficients() -> None:
    functions = FunctionCollection()
    entry = functions.add(definition="a*x", coefficients={"a": 3})
    updated = functions.update(entry.id, title="Line", color="#d32f2f")
    assert updated.id == entry.id
    assert updated.title == "Line"
    assert updated.css_color == "#d32f2f"
    assert dict(updated.coefficients) == {"a": 3.0}


def test_update_rejects_unknown_fields_and_ids() -> None:
    functions = FunctionCollection()
    entry = functions.add()
    with pytest.raises(TypeError):
        functions.update(entry.id, id="other")
    with pytest.raises(KeyError):
        functions.update("missing", title="x")


def test_remove_returns_entry() -> None:
    functions = FunctionCollection()
    entry = functions.add()
    assert functions.remove(entry.id) == entry
    assert len(functions) == 0
    with pytest.raises(KeyError):
        functions.remove(entry.id)


def test_definition_coefficients_are_read_only() -> None:
    entry = _definition("a*x", a=1.0)
    with pytest.raises(TypeError):
        entry.coefficients["a"] = 2.0  # type: ignore[index]
    assert hash(entry) == hash(_definition("a*x", a=1.0))


# --- render pass ------------------------------------------------------------


def test_render_curve_reports_failure_without_path() -> None:
    curve = render_curve("x@2", None, LIMITS)
    assert not curve.drawn
    assert curve.result.error is ErrorKind.INVALID_CHARACTERS
    assert curve.svg_path == ""


def test_render_curve_uses_coefficients() -> None:
    curve = render_curve("a*x", {"a": 0}, LIMITS)
    # a = 0 gives a horizontal line at y = 0, screen y = 250.
    assert curve.drawn
    assert {sy for _, sy in curve.strokes[0]} == {250.0}


def test_one_failing_function_does_not_block_others(caplog) -> None:
    functions = [_definition("x@2"), _definition("2x+1"), _definition(""), _definition("1/x")]
    with caplog.at_level(logging.DEBUG, logger="function_visualizer"):
        render = render_graph(functions, LIMITS)

    assert [curve.result.success for curve in render.curves] == [False, True, False, True]
    assert [curve.id for curve in render.drawn_curves] == ["2x+1", "1/x"]
    assert render.curves[0].color == "#1976d2"
    assert len(render.x_ticks) == 11
    assert len(render.y_ticks) == 11


def test_sampler_crash_is_isolated(monkeypatch, caplog) -> None:
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(graph_mod, "sample_curve", explode)
    with caplog.at_level(logging.WARNING, logger="function_visualizer.graph"):
        render = render_graph([_definition("x")], LIMITS)

    assert render.curves[0].result.success
    assert not render.curves[0].drawn
    assert "Sampling failed" in caplog.text


def test_zero_guides_follow_limits() -> None:
    _, _, zero_x, zero_y = render_axes(LIMITS)
    assert (zero_x, zero_y) == (250.0, 250.0)

    _, _, zero_x, zero_y = render_axes(AxisLimits(1, 5, -1, 1))
    assert zero_x is None
    assert zero_y == 250.0


def test_default_limits_render() -> None:
    render = render_graph([_definition("x")], DEFAULT_AXIS_LIMITS)
    assert render.zero_x == 50.0
    assert render.zero_y == 450.0
    assert len(render.curves[0].strokes) == 1


def test_degenerate_limits_render_nothing() -> None:
    render = render_graph([_definition("x")], AxisLimits(3, 3, 10, 0))
    assert render.curves[0].result.success
    assert render.drawn_curves == ()
    assert render.x_ticks == () and render.y_ticks == ()
    assert render.zero_x is None and render.zero_y is None


def test_cached_render_matches_uncached() -> None:
    render_curve_cached.cache_clear()
    functions = [_definition("a*x+b", a=2.0, b=1.0)]
    cached = render_graph(functions, LIMITS, cached=True)
    again = render_graph(functions, LIMITS, cached=True)
    plain = render_graph(functions, LIMITS)
    assert cached == plain
    assert cached.curves[0].path is again.curves[0].path


# --- Plotly export ----------------------------------------------------------


def test_curve_trace_separates_strokes_with_gaps() -> None:
    curve = render_graph([_definition("1/x")], LIMITS).curves[0]
    trace = curve_trace(curve)
    assert isinstance(trace, go.Scatter)
    assert trace.connectgaps is False
    assert list(trace.x).count(None) == len(curve.strokes) - 1
    assert trace.line.color == "#1976d2"


def test_build_figure_has_one_trace_per_drawn_curve() -> None:
    render = render_graph([_definition("x"), _definition("x@2"), _definition("1/x")], LIMITS)
    fig = build_figure(render, title="Graph")
    assert len(fig.data) == 2
    assert fig.layout.width == 500
    assert list(fig.layout.yaxis.range) == [500, 0]
    assert len(fig.layout.annotations) == len(render.x_ticks) + len(render.y_ticks)
    assert fig.layout.title.text == "Graph"


def test_build_figure_without_curves() -> None:
    fig = build_figure(render_graph([], LIMITS))
    assert len(fig.data) == 0
    assert fig.layout.showlegend is False
