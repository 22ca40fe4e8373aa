"""Tests for layered scopes and variable resolution"""

import pytest

import patternscript
from patternscript import ast


def test_inner_layer_wins():
    scope = patternscript.Scope({"a": ast.Int(1), "b": ast.Int(2)}, {"a": ast.Int(10)})
    assert ast.Variable("a").evaluate(scope).data == 10
    assert ast.Variable("b").evaluate(scope).data == 2


def test_push_shares_layers():
    base = patternscript.Scope({"a": ast.Int(1)})
    pushed = base.push({"b": ast.Int(2)})
    assert pushed.layers[0] is base.layers[0]
    assert ast.Variable("b").evaluate(pushed).data == 2
    with pytest.raises(patternscript.UndefinedVariable):
        ast.Variable("b").evaluate(base)
    assert base.push({}) is base


def test_chain_orders_scopes():
    globals_ = patternscript.Scope({"a": ast.Int(1)})
    instance = patternscript.Scope({"a": ast.Int(2)})
    assert ast.Variable("a").evaluate(patternscript.Scope.chain(globals_, instance)).data == 2
    assert ast.Variable("a").evaluate(patternscript.Scope.chain(instance, globals_)).data == 1
    assert patternscript.Scope.chain(None, globals_).layers == globals_.layers


def test_self_reference_reads_outer_definition():
    """x = x + 1 reads the x from the layer below"""
    scope = patternscript.Scope(
        {"x": ast.Int(1)},
        {"x": patternscript.parse_expr("x + 1")},
    )
    assert ast.Variable("x").evaluate(scope).data == 2


def test_self_reference_without_outer_is_undefined():
    scope = patternscript.Scope({"x": patternscript.parse_expr("x + 1")})
    with pytest.raises(patternscript.UndefinedVariable):
        ast.Variable("x").evaluate(scope)


def test_definition_cycle_is_undefined():
    scope = patternscript.Scope({"a": ast.Variable("b"), "b": ast.Variable("a")})
    with pytest.raises(patternscript.UndefinedVariable):
        ast.Variable("a").evaluate(scope)


def test_definitions_see_inner_bindings():
    """Definitions are evaluated lazily against the whole scope"""
    scope = patternscript.Scope(
        {"base": ast.Int(5), "double": patternscript.parse_expr("base * 2")},
        {"base": ast.Int(100)},
    )
    assert ast.Variable("double").evaluate(scope).data == 200


def test_resolve_returns_defining_expression():
    scope = patternscript.Scope({"a": ast.Int(1)}, {"a": ast.Int(2), "b": ast.Int(3)})
    expr, inner = scope.resolve("a")
    assert expr.value == 2
    assert inner.layers is scope.layers
    with pytest.raises(patternscript.UndefinedVariable):
        scope.resolve("missing")
