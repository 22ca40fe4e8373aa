"""Tests for expression evaluation

Covers literal values, the numeric and boolean operator tables, builtin
functions and the errors each of them raises.
"""

import math

import pytest

import patternscript
import pstest
from patternscript import ast


def test_literals():
    """Each literal evaluates to its own kind"""
    assert pstest.evaluate("42") == patternscript.Value.integer(42)
    assert pstest.evaluate("1.5") == patternscript.Value.float(1.5)
    assert pstest.evaluate('"spiral"') == patternscript.Value.string("spiral")
    assert pstest.evaluate("true") == patternscript.Value.boolean(True)
    assert pstest.evaluate("false").kind is patternscript.BOOL


def test_integer_arithmetic_stays_integer():
    result = pstest.evaluate("7 + 2 * 3")
    assert result.kind is patternscript.INT
    assert result.data == 13
    assert pstest.value("2 ^ 3 ^ 2") == 512
    assert pstest.value("10 - 4 - 3") == 3


def test_integer_division_truncates_toward_zero():
    assert pstest.value("7 / 2") == 3
    assert pstest.value("(0 - 7) / 2") == -3
    assert pstest.value("7 / (0 - 2)") == -3
    assert pstest.evaluate("7 / 2").kind is patternscript.INT


def test_negative_integer_exponent_is_float():
    result = pstest.evaluate("2 ^ -1")
    assert result.kind is patternscript.FLOAT
    assert result.data == 0.5


def test_mixed_numbers_promote_to_float():
    result = pstest.evaluate("1 + 2.5")
    assert result.kind is patternscript.FLOAT
    assert result.data == 3.5
    assert pstest.value("5.0 / 2") == 2.5


def test_string_concatenation():
    assert pstest.value('"ab" + "cd"') == "abcd"
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate('"ab" - "cd"')


def test_division_by_zero():
    with pytest.raises(patternscript.DivisionByZero):
        pstest.evaluate("1 / 0")
    with pytest.raises(patternscript.DivisionByZero):
        pstest.evaluate("1.0 / 0.0")
    with pytest.raises(patternscript.DivisionByZero):
        pstest.evaluate("0 ^ -1")


def test_comparisons():
    assert pstest.value("3 > 2") is True
    assert pstest.value("3 >= 3.5") is False
    assert pstest.value("1.5 < 2") is True
    assert pstest.value("2 <= 2") is True
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate('"a" < "b"')


def test_boolean_operators_need_bools():
    assert pstest.value("true and false") is False
    assert pstest.value("true or false") is True
    assert pstest.value("(1 > 0) == (2 > 1)") is True
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate("1 == 1")
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate("true and 1")


def test_operator_error_describes_operands():
    with pytest.raises(patternscript.OperatorTypeError) as info:
        pstest.evaluate('3 * "x"')
    assert info.value.op == "*"
    assert "Integer(3)" in str(info.value)
    assert "String('x')" in str(info.value)


def test_negate():
    assert pstest.value("-4") == -4
    assert pstest.value("-(1.5)") == -1.5
    assert pstest.value("-2 ^ 2") == -4
    with pytest.raises(patternscript.NegateTypeError):
        pstest.evaluate('-"a"')
    with pytest.raises(patternscript.NegateTypeError):
        pstest.evaluate("-true")


def test_trig_in_degrees():
    assert pstest.value("sin(90)") == pytest.approx(1.0)
    assert pstest.value("cos(180)") == pytest.approx(-1.0)
    assert pstest.value("tan(45)") == pytest.approx(1.0)
    assert pstest.evaluate("sin(0)").kind is patternscript.FLOAT


def test_sqrt():
    assert pstest.value("sqrt(16)") == 4.0
    assert math.isnan(pstest.value("sqrt(-1)"))


def test_element_accessors():
    assert pstest.value("x((3, 4))") == 3
    assert pstest.value("y(3, 4)") == 4
    assert pstest.value("x(pos)", pos=(1.5, 2.5)) == 1.5
    with pytest.raises(patternscript.VectorTypeError):
        pstest.evaluate('y((1, "a"))')
    with pytest.raises(patternscript.FunctionArgumentError):
        pstest.evaluate("x(1)")


def test_function_errors():
    with pytest.raises(patternscript.UnknownFunction) as info:
        pstest.evaluate("spin(1)")
    assert info.value.name == "spin"
    with pytest.raises(patternscript.FunctionArgumentError):
        pstest.evaluate('sin("a")')
    with pytest.raises(patternscript.FunctionArgumentError):
        pstest.evaluate("cos()")


def test_vector_literal_kind_from_first_element():
    result = pstest.evaluate("(1, 2.5, 3)")
    assert result.kind is patternscript.INTVEC
    assert result.data == (1, 3)
    result = pstest.evaluate("(1.5, 2)")
    assert result.kind is patternscript.FLOATVEC
    assert result.data == (1.5,)
    assert pstest.evaluate('("a", "b")').kind is patternscript.STRVEC
    with pytest.raises(patternscript.VectorTypeError):
        pstest.evaluate("(true, false)")


@pytest.mark.parametrize(
    "left, op, right, kind",
    [
        ("(1, 2)", "+", "(3, 4)", patternscript.INTVEC),
        ("(1, 2)", "-", "(3, 4)", patternscript.INTVEC),
        ("(1, 2)", "*", "(3, 4)", patternscript.FLOATVEC),
        ("(1, 2)", "/", "(3, 4)", patternscript.FLOATVEC),
        ("(1, 2)", "+", "(3.0, 4.0)", patternscript.FLOATVEC),
        ("(1.0, 2.0)", "-", "(3, 4)", patternscript.FLOATVEC),
        ("(1.0, 2.0)", "*", "(3.0, 4.0)", patternscript.FLOATVEC),
        ("(1.0, 2.0)", "/", "(3, 4)", patternscript.FLOATVEC),
    ],
)
def test_vector_promotion(left, op, right, kind):
    """IntVector only survives add and sub between two IntVectors"""
    result = pstest.evaluate(f"{left} {op} {right}")
    assert result.kind is kind


def test_vector_arithmetic_values():
    assert pstest.value("(1, 2) + (3, 4)") == (4, 6)
    assert pstest.value("(4, 6) / (2, 3)") == (2.0, 2.0)
    assert pstest.value("(1.0, 2.0) - (3, 5)") == (-2.0, -3.0)
    assert pstest.value("(3, 5) - (1.0, 2.0)") == (2.0, 3.0)
    # Shorter operand decides the length
    assert pstest.value("(1, 2, 3) + (1, 1)") == (2, 3)


def test_vector_operator_errors():
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate("(1, 2) + 1")
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate("(1, 2) ^ (1, 2)")
    with pytest.raises(patternscript.OperatorTypeError):
        pstest.evaluate('("a", "b") + ("c", "d")')
    with pytest.raises(patternscript.DivisionByZero):
        pstest.evaluate("(1, 2) / (1, 0)")


def test_variables():
    assert pstest.value("speed * 2", speed=3) == 6
    with pytest.raises(patternscript.UndefinedVariable) as info:
        pstest.evaluate("angle + 1")
    assert info.value.name == "angle"


def test_evaluation_is_idempotent():
    expr = patternscript.parse_expr("(i * 30, sin(i * 30) + 0.5)")
    scope = pstest.scope(i=2)
    assert expr.evaluate(scope) == expr.evaluate(scope)


def test_structural_nodes_have_no_value():
    scope = pstest.scope()
    with pytest.raises(patternscript.NotComputable):
        ast.Duration(ast.Int(3), "frames").evaluate(scope)
    with pytest.raises(patternscript.NotComputable):
        ast.Range(0, 3).evaluate(scope)
    with pytest.raises(patternscript.NotComputable):
        ast.BlockExpr(ast.Block()).evaluate(scope)


def test_check_condition():
    scope = pstest.scope(i=2)
    when = ast.Condition("when", patternscript.parse_expr("i > 1"))
    unless = ast.Condition("unless", patternscript.parse_expr("i > 1"))
    assert patternscript.check_condition(None, scope) is True
    assert patternscript.check_condition(when, scope) is True
    assert patternscript.check_condition(unless, scope) is False
    with pytest.raises(patternscript.CondNotBooleanError):
        patternscript.check_condition(ast.Condition("when", ast.Int(1)), scope)


def test_duration_frames():
    scope = pstest.scope(n=3)
    frames = ast.Duration(ast.Int(30), "frames")
    seconds = ast.Duration(ast.Int(2), "seconds")
    half = ast.Duration(ast.Float(0.5), "seconds")
    assert patternscript.duration_frames(frames, scope, 120) == 30
    assert patternscript.duration_frames(frames, scope, 60) == 30
    assert patternscript.duration_frames(seconds, scope, 120) == 240
    assert patternscript.duration_frames(half, scope, 45) == 22
    computed = ast.Duration(patternscript.parse_expr("n * 10"), "frames")
    assert patternscript.duration_frames(computed, scope, 120) == 30


def test_duration_errors():
    scope = pstest.scope()
    with pytest.raises(patternscript.DurationError):
        patternscript.duration_frames(ast.Duration(ast.Float(1.5), "frames"), scope, 120)
    with pytest.raises(patternscript.DurationError):
        patternscript.duration_frames(ast.Duration(ast.Negate(ast.Int(1)), "frames"), scope, 120)
    with pytest.raises(patternscript.DurationError):
        patternscript.duration_frames(ast.Duration(ast.String("1"), "seconds"), scope, 120)


def test_overflow_becomes_float_infinity():
    assert pstest.value("10.0 ^ 400") == math.inf
    assert pstest.value("(10 ^ 400, 1) * (1.5, 1.5)")[0] == math.inf


def test_builtin_out_of_range_argument_is_nan():
    assert math.isnan(pstest.value("sin(10 ^ 400)"))
    assert math.isnan(pstest.value("cos(10.0 ^ 400)"))
