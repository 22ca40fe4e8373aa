"""Perform builtin operations on Values.

These raise EvalError subclasses. There is a function here for each
family of operator node, dispatched through `binary`.
"""

__all__ = [
    "binary",
    "math_binary",
    "vector_binary",
    "compare",
    "logic_binary",
    "negate",
    "OPERATORS",
]

import operator

from . import _error
from ._value import Value, INT, FLOAT, STRING, BOOL, NUMERIC, NUMERIC_VECTORS, INTVEC


def _int_div(left, right):
    # Integer division truncates toward zero
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


_math = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "^": operator.pow,
}

_compare = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_logic = {
    "and": lambda l, r: l and r,
    "or": lambda l, r: l or r,
    "==": operator.eq,
}

# Vector elementwise operators, ^ has no vector form
_vector = ("+", "-", "*", "/")


def math_binary(op, left, right):
    """Numeric and string arithmetic.

    Integer with Integer stays Integer, Float with Float stays Float and any
    mix is promoted to Float at the operator. String + String concatenates.

    Args:
        op: (str) One of + - * / ^
        left: (Value) Left operand
        right: (Value) Right operand
    Returns:
        (Value) Result of the operation
    Raises:
        OperatorTypeError: Operand kinds unsupported by the operator
        DivisionByZero: Zero divisor
    """
    if left.kind is STRING and right.kind is STRING and op == "+":
        return Value.string(left.data + right.data)
    if left.kind not in NUMERIC or right.kind not in NUMERIC:
        raise _error.OperatorTypeError(op, left, right)

    if op == "/" and right.data == 0:
        raise _error.DivisionByZero(f"Division by zero: {left.describe()} / {right.describe()}")

    # A negative integer exponent falls through to the Float path
    if left.kind is INT and right.kind is INT and not (op == "^" and right.data < 0):
        if op == "/":
            return Value.integer(_int_div(left.data, right.data))
        return Value.integer(_math[op](left.data, right.data))

    try:
        result = _math[op](float(left.data), float(right.data))
    except OverflowError:
        result = float("inf")
    except ZeroDivisionError as e:
        raise _error.DivisionByZero(f"{left.describe()} {op} {right.describe()}: {e}") from e
    if isinstance(result, complex):
        # Fractional power of a negative base has no real result
        result = float("nan")
    return Value.float(result)


def vector_binary(op, left, right):
    """Elementwise arithmetic on two numeric vectors.

    IntVector with IntVector stays IntVector for + and -, but * and /
    produce a FloatVector. Any Float operand produces a FloatVector. The
    shorter operand decides the result length.
    """
    if op not in _vector or left.kind not in NUMERIC_VECTORS or right.kind not in NUMERIC_VECTORS:
        raise _error.OperatorTypeError(op, left, right)

    pairs = zip(left.data, right.data)
    if left.kind is INTVEC and right.kind is INTVEC and op in ("+", "-"):
        return Value.vector(INT, (_math[op](l, r) for l, r in pairs))

    items = []
    for l, r in pairs:
        if op == "/" and r == 0:
            raise _error.DivisionByZero(f"Division by zero: {left.describe()} / {right.describe()}")
        try:
            items.append(_math[op](float(l), float(r)))
        except OverflowError:
            items.append(float("inf"))
    return Value.vector(FLOAT, items)


def compare(op, left, right):
    """Ordering comparison of two numbers, mixed pairs compare as Float."""
    if left.kind not in NUMERIC or right.kind not in NUMERIC:
        raise _error.OperatorTypeError(op, left, right)
    return Value.boolean(_compare[op](left.data, right.data))


def logic_binary(op, left, right):
    """Boolean and/or/equality, both operands must be Bool."""
    if left.kind is not BOOL or right.kind is not BOOL:
        raise _error.OperatorTypeError(op, left, right)
    return Value.boolean(_logic[op](left.data, right.data))


def negate(operand):
    """Unary minus for Integer and Float."""
    if operand.kind is INT:
        return Value.integer(-operand.data)
    if operand.kind is FLOAT:
        return Value.float(-operand.data)
    raise _error.NegateTypeError(operand)


OPERATORS = {
    **{op: math_binary for op in _math},
    **{op: compare for op in _compare},
    **{op: logic_binary for op in _logic},
}


def binary(op, left, right):
    """Apply any binary operator to two values.

    Vector operands are routed to the elementwise table, everything else goes
    through the operator table.
    """
    handler = OPERATORS.get(op)
    if handler is None:
        raise ValueError(f"Unknown binary operator: {op}")
    if left.is_vector or right.is_vector:
        return vector_binary(op, left, right)
    return handler(op, left, right)
