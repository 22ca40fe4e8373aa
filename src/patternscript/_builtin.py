"""Builtin functions callable from expressions.

Every builtin takes exactly one already evaluated argument. Trigonometry
works in degrees.
"""

__all__ = ["BUILTINS", "call_function"]

import math

from . import _error
from ._value import Value, NUMERIC


def _numeric(name, fn):
    def builtin(arg):
        if arg is None or arg.kind not in NUMERIC:
            raise _error.FunctionArgumentError(name, arg)
        try:
            result = fn(float(arg.data))
        except (OverflowError, ValueError):
            # Argument too large or infinite
            result = float("nan")
        return Value.float(result)
    builtin.__name__ = name
    return builtin


def _sqrt(value):
    if value < 0:
        return float("nan")
    return math.sqrt(value)


def _element(name, index):
    def builtin(arg):
        if arg is None or not arg.is_vector:
            raise _error.FunctionArgumentError(name, arg)
        if len(arg.data) <= index:
            raise _error.VectorTypeError(
                f"{name}() needs at least {index + 1} elements, got {arg.describe()}"
            )
        return Value(arg.kind.element, arg.data[index])
    builtin.__name__ = name
    return builtin


BUILTINS = {
    "sqrt": _numeric("sqrt", _sqrt),
    "sin": _numeric("sin", lambda deg: math.sin(math.radians(deg))),
    "cos": _numeric("cos", lambda deg: math.cos(math.radians(deg))),
    "tan": _numeric("tan", lambda deg: math.tan(math.radians(deg))),
    "x": _element("x", 0),
    "y": _element("y", 1),
}


def call_function(name, arg):
    """Call a builtin by name.

    Args:
        name: (str) Function name
        arg: (Value | None) Evaluated argument, None for an empty call
    Returns:
        (Value) Function result
    Raises:
        UnknownFunction: No builtin has this name
    """
    func = BUILTINS.get(name)
    if func is None:
        raise _error.UnknownFunction(name)
    return func(arg)
