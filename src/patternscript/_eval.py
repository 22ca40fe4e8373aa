"""Expression evaluation entry points."""

__all__ = ["evaluate", "check_condition", "duration_frames"]

import math

from . import _error
from ._value import BOOL, FLOAT, INT, NUMERIC


def evaluate(expr, scope):
    """Evaluate an expression node against a scope.

    Evaluation is pure: the same expression and bindings always produce the
    same value.

    Args:
        expr: (ExprNode) Expression to evaluate
        scope: (Scope) Variable bindings
    Returns:
        (Value) Result of evaluation
    Raises:
        EvalError: Evaluation failed
    """
    return expr.evaluate(scope)


def check_condition(condition, scope):
    """Decide whether a guard passes.

    A missing condition always passes. `when` passes when the expression is
    true and `unless` when it is false.

    Args:
        condition: (Condition | None) Guard to check
        scope: (Scope) Variable bindings
    Returns:
        (bool) Whether the guard passes
    Raises:
        CondNotBooleanError: Guard expression did not produce a Bool
    """
    if condition is None:
        return True
    value = condition.expr.evaluate(scope)
    if value.kind is not BOOL:
        raise _error.CondNotBooleanError(value)
    if condition.kind == "unless":
        return not value.data
    return value.data


def duration_frames(duration, scope, fps):
    """Count the frames in a Duration node.

    Frames must be a non-negative Integer. Seconds may be an Integer or a
    Float and are converted with `floor(seconds * fps)`.

    Args:
        duration: (ast.Duration) Duration to measure
        scope: (Scope) Variable bindings for the amount
        fps: (int) Frames per second
    Returns:
        (int) Frame count
    Raises:
        DurationError: Amount has the wrong kind or is negative
        EvalError: Amount failed to evaluate
    """
    amount = duration.amount.evaluate(scope)
    if duration.unit == "frames":
        if amount.kind is not INT or amount.data < 0:
            raise _error.DurationError(
                f"frames must be a non-negative Integer, got {amount.describe()}"
            )
        return amount.data
    if amount.kind not in NUMERIC or amount.data < 0:
        raise _error.DurationError(
            f"seconds must be a non-negative number, got {amount.describe()}"
        )
    frames = amount.data * fps
    if amount.kind is FLOAT and not math.isfinite(frames):
        raise _error.DurationError(f"seconds are not finite, got {amount.describe()}")
    return math.floor(frames)
