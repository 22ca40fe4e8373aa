"""Error classes and helpers"""

__all__ = [
    "PatternscriptError",
    "EvalError",
    "UndefinedVariable",
    "OperatorTypeError",
    "UnknownFunction",
    "FunctionArgumentError",
    "NegateTypeError",
    "VectorTypeError",
    "CondNotBooleanError",
    "DivisionByZero",
    "NotComputable",
    "CompileError",
    "DurationError",
    "NonAdvancingLoopError",
    "ParseError",
]


class PatternscriptError(Exception):
    """Base for every error raised by the package."""


class EvalError(PatternscriptError):
    """Error evaluating an expression into a value."""


class UndefinedVariable(EvalError):
    """Variable lookup found no binding in any scope layer."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Variable not defined: {name}")


class OperatorTypeError(EvalError):
    """Operator is not defined for the given operand kinds.

    Args:
        op: (str) Operator symbol
        left: (Value) Left operand
        right: (Value) Right operand
    """

    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(
            f"Operator {op!r} not defined for {left.describe()} and {right.describe()}"
        )


class UnknownFunction(EvalError):
    """Function call names no builtin."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Unknown function: {name}()")


class FunctionArgumentError(EvalError):
    """Builtin function received an argument of the wrong kind."""

    def __init__(self, name, arg):
        self.name = name
        self.arg = arg
        described = arg.describe() if arg is not None else "no argument"
        super().__init__(f"Function {name}() not defined for {described}")


class NegateTypeError(EvalError):
    """Negation of a non-numeric value."""

    def __init__(self, operand):
        self.operand = operand
        super().__init__(f"Cannot negate {operand.describe()}")


class VectorTypeError(EvalError):
    """Vector built from, or indexed with, unsupported elements."""


class CondNotBooleanError(EvalError):
    """Guard condition did not evaluate to a Bool."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Condition must be Bool, got {value.describe()}")


class DivisionByZero(EvalError):
    """Division with a zero divisor."""


class NotComputable(EvalError):
    """Node is structural (block, duration, range) and has no value."""


class CompileError(PatternscriptError):
    """Error flattening a pattern into a timeline."""


class DurationError(CompileError):
    """Wait or length amount is malformed."""


class NonAdvancingLoopError(CompileError):
    """Replayed pattern body never moves the compile clock forward."""


class ParseError(PatternscriptError):
    """Exception raised for parsing errors.

    Args:
        message: (str) Error description
        position: (tuple | None) Optional (line, column) where error occurred

    Attributes:
        message: (str) Error description
        position: (tuple | None) Line and column where error occurred
    """

    def __init__(self, message, position=None):
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} (line {position[0]}, column {position[1]})"
        super().__init__(message)
