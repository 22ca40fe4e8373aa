"""Expression nodes."""

__all__ = [
    "Int",
    "Float",
    "String",
    "Bool",
    "Variable",
    "Negate",
    "Call",
    "BinaryOp",
    "Vector",
    "BlockExpr",
    "Duration",
    "Range",
    "literal",
]

from . import _base
from .. import _builtin, _error, _ops
from .._value import Value, INT, FLOAT, STRING, BOOL


BINARY_OPERATORS = ("+", "-", "*", "/", "^", ">", ">=", "<", "<=", "==", "and", "or")


class Int(_base.ExprNode):
    """Integer literal."""

    __slots__ = ("value",)

    def __init__(self, value: int):
        self.value = int(value)

    def evaluate(self, scope):
        return Value(INT, self.value)

    def unparse(self) -> str:
        return str(self.value)

    def __repr__(self):
        return f"Int({self.value})"


class Float(_base.ExprNode):
    """Float literal."""

    __slots__ = ("value",)

    def __init__(self, value: float):
        self.value = float(value)

    def evaluate(self, scope):
        return Value(FLOAT, self.value)

    def unparse(self) -> str:
        return repr(self.value)

    def __repr__(self):
        return f"Float({self.value})"


class String(_base.ExprNode):
    """String literal."""

    __slots__ = ("value",)

    def __init__(self, value: str):
        self.value = value

    def evaluate(self, scope):
        return Value(STRING, self.value)

    def unparse(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    def __repr__(self):
        return f"String({self.value!r})"


class Bool(_base.ExprNode):
    """Bool literal, `true` or `false`."""

    __slots__ = ("value",)

    def __init__(self, value: bool):
        self.value = bool(value)

    def evaluate(self, scope):
        return Value(BOOL, self.value)

    def unparse(self) -> str:
        return "true" if self.value else "false"

    def __repr__(self):
        return f"Bool({self.value})"


class Variable(_base.ExprNode):
    """Reference to a name bound in scope.

    The bound expression is evaluated on every lookup, in the scope where it
    was found.
    """

    __slots__ = ("name",)

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise TypeError(f"Variable name must be str, got {type(name)}")
        self.name = name

    def evaluate(self, scope):
        expr, inner = scope.resolve(self.name)
        return expr.evaluate(inner)

    def unparse(self) -> str:
        return self.name

    def __repr__(self):
        return f"Variable({self.name!r})"


class Negate(_base.ExprNode):
    """Unary minus."""

    __slots__ = ("operand",)

    def __init__(self, operand: _base.ExprNode):
        if not isinstance(operand, _base.ExprNode):
            raise TypeError(f"Negate operand must be ExprNode, got {type(operand)}")
        self.operand = operand

    def evaluate(self, scope):
        return _ops.negate(self.operand.evaluate(scope))

    def unparse(self) -> str:
        return f"-{self.operand.unparse()}"

    def __repr__(self):
        return f"Negate({self.operand})"


class Call(_base.ExprNode):
    """Named function call with a single argument, or none.

    Several arguments arrive as one Vector argument. When the name is a path
    rather than a builtin the call is only meaningful as a motion binding,
    which reads `name` and `args` directly.
    """

    __slots__ = ("name", "arg")

    def __init__(self, name: str, arg: _base.ExprNode | None = None):
        self.name = name
        self.arg = arg

    @property
    def args(self) -> tuple:
        """Call arguments as a tuple of expression nodes."""
        if self.arg is None:
            return ()
        if isinstance(self.arg, Vector):
            return self.arg.elements
        return (self.arg,)

    def evaluate(self, scope):
        if self.name not in _builtin.BUILTINS:
            raise _error.UnknownFunction(self.name)
        arg = self.arg.evaluate(scope) if self.arg is not None else None
        return _builtin.call_function(self.name, arg)

    def unparse(self) -> str:
        if self.arg is None:
            return f"{self.name}()"
        if isinstance(self.arg, Vector):
            return f"{self.name}{self.arg.unparse()}"
        return f"{self.name}({self.arg.unparse()})"

    def __repr__(self):
        return f"Call({self.name!r}, {self.arg})"


class BinaryOp(_base.ExprNode):
    """Binary operation: arithmetic, comparison or boolean.

    Both operands are always evaluated (no short circuit).
    """

    __slots__ = ("op", "left", "right")

    def __init__(self, op: str, left: _base.ExprNode, right: _base.ExprNode):
        if op not in BINARY_OPERATORS:
            raise ValueError(f"BinaryOp requires one of {BINARY_OPERATORS}, got {op!r}")
        if not isinstance(left, _base.ExprNode):
            raise TypeError(f"BinaryOp left must be ExprNode, got {type(left)}")
        if not isinstance(right, _base.ExprNode):
            raise TypeError(f"BinaryOp right must be ExprNode, got {type(right)}")
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, scope):
        left = self.left.evaluate(scope)
        right = self.right.evaluate(scope)
        return _ops.binary(self.op, left, right)

    def unparse(self) -> str:
        return f"({self.left.unparse()} {self.op} {self.right.unparse()})"

    def __repr__(self):
        return f"BinaryOp({self.left}, {self.op!r}, {self.right})"


class Vector(_base.ExprNode):
    """Vector literal like (1, 2).

    The first evaluated element fixes the vector kind. Elements of any other
    kind are dropped from the result.
    """

    __slots__ = ("elements",)

    def __init__(self, elements):
        self.elements = tuple(elements)

    def evaluate(self, scope):
        if not self.elements:
            raise _error.VectorTypeError("Vector literal has no elements")
        values = [element.evaluate(scope) for element in self.elements]
        kind = values[0].kind
        if kind not in (INT, FLOAT, STRING):
            raise _error.VectorTypeError(
                f"Vector elements must be Integer, Float or String, got {values[0].describe()}"
            )
        return Value.vector(kind, (v.data for v in values if v.kind is kind))

    def unparse(self) -> str:
        return "(" + ", ".join(e.unparse() for e in self.elements) + ")"

    def __repr__(self):
        return f"Vector({list(self.elements)})"


class BlockExpr(_base.ExprNode):
    """A nested block used as a definition value (`actions = { ... }`)."""

    __slots__ = ("block",)

    def __init__(self, block):
        self.block = block

    def evaluate(self, scope):
        raise _error.NotComputable("Block has no runtime value")

    def unparse(self) -> str:
        return self.block.unparse()

    def __repr__(self):
        return f"BlockExpr({self.block})"


class Duration(_base.ExprNode):
    """Amount of time, counted in frames or seconds."""

    __slots__ = ("amount", "unit")

    UNITS = ("frames", "seconds")

    def __init__(self, amount: _base.ExprNode, unit: str):
        if unit not in self.UNITS:
            raise ValueError(f"Duration unit must be one of {self.UNITS}, got {unit!r}")
        self.amount = amount
        self.unit = unit

    def evaluate(self, scope):
        raise _error.NotComputable(f"Duration {self.unparse()} has no runtime value")

    def unparse(self) -> str:
        return f"{self.amount.unparse()} {self.unit}"

    def __repr__(self):
        return f"Duration({self.amount}, {self.unit!r})"


class Range(_base.ExprNode):
    """Half-open integer range `start...end`."""

    __slots__ = ("start", "end")

    def __init__(self, start: int, end: int):
        self.start = int(start)
        self.end = int(end)

    def __iter__(self):
        return iter(range(self.start, self.end))

    def __len__(self):
        return max(0, self.end - self.start)

    def evaluate(self, scope):
        raise _error.NotComputable(f"Range {self.unparse()} has no runtime value")

    def unparse(self) -> str:
        return f"{self.start}...{self.end}"

    def __repr__(self):
        return f"Range({self.start}, {self.end})"


def literal(data) -> _base.ExprNode:
    """Create an expression node for a Python value.

    Expression nodes are passed through unchanged. Tuples and lists become
    vector literals.
    """
    if isinstance(data, _base.ExprNode):
        return data
    if isinstance(data, bool):
        return Bool(data)
    if isinstance(data, int):
        return Int(data)
    if isinstance(data, float):
        return Float(data)
    if isinstance(data, str):
        return String(data)
    if isinstance(data, (list, tuple)):
        return Vector(literal(d) for d in data)
    raise ValueError(f"Cannot convert Python {type(data)} to an expression")
