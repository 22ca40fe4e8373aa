"""Statement and definition nodes."""

__all__ = [
    "Block",
    "Condition",
    "Wait",
    "For",
    "Spawn",
    "Assign",
    "Die",
    "Invoke",
    "Pattern",
    "Bullet",
    "Path",
    "Head",
]

from . import _base, _expr


def _unparse_fields(fields, indent="    "):
    return "".join(f"{indent}{name} = {expr.unparse()};\n" for name, expr in fields.items())


class Block(_base.StmtNode):
    """Local definitions followed by ordered statements.

    Args:
        definitions: Mapping of name to expression node
        statements: Sequence of statement nodes
    """

    __slots__ = ("definitions", "statements")

    def __init__(self, definitions=None, statements=()):
        self.definitions = dict(definitions or {})
        self.statements = tuple(statements)

    def unparse(self) -> str:
        body = _unparse_fields(self.definitions)
        for stmt in self.statements:
            lines = stmt.unparse().splitlines()
            body += "".join(f"    {line}\n" for line in lines)
        return "{\n" + body + "}"

    def __repr__(self):
        return f"Block({list(self.definitions)}, {list(self.statements)})"


class Condition(_base.StmtNode):
    """Guard attached to a for loop, `when (...)` or `unless (...)`."""

    __slots__ = ("kind", "expr")

    KINDS = ("when", "unless")

    def __init__(self, kind: str, expr: _base.ExprNode):
        if kind not in self.KINDS:
            raise ValueError(f"Condition kind must be one of {self.KINDS}, got {kind!r}")
        self.kind = kind
        self.expr = expr

    def unparse(self) -> str:
        return f"{self.kind} ({self.expr.unparse()})"

    def __repr__(self):
        return f"Condition({self.kind!r}, {self.expr})"


class Wait(_base.StmtNode):
    """Advance the pattern clock by a duration."""

    __slots__ = ("duration",)

    def __init__(self, duration: _expr.Duration):
        if not isinstance(duration, _expr.Duration):
            raise TypeError(f"Wait needs a Duration, got {type(duration)}")
        self.duration = duration

    def unparse(self) -> str:
        return f"wait {self.duration.unparse()};"

    def __repr__(self):
        return f"Wait({self.duration})"


class For(_base.StmtNode):
    """Loop over the Cartesian product of integer ranges.

    Args:
        bindings: Ordered (name, Range) pairs, first pair outermost
        condition: Optional Condition guarding each combination
        body: Block run for each surviving combination
    """

    __slots__ = ("bindings", "condition", "body")

    def __init__(self, bindings, condition=None, body=None):
        self.bindings = tuple((name, rng) for name, rng in bindings)
        self.condition = condition
        self.body = body if body is not None else Block()

    def unparse(self) -> str:
        binds = ", ".join(f"{name} = {rng.unparse()}" for name, rng in self.bindings)
        guard = f" {self.condition.unparse()}" if self.condition is not None else ""
        return f"for ({binds}){guard} {self.body.unparse()}"

    def __repr__(self):
        return f"For({list(self.bindings)}, {self.condition}, {self.body})"


class Spawn(_base.StmtNode):
    """Create an entity from field expressions."""

    __slots__ = ("fields",)

    def __init__(self, fields=None):
        self.fields = dict(fields or {})

    def unparse(self) -> str:
        return "spawn {\n" + _unparse_fields(self.fields) + "}"

    def __repr__(self):
        return f"Spawn({self.fields})"


class Assign(_base.StmtNode):
    """Set a field on the entity running the pattern (`set speed = 40;`)."""

    __slots__ = ("name", "expr")

    def __init__(self, name: str, expr: _base.ExprNode):
        self.name = name
        self.expr = expr

    def unparse(self) -> str:
        return f"set {self.name} = {self.expr.unparse()};"

    def __repr__(self):
        return f"Assign({self.name!r}, {self.expr})"


class Die(_base.StmtNode):
    """Remove the entity running the pattern."""

    __slots__ = ()

    def unparse(self) -> str:
        return "die;"

    def __repr__(self):
        return "Die()"


class Invoke(_base.StmtNode):
    """Inline a named pattern at this point (`run burst;`)."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def unparse(self) -> str:
        return f"run {self.name};"

    def __repr__(self):
        return f"Invoke({self.name!r})"


class Pattern(_base.StmtNode):
    """Behavior script, named at top level or inline inside a block."""

    __slots__ = ("block",)

    def __init__(self, block: Block):
        self.block = block

    def unparse(self) -> str:
        return f"pattern {self.block.unparse()}"

    def __repr__(self):
        return f"Pattern({self.block})"


class Bullet(_base.StmtNode):
    """Prefab of default spawn fields."""

    __slots__ = ("fields",)

    def __init__(self, fields=None):
        self.fields = dict(fields or {})

    def unparse(self) -> str:
        return "{\n" + _unparse_fields(self.fields) + "}"

    def __repr__(self):
        return f"Bullet({self.fields})"


class Path(_base.StmtNode):
    """Parametric motion function of its arguments and time `t`.

    Args:
        arguments: Ordered formal argument names
        fields: Mapping with at least `x` and `y` expressions
    """

    __slots__ = ("arguments", "fields")

    def __init__(self, arguments=(), fields=None):
        self.arguments = tuple(arguments)
        self.fields = dict(fields or {})

    def unparse(self) -> str:
        return "(" + ", ".join(self.arguments) + ") = {\n" + _unparse_fields(self.fields) + "}"

    def __repr__(self):
        return f"Path({list(self.arguments)}, {self.fields})"


class Head(_base.StmtNode):
    """Root of a parsed source, mapping top level names to definitions."""

    __slots__ = ("definitions",)

    _keywords = {Pattern: "pattern", Bullet: "bullet", Path: "path"}

    def __init__(self, definitions=None):
        self.definitions = dict(definitions or {})

    def unparse(self) -> str:
        parts = []
        for name, node in self.definitions.items():
            keyword = self._keywords[type(node)]
            if isinstance(node, Pattern):
                parts.append(f"pattern {name} = {node.block.unparse()}")
            elif isinstance(node, Path):
                parts.append(f"path {name} {node.unparse()}")
            else:
                parts.append(f"{keyword} {name} = {node.unparse()}")
        return "\n\n".join(parts) + "\n"

    def __repr__(self):
        return f"Head({list(self.definitions)})"
