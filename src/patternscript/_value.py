"""Runtime values produced by expression evaluation."""

__all__ = [
    "Kind",
    "Value",
    "INT",
    "FLOAT",
    "STRING",
    "BOOL",
    "INTVEC",
    "FLOATVEC",
    "STRVEC",
    "NUMERIC",
    "NUMERIC_VECTORS",
]


class Kind:
    """Variant tag for a runtime value (Integer, FloatVector, ...)."""

    __slots__ = ("name", "element")

    def __init__(self, name: str, element: "Kind | None" = None):
        self.name = name
        self.element = element

    @property
    def is_vector(self) -> bool:
        return self.element is not None

    def __repr__(self):
        return self.name


INT = Kind("Integer")
FLOAT = Kind("Float")
STRING = Kind("String")
BOOL = Kind("Bool")
INTVEC = Kind("IntVector", INT)
FLOATVEC = Kind("FloatVector", FLOAT)
STRVEC = Kind("StringVector", STRING)

NUMERIC = (INT, FLOAT)
NUMERIC_VECTORS = (INTVEC, FLOATVEC)

# Vector kind holding elements of a scalar kind
_vector_of = {INT: INTVEC, FLOAT: FLOATVEC, STRING: STRVEC}


class Value:
    """Patternscript runtime value.

    A value is one variant of the tagged union {Integer, Float, String, Bool,
    IntVector, FloatVector, StringVector}. The `kind` selects the variant and
    `data` holds the Python payload (int, float, str, bool or a tuple for
    vectors). Values are immutable and shared freely.

    Args:
        kind: (Kind) Variant of this value
        data: Python payload matching the kind
    """

    __slots__ = ("kind", "data")

    def __init__(self, kind: Kind, data):
        self.kind = kind
        self.data = data

    @classmethod
    def integer(cls, data: int) -> "Value":
        return cls(INT, int(data))

    @classmethod
    def float(cls, data: float) -> "Value":
        return cls(FLOAT, float(data))

    @classmethod
    def string(cls, data: str) -> "Value":
        return cls(STRING, data)

    @classmethod
    def boolean(cls, data: bool) -> "Value":
        return cls(BOOL, bool(data))

    @classmethod
    def vector(cls, element: Kind, items) -> "Value":
        """Create a vector value holding elements of the given scalar kind."""
        return cls(_vector_of[element], tuple(items))

    @property
    def is_vector(self) -> bool:
        return self.kind.is_vector

    def describe(self) -> str:
        """Operand description used by error messages."""
        if self.is_vector:
            return f"{self.kind.name}({', '.join(repr(d) for d in self.data)})"
        return f"{self.kind.name}({self.data!r})"

    def __repr__(self):
        return f"Value({self.describe()})"

    def __eq__(self, other):
        if not isinstance(other, Value):
            return False
        return self.kind is other.kind and self.data == other.data

    def __hash__(self):
        return hash((self.kind.name, self.data))
