"""Base classes for AST node hierarchies.

The hierarchy is split by role:
- ExprNode: Nodes that can be evaluated into a Value
- StmtNode: Control flow and definitions flattened by the compiler
"""

__all__ = ["AstNode", "ExprNode", "StmtNode"]


class AstNode:
    """Base class for all AST nodes.

    Nodes are immutable after construction and shared by reference between
    scopes, registries and compiled timelines. Nothing in the runtime ever
    modifies a node.

    This is a base class that should not be instantiated directly.
    """

    __slots__ = ()

    def unparse(self) -> str:
        """Convert this node back to source code.

        Used for debugging and error messages.

        Returns:
            Source code string
        """
        raise NotImplementedError(f"{self.__class__.__name__}.unparse() not implemented")

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"{self.__class__.__name__} is immutable")
        object.__setattr__(self, name, value)


class ExprNode(AstNode):
    """Base class for nodes that evaluate to runtime Values."""

    __slots__ = ()

    def evaluate(self, scope):
        """Evaluate this node to produce a Value.

        Args:
            scope: (Scope) Variable bindings visible to the expression

        Returns:
            (Value) Result of evaluation

        Raises:
            EvalError: Evaluation failed
        """
        raise NotImplementedError(f"{self.__class__.__name__}.evaluate() not implemented")


class StmtNode(AstNode):
    """Base class for statements and definitions."""

    __slots__ = ()
