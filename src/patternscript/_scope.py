"""Layered scopes for expression lookup."""

__all__ = ["Scope"]

from . import _error


class Scope:
    """A persistent stack of name -> expression layers.

    Layers are searched innermost-out so later layers shadow earlier ones.
    Pushing a layer creates a new Scope sharing every existing layer, nothing
    is copied. The usual stacking is globals, spawn instance arguments, loop
    bindings and then block definitions.

    While a name is being resolved, references to that same name only see the
    layers below the one that defined it. That makes `x = x + 1;` read the
    outer `x` and keeps definition cycles from recursing forever.

    Args:
        *layers: Mappings of name to expression node, outermost first
    """

    __slots__ = ("layers", "_pending")

    def __init__(self, *layers, _pending=None):
        self.layers = tuple(layer for layer in layers if layer)
        self._pending = _pending or {}

    @classmethod
    def chain(cls, *scopes) -> "Scope":
        """Join the layers of several scopes, first scope outermost."""
        layers = []
        for scope in scopes:
            if scope is not None:
                layers.extend(scope.layers)
        return cls(*layers)

    def push(self, layer) -> "Scope":
        """Return a new scope with an innermost layer added."""
        if not layer:
            return self
        return Scope(*self.layers, layer, _pending=self._pending)

    def resolve(self, name: str):
        """Find the expression bound to name.

        Returns:
            (tuple) Expression node and the scope it must be evaluated in
        Raises:
            UndefinedVariable: No layer binds the name
        """
        top = self._pending.get(name, len(self.layers))
        for index in range(top - 1, -1, -1):
            layer = self.layers[index]
            if name in layer:
                pending = dict(self._pending)
                pending[name] = index
                inner = Scope.__new__(Scope)
                inner.layers = self.layers
                inner._pending = pending
                return layer[name], inner
        raise _error.UndefinedVariable(name)

    def __repr__(self):
        return f"Scope({len(self.layers)} layers)"
