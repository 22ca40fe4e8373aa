"""Read-only lookup tables built from a parsed Head."""

__all__ = ["Registry"]

from types import MappingProxyType

from loguru import logger

from . import ast


class Registry:
    """Named paths, patterns and bullet prefabs.

    A registry is built once and never modified afterwards. It is shared by
    reference with every compiled timeline and handed to each action when it
    fires, so actions never hold on to it themselves.

    Args:
        paths: Mapping of name to ast.Path
        patterns: Mapping of name to ast.Pattern
        bullets: Mapping of name to ast.Bullet
    """

    __slots__ = ("paths", "patterns", "bullets")

    def __init__(self, paths=None, patterns=None, bullets=None):
        self.paths = MappingProxyType(dict(paths or {}))
        self.patterns = MappingProxyType(dict(patterns or {}))
        self.bullets = MappingProxyType(dict(bullets or {}))

    @classmethod
    def from_head(cls, head):
        """Sort top level definitions of a Head into a registry."""
        if not isinstance(head, ast.Head):
            raise TypeError(f"Registry needs a Head node, got {type(head)}")
        paths = {}
        patterns = {}
        bullets = {}
        for name, node in head.definitions.items():
            if isinstance(node, ast.Path):
                paths[name] = node
            elif isinstance(node, ast.Pattern):
                patterns[name] = node
            elif isinstance(node, ast.Bullet):
                bullets[name] = node
            else:
                raise TypeError(f"Unexpected top level definition {name!r}: {node!r}")
            logger.debug("registered {} {}", type(node).__name__.lower(), name)
        return cls(paths, patterns, bullets)

    def __repr__(self):
        return (
            f"Registry(paths={list(self.paths)}, patterns={list(self.patterns)}, "
            f"bullets={list(self.bullets)})"
        )
