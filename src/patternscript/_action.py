"""Timeline entries and the actions they fire."""

__all__ = [
    "TimelineEntry",
    "ActionResult",
    "Action",
    "SpawnAction",
    "MutateAction",
    "DeleteAction",
]

from dataclasses import dataclass

from loguru import logger

from . import _error
from ._entity import Entity


class ActionResult:
    """What a fired action asks the world to do.

    Results are `ADD` with the entities to admit, `DELETE` for the entity
    that fired the action, or `MUTATE` when the entity was changed in place.
    """

    __slots__ = ("kind", "entities")

    ADD = "add"
    DELETE = "delete"
    MUTATE = "mutate"

    def __init__(self, kind, entities=()):
        self.kind = kind
        self.entities = tuple(entities)

    @classmethod
    def add(cls, *entities):
        return cls(cls.ADD, entities)

    def __repr__(self):
        if self.kind == self.ADD:
            return f"ActionResult({self.kind!r}, {len(self.entities)} entities)"
        return f"ActionResult({self.kind!r})"


class Action:
    """Base for timeline actions.

    Actions keep the scope they were compiled in but never the registry,
    that is handed to `fire` by the world.
    """

    __slots__ = ()

    def fire(self, env, registry, fps):
        """Run the action for an environment.

        Args:
            env: (ExecutionEnvironment) Entity running the timeline
            registry: (Registry) Paths, patterns and prefabs
            fps: (int) Frames per second
        Returns:
            (ActionResult) Request for the world
        """
        raise NotImplementedError(f"{type(self).__name__}.fire")


class SpawnAction(Action):
    """Create one entity from spawn fields."""

    __slots__ = ("fields", "scope")

    def __init__(self, fields, scope):
        self.fields = dict(fields)
        self.scope = scope

    def fire(self, env, registry, fps):
        entity = Entity.from_values(
            self.fields, registry, instance_scope=env.scope(self.scope), fps=fps
        )
        logger.debug("spawn at {} from {}", entity.position, env.entity.position)
        return ActionResult.add(entity)

    def __repr__(self):
        return f"SpawnAction({list(self.fields)})"


class MutateAction(Action):
    """Write one field of the running entity (`set name = expr;`)."""

    __slots__ = ("name", "expr", "scope")

    def __init__(self, name, expr, scope):
        self.name = name
        self.expr = expr
        self.scope = scope

    def fire(self, env, registry, fps):
        try:
            env.assign(self.name, self.expr, env.scope(self.scope), fps)
        except (_error.EvalError, _error.DurationError, TypeError, ValueError) as e:
            logger.warning("set {} = {} skipped: {}", self.name, self.expr.unparse(), e)
        return ActionResult(ActionResult.MUTATE)

    def __repr__(self):
        return f"MutateAction({self.name!r}, {self.expr})"


class DeleteAction(Action):
    """Remove the running entity."""

    __slots__ = ()

    def fire(self, env, registry, fps):
        return ActionResult(ActionResult.DELETE)

    def __repr__(self):
        return "DeleteAction()"


@dataclass(frozen=True)
class TimelineEntry:
    """An action due at a frame of its entity's elapsed time."""

    due_frame: int
    action: Action
