"""The simulation stepper."""

__all__ = ["World"]

import math

from loguru import logger

from . import _error, ast
from ._action import ActionResult
from ._compile import compile_behavior
from ._entity import DEFAULT_FPS, Entity, ExecutionEnvironment
from ._registry import Registry
from ._scope import Scope


class World:
    """Live entities and the timelines driving them.

    The entity pool and the timeline pool are parallel lists, entry `i` of
    one always belongs to entry `i` of the other. Spawns and deletions that
    happen during a step are buffered and applied once the step is over.

    Args:
        source: (ast.Head | Registry) Definitions to simulate
        fps: (int) Frames per second
        globals: (dict | None) Name to Python value or expression node
    """

    def __init__(self, source, fps=DEFAULT_FPS, globals=None):
        if isinstance(source, Registry):
            self.registry = source
        else:
            self.registry = Registry.from_head(source)
        if not isinstance(fps, int) or fps <= 0:
            raise ValueError(f"fps must be a positive int, got {fps!r}")
        self.fps = fps
        self.globals = Scope({name: ast.literal(value) for name, value in (globals or {}).items()})
        self.tick = 0
        self._entities = []
        self._timelines = []
        self._pending = []

    @classmethod
    def from_source(cls, text, fps=DEFAULT_FPS, globals=None):
        """Parse source text and build a world from it."""
        from ._parse import parse

        return cls(parse(text), fps=fps, globals=globals)

    @property
    def entities(self):
        """Live execution environments in pool order."""
        return tuple(self._entities)

    def __len__(self):
        return len(self._entities)

    def snapshot(self):
        """Read-only state of every live entity, in pool order."""
        return [env.state() for env in self._entities]

    def spawn_direct(self, entity):
        """Add a host-built entity to the world immediately.

        The behavior compiles against the world globals with the entity
        scope layered over them.

        Returns:
            (ExecutionEnvironment) Environment running the entity
        Raises:
            CompileError: The entity behavior failed to compile
            EvalError: An expression the compile depends on failed
        """
        return self._add(entity, Scope.chain(self.globals, entity.scope))

    def spawn(self, **fields):
        """Build an entity from Python values and add it immediately."""
        exprs = {name: _field_expr(value) for name, value in fields.items()}
        entity = Entity.from_values(exprs, self.registry, self.globals, fps=self.fps)
        return self._add(entity, entity.scope)

    def spawn_named(self, name, **overrides):
        """Spawn a bullet prefab by name, overriding some of its fields."""
        if name not in self.registry.bullets:
            raise KeyError(f"Unknown bullet {name!r}")
        return self.spawn(type=ast.String(name), **overrides)

    def _add(self, entity, scope):
        env = ExecutionEnvironment(entity)
        timeline = compile_behavior(entity.behavior, scope, self.registry, self.fps)
        self._entities.append(env)
        self._timelines.append(timeline)
        logger.debug("spawned entity {} with {} actions", len(self._entities) - 1, len(timeline))
        return env

    def step(self):
        """Advance the simulation by one frame."""
        entities = self._entities
        timelines = self._timelines
        for env in entities:
            self._move(env)

        removed = []
        for index, env in enumerate(entities):
            if env.expired:
                removed.append(index)
                continue
            if self._dispatch(env, timelines, index):
                removed.append(index)
                continue
            env.elapsed += 1

        for index in reversed(removed):
            last = len(entities) - 1
            entities[index] = entities[last]
            timelines[index] = timelines[last]
            entities.pop()
            timelines.pop()
        if removed:
            logger.debug("tick {} removed {} entities", self.tick, len(removed))

        for env, timeline in self._pending:
            entities.append(env)
            timelines.append(timeline)
        if self._pending:
            logger.debug("tick {} admitted {} entities", self.tick, len(self._pending))
        self._pending = []
        self.tick += 1

    def run(self, frames):
        """Step a number of frames."""
        for _ in range(frames):
            self.step()

    def _move(self, env):
        entity = env.entity
        if entity.position_fn is not None:
            entity.position = entity.position_fn.sample(env.elapsed)
            return
        if entity.speed is not None:
            angle = math.radians(entity.rotation)
            entity.velocity = (entity.speed * math.cos(angle), entity.speed * math.sin(angle))
        if entity.velocity_fn is not None:
            entity.velocity = entity.velocity_fn.sample(env.elapsed)
        x, y = entity.position
        dx, dy = entity.velocity
        entity.position = (x + dx / self.fps, y + dy / self.fps)

    def _dispatch(self, env, timelines, index):
        """Fire every due entry of one timeline, True when the entity dies."""
        timeline = timelines[index]
        due = [entry for entry in timeline if entry.due_frame <= env.elapsed]
        if not due:
            return False
        timelines[index] = [entry for entry in timeline if entry.due_frame > env.elapsed]
        delete = False
        for entry in due:
            result = entry.action.fire(env, self.registry, self.fps)
            match result.kind:
                case ActionResult.ADD:
                    for entity in result.entities:
                        self._pending.append(self._admit(entity))
                case ActionResult.DELETE:
                    delete = True
        return delete

    def _admit(self, entity):
        env = ExecutionEnvironment(entity)
        try:
            timeline = compile_behavior(entity.behavior, entity.scope, self.registry, self.fps)
        except (_error.CompileError, _error.EvalError) as e:
            logger.error("behavior {} failed to compile: {}", entity.behavior, e)
            timeline = []
        return env, timeline

    def __repr__(self):
        return f"World(tick={self.tick}, entities={len(self._entities)}, fps={self.fps})"


def _field_expr(value):
    """Expression for a host spawn field, inline patterns become blocks."""
    if isinstance(value, ast.Pattern):
        return ast.BlockExpr(value.block)
    return ast.literal(value)
