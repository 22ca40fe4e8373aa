"""Compile patterns into timelines of frame-stamped actions.

A pattern is walked once, symbolically. Waits move a single shared clock
forward and every spawn, set or die captures the clock as the frame it is
due on. Loops and replays are unrolled, so the timeline holds one entry per
action that will ever fire.
"""

__all__ = ["Clock", "compile_pattern", "compile_behavior"]

import itertools

from loguru import logger

from . import _error, _eval, ast
from ._action import DeleteAction, MutateAction, SpawnAction, TimelineEntry
from ._entity import DEFAULT_FPS
from ._scope import Scope
from ._value import INT


ITERATION_TYPES = ("time", "cycles")

# Definitions that configure a pattern rather than bind a variable
_CONTROL_NAMES = ("iteration_type", "length", "actions")


class Clock:
    """Frame counter shared by every statement of one compile."""

    __slots__ = ("frame",)

    def __init__(self, frame=0):
        self.frame = frame

    def advance(self, frames):
        self.frame += frames

    def __repr__(self):
        return f"Clock({self.frame})"


def compile_pattern(pattern, scope, registry, fps=DEFAULT_FPS):
    """Compile a pattern into its timeline.

    Compiling is pure. The registry is only read and any error stops the
    whole compile, there is never a partial timeline.

    Args:
        pattern: (ast.Pattern) Pattern to compile
        scope: (Scope) Bindings of the entity running the pattern
        registry: (Registry) Paths, patterns and prefabs
        fps: (int) Frames per second, for durations in seconds
    Returns:
        (list[TimelineEntry]) Entries in traversal order
    Raises:
        CompileError: Invalid iteration, duration or pattern reference
        EvalError: An expression the compile depends on failed
    """
    compiler = _Compiler(registry, fps)
    compiler.pattern(pattern.block, scope if scope is not None else Scope())
    return compiler.timeline


def compile_behavior(behavior, scope, registry, fps=DEFAULT_FPS):
    """Compile an entity behavior, a pattern name or inline pattern.

    Returns:
        (list[TimelineEntry]) Timeline, empty when there is no behavior
    Raises:
        CompileError: The name is not a registered pattern, or see compile_pattern
    """
    if behavior is None:
        return []
    if isinstance(behavior, str):
        pattern = registry.patterns.get(behavior)
        if pattern is None:
            raise _error.CompileError(f"Unknown pattern {behavior!r}")
    else:
        pattern = behavior
    return compile_pattern(pattern, scope, registry, fps)


class _Compiler:
    def __init__(self, registry, fps):
        self.registry = registry
        self.fps = fps
        self.clock = Clock()
        self.timeline = []
        # Names of patterns being inlined by `run`, outermost first
        self.running = []

    def emit(self, action):
        self.timeline.append(TimelineEntry(self.clock.frame, action))

    def block(self, block, scope):
        scope = scope.push(block.definitions)
        for stmt in block.statements:
            self.statement(stmt, scope)

    def statement(self, stmt, scope):
        match stmt:
            case ast.Wait():
                self.clock.advance(_eval.duration_frames(stmt.duration, scope, self.fps))
            case ast.Spawn():
                self.emit(SpawnAction(stmt.fields, scope))
            case ast.Assign():
                self.emit(MutateAction(stmt.name, stmt.expr, scope))
            case ast.Die():
                self.emit(DeleteAction())
            case ast.For():
                self.loop(stmt, scope)
            case ast.Pattern():
                self.pattern(stmt.block, scope)
            case ast.Invoke():
                pattern = self.registry.patterns.get(stmt.name)
                if pattern is None:
                    raise _error.CompileError(f"run names unknown pattern {stmt.name!r}")
                if stmt.name in self.running:
                    chain = " -> ".join([*self.running, stmt.name])
                    raise _error.CompileError(f"recursive run of pattern {stmt.name!r}: {chain}")
                self.running.append(stmt.name)
                self.pattern(pattern.block, scope)
                self.running.pop()
            case ast.Block():
                self.block(stmt, scope)
            case _:
                raise _error.CompileError(f"Cannot compile statement {stmt!r}")

    def loop(self, stmt, scope):
        names = [name for name, _ in stmt.bindings]
        ranges = [rng for _, rng in stmt.bindings]
        for combo in itertools.product(*ranges):
            inner = scope.push({name: ast.Int(value) for name, value in zip(names, combo)})
            try:
                passed = _eval.check_condition(stmt.condition, inner)
            except _error.CondNotBooleanError as e:
                logger.debug("for {} skipped: {}", dict(zip(names, combo)), e)
                continue
            if passed:
                self.block(stmt.body, inner)

    def pattern(self, block, scope):
        definitions = block.definitions
        scope = scope.push({k: v for k, v in definitions.items() if k not in _CONTROL_NAMES})
        body = self._body(block)
        iteration = _control_name(definitions.get("iteration_type"))
        match iteration:
            case None:
                self.block(body, scope)
            case "time":
                self._replay_time(body, scope, definitions.get("length"))
            case "cycles":
                self._replay_cycles(body, scope, definitions.get("length"))
            case _:
                raise _error.CompileError(
                    f"Unknown iteration_type {iteration!r}, expected one of {ITERATION_TYPES}"
                )

    def _body(self, block):
        actions = block.definitions.get("actions")
        if actions is None:
            return ast.Block(statements=block.statements)
        if not isinstance(actions, ast.BlockExpr):
            raise _error.CompileError(f"actions must be a block, got {actions.unparse()}")
        return actions.block

    def _replay_time(self, body, scope, length):
        if length is None:
            raise _error.CompileError("iteration_type time needs a length")
        if isinstance(length, ast.Duration):
            frames = _eval.duration_frames(length, scope, self.fps)
        else:
            value = length.evaluate(scope)
            if value.kind is not INT or value.data < 0:
                raise _error.DurationError(
                    f"time length must be a non-negative Integer or duration, got {value.describe()}"
                )
            frames = value.data
        # The target is a frame of the whole timeline, not of this pattern
        while self.clock.frame < frames:
            start = self.clock.frame
            self.block(body, scope)
            if self.clock.frame == start:
                raise _error.NonAdvancingLoopError(
                    f"time pattern body does not advance the clock at frame {start}"
                )

    def _replay_cycles(self, body, scope, length):
        count = 1
        if length is not None:
            value = length.evaluate(scope)
            if value.kind is not INT or value.data < 0:
                raise _error.CompileError(
                    f"cycles length must be a non-negative Integer, got {value.describe()}"
                )
            count = value.data
        for _ in range(count):
            start = self.clock.frame
            self.block(body, scope)
            if count > 1 and self.clock.frame == start:
                raise _error.NonAdvancingLoopError(
                    f"cycles pattern body does not advance the clock, {count} cycles at frame {start}"
                )


def _control_name(expr):
    """Read `iteration_type = time;` or `iteration_type = "time";`."""
    if expr is None:
        return None
    if isinstance(expr, ast.Variable):
        return expr.name
    if isinstance(expr, ast.String):
        return expr.value
    raise _error.CompileError(f"iteration_type must be a name, got {expr.unparse()}")
