"""Entities, their motion bindings and execution environments."""

__all__ = [
    "Entity",
    "Hitbox",
    "PathBinding",
    "ExecutionEnvironment",
    "EntityState",
    "DEFAULT_FPS",
    "DEFAULT_LIFETIME",
]

import math
from dataclasses import dataclass, field, replace

from loguru import logger

from . import _error, _eval, ast
from ._scope import Scope
from ._value import INT, FLOAT, STRING, NUMERIC, NUMERIC_VECTORS


DEFAULT_FPS = 120
DEFAULT_LIFETIME = 600
DEFAULT_COLOR = (255, 255, 255)
HITBOX_SHAPES = ("rectangle", "ellipse")


@dataclass(frozen=True)
class Hitbox:
    """Collision footprint, only carried for presentation."""

    size: tuple = (8, 8)
    offset: tuple = (0.0, 0.0)
    shape: str = "rectangle"


class PathBinding:
    """A path bound to call-site arguments for one entity.

    The formal arguments of the path are bound positionally to the argument
    expressions of the call. The expressions stay unevaluated, every sample
    evaluates `x` and `y` again with `t` set to the entity's elapsed frames.

    Args:
        name: (str) Path name
        path: (ast.Path) Path definition
        scope: (Scope) Entity scope the call was made in
        args: (tuple) Call argument expressions
    """

    __slots__ = ("name", "path", "scope")

    def __init__(self, name, path, scope, args=()):
        self.name = name
        self.path = path
        self.scope = scope.push(dict(zip(path.arguments, args)))

    def sample(self, elapsed):
        """Evaluate the path at a frame count.

        A component that fails to evaluate, or is not a number, reads as 0.0.

        Returns:
            (tuple) x and y as floats
        """
        scope = self.scope.push({"t": ast.Int(elapsed)})
        return (self._component("x", scope), self._component("y", scope))

    def _component(self, axis, scope):
        expr = self.path.fields.get(axis)
        if expr is None:
            return 0.0
        try:
            value = expr.evaluate(scope)
        except _error.EvalError as e:
            logger.warning("path {} {} failed: {}", self.name, axis, e)
            return 0.0
        try:
            return _as_float(value)
        except (TypeError, ValueError) as e:
            logger.warning("path {} {} is not a usable number: {}", self.name, axis, e)
            return 0.0

    def __repr__(self):
        return f"PathBinding({self.name!r})"


# Field coercions, each raises TypeError or ValueError for values it rejects


def _finite(number):
    """Float from a numeric payload, rejecting overflow, inf and nan."""
    try:
        result = float(number)
    except OverflowError as e:
        raise ValueError("number is too large for a Float") from e
    if not math.isfinite(result):
        raise ValueError(f"number is not finite: {result}")
    return result


def _as_float(value):
    if value.kind not in NUMERIC:
        raise TypeError(f"expected number, got {value.describe()}")
    return _finite(value.data)


def _as_vector2(value):
    if value.kind not in NUMERIC_VECTORS or len(value.data) < 2:
        raise TypeError(f"expected numeric vector of 2, got {value.describe()}")
    return (_finite(value.data[0]), _finite(value.data[1]))


def _as_color(value):
    if value.kind not in NUMERIC_VECTORS or len(value.data) < 3:
        raise TypeError(f"expected numeric vector of 3, got {value.describe()}")
    return tuple(int(min(255, max(0, c))) for c in value.data[:3])


def _as_size(value):
    if value.kind not in NUMERIC_VECTORS or len(value.data) < 2:
        raise TypeError(f"expected numeric vector of 2, got {value.describe()}")
    size = (int(_finite(value.data[0])), int(_finite(value.data[1])))
    if size[0] < 0 or size[1] < 0:
        raise ValueError(f"hitbox size cannot be negative, got {value.describe()}")
    return size


def _as_frames(value):
    if value.kind is INT:
        frames = value.data
    elif value.kind is FLOAT:
        frames = math.floor(_finite(value.data))
    else:
        raise TypeError(f"expected frame count, got {value.describe()}")
    if frames < 0:
        raise ValueError(f"lifetime cannot be negative, got {value.describe()}")
    return frames


def _name_of(expr, scope):
    """Name referenced by a field like `type = small;` or `type = "small";`."""
    if isinstance(expr, ast.Variable):
        return expr.name
    if isinstance(expr, ast.String):
        return expr.value
    value = expr.evaluate(scope)
    if value.kind is not STRING:
        raise TypeError(f"expected a name, got {value.describe()}")
    return value.data


def _evaluate_field(name, expr, scope, coerce, default):
    """Evaluate and coerce one field, falling back to the default on failure."""
    if expr is None:
        return default
    try:
        return coerce(expr.evaluate(scope))
    except (_error.EvalError, TypeError, ValueError) as e:
        logger.warning("field {} = {} defaulted to {}: {}", name, expr.unparse(), default, e)
        return default


@dataclass
class Entity:
    """Mutable simulation state of one spawned object.

    Attributes:
        position: (tuple) x, y in world units
        velocity: (tuple) x, y in world units per second
        rotation: (float) Heading in degrees
        speed: (float | None) Fixed speed along the rotation, if set
        lifetime: (int) Frames the entity lives
        color: (tuple) RGB components 0..255
        hitbox: (Hitbox) Presentation footprint
        behavior: (str | ast.Pattern | None) Pattern run by the entity
        position_fn: (PathBinding | None) Path setting absolute position
        velocity_fn: (PathBinding | None) Path setting velocity
        scope: (Scope) Instance scope the behavior compiles against
    """

    position: tuple = (0.0, 0.0)
    velocity: tuple = (0.0, 0.0)
    rotation: float = 0.0
    speed: float | None = None
    lifetime: int = DEFAULT_LIFETIME
    color: tuple = DEFAULT_COLOR
    hitbox: Hitbox = field(default_factory=Hitbox)
    behavior: object = None
    position_fn: PathBinding | None = None
    velocity_fn: PathBinding | None = None
    scope: Scope = field(default_factory=Scope)

    @classmethod
    def from_values(cls, fields, registry, global_scope=None, instance_scope=None, fps=DEFAULT_FPS):
        """Build an entity from spawn field expressions.

        Prefab fields named by `type` are merged first, then the spawn fields
        so they always win. Every field is evaluated against the globals, the
        instance scope and the merged fields. A field that fails to evaluate
        or has the wrong kind keeps its default, it never stops the spawn.

        Args:
            fields: Mapping of field name to expression node
            registry: (Registry) Paths, patterns and prefabs
            global_scope: (Scope | None) Global constants
            instance_scope: (Scope | None) Scope captured at the spawn site
            fps: (int) Frames per second, for durations
        Returns:
            (Entity) New entity
        """
        merged = {}
        type_expr = fields.get("type")
        if type_expr is not None:
            base = Scope.chain(global_scope, instance_scope)
            try:
                prefab_name = _name_of(type_expr, base)
            except (_error.EvalError, TypeError) as e:
                logger.warning("spawn type {} ignored: {}", type_expr.unparse(), e)
                prefab_name = None
            prefab = registry.bullets.get(prefab_name)
            if prefab is not None:
                merged.update(prefab.fields)
            elif prefab_name is not None:
                logger.warning("unknown bullet type {}", prefab_name)
        merged.update(fields)
        merged.pop("type", None)

        scope = Scope.chain(global_scope, instance_scope).push(merged)
        entity = cls(scope=scope)
        get = merged.get

        entity.position = _evaluate_field("position", get("position"), scope, _as_vector2, entity.position)
        entity.velocity = _evaluate_field("velocity", get("velocity"), scope, _as_vector2, entity.velocity)
        entity.rotation = _evaluate_field("rotation", get("rotation"), scope, _as_float, entity.rotation)
        entity.speed = _evaluate_field("speed", get("speed"), scope, _as_float, None)
        entity.color = _evaluate_field("color", get("color"), scope, _as_color, entity.color)
        entity.lifetime = entity._lifetime(get("lifetime"), scope, fps)

        hitbox = Hitbox()
        size = _evaluate_field("hitbox", get("hitbox"), scope, _as_size, hitbox.size)
        offset = _evaluate_field("hitbox_offset", get("hitbox_offset"), scope, _as_vector2, hitbox.offset)
        shape = hitbox.shape
        if get("hitbox_type") is not None:
            try:
                shape = _name_of(get("hitbox_type"), scope)
            except (_error.EvalError, TypeError) as e:
                logger.warning("hitbox_type defaulted to {}: {}", hitbox.shape, e)
            if shape not in HITBOX_SHAPES:
                logger.warning("unknown hitbox_type {}, using {}", shape, hitbox.shape)
                shape = hitbox.shape
        entity.hitbox = Hitbox(size, offset, shape)

        entity.behavior = _behavior(get("behavior", get("pattern")), scope)
        entity.position_fn = _bind_path("position_fn", get("position_fn"), registry, scope)
        entity.velocity_fn = _bind_path("velocity_fn", get("velocity_fn"), registry, scope)
        return entity

    def _lifetime(self, expr, scope, fps):
        if isinstance(expr, ast.Duration):
            try:
                return _eval.duration_frames(expr, scope, fps)
            except (_error.EvalError, _error.DurationError) as e:
                logger.warning("lifetime defaulted to {}: {}", self.lifetime, e)
                return self.lifetime
        return _evaluate_field("lifetime", expr, scope, _as_frames, self.lifetime)

    def copy(self):
        """Independent copy sharing the immutable scope and bindings."""
        return replace(self)


def _behavior(expr, scope):
    if expr is None:
        return None
    if isinstance(expr, ast.BlockExpr):
        return ast.Pattern(expr.block)
    try:
        return _name_of(expr, scope)
    except (_error.EvalError, TypeError) as e:
        logger.warning("behavior {} ignored: {}", expr.unparse(), e)
        return None


def _bind_path(field_name, expr, registry, scope):
    """Bind `name` or `name(args...)` to a registered path."""
    if expr is None:
        return None
    if isinstance(expr, ast.Call):
        name, args = expr.name, expr.args
    else:
        try:
            name, args = _name_of(expr, scope), ()
        except (_error.EvalError, TypeError) as e:
            logger.warning("{} {} ignored: {}", field_name, expr.unparse(), e)
            return None
    path = registry.paths.get(name)
    if path is None:
        logger.warning("{} names unknown path {}", field_name, name)
        return None
    if len(args) != len(path.arguments):
        logger.warning(
            "{} path {} takes {} arguments, got {}", field_name, name, len(path.arguments), len(args)
        )
    return PathBinding(name, path, scope, args)


@dataclass(frozen=True)
class EntityState:
    """Read-only view of an entity for rendering or inspection."""

    position: tuple
    velocity: tuple
    rotation: float
    color: tuple
    hitbox: Hitbox
    remaining: int


class ExecutionEnvironment:
    """One live entity and its frame counter.

    Created when the entity spawns and discarded when it is removed from the
    world. Names assigned with `set` that are not entity fields are kept in
    `variables` and layered over the scope of every later action.

    Args:
        entity: (Entity) Entity to run, copied so spawns never share state
    """

    __slots__ = ("entity", "elapsed", "duration", "variables")

    def __init__(self, entity: Entity):
        self.entity = entity.copy()
        self.elapsed = 0
        self.duration = self.entity.lifetime
        self.variables = {}

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.duration

    @property
    def remaining(self) -> int:
        return max(0, self.duration - self.elapsed)

    def scope(self, captured):
        """Scope an action evaluates in, its captured scope plus variables."""
        return captured.push(self.variables)

    def assign(self, name, expr, scope, fps=DEFAULT_FPS):
        """Set an entity field from an expression.

        Known fields are coerced like spawn fields. Any other name becomes an
        instance variable visible to later actions.

        Raises:
            EvalError: The expression failed to evaluate
            DurationError: A lifetime duration was invalid
            TypeError: The value has the wrong kind for the field
        """
        entity = self.entity
        if name == "lifetime":
            if isinstance(expr, ast.Duration):
                entity.lifetime = _eval.duration_frames(expr, scope, fps)
            else:
                entity.lifetime = _as_frames(expr.evaluate(scope))
            self.duration = entity.lifetime
            return
        value = expr.evaluate(scope)
        match name:
            case "position":
                entity.position = _as_vector2(value)
            case "velocity":
                entity.velocity = _as_vector2(value)
            case "rotation":
                entity.rotation = _as_float(value)
            case "speed":
                entity.speed = _as_float(value)
            case "color":
                entity.color = _as_color(value)
            case _:
                self.variables = {**self.variables, name: ast.literal(value.data)}

    def state(self) -> EntityState:
        entity = self.entity
        return EntityState(
            entity.position,
            entity.velocity,
            entity.rotation,
            entity.color,
            entity.hitbox,
            self.remaining,
        )

    def __repr__(self):
        return f"ExecutionEnvironment(elapsed={self.elapsed}, duration={self.duration}, {self.entity!r})"
