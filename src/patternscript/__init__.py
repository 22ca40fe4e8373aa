"""
Patternscript Bullet Pattern Language

A small language for describing bullet-hell spawn patterns. Sources are
parsed into an AST, patterns are compiled into timelines of frame-stamped
actions and a World steps every live entity through them.
"""

__version__ = "0.1.0"

from loguru import logger

from . import ast
from ._error import *
from ._value import *
from ._scope import *
from ._eval import *
from ._registry import *
from ._entity import *
from ._action import *
from ._compile import *
from ._world import *
from ._parse import *

logger.disable("patternscript")
