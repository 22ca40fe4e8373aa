"""AST nodes for patternscript sources."""

from ._base import *
from ._expr import *
from ._stmt import *
