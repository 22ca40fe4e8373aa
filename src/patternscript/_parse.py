"""Parse patternscript source into AST nodes.

The lark tree is an internal detail. It is converted straight into the
nodes from `patternscript.ast`, which are what the rest of the package
works with.
"""

__all__ = ["parse", "parse_expr"]

import lark
from loguru import logger

from . import _error, ast


# Global parser instances, cached by start rule
_parsers: dict[str, lark.Lark] = {}

_BINARY = {
    "op_or": "or",
    "op_and": "and",
    "op_eq": "==",
    "op_gt": ">",
    "op_ge": ">=",
    "op_lt": "<",
    "op_le": "<=",
    "op_add": "+",
    "op_sub": "-",
    "op_mul": "*",
    "op_div": "/",
    "op_pow": "^",
}


def parse(source):
    """Parse a complete source into a Head.

    Args:
        source: (str) Patternscript source text
    Returns:
        (ast.Head) Top level definitions by name
    Raises:
        ParseError: The text contains invalid syntax
    """
    tree = _parse_tree(source, "start")
    definitions = {}
    for kid in tree.children:
        name, node = _convert_definition(kid)
        if name in definitions:
            logger.warning("{} is defined more than once, the last one wins", name)
        definitions[name] = node
    return ast.Head(definitions)


def parse_expr(source):
    """Parse a single expression.

    Args:
        source: (str) Expression text like `sin(i * 30) + 1`
    Returns:
        (ast.ExprNode) Expression node
    Raises:
        ParseError: The text contains invalid syntax
    """
    return _convert_expr(_parse_tree(source, "expression").children[0])


def _parse_tree(source, start):
    parser = _lark_parser(start)
    try:
        return parser.parse(source)
    except lark.exceptions.UnexpectedInput as e:
        message = str(e).splitlines()[0]
        raise _error.ParseError(message, (e.line, e.column)) from e
    except lark.exceptions.LarkError as e:
        raise _error.ParseError(str(e)) from e


def _lark_parser(start):
    """Get globally shared lark parser.

    Args:
        start: (str) Grammar rule to start from
    Returns:
        (lark.Lark) Parser instance
    """
    parser = _parsers.get(start)
    if parser is not None:
        return parser

    parser = lark.Lark.open(
        "lark/patternscript.lark",
        rel_to=__file__,
        parser="lalr",
        start=start,
        propagate_positions=True,
        maybe_placeholders=True,
    )
    _parsers[start] = parser
    return parser


def _position(tree):
    meta = getattr(tree, "meta", None)
    if meta is None or meta.empty:
        return None
    return (meta.line, meta.column)


def _convert_definition(tree):
    kids = tree.children
    name = kids[0].value
    match tree.data:
        case "pattern_def":
            return name, ast.Pattern(_convert_block(kids[1]))
        case "bullet_def":
            return name, ast.Bullet(_convert_fields(kids[1]))
        case "path_def":
            params = [tok.value for tok in kids[1].children if tok is not None]
            fields = _convert_fields(kids[2])
            if "x" not in fields or "y" not in fields:
                raise _error.ParseError(f"path {name} needs both x and y", _position(tree))
            return name, ast.Path(params, fields)
    raise _error.ParseError(f"Unexpected definition {tree.data}", _position(tree))


def _convert_fields(tree):
    fields = {}
    for kid in tree.children:
        name, expr = _convert_field(kid)
        fields[name] = expr
    return fields


def _convert_field(tree):
    kids = tree.children
    name = kids[0].value
    if tree.data == "block_field":
        return name, ast.BlockExpr(_convert_block(kids[1]))
    if kids[1].data == "duration":
        return name, _convert_duration(kids[1])
    return name, _convert_expr(kids[1])


def _convert_block(tree):
    definitions = {}
    statements = []
    for kid in tree.children:
        if kid.data in ("field", "block_field"):
            name, expr = _convert_field(kid)
            definitions[name] = expr
        else:
            statements.append(_convert_statement(kid))
    return ast.Block(definitions, statements)


def _convert_statement(tree):
    kids = tree.children
    match tree.data:
        case "wait":
            return ast.Wait(_convert_duration(kids[0]))
        case "spawn":
            return ast.Spawn(_convert_fields(kids[0]))
        case "for_loop":
            *bindings, condition, body = kids
            pairs = [(b.children[0].value, _convert_range(b.children[1])) for b in bindings]
            if condition is not None:
                condition = ast.Condition(condition.children[0].value, _convert_expr(condition.children[1]))
            return ast.For(pairs, condition, _convert_block(body))
        case "assign":
            value = kids[1]
            if isinstance(value, lark.Tree) and value.data == "duration":
                return ast.Assign(kids[0].value, _convert_duration(value))
            return ast.Assign(kids[0].value, _convert_expr(value))
        case "die":
            return ast.Die()
        case "invoke":
            return ast.Invoke(kids[0].value)
        case "inline_pattern":
            return ast.Pattern(_convert_block(kids[0]))
    raise _error.ParseError(f"Unexpected statement {tree.data}", _position(tree))


def _convert_range(tree):
    start, end = (_bound(kid) for kid in tree.children)
    return ast.Range(start, end)


def _bound(kid):
    if isinstance(kid, lark.Token):
        return int(kid.value)
    # negative_int
    return -int(kid.children[0].value)


def _convert_duration(tree):
    amount, unit = tree.children
    return ast.Duration(_convert_expr(amount), unit.value)


def _convert_expr(tree):
    """Convert an expression tree or token into an expression node."""
    if isinstance(tree, lark.Token):
        raise _error.ParseError(f"Unhandled grammar token: {tree}", (tree.line, tree.column))

    kids = tree.children
    op = _BINARY.get(tree.data)
    if op is not None:
        return ast.BinaryOp(op, _convert_expr(kids[0]), _convert_expr(kids[1]))

    match tree.data:
        case "int":
            return ast.Int(int(kids[0].value))
        case "float":
            return ast.Float(float(kids[0].value))
        case "string":
            return ast.String(_unescape(kids[0].value[1:-1]))
        case "true":
            return ast.Bool(True)
        case "false":
            return ast.Bool(False)
        case "variable":
            return ast.Variable(kids[0].value)
        case "negate":
            return ast.Negate(_convert_expr(kids[0]))
        case "vector":
            return ast.Vector(_convert_expr(kid) for kid in kids)
        case "call":
            name = kids[0].value
            args = [_convert_expr(kid) for kid in kids[1:] if kid is not None]
            if not args:
                return ast.Call(name)
            if len(args) == 1:
                return ast.Call(name, args[0])
            return ast.Call(name, ast.Vector(args))
    raise _error.ParseError(f"Unexpected expression {tree.data}", _position(tree))


def _unescape(text):
    out = []
    chars = iter(text)
    for char in chars:
        if char == "\\":
            char = next(chars, "\\")
            char = {"n": "\n", "t": "\t"}.get(char, char)
        out.append(char)
    return "".join(out)
