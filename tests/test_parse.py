"""Tests for parsing source text into AST nodes"""

import pytest

import patternscript
from patternscript import ast


SOURCE = """
// Bullet prefabs hold default fields
bullet small = {
    lifetime = 3 seconds;
    color = (255, 0, 0);
    behavior = { wait 1 frames; die; };
}

path spiral (r, speed) = {
    x = r * cos(t * speed);
    y = r * sin(t * speed);
}

pattern ring = {
    count = 12;
    for (i = 0...12, j = -1...1) when (i > 2 and j == 0) {
        spawn { type = small; rotation = i * 30; position_fn = spiral(10, 2); }
        wait 5 frames;
    }
    set speed = 2.5;
    run burst;
    pattern { iteration_type = cycles; length = 2; actions = { spawn {} wait 1 frames; }; }
    die;
}

pattern burst = { spawn { name = "a \\"quoted\\" name"; } }
"""


def test_parse_definitions():
    head = patternscript.parse(SOURCE)
    assert list(head.definitions) == ["small", "spiral", "ring", "burst"]
    assert isinstance(head.definitions["small"], ast.Bullet)
    assert isinstance(head.definitions["spiral"], ast.Path)
    assert isinstance(head.definitions["ring"], ast.Pattern)


def test_parse_bullet_fields():
    small = patternscript.parse(SOURCE).definitions["small"]
    lifetime = small.fields["lifetime"]
    assert isinstance(lifetime, ast.Duration)
    assert lifetime.unit == "seconds"
    assert isinstance(small.fields["color"], ast.Vector)
    assert isinstance(small.fields["behavior"], ast.BlockExpr)


def test_parse_path():
    spiral = patternscript.parse(SOURCE).definitions["spiral"]
    assert spiral.arguments == ("r", "speed")
    assert set(spiral.fields) == {"x", "y"}


def test_parse_pattern_statements():
    ring = patternscript.parse(SOURCE).definitions["ring"].block
    assert list(ring.definitions) == ["count"]
    kinds = [type(stmt) for stmt in ring.statements]
    assert kinds == [ast.For, ast.Assign, ast.Invoke, ast.Pattern, ast.Die]

    loop = ring.statements[0]
    assert [name for name, _ in loop.bindings] == ["i", "j"]
    assert (loop.bindings[1][1].start, loop.bindings[1][1].end) == (-1, 1)
    assert loop.condition.kind == "when"
    assert [type(stmt) for stmt in loop.body.statements] == [ast.Spawn, ast.Wait]

    call = loop.body.statements[0].fields["position_fn"]
    assert isinstance(call, ast.Call)
    assert [arg.value for arg in call.args] == [10, 2]

    inline = ring.statements[3].block
    assert isinstance(inline.definitions["actions"], ast.BlockExpr)


def test_parse_string_escapes():
    burst = patternscript.parse(SOURCE).definitions["burst"].block
    assert burst.statements[0].fields["name"].value == 'a "quoted" name'


def test_parse_empty_source():
    assert patternscript.parse("").definitions == {}
    assert patternscript.parse("// nothing here\n").definitions == {}


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1 + 2 * 3", "(1 + (2 * 3))"),
        ("(1 + 2) * 3", "((1 + 2) * 3)"),
        ("2 ^ 3 ^ 2", "(2 ^ (3 ^ 2))"),
        ("2 ^ 3 * 4", "((2 ^ 3) * 4)"),
        ("2 ^ -1", "(2 ^ -1)"),
        ("-a * b", "-(a * b)"),
        ("a - b - c", "((a - b) - c)"),
        ("a > 1 and b < 2 or c", "(((a > 1) and (b < 2)) or c)"),
        ("x == y", "(x == y)"),
        ("sin(a, b)", "sin(a, b)"),
        ("f()", "f()"),
        ("(1, 2.5)", "(1, 2.5)"),
    ],
)
def test_expression_precedence(text, expected):
    assert patternscript.parse_expr(text).unparse() == expected


def test_unparse_round_trip():
    head = patternscript.parse(SOURCE)
    text = head.unparse()
    again = patternscript.parse(text)
    assert again.unparse() == text


def test_parse_error_position():
    with pytest.raises(patternscript.ParseError) as info:
        patternscript.parse("pattern p = {\n    wait 3;\n}")
    assert info.value.position is not None
    assert info.value.position[0] == 2


def test_parse_errors():
    with pytest.raises(patternscript.ParseError):
        patternscript.parse("pattern = {}")
    with pytest.raises(patternscript.ParseError):
        patternscript.parse("bullet b = { wait 1 frames; }")
    with pytest.raises(patternscript.ParseError):
        patternscript.parse("pattern p = { for (i = 0.5...2) {} }")
    with pytest.raises(patternscript.ParseError):
        patternscript.parse_expr("1 +")


def test_path_needs_x_and_y():
    with pytest.raises(patternscript.ParseError):
        patternscript.parse("path p () = { x = t; }")


def test_duplicate_definition_last_wins():
    head = patternscript.parse("pattern p = { die; }\npattern p = {}")
    assert head.definitions["p"].block.statements == ()
