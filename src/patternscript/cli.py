"""Command-line interface for patternscript.

Usage:
    patternscript <file.ps>                    # Run every pattern 600 frames
    patternscript <file.ps> --pattern spiral   # Run one pattern
    patternscript <file.ps> --ast              # Show the parsed definitions
    patternscript <file.ps> --lark             # Show Lark parse tree
"""

__all__ = ["main", "prettylark"]

import argparse
import pathlib
import sys

from lark import Token, Tree
from loguru import logger

import patternscript


def prettylark(node, indent=0, show_positions=False):
    """Pretty-print a Lark parse tree.

    Shows tree structure with clear indentation and token values.
    """
    prefix = "  " * indent

    if isinstance(node, Token):
        pos = f" @{node.line}:{node.column}" if show_positions else ""
        print(f"{prefix}{node.type}: {node.value!r}{pos}")

    elif isinstance(node, Tree):
        pos = ""
        if show_positions and node.meta and not node.meta.empty:
            pos = f" @{node.meta.line}:{node.meta.column}"

        if len(node.children) == 1 and isinstance(node.children[0], Token):
            # Compact single-token nodes
            print(f"{prefix}{node.data}: {node.children[0].value!r}{pos}")
        else:
            print(f"{prefix}{node.data}:{pos}")
            for child in node.children:
                prettylark(child, indent + 1, show_positions)

    else:
        # Placeholder for an optional rule that did not match
        print(f"{prefix}{node!r}")


def run_world(world, patterns, frames, every):
    """Spawn an emitter per pattern and step the world.

    Prints the live entity count every `every` frames, then the final
    state of each entity.
    """
    for name in patterns:
        world.spawn(behavior=name)
    for frame in range(frames):
        world.step()
        if every and (frame + 1) % every == 0:
            print(f"frame {world.tick}: {len(world)} entities")
    print(f"After {world.tick} frames, {len(world)} entities")
    for index, state in enumerate(world.snapshot()):
        x, y = state.position
        print(f"  [{index}] pos=({x:.2f}, {y:.2f}) rot={state.rotation:.1f} remaining={state.remaining}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="patternscript",
        description="Compile and simulate patternscript bullet patterns")
    parser.add_argument("source",
        help="Patternscript source file")
    parser.add_argument("--text", action="store_true",
        help="Treat source as the script text instead of a file path")
    parser.add_argument("--pattern", action="append",
        help="Pattern to run, may repeat (default: every pattern)")
    parser.add_argument("--frames", type=int, default=600,
        help="Number of frames to simulate")
    parser.add_argument("--fps", type=int, default=patternscript.DEFAULT_FPS,
        help="Frames per second")
    parser.add_argument("--every", type=int, default=0,
        help="Report the entity count every N frames")
    parser.add_argument("--ast", action="store_true",
        help="Show the parsed definitions and stop")
    parser.add_argument("--lark", action="store_true",
        help="Show Lark parse tree and stop")
    parser.add_argument("--pos", action="store_true",
        help="Show line:column positions in the Lark tree")
    parser.add_argument("--verbose", "-v", action="store_true",
        help="Log spawns, sweeps and compiles")

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")
    logger.enable("patternscript")

    if args.text:
        source = args.source
    else:
        filepath = pathlib.Path(args.source)
        if not filepath.exists():
            print(f"Error: File not found: {filepath}", file=sys.stderr)
            return 1
        source = filepath.read_text(encoding="utf-8")

    if args.frames < 0:
        parser.error("--frames cannot be negative")
    if args.fps <= 0:
        parser.error("--fps must be positive")

    try:
        if args.lark:
            tree = patternscript._parse._parse_tree(source, "start")
            prettylark(tree, show_positions=args.pos)
            return 0
        head = patternscript.parse(source)
    except patternscript.ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    if args.ast:
        print(head.unparse(), end="")
        return 0

    world = patternscript.World(head, fps=args.fps)
    patterns = args.pattern or list(world.registry.patterns)
    if not patterns:
        print("Error: No patterns to run", file=sys.stderr)
        return 1
    try:
        run_world(world, patterns, args.frames, args.every)
    except patternscript.PatternscriptError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0
