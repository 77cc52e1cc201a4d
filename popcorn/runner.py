"""
Popcorn File Runner
===================
Execute .pop source files.

Usage:
    popcorn run <filename.pop>
    popcorn run <filename.pop> --tokens --ast
    popcorn run <filename.pop> --dump-ast current_ast.json
"""
import logging
import os
import sys
from typing import Callable, TextIO

from .errors import PopcornError
from .interpreter import Interpreter
from .lexer import tokenize
from .nodes import ast_to_json
from .parser import produce_ast
from .values import NULL, format_value

logger = logging.getLogger(__name__)


def write_ast(ast, path: str):
    """Write the tagged JSON form of `ast` to `path`."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(ast_to_json(ast))
    logger.info("wrote AST dump to %s", path)


def run_source(source: str, show_tokens: bool = False, show_ast: bool = False,
               dump_ast: str | None = None,
               output_fn: Callable[[str], None] | None = None):
    """Tokenize, parse, and evaluate `source`; returns the final value."""
    out = output_fn or print

    tokens = tokenize(source)
    if show_tokens:
        out("=== TOKENS ===")
        for i, token in enumerate(tokens):
            out(f"{i}: {token!r}")
        out("")

    ast = produce_ast(tokens)
    if show_ast:
        out("=== AST ===")
        out(ast_to_json(ast))
        out("")
    if dump_ast:
        write_ast(ast, dump_ast)

    interp = Interpreter(output_fn=out)
    return interp.evaluate(ast, interp.make_environment())


def run_file(filepath: str, show_tokens: bool = False, show_ast: bool = False,
             dump_ast: str | None = None, stderr: TextIO | None = None) -> int:
    """
    Execute a .pop source file.

    Args:
        filepath: Path to the source file
        show_tokens: Print the token list before parsing
        show_ast: Print the AST as JSON before evaluating
        dump_ast: If set, write the AST JSON to this path

    Returns:
        0 on success, 1 on error
    """
    err = stderr or sys.stderr

    if not os.path.exists(filepath):
        print(f"Error: File not found: {filepath}", file=err)
        return 1

    with open(filepath, "r", encoding="utf-8") as f:
        source = f.read()

    logger.debug("running %s (%d bytes)", filepath, len(source))

    try:
        result = run_source(source, show_tokens=show_tokens, show_ast=show_ast, dump_ast=dump_ast)
    except PopcornError as e:
        print(f"Error running file: {type(e).__name__}: {e}", file=err)
        return 1

    if result != NULL:
        print(f"⟹ {format_value(result)}")
    return 0
