"""
Popcorn CLI
===========
Entry point for the `popcorn` console script and `python -m popcorn`.

Usage:
    # Interactive REPL (default)
    popcorn
    popcorn repl --no-color

    # Run a source file
    popcorn run examples/hello.pop
    popcorn run examples/hello.pop --tokens --ast --dump-ast current_ast.json

    # Print or write the AST as JSON
    popcorn ast examples/hello.pop -o hello.json

    # Playground HTTP server / editor stub
    popcorn serve --port 3000
    popcorn lsp
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from .config import Settings
from .errors import PopcornError
from .lexer import tokenize
from .nodes import ast_to_json
from .parser import produce_ast

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_run(args, settings: Settings) -> int:
    from .runner import run_file
    return run_file(args.file, show_tokens=args.tokens, show_ast=args.ast,
                    dump_ast=args.dump_ast or settings.ast_dump)


def cmd_repl(args, settings: Settings) -> int:
    from .repl import run_repl
    run_repl(color=settings.color and not getattr(args, "no_color", False))
    return 0


def cmd_ast(args, settings: Settings) -> int:
    if not os.path.exists(args.file):
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    with open(args.file, "r", encoding="utf-8") as f:
        source = f.read()

    try:
        text = ast_to_json(produce_ast(tokenize(source)))
    except PopcornError as e:
        print(f"Error parsing file: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"✅ AST written to {args.output}")
    else:
        print(text)
    return 0


def cmd_serve(args, settings: Settings) -> int:
    from .server import run_server
    run_server(host=args.host or settings.host, port=args.port or settings.port,
               log_level=settings.log_level)
    return 0


def cmd_lsp(args, settings: Settings) -> int:
    from .lsp import run_lsp
    return run_lsp()


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="popcorn",
        description="Popcorn: a small scripting language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  popcorn\n"
            "  popcorn run hello.pop --ast\n"
            "  popcorn ast hello.pop -o hello.json\n"
            "  popcorn serve --port 3000\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # run
    p_run = subparsers.add_parser("run", help="Execute a .pop source file")
    p_run.add_argument("file", help="Path to the source file")
    p_run.add_argument("--tokens", action="store_true", help="Print the token list")
    p_run.add_argument("--ast", action="store_true", help="Print the AST as JSON")
    p_run.add_argument("--dump-ast", default=None, metavar="PATH",
                       help="Write the AST JSON to PATH (default: $POPCORN_AST_DUMP)")

    # repl
    p_repl = subparsers.add_parser("repl", help="Start the interactive REPL")
    p_repl.add_argument("--no-color", action="store_true", help="Disable syntax highlighting")

    # ast
    p_ast = subparsers.add_parser("ast", help="Print or write the AST JSON for a file")
    p_ast.add_argument("file", help="Path to the source file")
    p_ast.add_argument("--output", "-o", default=None, help="Write to this path instead of stdout")

    # serve
    p_serve = subparsers.add_parser("serve", help="Launch the playground HTTP server")
    p_serve.add_argument("--host", default=None, help="Bind address (default: $POPCORN_HOST or 127.0.0.1)")
    p_serve.add_argument("--port", default=None, type=int, help="Port number (default: $POPCORN_PORT or 3000)")

    # lsp
    subparsers.add_parser("lsp", help="Run the language server stub on stdio")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.setrecursionlimit(max(sys.getrecursionlimit(), settings.recursion_limit))

    commands = {
        "run": cmd_run,
        "repl": cmd_repl,
        "ast": cmd_ast,
        "serve": cmd_serve,
        "lsp": cmd_lsp,
    }
    command = commands.get(args.command, cmd_repl)
    logger.debug("dispatching %s", args.command or "repl")
    return command(args, settings)


if __name__ == "__main__":
    sys.exit(main())
