"""
Popcorn REPL
============
Interactive Read-Eval-Print Loop. Every input is evaluated against one
retained environment, so bindings persist between lines. Errors are printed
and the loop continues with the environment as it was.
"""
import logging
from typing import Callable

from termcolor import colored

from .environment import Environment
from .errors import LexerError, PopcornError
from .highlight import highlight
from .interpreter import Interpreter
from .lexer import Lexer, TokenType
from .parser import produce_ast
from .values import NULL, format_value

logger = logging.getLogger(__name__)

BANNER = """
╔════════════════════════════════════════════════╗
║            🍿 Popcorn Language REPL 🍿          ║
╠════════════════════════════════════════════════╣
║  Type 'help' for a quick reference             ║
║  Type 'exit' to quit, 'clear' to reset         ║
╚════════════════════════════════════════════════╝
"""

HELP_TEXT = """
  let x = 10              mutable binding
  const y = 20            constant binding
  fn add(a, b) { pop a + b }
  add(x, y)               → 30
  [1, 2, 3][0]            → 1
  { a: 1, b }.a           → 1   (b is looked up in scope)
  if (x > 5) { print("big") } else { print("small") }
  while (x > 0) { x = x - 1 }
  for (let i = 0; i < 3; i = i + 1) { print(i) }

Commands: help, env, clear, exit
"""

PROMPT = "🍿 >> "
CONTINUATION_PROMPT = "   .. "
OPENERS = {TokenType.LPAREN: 1, TokenType.LBRACE: 1, TokenType.LBRACKET: 1,
           TokenType.RPAREN: -1, TokenType.RBRACE: -1, TokenType.RBRACKET: -1}


def is_incomplete(source: str) -> bool:
    """True while brackets are still open or a string is unterminated."""
    try:
        tokens = Lexer(source).tokenize()
    except LexerError as e:
        return e.message.startswith("Unterminated")
    return sum(OPENERS.get(t.type, 0) for t in tokens) > 0


class Repl:
    """Line-oriented REPL over a retained environment."""

    def __init__(self, input_fn: Callable[[str], str] = input,
                 output_fn: Callable[[str], None] = print, color: bool = True):
        self.input_fn = input_fn
        self.output_fn = output_fn
        self.color = color
        self.interp = Interpreter(output_fn=output_fn)
        self.env: Environment = self.interp.make_environment()

    def _paint(self, text: str, color: str) -> str:
        return colored(text, color, attrs=["bold"]) if self.color else text

    def _read(self) -> str | None:
        try:
            source = self.input_fn(PROMPT)
            while is_incomplete(source):
                source += "\n" + self.input_fn(CONTINUATION_PROMPT)
        except (EOFError, KeyboardInterrupt):
            return None
        return source

    def eval_source(self, source: str):
        """Evaluate one input against the retained environment."""
        return self.interp.evaluate(produce_ast(Lexer(source).tokenize()), self.env)

    def handle(self, line: str) -> bool:
        """Process one input; returns False when the loop should stop."""
        command = line.strip()
        if not command:
            return True

        if command.lower() in ("exit", "quit"):
            self.output_fn(self._paint("👋 Exiting REPL... Enjoy your popcorn!", "red"))
            return False

        if command.lower() == "help":
            self.output_fn(HELP_TEXT)
            return True

        if command.lower() == "clear":
            self.env = self.interp.make_environment()
            if self.color:
                self.output_fn("\033[2J\033[H" + BANNER)
            else:
                self.output_fn("(state cleared)")
            return True

        if command.lower() == "env":
            names = [n for n in self.env.variables if n not in ("print", "len")]
            if not names:
                self.output_fn("  (no bindings)")
            for name in names:
                marker = "const" if name in self.env.constants else "let"
                self.output_fn(f"  {marker} {name} = {format_value(self.env.variables[name], nested=True)}")
            return True

        if self.color:
            self.output_fn(f"   → {highlight(line)}")

        try:
            result = self.eval_source(line)
        except PopcornError as e:
            logger.debug("repl input failed", exc_info=True)
            self.output_fn(self._paint(f"⚠ {type(e).__name__}: {e}", "red"))
            return True

        if result != NULL:
            self.output_fn(f"   ← {self._paint(format_value(result, nested=True), 'green')}")
        return True

    def loop(self) -> Environment:
        """Run until `exit` or end of input; returns the final environment."""
        self.output_fn(BANNER)
        while True:
            line = self._read()
            if line is None:
                self.output_fn("")
                break
            if not self.handle(line):
                break
        return self.env


def run_repl(color: bool = True) -> Environment:
    """Run the interactive Popcorn REPL on stdin/stdout."""
    return Repl(color=color).loop()
