"""
Popcorn Errors
==============
Named error kinds raised by the lexer, parser, and evaluator.

Every failure in the core is fatal for the current run: nothing is
retried and no partial result is produced. Hosts (file runner, REPL,
playground server, LSP stub) catch PopcornError and decide whether to
halt or report and continue.
"""
from __future__ import annotations


class PopcornError(Exception):
    """Base class for every error raised by the Popcorn core."""

    kind = "error"

    def __init__(self, message: str, line: int = 0, col: int = 0):
        self.message = message
        self.line = line
        self.col = col
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line:
            return f"{self.message} at L{self.line}:{self.col}"
        return self.message

    def locate(self, line: int, col: int):
        """Attach a source position after the fact (e.g. from the failing node)."""
        self.line, self.col = line, col
        self.args = (self._format(),)


# ─────────────────────────────────────────────────────────────
#  Front end
# ─────────────────────────────────────────────────────────────

class LexerError(PopcornError):
    """Unrecognized character or unterminated string literal."""

    kind = "lexer"

    def __init__(self, message: str, line: int = 0, col: int = 0, context: str = ""):
        self.context = context
        super().__init__(message, line, col)

    def _format(self) -> str:
        text = super()._format()
        if self.context:
            return f"{text}\n  near: {self.context!r}"
        return text


class ParserError(PopcornError):
    """Unexpected token, unbalanced brackets, or malformed declaration."""

    kind = "parser"


# ─────────────────────────────────────────────────────────────
#  Runtime
# ─────────────────────────────────────────────────────────────

class PopcornRuntimeError(PopcornError):
    """Base class for errors detected while evaluating the AST."""

    kind = "runtime"


class UndefinedVariableError(PopcornRuntimeError):
    kind = "undefined_variable"

    def __init__(self, name: str, line: int = 0, col: int = 0):
        self.name = name
        super().__init__(f"Cannot resolve variable '{name}'", line, col)


class RedeclarationError(PopcornRuntimeError):
    kind = "redeclaration"

    def __init__(self, name: str, line: int = 0, col: int = 0):
        self.name = name
        super().__init__(
            f"Cannot declare variable '{name}' as it is already present in the current scope",
            line, col,
        )


class ConstantError(PopcornRuntimeError):
    """Reassigning a constant, or declaring one without a value."""

    kind = "constant"

    def __init__(self, name: str, message: str = "", line: int = 0, col: int = 0):
        self.name = name
        super().__init__(message or f"Cannot reassign constant variable '{name}'", line, col)


class NotCallableError(PopcornRuntimeError):
    kind = "not_callable"


class TypeMismatchError(PopcornRuntimeError):
    """Operator or access applied to a value of the wrong type."""

    kind = "type_mismatch"


class IndexOutOfRangeError(PopcornRuntimeError):
    kind = "index_out_of_range"


class InvalidAssignmentError(PopcornRuntimeError):
    kind = "invalid_assignment"


class ZeroDivisionRuntimeError(PopcornRuntimeError):
    kind = "zero_division"
