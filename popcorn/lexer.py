"""
Popcorn Lexer
=============
Tokenizes Popcorn source code into a flat list of typed tokens.
Handles keywords, operators, integer literals, quoted strings, identifiers,
and `//` line comments. Newlines are significant: they terminate statements.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .errors import LexerError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """All token types in the Popcorn language."""
    # Literals
    NUMBER          = auto()   # 42
    IDENTIFIER      = auto()   # variable/function names
    STRING          = auto()   # raw text between quotes
    QUOTE           = auto()   # "

    # Keywords
    LET             = auto()
    CONST           = auto()
    FN              = auto()
    POP             = auto()   # return
    TRUE            = auto()
    FALSE           = auto()
    NULL            = auto()
    IF              = auto()
    ELSE            = auto()
    WHILE           = auto()
    FOR             = auto()

    # Grouping & punctuation
    LPAREN          = auto()   # (
    RPAREN          = auto()   # )
    LBRACE          = auto()   # {
    RBRACE          = auto()   # }
    LBRACKET        = auto()   # [
    RBRACKET        = auto()   # ]
    COMMA           = auto()   # ,
    DOT             = auto()   # .
    COLON           = auto()   # :
    SEMICOLON       = auto()   # ;
    NEWLINE         = auto()

    # Operators
    BINARY_OPERATOR = auto()   # + - * / %
    BANG            = auto()   # !
    EQUALS          = auto()   # =

    # Comparison
    EQ              = auto()   # ==
    NEQ             = auto()   # !=
    LT              = auto()   # <
    GT              = auto()   # >
    LTE             = auto()   # <=
    GTE             = auto()   # >=

    # Logical
    AND             = auto()   # &&
    OR              = auto()   # ||

    # Special
    EOF             = auto()


@dataclass(frozen=True)
class Token:
    """A single token from the Popcorn source."""
    type: TokenType
    value: str
    line: int = 0
    col: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.col})"


SINGLE_CHAR_TOKENS = {
    "+": TokenType.BINARY_OPERATOR,
    "-": TokenType.BINARY_OPERATOR,
    "*": TokenType.BINARY_OPERATOR,
    "/": TokenType.BINARY_OPERATOR,
    "%": TokenType.BINARY_OPERATOR,
    "!": TokenType.BANG,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "=": TokenType.EQUALS,
    ";": TokenType.SEMICOLON,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "\n": TokenType.NEWLINE,
}

# Checked before the single-char table so that `==` is never split in two
DOUBLE_CHAR_TOKENS = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
}

KEYWORDS = {
    "let": TokenType.LET,
    "const": TokenType.CONST,
    "fn": TokenType.FN,
    "pop": TokenType.POP,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
}

SKIPPABLE = (" ", "\t", "\r")
CONTEXT_WIDTH = 30


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


class Lexer:
    """
    Tokenizes Popcorn source code.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.col = 1

    def _current(self) -> str | None:
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def _peek(self, offset: int = 1) -> str | None:
        idx = self.pos + offset
        if idx >= len(self.source):
            return None
        return self.source[idx]

    def _advance(self) -> str:
        ch = self.source[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return ch

    def _skip_comment(self):
        """Discard `//` through end of line, leaving the newline in place."""
        while self.pos < len(self.source) and self._current() != "\n":
            self._advance()

    def _read_string(self) -> Iterator[Token]:
        """Read a quoted string as QUOTE, STRING, QUOTE."""
        start, start_line, start_col = self.pos, self.line, self.col
        yield Token(TokenType.QUOTE, '"', start_line, start_col)
        self._advance()  # consume opening "

        text_line, text_col = self.line, self.col
        chars = []
        while self.pos < len(self.source):
            if self._current() == '"':
                yield Token(TokenType.STRING, "".join(chars), text_line, text_col)
                yield Token(TokenType.QUOTE, '"', self.line, self.col)
                self._advance()
                return
            chars.append(self._advance())

        raise LexerError(
            "Unterminated string literal", start_line, start_col,
            context=self.source[start:start + CONTEXT_WIDTH],
        )

    def _read_number(self) -> Token:
        """Read an integer literal."""
        start_line, start_col = self.line, self.col
        chars = []
        while self.pos < len(self.source) and is_digit(self._current()):
            chars.append(self._advance())
        return Token(TokenType.NUMBER, "".join(chars), start_line, start_col)

    def _read_identifier(self) -> Token:
        """Read an identifier or keyword."""
        start_line, start_col = self.line, self.col
        chars = []
        while self.pos < len(self.source):
            ch = self._current()
            if is_identifier_start(ch) or is_digit(ch):
                chars.append(self._advance())
            else:
                break
        word = "".join(chars)
        token_type = KEYWORDS.get(word, TokenType.IDENTIFIER)
        return Token(token_type, word, start_line, start_col)

    def tokenize(self) -> list[Token]:
        """Tokenize the entire source into a list of tokens ending in EOF."""
        tokens = list(self._iter_tokens())
        tokens.append(Token(TokenType.EOF, "EndOfFile", self.line, self.col))
        logger.debug("tokenized %d characters into %d tokens", len(self.source), len(tokens))
        return tokens

    def _iter_tokens(self) -> Iterator[Token]:
        """Generate tokens one at a time."""
        while self.pos < len(self.source):
            ch = self._current()

            if ch in SKIPPABLE:
                self._advance()
                continue

            # Two-character lookahead: comments and compound operators
            pair = ch + (self._peek() or "")
            if pair == "//":
                self._skip_comment()
                continue

            if pair in DOUBLE_CHAR_TOKENS:
                line, col = self.line, self.col
                self._advance()
                self._advance()
                yield Token(DOUBLE_CHAR_TOKENS[pair], pair, line, col)
                continue

            if ch == '"':
                yield from self._read_string()
                continue

            if ch in SINGLE_CHAR_TOKENS:
                yield Token(SINGLE_CHAR_TOKENS[ch], ch, self.line, self.col)
                self._advance()
                continue

            if is_digit(ch):
                yield self._read_number()
                continue

            if is_identifier_start(ch):
                yield self._read_identifier()
                continue

            raise LexerError(
                f"Unrecognized character {ch!r}", self.line, self.col,
                context=self.source[self.pos:self.pos + CONTEXT_WIDTH],
            )


def tokenize(source: str) -> list[Token]:
    """Convenience wrapper: tokenize `source` in one call."""
    return Lexer(source).tokenize()
