"""
Terminal syntax highlighting for the REPL, driven by the Lexer.
"""
from termcolor import colored

from .errors import LexerError
from .lexer import Lexer, TokenType

KEYWORD_TYPES = {
    TokenType.LET, TokenType.CONST, TokenType.FN, TokenType.POP,
    TokenType.IF, TokenType.ELSE, TokenType.WHILE, TokenType.FOR,
}
LITERAL_TYPES = {TokenType.TRUE, TokenType.FALSE, TokenType.NULL}
OPERATOR_TYPES = {
    TokenType.BINARY_OPERATOR, TokenType.EQUALS, TokenType.BANG,
    TokenType.EQ, TokenType.NEQ, TokenType.LT, TokenType.GT,
    TokenType.LTE, TokenType.GTE, TokenType.AND, TokenType.OR,
}


def _paint(token_type: TokenType, text: str) -> str:
    if token_type in KEYWORD_TYPES:
        return colored(text, "magenta", attrs=["bold"])
    if token_type in LITERAL_TYPES or token_type == TokenType.NUMBER:
        return colored(text, "yellow", attrs=["bold"])
    if token_type in OPERATOR_TYPES:
        return colored(text, "cyan", attrs=["bold"])
    if token_type in (TokenType.STRING, TokenType.QUOTE):
        return colored(text, "green", attrs=["bold"])
    if token_type == TokenType.IDENTIFIER:
        return colored(text, "white")
    return text


def highlight(line: str) -> str:
    """Return `line` with ANSI colors; unlexable input is returned unchanged."""
    if not line.strip():
        return line
    try:
        tokens = Lexer(line).tokenize()
    except LexerError:
        return line

    out = []
    last_end = 0
    for token in tokens:
        if token.type in (TokenType.EOF, TokenType.NEWLINE):
            continue
        pos = line.find(token.value, last_end)
        if pos < 0:
            continue
        out.append(line[last_end:pos])
        out.append(_paint(token.type, token.value))
        last_end = pos + len(token.value)

    out.append(line[last_end:])
    return "".join(out)
