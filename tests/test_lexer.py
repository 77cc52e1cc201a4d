"""
Popcorn Lexer Tests
===================
Token kinds, compound operators, strings, comments and lexer errors.

Usage:
    python -m pytest tests/test_lexer.py -v
"""
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from popcorn.errors import LexerError
from popcorn.lexer import Lexer, Token, TokenType, tokenize


def kinds(source):
    return [t.type for t in tokenize(source)]


class TestLiterals(unittest.TestCase):

    def test_integer_literals_are_single_tokens(self):
        for n in ("0", "7", "42", "1000", "98765432109876543210"):
            tokens = tokenize(n)
            self.assertEqual(len(tokens), 2, n)
            self.assertEqual(tokens[0].type, TokenType.NUMBER)
            self.assertEqual(tokens[0].value, n)

    def test_string_is_quote_string_quote(self):
        tokens = tokenize('"hello world"')
        self.assertEqual(
            [t.type for t in tokens],
            [TokenType.QUOTE, TokenType.STRING, TokenType.QUOTE, TokenType.EOF],
        )
        self.assertEqual(tokens[1].value, "hello world")

    def test_empty_string(self):
        tokens = tokenize('""')
        self.assertEqual(tokens[1].type, TokenType.STRING)
        self.assertEqual(tokens[1].value, "")

    def test_string_keeps_raw_text(self):
        tokens = tokenize('"let // not a comment"')
        self.assertEqual(tokens[1].value, "let // not a comment")

    def test_identifiers_and_keywords(self):
        tokens = tokenize("let const fn pop true false null foo _bar baz9")
        self.assertEqual(
            [t.type for t in tokens[:-1]],
            [TokenType.LET, TokenType.CONST, TokenType.FN, TokenType.POP,
             TokenType.TRUE, TokenType.FALSE, TokenType.NULL,
             TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.IDENTIFIER],
        )

    def test_keyword_prefix_is_identifier(self):
        tokens = tokenize("letter popcorn")
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[1].type, TokenType.IDENTIFIER)

    def test_control_flow_keywords(self):
        self.assertEqual(
            kinds("if else while for")[:-1],
            [TokenType.IF, TokenType.ELSE, TokenType.WHILE, TokenType.FOR],
        )


class TestOperators(unittest.TestCase):

    def test_compound_operators_are_never_split(self):
        cases = {
            "==": TokenType.EQ, "!=": TokenType.NEQ,
            "<=": TokenType.LTE, ">=": TokenType.GTE,
            "&&": TokenType.AND, "||": TokenType.OR,
        }
        for text, expected in cases.items():
            tokens = tokenize(f"a {text} b")
            self.assertEqual(len(tokens), 4, text)
            self.assertEqual(tokens[1].type, expected)
            self.assertEqual(tokens[1].value, text)

    def test_binary_operators(self):
        tokens = tokenize("+ - * / %")
        self.assertTrue(all(t.type == TokenType.BINARY_OPERATOR for t in tokens[:-1]))

    def test_single_char_comparisons_and_bang(self):
        self.assertEqual(
            kinds("< > ! =")[:-1],
            [TokenType.LT, TokenType.GT, TokenType.BANG, TokenType.EQUALS],
        )

    def test_punctuation(self):
        self.assertEqual(
            kinds("( ) { } [ ] , . : ;")[:-1],
            [TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACE,
             TokenType.RBRACE, TokenType.LBRACKET, TokenType.RBRACKET,
             TokenType.COMMA, TokenType.DOT, TokenType.COLON,
             TokenType.SEMICOLON],
        )


class TestLayout(unittest.TestCase):

    def test_eof_is_always_last(self):
        tokens = tokenize("")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].type, TokenType.EOF)
        self.assertEqual(tokens[0].value, "EndOfFile")

    def test_newlines_are_tokens(self):
        self.assertEqual(
            kinds("a\nb"),
            [TokenType.IDENTIFIER, TokenType.NEWLINE, TokenType.IDENTIFIER, TokenType.EOF],
        )

    def test_whitespace_is_skipped(self):
        self.assertEqual(kinds(" \t\r x "), [TokenType.IDENTIFIER, TokenType.EOF])

    def test_line_comment_is_skipped_but_newline_kept(self):
        self.assertEqual(
            kinds("x // note\ny"),
            [TokenType.IDENTIFIER, TokenType.NEWLINE, TokenType.IDENTIFIER, TokenType.EOF],
        )

    def test_positions_are_one_based(self):
        tokens = tokenize("let x\n  = 5")
        self.assertEqual((tokens[0].line, tokens[0].col), (1, 1))
        self.assertEqual((tokens[1].line, tokens[1].col), (1, 5))
        self.assertEqual((tokens[3].line, tokens[3].col), (2, 3))

    def test_token_repr(self):
        token = Token(TokenType.NUMBER, "5", 1, 2)
        self.assertEqual(repr(token), "Token(NUMBER, '5', L1:2)")

    def test_lexer_class_matches_helper(self):
        source = "fn add(a, b) { pop a + b }"
        self.assertEqual(Lexer(source).tokenize(), tokenize(source))


class TestLexerErrors(unittest.TestCase):

    def test_unrecognized_character(self):
        with self.assertRaises(LexerError) as ctx:
            tokenize("let x = 5 # 3")
        self.assertIn("'#'", ctx.exception.message)
        self.assertEqual((ctx.exception.line, ctx.exception.col), (1, 11))
        self.assertEqual(ctx.exception.context, "# 3")

    def test_unterminated_string(self):
        with self.assertRaises(LexerError) as ctx:
            tokenize('let s = "abc')
        self.assertEqual(ctx.exception.message, "Unterminated string literal")
        self.assertEqual(ctx.exception.context, '"abc')
        self.assertIn("near:", str(ctx.exception))

    def test_single_ampersand_is_rejected(self):
        with self.assertRaises(LexerError):
            tokenize("a & b")


if __name__ == "__main__":
    unittest.main()
