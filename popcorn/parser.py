"""
Popcorn Parser
==============
Recursive-descent parser that builds an Abstract Syntax Tree (AST)
from the token stream produced by the Lexer.

Supports:
  - let / const declarations, fn declarations, pop (return)
  - if / else, while, for statements with brace-delimited blocks
  - Expressions by precedence: assignment, logical, comparison, additive,
    multiplicative, unary, call/member chains, primary literals
  - Array and object literals (including shorthand `{ key }` properties)

The first error raises ParserError; there is no recovery.
"""
import logging

from .errors import ParserError
from .lexer import Token, TokenType
from .nodes import (
    ASTNode, ProgramNode, VariableDeclarationNode, FunctionDeclarationNode,
    ReturnStatementNode, BlockStatementNode, IfStatementNode,
    WhileStatementNode, ForStatementNode, AssignmentExprNode, IdentifierNode,
    BinaryExprNode, LogicalExprNode, UnaryExprNode, CallExprNode,
    MemberExprNode, NumericLiteralNode, StringLiteralNode, BooleanLiteralNode,
    NullLiteralNode, ArrayLiteralNode, PropertyNode, ObjectLiteralNode,
)

logger = logging.getLogger(__name__)


COMPARISON_TOKENS = (
    TokenType.EQ, TokenType.NEQ,
    TokenType.LT, TokenType.GT,
    TokenType.LTE, TokenType.GTE,
)

LOGICAL_TOKENS = (TokenType.AND, TokenType.OR)

# Tokens after `pop` that begin a return value
EXPRESSION_START = (
    TokenType.IDENTIFIER, TokenType.NUMBER, TokenType.LPAREN,
    TokenType.QUOTE, TokenType.LBRACKET, TokenType.LBRACE,
    TokenType.TRUE, TokenType.FALSE, TokenType.NULL,
    TokenType.BANG, TokenType.BINARY_OPERATOR,
)

# Tokens that may end a statement; the last two are left for the caller
STATEMENT_END = (TokenType.NEWLINE, TokenType.SEMICOLON, TokenType.EOF, TokenType.RBRACE)


class Parser:
    """
    Recursive-descent parser for Popcorn source.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()
    """

    def __init__(self, tokens: list[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            tokens = list(tokens) + [Token(TokenType.EOF, "EndOfFile")]
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def _at(self, *token_types: TokenType) -> bool:
        return self._current().type in token_types

    def _expect(self, token_type: TokenType, message: str) -> Token:
        token = self._current()
        if token.type != token_type:
            raise self._error(
                f"{message}. Expected {token_type.name}, got {token.type.name} ({token.value!r})"
            )
        return self._advance()

    def _error(self, message: str, token: Token | None = None) -> ParserError:
        token = token or self._current()
        return ParserError(message, token.line, token.col)

    def _skip_newlines(self):
        while self._current().type == TokenType.NEWLINE:
            self._advance()

    def _skip_blank_statements(self):
        while self._current().type in (TokenType.NEWLINE, TokenType.SEMICOLON):
            self._advance()

    def _end_statement(self, what: str):
        """Consume a newline or `;`; accept `}` and EOF without consuming them."""
        token = self._current()
        if token.type in (TokenType.NEWLINE, TokenType.SEMICOLON):
            self._advance()
        elif token.type not in (TokenType.EOF, TokenType.RBRACE):
            raise self._error(
                f"Expected newline or end of input after {what}, "
                f"got {token.type.name} ({token.value!r})"
            )

    # ─────────────────────────────────────────────────────────
    #  Top-Level Parsing
    # ─────────────────────────────────────────────────────────

    def parse(self) -> ProgramNode:
        """Parse the token stream into a ProgramNode."""
        program = ProgramNode(line=1, col=1)
        self._skip_blank_statements()

        while self._current().type != TokenType.EOF:
            program.body.append(self._parse_statement())
            self._skip_blank_statements()

        logger.debug("parsed %d top-level statements", len(program.body))
        return program

    def _parse_statement(self) -> ASTNode:
        """Parse a single statement."""
        token = self._current()

        match token.type:
            case TokenType.LET | TokenType.CONST:
                return self._parse_var_declaration()
            case TokenType.FN:
                return self._parse_fn_declaration()
            case TokenType.POP:
                return self._parse_return()
            case TokenType.IF:
                return self._parse_if()
            case TokenType.WHILE:
                return self._parse_while()
            case TokenType.FOR:
                return self._parse_for()
            case TokenType.RBRACE:
                raise self._error("Unexpected '}' with no open block")

        expr = self._parse_expr()
        self._end_statement("expression")
        return expr

    # ─────────────────────────────────────────────────────────
    #  Declarations & Return
    # ─────────────────────────────────────────────────────────

    def _parse_var_declaration(self) -> VariableDeclarationNode:
        """Parse: let name [= expr] | const name = expr."""
        keyword = self._advance()
        constant = keyword.type == TokenType.CONST

        name = self._expect(
            TokenType.IDENTIFIER,
            f"Expected identifier name following '{keyword.value}' keyword",
        ).value

        if self._at(*STATEMENT_END):
            if constant:
                raise self._error(
                    f"Must assign value to constant '{name}'. No value provided", keyword
                )
            self._end_statement("variable declaration")
            return VariableDeclarationNode(
                identifier=name, constant=False,
                line=keyword.line, col=keyword.col,
            )

        self._expect(
            TokenType.EQUALS,
            "Expected equals token following identifier in variable declaration",
        )
        value = self._parse_expr()
        self._end_statement("variable declaration")

        return VariableDeclarationNode(
            identifier=name, constant=constant, value=value,
            line=keyword.line, col=keyword.col,
        )

    def _parse_fn_declaration(self) -> FunctionDeclarationNode:
        """Parse: fn name(a, b) { body }."""
        keyword = self._advance()
        name = self._expect(
            TokenType.IDENTIFIER, "Expected a function name following the 'fn' keyword"
        ).value

        params = []
        for arg in self._parse_args():
            if not isinstance(arg, IdentifierNode):
                raise ParserError(
                    f"Function parameters must be identifiers, got {arg.node_type}",
                    arg.line, arg.col,
                )
            params.append(arg.symbol)

        body = self._parse_block_body("function declaration")

        if self._at(TokenType.NEWLINE):
            self._advance()

        return FunctionDeclarationNode(
            name=name, params=params, body=body,
            line=keyword.line, col=keyword.col,
        )

    def _parse_return(self) -> ReturnStatementNode:
        """Parse: pop [expr]."""
        keyword = self._advance()

        if self._at(*EXPRESSION_START):
            value = self._parse_expr()
        elif self._at(*STATEMENT_END):
            value = None
        else:
            token = self._current()
            raise self._error(
                f"Expected an expression or end of statement after 'pop', "
                f"got {token.type.name} ({token.value!r})"
            )

        self._end_statement("'pop' statement")
        return ReturnStatementNode(value=value, line=keyword.line, col=keyword.col)

    # ─────────────────────────────────────────────────────────
    #  Blocks & Control Flow
    # ─────────────────────────────────────────────────────────

    def _parse_block_body(self, owner: str) -> list[ASTNode]:
        """Parse `{ statements }` and return the statement list."""
        self._expect(TokenType.LBRACE, f"Expected '{{' to open {owner} body")
        body = []
        self._skip_blank_statements()
        while not self._at(TokenType.RBRACE, TokenType.EOF):
            body.append(self._parse_statement())
            self._skip_blank_statements()
        self._expect(TokenType.RBRACE, f"Closing brace expected to end {owner} body")
        return body

    def _parse_block(self, owner: str) -> BlockStatementNode:
        token = self._current()
        body = self._parse_block_body(owner)
        return BlockStatementNode(body=body, line=token.line, col=token.col)

    def _parse_condition(self, keyword: str) -> ASTNode:
        self._expect(TokenType.LPAREN, f"Expected '(' after '{keyword}'")
        condition = self._parse_expr()
        self._expect(TokenType.RPAREN, f"Expected ')' to close '{keyword}' condition")
        return condition

    def _parse_if(self) -> IfStatementNode:
        """Parse: if (cond) { ... } [else if ... | else { ... }]."""
        keyword = self._advance()
        condition = self._parse_condition("if")
        consequent = self._parse_block("if")

        alternate = None
        saved = self.pos
        self._skip_newlines()
        if self._at(TokenType.ELSE):
            self._advance()
            if self._at(TokenType.IF):
                alternate = self._parse_if()
            else:
                alternate = self._parse_block("else")
        else:
            self.pos = saved

        return IfStatementNode(
            condition=condition, consequent=consequent, alternate=alternate,
            line=keyword.line, col=keyword.col,
        )

    def _parse_while(self) -> WhileStatementNode:
        keyword = self._advance()
        condition = self._parse_condition("while")
        body = self._parse_block("while")
        return WhileStatementNode(
            condition=condition, body=body,
            line=keyword.line, col=keyword.col,
        )

    def _parse_for(self) -> ForStatementNode:
        """Parse: for ([init]; [condition]; [update]) { ... }."""
        keyword = self._advance()
        self._expect(TokenType.LPAREN, "Expected '(' after 'for'")

        init = None
        if self._at(TokenType.SEMICOLON):
            self._advance()
        elif self._at(TokenType.LET, TokenType.CONST):
            init = self._parse_var_declaration()
        else:
            init = self._parse_expr()
            self._expect(TokenType.SEMICOLON, "Expected ';' after for-loop initializer")

        condition = None
        if not self._at(TokenType.SEMICOLON):
            condition = self._parse_expr()
        self._expect(TokenType.SEMICOLON, "Expected ';' after for-loop condition")

        update = None
        if not self._at(TokenType.RPAREN):
            update = self._parse_expr()
        self._expect(TokenType.RPAREN, "Expected ')' to close for-loop header")

        body = self._parse_block("for")
        return ForStatementNode(
            init=init, condition=condition, update=update, body=body,
            line=keyword.line, col=keyword.col,
        )

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _parse_expr(self) -> ASTNode:
        return self._parse_assignment()

    def _parse_assignment(self) -> ASTNode:
        left = self._parse_logical()

        if self._at(TokenType.EQUALS):
            token = self._advance()
            value = self._parse_assignment()
            return AssignmentExprNode(
                assignee=left, value=value, line=token.line, col=token.col,
            )

        return left

    def _parse_logical(self) -> ASTNode:
        left = self._parse_comparison()

        while self._at(*LOGICAL_TOKENS):
            op = self._advance()
            right = self._parse_comparison()
            left = LogicalExprNode(
                left=left, right=right, operator=op.value,
                line=op.line, col=op.col,
            )

        return left

    def _parse_comparison(self) -> ASTNode:
        left = self._parse_additive()

        while self._at(*COMPARISON_TOKENS):
            op = self._advance()
            right = self._parse_additive()
            left = BinaryExprNode(
                left=left, right=right, operator=op.value,
                line=op.line, col=op.col,
            )

        return left

    def _parse_additive(self) -> ASTNode:
        left = self._parse_multiplicative()

        while self._at(TokenType.BINARY_OPERATOR) and self._current().value in ("+", "-"):
            op = self._advance()
            right = self._parse_multiplicative()
            left = BinaryExprNode(
                left=left, right=right, operator=op.value,
                line=op.line, col=op.col,
            )

        return left

    def _parse_multiplicative(self) -> ASTNode:
        left = self._parse_unary()

        while self._at(TokenType.BINARY_OPERATOR) and self._current().value in ("*", "/", "%"):
            op = self._advance()
            right = self._parse_unary()
            left = BinaryExprNode(
                left=left, right=right, operator=op.value,
                line=op.line, col=op.col,
            )

        return left

    def _parse_unary(self) -> ASTNode:
        token = self._current()
        is_sign = token.type == TokenType.BINARY_OPERATOR and token.value in ("+", "-")

        if is_sign or token.type == TokenType.BANG:
            self._advance()
            operand = self._parse_unary()
            if token.value == "+":
                return operand
            return UnaryExprNode(
                operator=token.value, operand=operand,
                line=token.line, col=token.col,
            )

        return self._parse_call_member()

    # ─────────────────────────────────────────────────────────
    #  Call & Member Chains
    # ─────────────────────────────────────────────────────────

    def _parse_call_member(self) -> ASTNode:
        """Parse postfix `.name`, `[expr]`, and `(args)` in any order."""
        node = self._parse_primary()

        while self._at(TokenType.DOT, TokenType.LBRACKET, TokenType.LPAREN):
            token = self._current()

            if token.type == TokenType.LPAREN:
                node = CallExprNode(
                    caller=node, args=self._parse_args(),
                    line=token.line, col=token.col,
                )
                continue

            self._advance()
            if token.type == TokenType.DOT:
                prop = self._current()
                if prop.type != TokenType.IDENTIFIER:
                    raise self._error(
                        "Cannot use dot operator without right hand side being an identifier"
                    )
                self._advance()
                node = MemberExprNode(
                    object=node,
                    property=IdentifierNode(symbol=prop.value, line=prop.line, col=prop.col),
                    computed=False,
                    line=token.line, col=token.col,
                )
            else:
                prop = self._parse_expr()
                self._expect(TokenType.RBRACKET, "Missing closing bracket in computed member access")
                node = MemberExprNode(
                    object=node, property=prop, computed=True,
                    line=token.line, col=token.col,
                )

        return node

    def _parse_args(self) -> list[ASTNode]:
        """Parse `( expr, expr, ... )`."""
        self._expect(TokenType.LPAREN, "Expected open parenthesis")
        self._skip_newlines()

        args = []
        if not self._at(TokenType.RPAREN):
            args.append(self._parse_assignment())
            self._skip_newlines()
            while self._at(TokenType.COMMA):
                self._advance()
                self._skip_newlines()
                args.append(self._parse_assignment())
                self._skip_newlines()

        self._expect(TokenType.RPAREN, "Missing closing parenthesis")
        return args

    # ─────────────────────────────────────────────────────────
    #  Primary Expressions
    # ─────────────────────────────────────────────────────────

    def _parse_primary(self) -> ASTNode:
        token = self._current()

        match token.type:
            case TokenType.IDENTIFIER:
                self._advance()
                return IdentifierNode(symbol=token.value, line=token.line, col=token.col)

            case TokenType.NUMBER:
                self._advance()
                return NumericLiteralNode(value=float(token.value), line=token.line, col=token.col)

            case TokenType.LPAREN:
                self._advance()
                value = self._parse_expr()
                self._expect(
                    TokenType.RPAREN,
                    "Unexpected token inside parenthesised expression",
                )
                return value

            case TokenType.LBRACKET:
                return self._parse_array()

            case TokenType.LBRACE:
                return self._parse_object()

            case TokenType.QUOTE:
                self._advance()
                text = self._expect(TokenType.STRING, "Expected string contents after quote")
                self._expect(TokenType.QUOTE, "String literals should end with a closing quote")
                return StringLiteralNode(value=text.value, line=token.line, col=token.col)

            case TokenType.TRUE | TokenType.FALSE:
                self._advance()
                return BooleanLiteralNode(
                    value=token.type == TokenType.TRUE, line=token.line, col=token.col,
                )

            case TokenType.NULL:
                self._advance()
                return NullLiteralNode(line=token.line, col=token.col)

        raise self._error(f"Unexpected token {token.type.name} ({token.value!r})")

    def _parse_array(self) -> ArrayLiteralNode:
        """Parse: [a, b, c] with an optional trailing comma."""
        token = self._advance()  # consume [
        self._skip_newlines()
        elements = []

        while not self._at(TokenType.RBRACKET):
            elements.append(self._parse_expr())
            self._skip_newlines()
            if self._at(TokenType.RBRACKET):
                break
            self._expect(TokenType.COMMA, "Array elements should be separated with commas")
            self._skip_newlines()

        self._expect(TokenType.RBRACKET, "Expected closing bracket for array literal")
        return ArrayLiteralNode(elements=elements, line=token.line, col=token.col)

    def _parse_object(self) -> ObjectLiteralNode:
        """Parse: { key, key: expr, ... }."""
        token = self._advance()  # consume {
        self._skip_newlines()
        properties = []

        while not self._at(TokenType.RBRACE):
            key = self._expect(TokenType.IDENTIFIER, "Object literal key expected")
            self._skip_newlines()

            # Shorthand property: { key }
            if self._at(TokenType.COMMA, TokenType.RBRACE):
                properties.append(PropertyNode(key=key.value, line=key.line, col=key.col))
                if self._at(TokenType.COMMA):
                    self._advance()
                    self._skip_newlines()
                continue

            self._expect(TokenType.COLON, "Missing colon following identifier in object literal")
            self._skip_newlines()
            value = self._parse_expr()
            properties.append(PropertyNode(key=key.value, value=value, line=key.line, col=key.col))
            self._skip_newlines()

            if not self._at(TokenType.RBRACE):
                self._expect(TokenType.COMMA, "Expected comma or closing brace following property")
                self._skip_newlines()

        self._expect(TokenType.RBRACE, "Object literal missing closing brace")
        return ObjectLiteralNode(properties=properties, line=token.line, col=token.col)


def produce_ast(tokens: list[Token]) -> ProgramNode:
    """Parse a token list (as returned by tokenize) into a ProgramNode."""
    return Parser(tokens).parse()
