"""
Popcorn: a small, dynamically typed scripting language.
Lexer, recursive-descent parser, and tree-walking interpreter.
"""
from .errors import (
    PopcornError, LexerError, ParserError, PopcornRuntimeError,
    UndefinedVariableError, RedeclarationError, ConstantError,
    NotCallableError, TypeMismatchError, IndexOutOfRangeError,
    InvalidAssignmentError, ZeroDivisionRuntimeError,
)
from .lexer import Lexer, Token, TokenType, tokenize
from .nodes import ASTNode, ProgramNode, dump_ast, load_ast, ast_to_json, ast_from_json
from .parser import Parser, produce_ast
from .environment import Environment, make_environment
from .values import (
    RuntimeValue, NULL, NullValue, BooleanValue, NumberValue, StringValue,
    ArrayValue, ObjectValue, FunctionValue, NativeFunctionValue, ReturnSignal,
    format_value, to_python,
)
from .interpreter import Interpreter, evaluate

__version__ = "0.1.0"
__all__ = [
    "PopcornError", "LexerError", "ParserError", "PopcornRuntimeError",
    "UndefinedVariableError", "RedeclarationError", "ConstantError",
    "NotCallableError", "TypeMismatchError", "IndexOutOfRangeError",
    "InvalidAssignmentError", "ZeroDivisionRuntimeError",
    "Lexer", "Token", "TokenType", "tokenize",
    "ASTNode", "ProgramNode", "dump_ast", "load_ast", "ast_to_json", "ast_from_json",
    "Parser", "produce_ast",
    "Environment", "make_environment",
    "RuntimeValue", "NULL", "NullValue", "BooleanValue", "NumberValue",
    "StringValue", "ArrayValue", "ObjectValue", "FunctionValue",
    "NativeFunctionValue", "ReturnSignal", "format_value", "to_python",
    "Interpreter", "evaluate",
]
