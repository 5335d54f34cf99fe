"""
Sparklet script language.

A closed, JS-flavoured expression and statement language interpreted over an
explicit AST. Nothing is compiled to host code.
"""

from .interpreter import Closure, Interpreter, Scope, binary_op, get_index, get_member
from .parser import Parser, parse_expression, parse_program
from .tokens import Token, TokenType, tokenize
from .values import (
    UNDEFINED,
    Namespace,
    NativeFunction,
    ScriptObject,
    is_truthy,
    strict_equals,
    to_js_string,
    to_json_value,
    to_number,
    type_of,
)

__all__ = [
    # Tokenizer / parser
    "Token",
    "TokenType",
    "tokenize",
    "Parser",
    "parse_expression",
    "parse_program",
    # Interpreter
    "Interpreter",
    "Scope",
    "Closure",
    "binary_op",
    "get_member",
    "get_index",
    # Values
    "UNDEFINED",
    "NativeFunction",
    "Namespace",
    "ScriptObject",
    "is_truthy",
    "strict_equals",
    "to_js_string",
    "to_json_value",
    "to_number",
    "type_of",
]
