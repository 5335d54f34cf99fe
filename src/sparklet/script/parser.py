"""Recursive-descent parser for the sparklet script language.

Two entry points: ``parse_expression`` for ``{{...}}`` fragments and
``parse_program`` for helper/action bodies. The statement grammar has no
loops and no property assignment; only local names can be (re)bound.
"""

from contextlib import contextmanager
from typing import Iterator

from ..core.errors import ParseError
from . import nodes as n
from .tokens import Token, TokenType, tokenize

BINARY_PRECEDENCE = {
    "??": 1, "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "===": 3, "!==": 3,
    "<": 4, ">": 4, "<=": 4, ">=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6, "%": 6,
    "**": 7,
}
LOGICAL_OPS = frozenset({"&&", "||", "??"})
RIGHT_ASSOCIATIVE = frozenset({"**"})
UNARY_OPS = frozenset({"!", "-", "+"})

# Nested expressions and statements; keeps parsing well inside the interpreter stack
MAX_NESTING = 100


class Parser:
    """Parses a token list into AST nodes."""

    def __init__(self, tokens: list[Token], depth: int = 0):
        self.tokens = tokens
        self.i = 0
        self.depth = depth

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.i]

    def peek(self, offset: int = 1) -> Token:
        idx = min(self.i + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.i]
        if tok.type != TokenType.EOF:
            self.i += 1
        return tok

    def match(self, punct: str) -> bool:
        if self.current.is_punct(punct):
            self.advance()
            return True
        return False

    def expect(self, punct: str) -> Token:
        if not self.current.is_punct(punct):
            raise self.error(f"Expected '{punct}'")
        return self.advance()

    def expect_ident(self) -> str:
        tok = self.current
        if tok.type != TokenType.IDENT:
            raise self.error("Expected identifier")
        self.advance()
        return tok.value

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self.depth >= MAX_NESTING:
            raise self.error(f"Nesting deeper than {MAX_NESTING} levels")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def error(self, message: str) -> ParseError:
        tok = self.current
        found = "end of input" if tok.type == TokenType.EOF else repr(tok.value)
        return ParseError(f"{message}, found {found} at {tok.pos}", tok.pos)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> n.Block:
        body = []
        while self.current.type != TokenType.EOF:
            stmt = self.parse_statement()
            if stmt is not None:
                body.append(stmt)
        return n.Block(tuple(body))

    def parse_statement(self) -> "n.Statement | None":
        with self._nested():
            return self._parse_statement()

    def _parse_statement(self) -> "n.Statement | None":
        tok = self.current

        if tok.is_punct(";"):
            self.advance()
            return None
        if tok.is_punct("{"):
            return self.parse_block()
        if tok.type == TokenType.KEYWORD and tok.value in ("const", "let", "var"):
            stmt = self.parse_var_decl()
        elif tok.is_keyword("if"):
            return self.parse_if()
        elif tok.is_keyword("return"):
            self.advance()
            value = None
            if not (self.current.is_punct(";") or self.current.is_punct("}")
                    or self.current.type == TokenType.EOF):
                value = self.parse_expression()
            stmt = n.Return(value)
        elif tok.type == TokenType.IDENT and self.peek().is_punct("="):
            name = self.advance().value
            self.advance()
            stmt = n.Assign(name, self.parse_expression())
        else:
            expr = self.parse_expression()
            if self.current.is_punct("="):
                raise self.error("Only local variables can be assigned")
            stmt = n.ExprStmt(expr)

        self.match(";")
        return stmt

    def parse_whole_expression(self) -> n.Node:
        if self.current.type == TokenType.EOF:
            raise self.error("Empty expression")
        expr = self.parse_expression()
        if self.current.type != TokenType.EOF:
            raise self.error("Unexpected token after expression")
        return expr

    def parse_block(self) -> n.Block:
        self.expect("{")
        body = []
        while not self.current.is_punct("}"):
            if self.current.type == TokenType.EOF:
                raise self.error("Unterminated block")
            stmt = self.parse_statement()
            if stmt is not None:
                body.append(stmt)
        self.expect("}")
        return n.Block(tuple(body))

    def parse_var_decl(self) -> n.VarDecl:
        kind = self.advance().value
        name = self.expect_ident()
        init = None
        if self.match("="):
            init = self.parse_expression()
        elif kind == "const":
            raise self.error("Missing initializer in const declaration")
        return n.VarDecl(kind, name, init)

    def parse_if(self) -> n.If:
        self.advance()
        self.expect("(")
        test = self.parse_expression()
        self.expect(")")
        consequent = self.parse_statement() or n.Block(())
        alternate = None
        if self.current.is_keyword("else"):
            self.advance()
            alternate = self.parse_statement() or n.Block(())
        return n.If(test, consequent, alternate)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self) -> n.Node:
        with self._nested():
            return self._parse_expression()

    def _parse_expression(self) -> n.Node:
        if self._at_arrow():
            return self.parse_arrow()

        test = self.parse_binary(1)
        if self.match("?"):
            consequent = self.parse_expression()
            self.expect(":")
            alternate = self.parse_expression()
            return n.Conditional(test, consequent, alternate)
        return test

    def _at_arrow(self) -> bool:
        tok = self.current
        if tok.type == TokenType.IDENT:
            return self.peek().is_punct("=>")
        if not tok.is_punct("("):
            return False

        depth = 0
        j = self.i
        while j < len(self.tokens):
            t = self.tokens[j]
            if t.is_punct("("):
                depth += 1
            elif t.is_punct(")"):
                depth -= 1
                if depth == 0:
                    return j + 1 < len(self.tokens) and self.tokens[j + 1].is_punct("=>")
            elif t.type == TokenType.EOF:
                return False
            j += 1
        return False

    def parse_arrow(self) -> n.Arrow:
        params: list[str] = []
        if self.current.type == TokenType.IDENT:
            params.append(self.advance().value)
        else:
            self.expect("(")
            while not self.current.is_punct(")"):
                params.append(self.expect_ident())
                if not self.match(","):
                    break
            self.expect(")")
        self.expect("=>")

        if self.current.is_punct("{"):
            return n.Arrow(tuple(params), self.parse_block())
        return n.Arrow(tuple(params), self.parse_expression())

    def parse_binary(self, min_prec: int) -> n.Node:
        left = self.parse_unary()
        while True:
            tok = self.current
            if tok.type != TokenType.PUNCT or tok.value not in BINARY_PRECEDENCE:
                return left
            prec = BINARY_PRECEDENCE[tok.value]
            if prec < min_prec:
                return left

            op = self.advance().value
            next_min = prec if op in RIGHT_ASSOCIATIVE else prec + 1
            right = self.parse_binary(next_min)
            if op in LOGICAL_OPS:
                left = n.Logical(op, left, right)
            else:
                left = n.Binary(op, left, right)

    def parse_unary(self) -> n.Node:
        with self._nested():
            return self._parse_unary()

    def _parse_unary(self) -> n.Node:
        tok = self.current
        if tok.type == TokenType.PUNCT and tok.value in UNARY_OPS:
            self.advance()
            return n.Unary(tok.value, self.parse_unary())
        if tok.is_keyword("typeof"):
            self.advance()
            return n.Unary("typeof", self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> n.Node:
        expr = self.parse_primary()
        while True:
            if self.match("."):
                expr = n.Member(expr, self._property_name())
            elif self.match("?."):
                if self.match("["):
                    index = self.parse_expression()
                    self.expect("]")
                    expr = n.Index(expr, index, optional=True)
                elif self.current.is_punct("("):
                    expr = n.Call(expr, self.parse_arguments(), optional=True)
                else:
                    expr = n.Member(expr, self._property_name(), optional=True)
            elif self.match("["):
                index = self.parse_expression()
                self.expect("]")
                expr = n.Index(expr, index)
            elif self.current.is_punct("("):
                expr = n.Call(expr, self.parse_arguments())
            else:
                return expr

    def _property_name(self) -> str:
        tok = self.current
        if tok.type not in (TokenType.IDENT, TokenType.KEYWORD):
            raise self.error("Expected property name")
        self.advance()
        return tok.value

    def parse_arguments(self) -> tuple[n.Node, ...]:
        self.expect("(")
        args = []
        while not self.current.is_punct(")"):
            if self.match("..."):
                args.append(n.Spread(self.parse_expression()))
            else:
                args.append(self.parse_expression())
            if not self.match(","):
                break
        self.expect(")")
        return tuple(args)

    def parse_primary(self) -> n.Node:
        tok = self.current

        if tok.type in (TokenType.NUMBER, TokenType.STRING):
            self.advance()
            return n.Literal(tok.value)
        if tok.type == TokenType.TEMPLATE:
            self.advance()
            return self._template(tok)
        if tok.type == TokenType.IDENT:
            self.advance()
            return n.Identifier(tok.value)
        if tok.type == TokenType.KEYWORD:
            if tok.value in ("true", "false"):
                self.advance()
                return n.Literal(tok.value == "true")
            if tok.value == "null":
                self.advance()
                return n.Literal(None)
            if tok.value == "undefined":
                self.advance()
                return n.Identifier("undefined")
        if self.match("("):
            expr = self.parse_expression()
            self.expect(")")
            return expr
        if tok.is_punct("["):
            return self.parse_array()
        if tok.is_punct("{"):
            return self.parse_object()

        raise self.error("Unexpected token")

    def _template(self, tok: Token) -> n.TemplateLiteral:
        parts: list[n.Node | str] = []
        for is_expr, text in tok.value:
            parts.append(Parser(tokenize(text), self.depth).parse_whole_expression() if is_expr else text)
        return n.TemplateLiteral(tuple(parts))

    def parse_array(self) -> n.ArrayLiteral:
        self.expect("[")
        items = []
        while not self.current.is_punct("]"):
            if self.match("..."):
                items.append(n.Spread(self.parse_expression()))
            else:
                items.append(self.parse_expression())
            if not self.match(","):
                break
        self.expect("]")
        return n.ArrayLiteral(tuple(items))

    def parse_object(self) -> n.ObjectLiteral:
        self.expect("{")
        props: list[n.Property | n.Spread] = []
        while not self.current.is_punct("}"):
            if self.match("..."):
                props.append(n.Spread(self.parse_expression()))
            elif self.match("["):
                key = self.parse_expression()
                self.expect("]")
                self.expect(":")
                props.append(n.Property(key, self.parse_expression()))
            else:
                tok = self.current
                if tok.type in (TokenType.IDENT, TokenType.KEYWORD):
                    key = tok.value
                elif tok.type == TokenType.STRING:
                    key = tok.value
                elif tok.type == TokenType.NUMBER:
                    key = str(tok.value)
                else:
                    raise self.error("Expected property key")
                self.advance()

                if self.match(":"):
                    props.append(n.Property(key, self.parse_expression()))
                elif tok.type == TokenType.IDENT:
                    # Shorthand {index}
                    props.append(n.Property(key, n.Identifier(key)))
                else:
                    raise self.error("Expected ':'")
            if not self.match(","):
                break
        self.expect("}")
        return n.ObjectLiteral(tuple(props))


def parse_expression(source: str) -> n.Node:
    """Parse a single expression; the whole source must be consumed."""
    return Parser(tokenize(source)).parse_whole_expression()


def parse_program(source: str) -> n.Block:
    """Parse a helper or action body."""
    return Parser(tokenize(source)).parse_program()
