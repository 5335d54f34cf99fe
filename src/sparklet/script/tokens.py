"""Tokenizer for the sparklet script language."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.errors import TokenizeError
from .values import normalize_number


class TokenType(str, Enum):
    NUMBER = "number"
    STRING = "string"
    TEMPLATE = "template"
    IDENT = "ident"
    KEYWORD = "keyword"
    PUNCT = "punct"
    EOF = "eof"


KEYWORDS = frozenset({
    "const", "let", "var", "if", "else", "return",
    "true", "false", "null", "undefined", "typeof",
})

# Longest first so that "===" wins over "==" and "=".
PUNCTUATORS = (
    "...", "===", "!==",
    "**", "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.",
    "+", "-", "*", "/", "%", "<", ">", "!", "=", "?", ":",
    ".", ",", ";", "(", ")", "[", "]", "{", "}",
)

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: Any
    pos: int

    def is_punct(self, value: str) -> bool:
        return self.type == TokenType.PUNCT and self.value == value

    def is_keyword(self, value: str) -> bool:
        return self.type == TokenType.KEYWORD and self.value == value


class Tokenizer:
    """Turns source text into a list of tokens ending with EOF."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        src = self.source
        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(src):
                break

            ch = src[self.pos]
            start = self.pos

            if ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                self.tokens.append(Token(TokenType.NUMBER, self._read_number(), start))
            elif ch in "\"'":
                self.tokens.append(Token(TokenType.STRING, self._read_string(ch), start))
            elif ch == "`":
                self.tokens.append(Token(TokenType.TEMPLATE, self._read_template(), start))
            elif ch.isalpha() or ch in "_$":
                word = self._read_word()
                kind = TokenType.KEYWORD if word in KEYWORDS else TokenType.IDENT
                self.tokens.append(Token(kind, word, start))
            else:
                self.tokens.append(Token(TokenType.PUNCT, self._read_punct(), start))

        self.tokens.append(Token(TokenType.EOF, None, self.pos))
        return self.tokens

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def _skip_whitespace_and_comments(self) -> None:
        src = self.source
        while self.pos < len(src):
            ch = src[self.pos]
            if ch.isspace():
                self.pos += 1
            elif src.startswith("//", self.pos):
                end = src.find("\n", self.pos)
                self.pos = len(src) if end == -1 else end + 1
            elif src.startswith("/*", self.pos):
                end = src.find("*/", self.pos + 2)
                if end == -1:
                    raise TokenizeError("Unterminated comment", self.pos)
                self.pos = end + 2
            else:
                break

    def _read_number(self) -> int | float:
        src = self.source
        start = self.pos
        while self.pos < len(src) and (src[self.pos].isdigit() or src[self.pos] == "."):
            self.pos += 1
        if self._peek() in ("e", "E"):
            self.pos += 1
            if self._peek() in ("+", "-"):
                self.pos += 1
            while self._peek().isdigit():
                self.pos += 1
        text = src[start:self.pos]
        try:
            if "." in text or "e" in text or "E" in text or len(text) > 15:
                return normalize_number(float(text))
            return int(text)
        except ValueError:
            raise TokenizeError(f"Invalid number literal '{text}'", start) from None

    def _read_escape(self) -> str:
        # Positioned on the character after the backslash
        ch = self._peek()
        if ch == "":
            raise TokenizeError("Unterminated escape sequence", self.pos)
        if ch == "u":
            digits = self.source[self.pos + 1:self.pos + 5]
            try:
                value = chr(int(digits, 16))
            except ValueError:
                raise TokenizeError("Invalid unicode escape", self.pos) from None
            self.pos += 5
            return value
        self.pos += 1
        return ESCAPES.get(ch, ch)

    def _read_string(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        chars: list[str] = []
        while True:
            ch = self._peek()
            if ch == "" or ch == "\n":
                raise TokenizeError("Unterminated string literal", start)
            self.pos += 1
            if ch == quote:
                return "".join(chars)
            if ch == "\\":
                chars.append(self._read_escape())
            else:
                chars.append(ch)

    def _read_template(self) -> tuple[tuple[bool, str], ...]:
        """Read a template literal into (is_expression, text) parts."""
        start = self.pos
        self.pos += 1
        parts: list[tuple[bool, str]] = []
        chars: list[str] = []
        while True:
            ch = self._peek()
            if ch == "":
                raise TokenizeError("Unterminated template literal", start)
            if ch == "`":
                self.pos += 1
                if chars:
                    parts.append((False, "".join(chars)))
                return tuple(parts)
            if ch == "\\":
                self.pos += 1
                chars.append(self._read_escape())
            elif ch == "$" and self._peek(1) == "{":
                if chars:
                    parts.append((False, "".join(chars)))
                    chars = []
                self.pos += 2
                parts.append((True, self._read_template_expression()))
            else:
                chars.append(ch)
                self.pos += 1

    def _read_template_expression(self) -> str:
        start = self.pos
        depth = 0
        quote = ""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if quote:
                if ch == "\\":
                    self.pos += 1
                elif ch == quote:
                    quote = ""
            elif ch in "\"'":
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    text = self.source[start:self.pos]
                    self.pos += 1
                    return text
                depth -= 1
            self.pos += 1
        raise TokenizeError("Unterminated template expression", start)

    def _read_word(self) -> str:
        start = self.pos
        while self.pos < len(self.source) and (
            self.source[self.pos].isalnum() or self.source[self.pos] in "_$"
        ):
            self.pos += 1
        return self.source[start:self.pos]

    def _read_punct(self) -> str:
        for punct in PUNCTUATORS:
            if self.source.startswith(punct, self.pos):
                # "a?.5:1" is a ternary, not optional chaining
                if punct == "?." and self._peek(2).isdigit():
                    continue
                self.pos += len(punct)
                return punct
        raise TokenizeError(f"Unexpected character '{self.source[self.pos]}'", self.pos)


def tokenize(source: str) -> list[Token]:
    """Tokenize source text."""
    return Tokenizer(source).tokenize()
