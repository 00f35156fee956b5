"""
Scanner for computed-field expressions.

Expressions share the DSL's character rules: names may use any Unicode
letter that is valid in a Python identifier, numbers are ASCII digits only.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from formwork.core.lexer import is_digit, is_name_char, is_name_start


class ExprToken(StrEnum):
    NUMBER = "number"
    STRING = "string"
    NAME = "name"
    TRUE = "true"
    FALSE = "false"
    OPERATOR = "operator"
    LPAREN = "'('"
    RPAREN = "')'"
    DOT = "'.'"
    COMMA = "','"
    END = "end of expression"


OPERATORS = frozenset("+-*/")

DELIMITERS = {
    "(": ExprToken.LPAREN,
    ")": ExprToken.RPAREN,
    ".": ExprToken.DOT,
    ",": ExprToken.COMMA,
}

BOOLEANS = {"true": ExprToken.TRUE, "false": ExprToken.FALSE}


class ExpressionTokenError(ValueError):
    """Raised when an expression contains text that is not a token."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


@dataclass(frozen=True)
class Lexeme:
    kind: ExprToken
    text: str
    offset: int

    def describe(self) -> str:
        if self.kind in (ExprToken.END, ExprToken.LPAREN, ExprToken.RPAREN, ExprToken.DOT, ExprToken.COMMA):
            return str(self.kind)
        return f"{self.kind} {self.text!r}"


class _Scanner:
    def __init__(self, source: str) -> None:
        self.source = source
        self.offset = 0

    def char(self, ahead: int = 0) -> str:
        index = self.offset + ahead
        return self.source[index] if index < len(self.source) else ""

    def take_while(self, predicate) -> str:
        start = self.offset
        while self.char() and predicate(self.char()):
            self.offset += 1
        return self.source[start:self.offset]

    def number(self) -> Lexeme:
        start = self.offset
        self.take_while(is_digit)
        if self.char() == "." and is_digit(self.char(1)):
            self.offset += 1
            self.take_while(is_digit)
        if is_name_char(self.char()):
            raise ExpressionTokenError(f"Unexpected character {self.char()!r} in number", self.offset)
        return Lexeme(ExprToken.NUMBER, self.source[start:self.offset], start)

    def name(self) -> Lexeme:
        start = self.offset
        self.offset += 1
        word = self.source[start] + self.take_while(is_name_char)
        return Lexeme(BOOLEANS.get(word, ExprToken.NAME), word, start)

    def string(self) -> Lexeme:
        start = self.offset
        quote = self.char()
        self.offset += 1
        chars: list[str] = []
        while True:
            ch = self.char()
            if not ch:
                raise ExpressionTokenError("Unterminated string", start)
            self.offset += 1
            if ch == quote:
                return Lexeme(ExprToken.STRING, "".join(chars), start)
            if ch == "\\":
                if not self.char():
                    raise ExpressionTokenError("Unterminated string", start)
                ch = self.char()
                self.offset += 1
            chars.append(ch)

    def scan(self) -> list[Lexeme]:
        lexemes: list[Lexeme] = []
        while True:
            self.take_while(str.isspace)
            ch = self.char()
            if not ch:
                lexemes.append(Lexeme(ExprToken.END, "", self.offset))
                return lexemes
            if ch in "'\"":
                lexemes.append(self.string())
            elif is_digit(ch):
                lexemes.append(self.number())
            elif is_name_start(ch):
                lexemes.append(self.name())
            elif ch in OPERATORS:
                lexemes.append(Lexeme(ExprToken.OPERATOR, ch, self.offset))
                self.offset += 1
            elif ch in DELIMITERS:
                lexemes.append(Lexeme(DELIMITERS[ch], ch, self.offset))
                self.offset += 1
            else:
                raise ExpressionTokenError(f"Unexpected character {ch!r}", self.offset)


def tokenize(source: str) -> list[Lexeme]:
    """Split an expression into lexemes, always ending with an END lexeme."""
    return _Scanner(source).scan()
