"""
Lexer/Tokenizer for the formwork DSL.

Converts raw DSL text into a stream of tokens with source location tracking.
The DSL is brace-delimited, so newlines are insignificant whitespace.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import ErrorContext, LexError, SourcePosition


class TokenType(Enum):
    """Token types in the formwork DSL."""

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"

    # Block keywords
    ENTITY = "entity"
    PAGE = "page"
    VIEW = "view"
    WORKFLOW = "workflow"
    ENUM = "enum"
    CONFIG = "config"

    # Attribute-call opener: @name(
    ATTRIBUTE = "ATTRIBUTE"

    # Punctuation
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    COMMA = ","
    DOT = "."

    EOF = "EOF"


KEYWORDS = {
    "entity",
    "page",
    "view",
    "workflow",
    "enum",
    "config",
}

BOOLEANS = {"true", "false"}

PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
}

ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


def is_digit(ch: str) -> bool:
    """ASCII decimal digit; superscripts and other Unicode digits are not numbers."""
    return "0" <= ch <= "9"


def is_name_start(ch: str) -> bool:
    return ch.isidentifier()


def is_name_char(ch: str) -> bool:
    # names end up as Python identifiers in generated code
    return len(ch) == 1 and ("_" + ch).isidentifier()


@dataclass(frozen=True)
class Token:
    """
    A single token in the DSL.

    Attributes:
        type: Type of token
        value: String value of the token (unescaped for strings)
        position: Line, column and byte offset of the first character
    """

    type: TokenType
    value: str
    position: SourcePosition

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    def describe(self) -> str:
        """Short human-readable description used in error messages."""
        if self.type == TokenType.EOF:
            return "end of file"
        if self.type == TokenType.STRING:
            return f"string {self.value!r}"
        if self.type == TokenType.ATTRIBUTE:
            return f"'@{self.value}('"
        return f"{self.type.name} {self.value!r}"


class Lexer:
    """
    Lexer for the formwork DSL.

    Iterating a Lexer always scans from the start of the text, so the same
    instance can be consumed more than once with identical results.
    """

    def __init__(self, text: str, file: Path):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
            file: Source file path (for error reporting)
        """
        self.text = text
        self.file = file
        self._reset()

    def _reset(self) -> None:
        self.pos = 0
        self.offset = 0
        self.line = 1
        self.column = 1

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def position(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.offset)

    def advance(self) -> None:
        """Move to next character, updating line/column/byte offset."""
        if self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.offset += len(ch.encode("utf-8"))
            self.pos += 1

    def error(self, position: SourcePosition, char: str, message: str | None = None) -> LexError:
        context = ErrorContext.from_source(self.file, self.text, position)
        return LexError(position, char, context, message)

    def skip_whitespace_and_comments(self) -> None:
        """Skip whitespace (including newlines) and // comments."""
        while True:
            ch = self.current_char()
            if ch is not None and ch.isspace():
                self.advance()
            elif ch == "/" and self.peek_char() == "/":
                while self.current_char() not in (None, "\n"):
                    self.advance()
            else:
                return

    def read_string(self) -> str:
        """Read a quoted string."""
        start = self.position()
        quote = self.current_char()
        self.advance()

        chars = []
        while True:
            current = self.current_char()
            if current is None or current == "\n":
                raise self.error(start, quote or "", "Unterminated string literal")
            if current == quote:
                break

            if current == "\\":
                self.advance()
                escape_char = self.current_char()
                if escape_char is None:
                    raise self.error(start, quote or "", "Unterminated string literal")
                chars.append(ESCAPES.get(escape_char, escape_char))
                self.advance()
            else:
                chars.append(current)
                self.advance()

        self.advance()  # closing quote
        return "".join(chars)

    def read_number(self) -> str:
        """Read an integer or decimal, with optional leading minus."""
        chars = []
        if self.current_char() == "-":
            chars.append("-")
            self.advance()

        seen_dot = False
        current = self.current_char()
        while current is not None and (is_digit(current) or (current == "." and not seen_dot)):
            if current == ".":
                # "1." followed by a non-digit is a number then a DOT
                nxt = self.peek_char()
                if nxt is None or not is_digit(nxt):
                    break
                seen_dot = True
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        chars = []
        current = self.current_char()
        while current is not None and is_name_char(current):
            chars.append(current)
            self.advance()
            current = self.current_char()
        return "".join(chars)

    def read_attribute(self) -> str:
        """Read an attribute-call opener '@name(' and return the name."""
        start = self.position()
        self.advance()  # @
        ch = self.current_char()
        if ch is None or not is_name_start(ch):
            raise self.error(start, "@", "Expected attribute name after '@'")
        name = self.read_identifier()
        if self.current_char() != "(":
            raise self.error(start, "@", f"Expected '(' after '@{name}'")
        self.advance()
        return name

    def __iter__(self) -> Iterator[Token]:
        self._reset()
        while True:
            self.skip_whitespace_and_comments()
            ch = self.current_char()
            start = self.position()

            if ch is None:
                yield Token(TokenType.EOF, "", start)
                return

            if ch in ('"', "'"):
                yield Token(TokenType.STRING, self.read_string(), start)
            elif is_digit(ch) or (ch == "-" and is_digit(self.peek_char() or "")):
                yield Token(TokenType.NUMBER, self.read_number(), start)
            elif is_name_start(ch):
                value = self.read_identifier()
                if value in KEYWORDS:
                    token_type = TokenType(value)
                elif value in BOOLEANS:
                    token_type = TokenType.BOOLEAN
                else:
                    token_type = TokenType.IDENTIFIER
                yield Token(token_type, value, start)
            elif ch == "@":
                yield Token(TokenType.ATTRIBUTE, self.read_attribute(), start)
            elif ch in PUNCTUATION:
                self.advance()
                yield Token(PUNCTUATION[ch], ch, start)
            else:
                raise self.error(start, ch)

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with EOF

        Raises:
            LexError: On the first character that matches no token rule
        """
        return list(self)


def tokenize(text: str, file: Path) -> list[Token]:
    """
    Convenience function to tokenize DSL text.

    Args:
        text: Source text
        file: Source file path

    Returns:
        List of tokens
    """
    return Lexer(text, file).tokenize()
