"""
Base parser class for the formwork DSL.

Provides common token manipulation and utility methods used by all parser mixins.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..errors import DSLSyntaxError, ErrorContext
from ..lexer import KEYWORDS, Token, TokenType

if TYPE_CHECKING:
    from .. import syntax

# Block keywords may appear as property keys and bare names, e.g. `entity: Post`.
KEYWORD_TYPES = frozenset(TokenType(keyword) for keyword in KEYWORDS)


@runtime_checkable
class ParserProtocol(Protocol):
    """
    Protocol defining the interface available to parser mixins.

    This allows mypy to understand that mixins will have access to
    BaseParser methods when combined in the final Parser class.
    """

    tokens: list[Token]
    file: Path
    pos: int

    def current_token(self) -> Token: ...
    def peek_token(self, offset: int = 1) -> Token: ...
    def advance(self) -> Token: ...
    def expect(self, token_type: TokenType, expected: str | None = None) -> Token: ...
    def expect_name(self, expected: str = "identifier") -> Token: ...
    def match(self, *token_types: TokenType) -> bool: ...
    def error(self, expected: str, token: Token | None = None) -> DSLSyntaxError: ...

    # Cross-mixin methods
    def parse_value(self) -> "syntax.Value": ...
    def parse_properties(self) -> "tuple[syntax.Property, ...]": ...


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    This class provides the foundation for recursive descent parsing,
    including token navigation, matching, and error generation.
    """

    def __init__(self, tokens: list[Token], file: Path, source: str | None = None):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from lexer (ending with EOF)
            file: Source file path (for error reporting)
            source: Optional source text, used for error snippets
        """
        self.tokens = tokens
        self.file = file
        self.source = source
        self.pos = 0

    def current_token(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def peek_token(self, offset: int = 1) -> Token:
        """Peek ahead at token."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[pos]

    def advance(self) -> Token:
        """Consume and return current token."""
        token = self.current_token()
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def match(self, *token_types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current_token().type in token_types

    def is_name(self, token: Token | None = None) -> bool:
        """True for identifiers and keywords used in name position."""
        token = token or self.current_token()
        return token.type == TokenType.IDENTIFIER or token.type in KEYWORD_TYPES

    def error(self, expected: str, token: Token | None = None) -> DSLSyntaxError:
        """Build a syntax error for the current (or given) token."""
        token = token or self.current_token()
        context = ErrorContext.from_source(self.file, self.source, token.position)
        return DSLSyntaxError(token.position, expected, token.describe(), context)

    def expect(self, token_type: TokenType, expected: str | None = None) -> Token:
        """
        Expect a specific token type and consume it.

        Raises:
            DSLSyntaxError: If token doesn't match
        """
        if self.current_token().type != token_type:
            raise self.error(expected or f"'{token_type.value}'")
        return self.advance()

    def expect_name(self, expected: str = "identifier") -> Token:
        """Expect an identifier, accepting block keywords as plain names."""
        if not self.is_name():
            raise self.error(expected)
        return self.advance()

    def skip_comma(self) -> None:
        """Consume an optional separating comma."""
        if self.match(TokenType.COMMA):
            self.advance()
