"""
Enum parser mixin for the formwork DSL.

DSL Syntax:

    enum UserRole { ADMIN, EDITOR, VIEWER }
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import syntax
from ..lexer import TokenType


class EnumParserMixin:
    """Parser mixin for enum blocks."""

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        error: Any

    def parse_enum(self) -> syntax.EnumBlock:
        """
        Parse an enum block.

        Grammar:
            enum IDENTIFIER "{" (IDENTIFIER ","?)* "}"
        """
        start = self.expect(TokenType.ENUM)
        name = self.expect(TokenType.IDENTIFIER, "enum name").value
        self.expect(TokenType.LBRACE, f"'{{' after enum {name}")

        values: list[syntax.EnumValueDecl] = []
        while not self.match(TokenType.RBRACE):
            token = self.expect(TokenType.IDENTIFIER, f"enum value or '}}' in enum {name}")
            values.append(syntax.EnumValueDecl(token.value, token.position))
            if self.match(TokenType.COMMA):
                self.advance()

        self.advance()
        return syntax.EnumBlock(name, tuple(values), start.position)
