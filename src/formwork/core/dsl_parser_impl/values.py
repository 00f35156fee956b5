"""
Value parsing for the formwork DSL.

Values appear on the right-hand side of properties and as attribute-call
arguments: string/number/boolean literals, bare or dotted names, `env(VAR)`
secret references, arrays and object literals.
"""

from typing import TYPE_CHECKING, Any

from .. import syntax
from ..lexer import TokenType


class ValueParserMixin:
    """
    Mixin providing value, property and argument parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        expect_name: Any
        advance: Any
        match: Any
        current_token: Any
        peek_token: Any
        is_name: Any
        error: Any
        skip_comma: Any

    def parse_value(self) -> syntax.Value:
        """Parse a single value."""
        token = self.current_token()

        if token.type == TokenType.STRING:
            self.advance()
            return syntax.StringValue(token.value, token.position)

        if token.type == TokenType.NUMBER:
            self.advance()
            return syntax.NumberValue(token.value, token.position)

        if token.type == TokenType.BOOLEAN:
            self.advance()
            return syntax.BooleanValue(token.value == "true", token.position)

        if token.type == TokenType.LBRACKET:
            return self.parse_array()

        if token.type == TokenType.LBRACE:
            self.advance()
            properties = self.parse_properties()
            self.expect(TokenType.RBRACE, "'}' to close object")
            return syntax.ObjectValue(properties, token.position)

        if self.is_name():
            if token.value == "env" and self.peek_token().type == TokenType.LPAREN:
                return self.parse_env()
            return self.parse_name_value()

        raise self.error("value")

    def parse_name_value(self) -> syntax.NameValue:
        """Parse `a` or `a.b.c`."""
        first = self.expect_name()
        parts = [first.value]
        while self.match(TokenType.DOT):
            self.advance()
            parts.append(self.expect_name("identifier after '.'").value)
        return syntax.NameValue(tuple(parts), first.position)

    def parse_env(self) -> syntax.EnvValue:
        """Parse `env(VAR_NAME)`."""
        start = self.advance()
        self.expect(TokenType.LPAREN)
        var = self.expect(TokenType.IDENTIFIER, "environment variable name").value
        self.expect(TokenType.RPAREN, "')' to close env(...)")
        return syntax.EnvValue(var, start.position)

    def parse_array(self) -> syntax.ArrayValue:
        """Parse `[value, value, ...]`; commas are optional separators."""
        start = self.expect(TokenType.LBRACKET)
        items: list[syntax.Value] = []
        while not self.match(TokenType.RBRACKET):
            if self.match(TokenType.EOF):
                raise self.error("']' to close array")
            items.append(self.parse_value())
            self.skip_comma()
        self.advance()
        return syntax.ArrayValue(tuple(items), start.position)

    def parse_property(self) -> syntax.Property:
        """Parse `key: value`."""
        key = self.expect_name("property name")
        self.expect(TokenType.COLON, f"':' after '{key.value}'")
        value = self.parse_value()
        return syntax.Property(key.value, value, key.position)

    def parse_properties(self) -> tuple[syntax.Property, ...]:
        """Parse properties up to (not including) the closing brace."""
        properties: list[syntax.Property] = []
        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error("'}'")
            properties.append(self.parse_property())
            self.skip_comma()
        return tuple(properties)

    def parse_arguments(self) -> tuple[syntax.Argument, ...]:
        """
        Parse attribute-call arguments up to and including ')'.

        Arguments are `key: value` pairs or bare values, comma separated.
        """
        args: list[syntax.Argument] = []
        while not self.match(TokenType.RPAREN):
            token = self.current_token()
            if self.is_name() and self.peek_token().type == TokenType.COLON:
                self.advance()
                self.advance()
                args.append(syntax.Argument(token.value, self.parse_value(), token.position))
            else:
                args.append(syntax.Argument(None, self.parse_value(), token.position))

            if self.match(TokenType.COMMA):
                self.advance()
            elif not self.match(TokenType.RPAREN):
                raise self.error("',' or ')' in argument list")
        self.advance()
        return tuple(args)
