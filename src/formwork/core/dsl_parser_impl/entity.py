"""
Entity parsing for the formwork DSL.

Handles entity declarations and their fields:

    entity Post {
      id: UUID primaryKey,
      title: String unique
      author: User @relation(name: "PostAuthor")
      tags: Tag[]
      status: PostStatus default(DRAFT)
      summary: String @virtual(from: "title + ' by ' + authorName")
    }
"""

from typing import TYPE_CHECKING, Any

from .. import syntax
from ..lexer import TokenType

FIELD_MODIFIERS = ("primaryKey", "unique", "optional", "readonly")


class EntityParserMixin:
    """
    Mixin providing entity parsing.

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
        parse_arguments: Any

    def parse_entity(self) -> syntax.EntityBlock:
        """Parse entity declaration."""
        start = self.expect(TokenType.ENTITY)
        name = self.expect(TokenType.IDENTIFIER, "entity name").value
        self.expect(TokenType.LBRACE, f"'{{' after entity {name}")

        fields: list[syntax.FieldDecl] = []
        while not self.match(TokenType.RBRACE):
            if self.match(TokenType.EOF):
                raise self.error(f"'}}' to close entity {name}")
            fields.append(self.parse_field())
            if self.match(TokenType.COMMA):
                self.advance()

        self.advance()
        return syntax.EntityBlock(name, tuple(fields), start.position)

    def parse_field(self) -> syntax.FieldDecl:
        """
        Parse a field declaration.

        Grammar:
            IDENT ":" IDENT ("[" "]")? modifier*
        """
        name_token = self.expect_name("field name")
        self.expect(TokenType.COLON, f"':' after field '{name_token.value}'")
        type_token = self.expect(TokenType.IDENTIFIER, "field type")

        is_list = False
        if self.match(TokenType.LBRACKET):
            self.advance()
            self.expect(TokenType.RBRACKET, "']' in list type")
            is_list = True

        modifiers: list[str] = []
        attributes: list[syntax.AttributeCall] = []

        while True:
            token = self.current_token()
            if token.type == TokenType.ATTRIBUTE:
                self.advance()
                args = self.parse_arguments()
                attributes.append(syntax.AttributeCall(token.value, args, token.position))
            elif self.is_name() and self.peek_token().type == TokenType.LPAREN:
                # default(...) written without '@'
                self.advance()
                self.advance()
                args = self.parse_arguments()
                attributes.append(
                    syntax.AttributeCall(token.value, args, token.position, is_annotation=False)
                )
            elif self.is_name() and self.peek_token().type != TokenType.COLON:
                if token.value not in FIELD_MODIFIERS:
                    raise self.error("field modifier (" + ", ".join(FIELD_MODIFIERS) + ")")
                self.advance()
                modifiers.append(token.value)
            else:
                break

        return syntax.FieldDecl(
            name=name_token.value,
            type_name=type_token.value,
            is_list=is_list,
            modifiers=tuple(modifiers),
            attributes=tuple(attributes),
            position=name_token.position,
            type_position=type_token.position,
        )
