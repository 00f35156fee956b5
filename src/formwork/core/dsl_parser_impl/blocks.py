"""
Property-block parsing for the formwork DSL.

Pages, views, workflows and config sections share one body shape, a list of
`key: value` properties. Interpretation of the keys happens in the validator.

    page Posts { type: table, entity: Post, permissions: ["ADMIN"] }
    view UserSummary { from: User, fields: [email, { name: label, expression: "..." }] }
    workflow Welcome { trigger: { event: "user.created", entity: User }, steps: [...] }
    config auth { provider: jwt, userEntity: User }
    config { db: postgresql }
"""

from typing import TYPE_CHECKING, Any

from .. import syntax
from ..lexer import TokenType


class BlockParserMixin:
    """
    Mixin providing page, view, workflow and config parsing.

    Note: This mixin expects to be combined with BaseParser via multiple inheritance.
    """

    if TYPE_CHECKING:
        expect: Any
        advance: Any
        match: Any
        current_token: Any
        parse_properties: Any

    def _parse_property_block(self, keyword: TokenType, node_type: type, *, anonymous: bool = False):
        start = self.expect(keyword)
        name = None
        if not (anonymous and self.match(TokenType.LBRACE)):
            name = self.expect(TokenType.IDENTIFIER, f"{keyword.value} name").value
        label = f"{keyword.value} {name}" if name else keyword.value
        self.expect(TokenType.LBRACE, f"'{{' after {label}")
        properties = self.parse_properties()
        self.expect(TokenType.RBRACE, f"'}}' to close {label}")
        return node_type(name, properties, start.position)

    def parse_page(self) -> syntax.PageBlock:
        return self._parse_property_block(TokenType.PAGE, syntax.PageBlock)

    def parse_view(self) -> syntax.ViewBlock:
        return self._parse_property_block(TokenType.VIEW, syntax.ViewBlock)

    def parse_workflow(self) -> syntax.WorkflowBlock:
        return self._parse_property_block(TokenType.WORKFLOW, syntax.WorkflowBlock)

    def parse_config(self) -> syntax.ConfigBlock:
        """Parse `config { ... }` or `config <section> { ... }`."""
        return self._parse_property_block(TokenType.CONFIG, syntax.ConfigBlock, anonymous=True)
