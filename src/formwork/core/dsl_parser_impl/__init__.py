"""
formwork DSL Parser Package.

The parser is built using mixins to separate parsing logic by construct type.

The main exports are:
- Parser: The complete parser class
- parse_dsl: Convenience function to parse DSL text

Usage:
    from formwork.core.dsl_parser_impl import parse_dsl

    program = parse_dsl(text, file)
"""

from pathlib import Path

from .. import syntax
from ..lexer import TokenType, tokenize
from .base import BaseParser
from .blocks import BlockParserMixin
from .entity import EntityParserMixin
from .enum import EnumParserMixin
from .values import ValueParserMixin


class Parser(
    BaseParser,
    ValueParserMixin,
    EntityParserMixin,
    EnumParserMixin,
    BlockParserMixin,
):
    """
    Complete formwork DSL Parser.

    - ValueParserMixin: literals, names, env(), arrays, objects, arguments
    - EntityParserMixin: entity blocks and field declarations
    - EnumParserMixin: enum blocks
    - BlockParserMixin: page, view, workflow and config blocks

    Parsing is fail-fast: the first malformed construct raises DSLSyntaxError
    and no partial tree is returned.
    """

    def parse(self) -> syntax.Program:
        """
        Parse the whole token stream.

        Returns:
            Program with blocks in source order
        """
        dispatch = {
            TokenType.ENTITY: self.parse_entity,
            TokenType.ENUM: self.parse_enum,
            TokenType.PAGE: self.parse_page,
            TokenType.VIEW: self.parse_view,
            TokenType.WORKFLOW: self.parse_workflow,
            TokenType.CONFIG: self.parse_config,
        }

        blocks: list[syntax.Block] = []
        while not self.match(TokenType.EOF):
            handler = dispatch.get(self.current_token().type)
            if handler is None:
                raise self.error("block keyword (entity, page, view, workflow, enum, config)")
            blocks.append(handler())

        return syntax.Program(tuple(blocks))


def parse_dsl(text: str, file: Path) -> syntax.Program:
    """
    Parse DSL text into a syntax tree.

    Args:
        text: DSL source text
        file: Source file path (for error reporting)

    Returns:
        Program syntax tree

    Raises:
        LexError: On characters matching no token rule
        DSLSyntaxError: On the first malformed construct
    """
    tokens = tokenize(text, file)
    return Parser(tokens, file, text).parse()


__all__ = ["Parser", "parse_dsl"]
