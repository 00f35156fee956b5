"""
formwork computed-field expression language.

Tokenizer and parser for `@virtual(from: ...)` and view field expressions.

Usage:
    from formwork.core.expression_lang import parse_expr

    expr = parse_expr("firstName + ' ' + lastName")
"""

from formwork.core.expression_lang.parser import ExpressionParseError, parse_expr

__all__ = ["ExpressionParseError", "parse_expr"]
