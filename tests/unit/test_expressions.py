"""Tests for the computed-field expression language and its Python rendering."""

import pytest

from formwork.core import ir
from formwork.core.expression_lang import ExpressionParseError, parse_expr
from formwork.stacks.backend.expressions import attribute_ref, path_access, to_python, view_ref


class TestParse:
    def test_precedence(self):
        expr = parse_expr("a + b * 2")
        assert expr == ir.BinaryExpr(
            op=ir.BinaryOp.ADD,
            left=ir.FieldRef(path=["a"]),
            right=ir.BinaryExpr(op=ir.BinaryOp.MUL, left=ir.FieldRef(path=["b"]), right=ir.Literal(value=2)),
        )

    def test_left_associative(self):
        assert str(parse_expr("a - b - c")) == "((a - b) - c)"

    def test_parentheses(self):
        assert str(parse_expr("(a + b) * 2")) == "((a + b) * 2)"

    def test_relation_path(self):
        assert parse_expr("author.email") == ir.FieldRef(path=["author", "email"])

    def test_literals(self):
        assert parse_expr("'hi'") == ir.Literal(value="hi")
        assert parse_expr("1.5") == ir.Literal(value=1.5)
        assert parse_expr("true") == ir.Literal(value=True)

    def test_negation(self):
        assert parse_expr("-price") == ir.UnaryExpr(op=ir.UnaryOp.NEG, operand=ir.FieldRef(path=["price"]))

    def test_referenced_fields(self):
        expr = parse_expr("firstName + ' ' + lastName + firstName")
        assert ir.referenced_fields(expr) == ["firstName", "lastName"]

    def test_unicode_name(self):
        assert parse_expr("naïve + 1") == ir.BinaryExpr(
            op=ir.BinaryOp.ADD, left=ir.FieldRef(path=["naïve"]), right=ir.Literal(value=1)
        )

    def test_superscript_is_rejected_with_offset(self):
        with pytest.raises(ExpressionParseError) as exc_info:
            parse_expr("x²")
        assert str(exc_info.value) == "Unexpected character '²' at offset 1"
        assert exc_info.value.offset == 1

    def test_unclosed_parenthesis_message(self):
        with pytest.raises(ExpressionParseError, match=r"Expected '\)' to close '\(', found end of expression"):
            parse_expr("(a + b")

    @pytest.mark.parametrize("source", ["", "a +", "upper(name)", "a $ b", "(a + b", "a b", "'open", "x²", "3²", "a."])
    def test_invalid(self, source):
        with pytest.raises(ExpressionParseError):
            parse_expr(source)


class TestToPython:
    def test_concatenation_uses_add_helper(self):
        code = to_python(parse_expr("firstName + ' ' + lastName"), attribute_ref("obj"))
        assert code == "_add(_add(obj.firstName, ' '), obj.lastName)"

    def test_arithmetic(self):
        assert to_python(parse_expr("price * quantity"), attribute_ref("obj")) == "(obj.price * obj.quantity)"
        assert to_python(parse_expr("-total"), attribute_ref("obj")) == "(-obj.total)"

    def test_relation_path_uses_get_helper(self):
        assert path_access("obj", ["author", "email"]) == "_get(obj, 'author', 'email')"
        assert path_access("obj", ["email"]) == "obj.email"

    def test_view_fields_read_earlier_row_values(self):
        ref = view_ref({"fullName"})
        assert to_python(parse_expr("fullName + email"), ref) == "_add(row['fullName'], obj.email)"
