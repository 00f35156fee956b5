"""
Parser for computed-field expressions.

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := '-' factor | atom
    atom       := NUMBER | STRING | 'true' | 'false' | path | '(' expression ')'
    path       := NAME ('.' NAME)*

Binary operators are left-associative. A name followed by '(' is rejected
since expressions have no functions.
"""

from __future__ import annotations

from formwork.core.expression_lang.tokenizer import ExpressionTokenError, ExprToken, Lexeme, tokenize
from formwork.core.ir.expressions import BinaryExpr, BinaryOp, Expr, FieldRef, Literal, UnaryExpr, UnaryOp

ADDITIVE = {"+": BinaryOp.ADD, "-": BinaryOp.SUB}
MULTIPLICATIVE = {"*": BinaryOp.MUL, "/": BinaryOp.DIV}


class ExpressionParseError(ValueError):
    """Raised for any expression that cannot be turned into an Expr tree."""

    def __init__(self, message: str, offset: int = 0) -> None:
        super().__init__(message)
        self.offset = offset


class _ExpressionReader:
    def __init__(self, lexemes: list[Lexeme]) -> None:
        self.lexemes = lexemes
        self.index = 0

    @property
    def head(self) -> Lexeme:
        return self.lexemes[self.index]

    def take(self) -> Lexeme:
        lexeme = self.head
        if lexeme.kind != ExprToken.END:
            self.index += 1
        return lexeme

    def fail(self, message: str) -> ExpressionParseError:
        return ExpressionParseError(f"{message} at offset {self.head.offset}", self.head.offset)

    def require(self, kind: ExprToken, context: str) -> Lexeme:
        if self.head.kind != kind:
            raise self.fail(f"Expected {kind} {context}, found {self.head.describe()}")
        return self.take()

    def operator(self, table: dict[str, BinaryOp]) -> BinaryOp | None:
        if self.head.kind == ExprToken.OPERATOR and self.head.text in table:
            return table[self.take().text]
        return None

    def expression(self) -> Expr:
        left = self.term()
        while (op := self.operator(ADDITIVE)) is not None:
            left = BinaryExpr(op=op, left=left, right=self.term())
        return left

    def term(self) -> Expr:
        left = self.factor()
        while (op := self.operator(MULTIPLICATIVE)) is not None:
            left = BinaryExpr(op=op, left=left, right=self.factor())
        return left

    def factor(self) -> Expr:
        if self.head.kind == ExprToken.OPERATOR and self.head.text == "-":
            self.take()
            return UnaryExpr(op=UnaryOp.NEG, operand=self.factor())
        return self.atom()

    def atom(self) -> Expr:
        lexeme = self.head
        match lexeme.kind:
            case ExprToken.NUMBER:
                self.take()
                return Literal(value=float(lexeme.text) if "." in lexeme.text else int(lexeme.text))
            case ExprToken.STRING:
                self.take()
                return Literal(value=lexeme.text)
            case ExprToken.TRUE | ExprToken.FALSE:
                self.take()
                return Literal(value=lexeme.kind == ExprToken.TRUE)
            case ExprToken.LPAREN:
                self.take()
                inner = self.expression()
                self.require(ExprToken.RPAREN, "to close '('")
                return inner
            case ExprToken.NAME:
                return self.path()
        raise self.fail(f"Expected a value, found {lexeme.describe()}")

    def path(self) -> FieldRef:
        segments = [self.take().text]
        if self.head.kind == ExprToken.LPAREN:
            raise self.fail(f"'{segments[0]}' is not a function; expressions cannot call functions")
        while self.head.kind == ExprToken.DOT:
            self.take()
            segments.append(self.require(ExprToken.NAME, "after '.'").text)
        return FieldRef(path=segments)


def parse_expr(source: str) -> Expr:
    """
    Parse a computed-field expression.

    Raises ExpressionParseError for empty input, stray characters, unbalanced
    parentheses and trailing tokens.
    """
    try:
        lexemes = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(str(e), e.offset) from e

    reader = _ExpressionReader(lexemes)
    if reader.head.kind == ExprToken.END:
        raise ExpressionParseError("Expression is empty")
    expr = reader.expression()
    if reader.head.kind != ExprToken.END:
        raise reader.fail(f"Unexpected {reader.head.describe()} after a complete expression")
    return expr
