"""
Expression types for formwork IR.

A deliberately small AST for computed values (virtual entity fields and
view fields): concatenation/arithmetic over field references and literals.

Supports:
- Arithmetic and concatenation: +, -, *, /
- Unary minus
- Field references: firstName, author.email
- Literals: strings, numbers, booleans
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class BinaryOp(StrEnum):
    """Binary operators for expressions."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class UnaryOp(StrEnum):
    """Unary operators for expressions."""

    NEG = "-"


class Literal(BaseModel):
    """A literal value: int, float, str or bool."""

    value: int | float | str | bool = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return f'"{self.value}"'
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


class FieldRef(BaseModel):
    """
    Reference to a field, possibly through a relation.

    Examples:
        - FieldRef(path=["firstName"]) → firstName
        - FieldRef(path=["author", "email"]) → author.email
    """

    path: list[str] = Field(description="Field path segments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return ".".join(self.path)

    @property
    def root(self) -> str:
        """The field on the owning entity."""
        return self.path[0]


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"-{self.operand}"


Expr = Literal | FieldRef | BinaryExpr | UnaryExpr

BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()


def field_refs(expr: Expr) -> list[FieldRef]:
    """Collect field references in left-to-right order."""
    if isinstance(expr, FieldRef):
        return [expr]
    if isinstance(expr, BinaryExpr):
        return field_refs(expr.left) + field_refs(expr.right)
    if isinstance(expr, UnaryExpr):
        return field_refs(expr.operand)
    return []


def referenced_fields(expr: Expr) -> list[str]:
    """Root field names referenced by an expression, deduplicated, in order."""
    seen: dict[str, None] = {}
    for ref in field_refs(expr):
        seen.setdefault(ref.root, None)
    return list(seen)
