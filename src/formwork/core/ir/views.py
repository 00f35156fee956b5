"""
View types for formwork IR.

A view projects an entity into a read model of plain field references and
computed fields.

DSL Syntax:

    view AuthorCard {
      from: User
      fields: [
        email,
        { name: contact, field: email },
        { name: displayName, expression: "firstName + ' ' + lastName", type: String }
      ]
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .expressions import Expr


class ViewFieldSpec(BaseModel):
    """
    A field of a view: either a field reference or a computed expression.

    Attributes:
        name: Field name in the view
        type: Declared result type name
        field: Source entity field, for references
        expression: Parsed expression, for computed fields
        source: Original expression text
        resolver: Resolver function name, for computed fields
    """

    name: str
    type: str = "String"
    field: str | None = None
    expression: Expr | None = None
    source: str | None = None
    resolver: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_computed(self) -> bool:
        return self.expression is not None


class ViewSpec(BaseModel):
    name: str
    source_entity: str
    fields: list[ViewFieldSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
