"""
Field type definitions for formwork IR.

This module contains the core field type system including field types,
modifiers, relation metadata and field specifications.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .config import SecretRef
from .expressions import Expr


class FieldTypeKind(str, Enum):
    """Enumeration of supported field types in formwork."""

    STRING = "String"
    TEXT = "Text"
    INT = "Int"
    DECIMAL = "Decimal"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    UUID = "UUID"
    JSON = "JSON"
    ENUM = "Enum"
    PASSWORD = "Password"
    RELATION = "Relation"


# Type names usable directly in the DSL. ENUM and RELATION are reached
# through declared enum and entity names.
SCALAR_TYPE_NAMES = {
    kind.value: kind
    for kind in FieldTypeKind
    if kind not in (FieldTypeKind.ENUM, FieldTypeKind.RELATION)
}


class FieldType(BaseModel):
    """
    Represents a field type specification.

    Examples:
        - String: FieldType(kind=STRING)
        - UserRole (enum): FieldType(kind=ENUM, enum_name="UserRole")
        - User (entity): FieldType(kind=RELATION, ref_entity="User")
        - Post[]: FieldType(kind=RELATION, ref_entity="Post", is_list=True)
    """

    kind: FieldTypeKind
    enum_name: str | None = None
    ref_entity: str | None = None
    is_list: bool = False

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        name = self.enum_name or self.ref_entity or self.kind.value
        return f"{name}[]" if self.is_list else name


class FieldModifier(str, Enum):
    """Modifiers that can be applied to fields."""

    PRIMARY_KEY = "primaryKey"
    UNIQUE = "unique"
    OPTIONAL = "optional"
    READONLY = "readonly"


class Cardinality(str, Enum):
    """Relation cardinality, read from the side of the field that holds it."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"

    @property
    def inverse(self) -> Cardinality:
        return {
            Cardinality.ONE_TO_MANY: Cardinality.MANY_TO_ONE,
            Cardinality.MANY_TO_ONE: Cardinality.ONE_TO_MANY,
        }.get(self, self)


class RelationSpec(BaseModel):
    """
    Relation metadata on a relation-typed field.

    Attributes:
        target: Target entity name
        name: Relation name (explicit, or "{Source}To{Target}")
        cardinality: Cardinality from this field's entity
        inverse_field: Field on the target that forms the other side, if declared
        owns_key: This side stores the foreign key column
    """

    target: str
    name: str
    cardinality: Cardinality
    inverse_field: str | None = None
    owns_key: bool = False

    model_config = ConfigDict(frozen=True)


class VirtualFieldSpec(BaseModel):
    """
    A computed field.

    Attributes:
        expression: Parsed expression AST
        source: Original expression text
        resolver: Stable resolver function name
        depends_on: Fields the expression reads, in order
    """

    expression: Expr
    source: str
    resolver: str
    depends_on: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


DefaultValue = str | int | float | bool | SecretRef


class FieldSpec(BaseModel):
    """
    Specification for a single field in an entity.

    Attributes:
        name: Field identifier
        type: Field type specification
        modifiers: Modifiers in declaration order
        default: Optional default value (enum defaults hold the member name)
        relation: Relation metadata for relation-typed fields
        virtual: Computed-field metadata for @virtual fields
    """

    name: str
    type: FieldType
    modifiers: list[FieldModifier] = Field(default_factory=list)
    default: DefaultValue | None = None
    relation: RelationSpec | None = None
    virtual: VirtualFieldSpec | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_primary_key(self) -> bool:
        return FieldModifier.PRIMARY_KEY in self.modifiers

    @property
    def is_unique(self) -> bool:
        return FieldModifier.UNIQUE in self.modifiers or self.is_primary_key

    @property
    def is_optional(self) -> bool:
        return FieldModifier.OPTIONAL in self.modifiers

    @property
    def is_readonly(self) -> bool:
        return FieldModifier.READONLY in self.modifiers or self.is_virtual

    @property
    def is_relation(self) -> bool:
        return self.type.kind == FieldTypeKind.RELATION

    @property
    def is_virtual(self) -> bool:
        return self.virtual is not None

    @property
    def is_stored(self) -> bool:
        """Backed by a database column (not virtual, not the list side of a relation)."""
        return not self.is_virtual and not self.type.is_list
