"""
Domain types for formwork IR.

Entities and the relation graph between them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .fields import Cardinality, FieldSpec


class RelationEdge(BaseModel):
    """
    One side of a relation as seen from an entity.

    Declared edges point at a field on the entity itself. Inverse edges are
    synthesized for the target side of a relation whose other side was not
    declared; they have no backing field.

    Attributes:
        name: Relation name
        target: Entity on the other side
        cardinality: Cardinality from this entity
        field: Declared field holding the relation, None for inverse edges
        inverse_field: Field on the target entity forming the other side
    """

    name: str
    target: str
    cardinality: Cardinality
    field: str | None = None
    inverse_field: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_inverse(self) -> bool:
        return self.field is None


class EntitySpec(BaseModel):
    """
    Specification for a domain entity.

    Attributes:
        name: Entity name (PascalCase)
        fields: Fields in declaration order
        relations: Relation edges touching this entity, declared first
    """

    name: str
    fields: list[FieldSpec] = Field(default_factory=list)
    relations: list[RelationEdge] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def primary_key(self) -> FieldSpec | None:
        for f in self.fields:
            if f.is_primary_key:
                return f
        return None

    @property
    def stored_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.is_stored]

    @property
    def virtual_fields(self) -> list[FieldSpec]:
        return [f for f in self.fields if f.is_virtual]

    def get_field(self, name: str) -> FieldSpec | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None
