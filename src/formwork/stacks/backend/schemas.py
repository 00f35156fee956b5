"""
Request/response schema planning.

The same field lists drive the generated pydantic schemas (app/schemas.py)
and the OpenAPI components, so the two cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from formwork.core import ir

from .types import field_to_property, get_python_type, python_type_for_name, type_name_to_property


@dataclass(frozen=True)
class SchemaField:
    name: str
    python_type: str
    property: dict[str, Any]
    required: bool


@dataclass
class EntitySchemas:
    """Create, Update and Read schemas for one entity."""

    entity: str
    create: list[SchemaField] = field(default_factory=list)
    update: list[SchemaField] = field(default_factory=list)
    read: list[SchemaField] = field(default_factory=list)


def _key_type(spec: ir.AppSpec, entity_name: str) -> tuple[str, dict[str, Any]]:
    entity = spec.get_entity(entity_name)
    pk = entity.primary_key if entity else None
    if pk is None:
        return "UUID", {"type": "string", "format": "uuid"}
    return get_python_type(pk.type), field_to_property(pk.type)


def build_entity_schemas(spec: ir.AppSpec, entity: ir.EntitySpec) -> EntitySchemas:
    schemas = EntitySchemas(entity=entity.name)

    for f in entity.fields:
        if f.virtual is not None:
            prop = dict(field_to_property(f.type), readOnly=True)
            schemas.read.append(SchemaField(f.name, get_python_type(f.type), prop, required=False))
            continue

        rel = f.relation
        if rel is not None:
            if not rel.owns_key:
                continue
            py_type, prop = _key_type(spec, rel.target)
            prop = dict(prop, description=f"Reference to {rel.target}")
            key = f"{f.name}_id"
            required = not f.is_optional
            schemas.create.append(SchemaField(key, py_type, prop, required=required))
            if not f.is_readonly:
                schemas.update.append(SchemaField(key, py_type, prop, required=False))
            schemas.read.append(SchemaField(key, py_type, prop, required=required))
            continue

        py_type = get_python_type(f.type)
        prop = field_to_property(f.type)
        generated = f.is_primary_key and f.default is not None
        if not generated:
            schemas.create.append(
                SchemaField(f.name, py_type, prop, required=not f.is_optional and f.default is None)
            )
            if not f.is_readonly and not f.is_primary_key:
                schemas.update.append(SchemaField(f.name, py_type, prop, required=False))
        if f.type.kind != ir.FieldTypeKind.PASSWORD:
            schemas.read.append(SchemaField(f.name, py_type, prop, required=not f.is_optional))

    return schemas


def build_view_schema(spec: ir.AppSpec, view: ir.ViewSpec) -> list[SchemaField]:
    fields = []
    for vf in view.fields:
        prop = type_name_to_property(vf.type, spec)
        if vf.is_computed:
            prop = dict(prop, readOnly=True)
        fields.append(SchemaField(vf.name, python_type_for_name(vf.type, spec), prop, required=False))
    return fields


def component_schema(fields: list[SchemaField]) -> dict[str, Any]:
    """OpenAPI object schema for a field list."""
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {f.name: f.property for f in fields},
    }
    required = [f.name for f in fields if f.required]
    if required:
        schema["required"] = required
    return schema
