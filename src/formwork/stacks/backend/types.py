"""
Type mappings for the FastAPI backend.

Maps IR field kinds to SQLAlchemy column types, Python annotations and
OpenAPI properties.
"""

from __future__ import annotations

from typing import Any

from formwork.core import ir

COLUMN_TYPES = {
    ir.FieldTypeKind.STRING: "String(255)",
    ir.FieldTypeKind.TEXT: "Text",
    ir.FieldTypeKind.INT: "Integer",
    ir.FieldTypeKind.DECIMAL: "Numeric(12, 2)",
    ir.FieldTypeKind.BOOLEAN: "Boolean",
    ir.FieldTypeKind.DATETIME: "DateTime(timezone=True)",
    ir.FieldTypeKind.UUID: "Uuid",
    ir.FieldTypeKind.JSON: "JSON",
    ir.FieldTypeKind.PASSWORD: "String(255)",
}

PYTHON_TYPES = {
    ir.FieldTypeKind.STRING: "str",
    ir.FieldTypeKind.TEXT: "str",
    ir.FieldTypeKind.INT: "int",
    ir.FieldTypeKind.DECIMAL: "Decimal",
    ir.FieldTypeKind.BOOLEAN: "bool",
    ir.FieldTypeKind.DATETIME: "datetime",
    ir.FieldTypeKind.UUID: "UUID",
    ir.FieldTypeKind.JSON: "Any",
    ir.FieldTypeKind.PASSWORD: "str",
}


def get_column_type(field_type: ir.FieldType) -> str:
    """Get SQLAlchemy column type."""
    if field_type.kind == ir.FieldTypeKind.ENUM:
        return f"SQLEnum({field_type.enum_name})"
    if field_type.kind == ir.FieldTypeKind.RELATION:
        return "Uuid"
    return COLUMN_TYPES[field_type.kind]


def get_python_type(field_type: ir.FieldType) -> str:
    """Get Python type annotation for a field."""
    if field_type.kind == ir.FieldTypeKind.ENUM:
        return field_type.enum_name or "str"
    if field_type.kind == ir.FieldTypeKind.RELATION:
        return "UUID"
    return PYTHON_TYPES[field_type.kind]


def python_type_for_name(type_name: str, spec: ir.AppSpec) -> str:
    """Python annotation for a type written by name (view field types)."""
    if type_name in ir.SCALAR_TYPE_NAMES:
        return PYTHON_TYPES[ir.SCALAR_TYPE_NAMES[type_name]]
    if spec.get_enum(type_name):
        return type_name
    # relation-typed view fields hold the related key or objects
    return "Any"


def field_to_property(field_type: ir.FieldType) -> dict[str, Any]:
    """Convert an IR field type to an OpenAPI property."""
    kind = field_type.kind
    if kind in (ir.FieldTypeKind.STRING, ir.FieldTypeKind.TEXT, ir.FieldTypeKind.PASSWORD):
        prop: dict[str, Any] = {"type": "string"}
        if kind == ir.FieldTypeKind.STRING:
            prop["maxLength"] = 255
        if kind == ir.FieldTypeKind.PASSWORD:
            prop["format"] = "password"
        return prop
    if kind == ir.FieldTypeKind.INT:
        return {"type": "integer", "format": "int64"}
    if kind == ir.FieldTypeKind.DECIMAL:
        return {"type": "string", "format": "decimal"}
    if kind == ir.FieldTypeKind.BOOLEAN:
        return {"type": "boolean"}
    if kind == ir.FieldTypeKind.DATETIME:
        return {"type": "string", "format": "date-time"}
    if kind == ir.FieldTypeKind.UUID:
        return {"type": "string", "format": "uuid"}
    if kind == ir.FieldTypeKind.JSON:
        return {}
    if kind == ir.FieldTypeKind.ENUM:
        return {"$ref": f"#/components/schemas/{field_type.enum_name}"}
    # Reference to another entity (UUID foreign key)
    return {"type": "string", "format": "uuid", "description": f"Reference to {field_type.ref_entity}"}


def type_name_to_property(type_name: str, spec: ir.AppSpec) -> dict[str, Any]:
    """OpenAPI property for a type written by name."""
    if type_name in ir.SCALAR_TYPE_NAMES:
        return field_to_property(ir.FieldType(kind=ir.SCALAR_TYPE_NAMES[type_name]))
    if spec.get_enum(type_name):
        return {"$ref": f"#/components/schemas/{type_name}"}
    return {}
