"""
TypeScript rendering of the backend's OpenAPI document.

The frontend never looks at the AppSpec's fields directly: types and the
client are derived from the `api_schema` artifact so both tiers agree on
the wire format.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

HTTP_METHODS = ("get", "post", "put", "patch", "delete")

_PATH_PARAM = re.compile(r"\{(\w+)\}")


def ts_type(schema: dict[str, Any]) -> str:
    """TypeScript type for a JSON schema fragment."""
    ref = schema.get("$ref")
    if ref:
        return ref.rsplit("/", 1)[-1]
    if "enum" in schema:
        return " | ".join(f"'{value}'" for value in schema["enum"])
    kind = schema.get("type")
    if kind == "string":
        return "string"
    if kind in ("integer", "number"):
        return "number"
    if kind == "boolean":
        return "boolean"
    if kind == "array":
        item = ts_type(schema.get("items", {}))
        return f"({item})[]" if " | " in item else f"{item}[]"
    if kind == "object":
        return "Record<string, unknown>"
    return "unknown"


def render_types(document: dict[str, Any]) -> str:
    """types.ts: one type per component schema, in document order."""
    lines = [
        "/**",
        f" * API types for {document['info']['title']}.",
        " * Generated from openapi.json - DO NOT EDIT.",
        " */",
    ]
    for name, schema in document.get("components", {}).get("schemas", {}).items():
        lines.append("")
        if "enum" in schema:
            lines.append(f"export type {name} = {ts_type(schema)};")
            continue
        required = set(schema.get("required", []))
        lines.append(f"export interface {name} {{")
        for prop, prop_schema in schema.get("properties", {}).items():
            readonly = "readonly " if prop_schema.get("readOnly") else ""
            optional = "" if prop in required else "?"
            lines.append(f"  {readonly}{prop}{optional}: {ts_type(prop_schema)};")
        lines.append("}")
    return "\n".join(lines)


@dataclass(frozen=True)
class ClientOperation:
    """One API call in the generated client."""

    name: str
    method: str
    url: str
    params: tuple[str, ...]
    body_type: str | None
    result_type: str


def _result_type(operation: dict[str, Any]) -> str:
    for status in ("200", "201"):
        response = operation.get("responses", {}).get(status)
        if response and "content" in response:
            return ts_type(response["content"]["application/json"]["schema"])
    return "void"


def _body_type(operation: dict[str, Any]) -> str | None:
    body = operation.get("requestBody")
    if body is None:
        return None
    return ts_type(body["content"]["application/json"]["schema"])


def client_operations(document: dict[str, Any]) -> list[ClientOperation]:
    """Operations in path order, then method order."""
    operations = []
    for path, item in document.get("paths", {}).items():
        for method in HTTP_METHODS:
            operation = item.get(method)
            if operation is None:
                continue
            operations.append(
                ClientOperation(
                    name=operation["operationId"],
                    method=method.upper(),
                    url=_PATH_PARAM.sub(r"${\1}", path),
                    params=tuple(_PATH_PARAM.findall(path)),
                    body_type=_body_type(operation),
                    result_type=_result_type(operation),
                )
            )
    return operations


def referenced_types(operations: list[ClientOperation]) -> list[str]:
    """Named types the client imports, sorted."""
    names: set[str] = set()
    for op in operations:
        for type_name in (op.body_type, op.result_type):
            if type_name:
                names.update(re.findall(r"[A-Z]\w*", type_name))
    return sorted(names)
