"""
OpenAPI 3 document for the generated backend.

The document is written to openapi.json and published as the `api_schema`
artifact that the frontend generator builds its client types from.
"""

from __future__ import annotations

from typing import Any

from formwork.core import ir

from .access import EntityRoutes, plan_routes, view_path
from .schemas import build_entity_schemas, build_view_schema, component_schema

OPENAPI_VERSION = "3.0.3"


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _json_body(schema: dict[str, Any]) -> dict[str, Any]:
    return {"application/json": {"schema": schema}}


def _secure(operation: dict[str, Any], roles: tuple[str, ...], has_auth: bool) -> dict[str, Any]:
    if roles:
        operation["x-roles"] = list(roles)
        if has_auth:
            operation["security"] = [{"bearerAuth": []}]
        operation["responses"]["401"] = {"description": "Not authenticated"}
        operation["responses"]["403"] = {"description": "Role not permitted"}
    return operation


def _id_parameter(entity: str) -> dict[str, Any]:
    return {
        "name": "id",
        "in": "path",
        "required": True,
        "schema": {"type": "string"},
        "description": f"{entity} ID",
    }


def _entity_paths(plan: EntityRoutes, has_auth: bool) -> dict[str, dict[str, Any]]:
    name = plan.entity
    collection: dict[str, Any] = {}
    item: dict[str, Any] = {}

    if plan.read_roles is not None:
        collection["get"] = _secure(
            {
                "summary": f"List {name} records",
                "operationId": f"list{name}",
                "tags": [name],
                "responses": {
                    "200": {
                        "description": "Successful response",
                        "content": _json_body({"type": "array", "items": _ref(name)}),
                    }
                },
            },
            plan.read_roles,
            has_auth,
        )
        item["get"] = _secure(
            {
                "summary": f"Get {name} by ID",
                "operationId": f"get{name}",
                "tags": [name],
                "parameters": [_id_parameter(name)],
                "responses": {
                    "200": {"description": "Successful response", "content": _json_body(_ref(name))},
                    "404": {"description": f"{name} not found"},
                },
            },
            plan.read_roles,
            has_auth,
        )

    if plan.write_roles is not None:
        collection["post"] = _secure(
            {
                "summary": f"Create new {name}",
                "operationId": f"create{name}",
                "tags": [name],
                "requestBody": {"required": True, "content": _json_body(_ref(f"{name}Create"))},
                "responses": {
                    "201": {"description": f"{name} created", "content": _json_body(_ref(name))},
                    "422": {"description": "Invalid input"},
                },
            },
            plan.write_roles,
            has_auth,
        )
        item["patch"] = _secure(
            {
                "summary": f"Update {name}",
                "operationId": f"update{name}",
                "tags": [name],
                "parameters": [_id_parameter(name)],
                "requestBody": {"required": True, "content": _json_body(_ref(f"{name}Update"))},
                "responses": {
                    "200": {"description": f"{name} updated", "content": _json_body(_ref(name))},
                    "404": {"description": f"{name} not found"},
                    "422": {"description": "Invalid input"},
                },
            },
            plan.write_roles,
            has_auth,
        )
        item["delete"] = _secure(
            {
                "summary": f"Delete {name}",
                "operationId": f"delete{name}",
                "tags": [name],
                "parameters": [_id_parameter(name)],
                "responses": {
                    "204": {"description": f"{name} deleted"},
                    "404": {"description": f"{name} not found"},
                },
            },
            plan.write_roles,
            has_auth,
        )

    paths = {}
    if collection:
        paths[plan.path] = collection
    if item:
        paths[f"{plan.path}/{{id}}"] = item
    return paths


def build_openapi_document(spec: ir.AppSpec) -> dict[str, Any]:
    """Build the complete OpenAPI document."""
    has_auth = spec.config.auth is not None
    plans = plan_routes(spec)

    schemas: dict[str, Any] = {}
    for enum in spec.enums:
        schemas[enum.name] = {"type": "string", "enum": list(enum.values)}
    for entity in spec.entities:
        entity_schemas = build_entity_schemas(spec, entity)
        schemas[entity.name] = component_schema(entity_schemas.read)
        schemas[f"{entity.name}Create"] = component_schema(entity_schemas.create)
        schemas[f"{entity.name}Update"] = component_schema(entity_schemas.update)
    for view in spec.views:
        schemas[view.name] = component_schema(build_view_schema(spec, view))

    paths: dict[str, Any] = {}
    for plan in plans:
        paths.update(_entity_paths(plan, has_auth))
    for view in spec.views:
        paths[view_path(view.name)] = {
            "get": {
                "summary": f"Rows of view {view.name}",
                "operationId": f"view{view.name}",
                "tags": ["views"],
                "responses": {
                    "200": {
                        "description": "Successful response",
                        "content": _json_body({"type": "array", "items": _ref(view.name)}),
                    }
                },
            }
        }

    doc: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": {"title": spec.name, "version": "0.1.0"},
        "paths": paths,
        "components": {"schemas": schemas},
    }
    if has_auth:
        doc["components"]["securitySchemes"] = {
            "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
        }
    if plans:
        doc["tags"] = [{"name": plan.entity} for plan in plans]
    return doc
