"""
React frontend generator.

Generates a Vite + React + TypeScript client:
- src/api/types.ts and src/api/client.ts from the backend's API schema
- one component per page under src/pages/
- src/routes.tsx wiring page routes
- package.json, tsconfig.json, index.html
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from formwork.core import ir

from ..base import Generator, GeneratorOptions, GeneratorResult, render_template
from .typescript import client_operations, referenced_types, render_types

logger = logging.getLogger(__name__)

TEMPLATE_DIR = "frontend"

DEPENDENCIES = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "react-router-dom": "^6.22.0",
}

DEV_DEPENDENCIES = {
    "@types/react": "^18.2.0",
    "@types/react-dom": "^18.2.0",
    "@vitejs/plugin-react": "^4.2.0",
    "typescript": "^5.3.0",
    "vite": "^5.0.0",
}

TSCONFIG = {
    "compilerOptions": {
        "target": "ES2020",
        "lib": ["ES2020", "DOM", "DOM.Iterable"],
        "module": "ESNext",
        "skipLibCheck": True,
        "moduleResolution": "bundler",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "noEmit": True,
        "jsx": "react-jsx",
        "strict": True,
        "types": ["vite/client"],
    },
    "include": ["src"],
}


def _input_kind(schema: dict[str, Any]) -> str:
    if "$ref" in schema:
        return "select"
    kind = schema.get("type")
    if kind == "boolean":
        return "checkbox"
    if kind in ("integer", "number"):
        return "number"
    if schema.get("format") == "password":
        return "password"
    if schema.get("format") == "date-time":
        return "datetime-local"
    return "text"


def _component_import(component: str) -> str:
    """Component paths are relative to src/; pages live one level down."""
    if component.startswith("./"):
        return "../" + component[2:]
    return component


class FrontendGenerator(Generator):
    """Generate the React frontend against the backend API schema."""

    name = "frontend"
    description = "React + TypeScript client built from the API schema"
    requires = ("api_schema",)

    def render(
        self,
        spec: ir.AppSpec,
        options: GeneratorOptions,
        artifacts: Mapping[str, Any],
    ) -> GeneratorResult:
        document = artifacts.get("api_schema")
        if document is None:
            raise self.fail("Required artifact 'api_schema' is not available")

        result = GeneratorResult(self.name)
        schemas = document.get("components", {}).get("schemas", {})

        result.add_file("src/api/types.ts", render_types(document))

        operations = client_operations(document)
        imports = [name for name in referenced_types(operations) if name in schemas]
        result.add_file(
            "src/api/client.ts",
            render_template(TEMPLATE_DIR, "client.ts.j2", app_name=spec.name, operations=operations, imports=imports),
        )

        routes = []
        for page in spec.pages:
            context = self._page_context(spec, page, schemas)
            result.add_file(
                f"src/pages/{page.name}.tsx",
                render_template(TEMPLATE_DIR, f"pages/{page.kind.value}.tsx.j2", page=context),
            )
            path = page.route + "/:id" if page.kind == ir.PageKind.DETAILS else page.route
            routes.append({"name": page.name, "path": path})

        result.add_file("src/routes.tsx", render_template(TEMPLATE_DIR, "routes.tsx.j2", app_name=spec.name, pages=routes))
        result.add_file("src/main.tsx", render_template(TEMPLATE_DIR, "main.tsx.j2", app_name=spec.name))
        result.add_file("index.html", render_template(TEMPLATE_DIR, "index.html.j2", app_name=spec.name))
        result.add_file("package.json", json.dumps(self._package_json(spec), indent=2))
        result.add_file("tsconfig.json", json.dumps(TSCONFIG, indent=2))

        logger.debug("Rendered %d frontend files", len(result.files))
        return result

    def _package_json(self, spec: ir.AppSpec) -> dict[str, Any]:
        return {
            "name": f"{spec.name}-frontend",
            "version": "0.1.0",
            "private": True,
            "type": "module",
            "scripts": {
                "dev": "vite",
                "build": "tsc && vite build",
                "preview": "vite preview",
                "typecheck": "tsc --noEmit",
            },
            "dependencies": DEPENDENCIES,
            "devDependencies": DEV_DEPENDENCIES,
        }

    def _page_context(self, spec: ir.AppSpec, page: ir.PageSpec, schemas: dict[str, Any]) -> dict[str, Any]:
        context: dict[str, Any] = {"name": page.name, "title": page.title, "entity": page.entity}
        if page.kind == ir.PageKind.CUSTOM:
            context["component"] = _component_import(page.component or "")
            return context

        entity = page.entity
        read = schemas.get(entity, {}).get("properties", {})
        columns = []
        for column in page.columns:
            field = column.field
            if field not in read and f"{field}_id" in read:
                # relation columns show the stored key
                field = f"{field}_id"
            columns.append({"field": field, "label": column.label})
        if not columns:
            columns = [{"field": name, "label": name} for name in read]
        context["columns"] = columns
        context["list_op"] = f"list{entity}"
        context["get_op"] = f"get{entity}"
        context["create_op"] = f"create{entity}"

        pk = spec.get_entity(entity).primary_key
        context["pk"] = pk.name if pk else "id"
        details = next(
            (p for p in spec.pages_for(entity) if p.kind == ir.PageKind.DETAILS),
            None,
        )
        context["details_route"] = details.route if details else None

        create = schemas.get(f"{entity}Create", {})
        required = set(create.get("required", []))
        inputs = []
        for name, prop in create.get("properties", {}).items():
            options: list[str] = []
            if "$ref" in prop:
                options = schemas.get(prop["$ref"].rsplit("/", 1)[-1], {}).get("enum", [])
            inputs.append(
                {"name": name, "kind": _input_kind(prop), "required": name in required, "options": options}
            )
        context["inputs"] = inputs
        return context
