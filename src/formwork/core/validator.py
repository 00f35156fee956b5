"""
Semantic validation for the formwork syntax tree.

Runs in two passes. The first pass builds symbol tables for entities, enums,
views, pages, workflows and roles, so any declaration may reference one that
appears later in the file. The second pass checks, in order:

    a. uniqueness (declarations, fields, primary keys, enum values)
    b. field types against the fixed registry plus declared names
    c. relation targets and relation naming
    d. pages (entity, route, permissions, columns)
    e. views (source entity, field references, expressions)
    f. workflows (trigger, steps, inputs)
    g. config (db kind, provider-specific auth and integration properties)

Violations are collected and reported together as one ValidationError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from . import ir, syntax
from .errors import SemanticError, SourcePosition, ValidationError, make_semantic_error
from .expression_lang import ExpressionParseError, parse_expr

logger = logging.getLogger(__name__)

# =============================================================================
# Validation Constants
# =============================================================================

RESERVED_ROLES = ("ADMIN", "USER", "GUEST")

PAGE_TYPES = {kind.value for kind in ir.PageKind}
PAGE_PROPERTIES = {"type", "entity", "route", "title", "permissions", "columns", "component"}
VIEW_PROPERTIES = {"from", "fields"}
WORKFLOW_PROPERTIES = {"trigger", "steps"}
APP_CONFIG_KEYS = {"name", "db", "auth", "integrations"}
CONFIG_SECTIONS = {"auth", "integrations"}
ATTRIBUTES = {"default", "relation", "virtual"}

_AUTH_ADAPTER: TypeAdapter[Any] = TypeAdapter(ir.AuthConfig)


@dataclass
class SymbolTable:
    """Declarations by name, first occurrence wins."""

    entities: dict[str, syntax.EntityBlock] = field(default_factory=dict)
    enums: dict[str, syntax.EnumBlock] = field(default_factory=dict)
    views: dict[str, syntax.ViewBlock] = field(default_factory=dict)
    pages: dict[str, syntax.PageBlock] = field(default_factory=dict)
    workflows: dict[str, syntax.WorkflowBlock] = field(default_factory=dict)
    config: dict[str, tuple[syntax.Property, ...]] = field(default_factory=dict)
    roles: set[str] = field(default_factory=set)
    roles_enum: str | None = None

    def is_type_name(self, name: str) -> bool:
        return name in self.entities or name in self.enums or name in self.views


@dataclass(frozen=True)
class ValidatedProgram:
    """
    A syntax tree that passed semantic validation.

    Attributes:
        program: The validated tree
        symbols: Symbol tables built during validation
        config: Resolved configuration (tagged-union provider variants)
        app_name: Name from the anonymous config block, if given
        warnings: Non-fatal findings
        file: Source file, if known
    """

    program: syntax.Program
    symbols: SymbolTable
    config: ir.AppConfig
    app_name: str | None = None
    warnings: tuple[str, ...] = ()
    file: Path | None = None


class _Context:
    def __init__(self, program: syntax.Program):
        self.program = program
        self.symbols = SymbolTable()
        self.errors: list[SemanticError] = []
        self.warnings: list[str] = []

    def error(self, message: str, *subject: str, position: SourcePosition | None = None) -> None:
        self.errors.append(make_semantic_error(message, *subject, position=position))


# =============================================================================
# Value helpers
# =============================================================================


def to_python(value: syntax.Value) -> Any:
    """Convert a syntax value into plain Python data (env() becomes SecretRef)."""
    if isinstance(value, (syntax.StringValue, syntax.BooleanValue, syntax.NumberValue)):
        return value.value
    if isinstance(value, syntax.NameValue):
        return value.name
    if isinstance(value, syntax.EnvValue):
        return ir.SecretRef(env=value.var)
    if isinstance(value, syntax.ArrayValue):
        return [to_python(item) for item in value.items]
    return {prop.key: to_python(prop.value) for prop in value.properties}


def _name_of(value: syntax.Value) -> str | None:
    """Accept `Foo` or `"Foo"` where a name is expected."""
    if isinstance(value, syntax.NameValue) and not value.is_qualified:
        return value.name
    if isinstance(value, syntax.StringValue):
        return value.value
    return None


def _check_unknown_keys(
    ctx: _Context,
    properties: tuple[syntax.Property, ...],
    allowed: set[str],
    owner: str,
    owner_name: str,
) -> None:
    seen: set[str] = set()
    for prop in properties:
        if prop.key in seen:
            ctx.error(
                f"{owner} '{owner_name}' sets property '{prop.key}' more than once",
                owner_name,
                position=prop.position,
            )
        seen.add(prop.key)
        if prop.key not in allowed:
            ctx.error(
                f"{owner} '{owner_name}' has unknown property '{prop.key}' "
                f"(expected one of: {', '.join(sorted(allowed))})",
                owner_name,
                prop.key,
                position=prop.position,
            )


# =============================================================================
# Pass 1: symbol tables
# =============================================================================


def _collect_config_sections(ctx: _Context) -> None:
    """Flatten anonymous and named config blocks into sections."""
    sections = ctx.symbols.config
    anonymous: list[syntax.Property] = []

    def add(section: str, properties: tuple[syntax.Property, ...], position: SourcePosition) -> None:
        if section in sections:
            ctx.error(f"Config section '{section}' is declared more than once", section, position=position)
            return
        sections[section] = properties

    for block in ctx.program.configs:
        if block.name is None:
            for prop in block.properties:
                if prop.key in CONFIG_SECTIONS and isinstance(prop.value, syntax.ObjectValue):
                    add(prop.key, prop.value.properties, prop.position)
                else:
                    anonymous.append(prop)
        elif block.name in CONFIG_SECTIONS:
            add(block.name, block.properties, block.position)
        else:
            ctx.error(
                f"Unknown config section '{block.name}' (expected one of: auth, integrations)",
                block.name,
                position=block.position,
            )

    sections["app"] = tuple(anonymous)


def _prescan(ctx: _Context) -> None:
    symbols = ctx.symbols
    type_namespace: dict[str, str] = {}

    for block in ctx.program.blocks:
        if isinstance(block, (syntax.EntityBlock, syntax.EnumBlock, syntax.ViewBlock)):
            kind = {
                syntax.EntityBlock: "Entity",
                syntax.EnumBlock: "Enum",
                syntax.ViewBlock: "View",
            }[type(block)]
            name = block.name or ""
            if name in type_namespace:
                ctx.error(
                    f"Duplicate name '{name}': {kind} conflicts with {type_namespace[name]} of the same name",
                    name,
                    position=block.position,
                )
                continue
            type_namespace[name] = kind
            if isinstance(block, syntax.EntityBlock):
                symbols.entities[name] = block
            elif isinstance(block, syntax.EnumBlock):
                symbols.enums[name] = block
            else:
                symbols.views[name] = block
        elif isinstance(block, (syntax.PageBlock, syntax.WorkflowBlock)):
            table = symbols.pages if isinstance(block, syntax.PageBlock) else symbols.workflows
            kind = "Page" if isinstance(block, syntax.PageBlock) else "Workflow"
            name = block.name or ""
            if name in table:
                ctx.error(f"Duplicate {kind.lower()} name '{name}'", name, position=block.position)
                continue
            table[name] = block  # type: ignore[assignment]

    _collect_config_sections(ctx)

    symbols.roles = set(RESERVED_ROLES)
    auth = symbols.config.get("auth", ())
    for prop in auth:
        if prop.key == "roles":
            enum_name = _name_of(prop.value)
            if enum_name and enum_name in symbols.enums:
                symbols.roles_enum = enum_name
                symbols.roles.update(v.name for v in symbols.enums[enum_name].values)


# =============================================================================
# (a) Uniqueness
# =============================================================================


def _check_uniqueness(ctx: _Context) -> None:
    for entity in ctx.symbols.entities.values():
        seen: set[str] = set()
        primary_keys: list[str] = []
        for fdecl in entity.fields:
            if fdecl.name in seen:
                ctx.error(
                    f"Entity '{entity.name}' has duplicate field '{fdecl.name}'",
                    entity.name,
                    fdecl.name,
                    position=fdecl.position,
                )
            seen.add(fdecl.name)
            if "primaryKey" in fdecl.modifiers:
                primary_keys.append(fdecl.name)

        if len(primary_keys) > 1:
            ctx.error(
                f"Entity '{entity.name}' has multiple primary keys: {', '.join(primary_keys)}",
                entity.name,
                *primary_keys,
                position=entity.position,
            )
        elif not primary_keys:
            if "id" in seen:
                ctx.error(
                    f"Entity '{entity.name}' has a field 'id' but no primaryKey; "
                    f"mark 'id' (or another field) as primaryKey",
                    entity.name,
                    "id",
                    position=entity.position,
                )
            else:
                ctx.warnings.append(
                    f"Entity '{entity.name}' has no primaryKey; an 'id: UUID' key will be added"
                )

    for enum in ctx.symbols.enums.values():
        if not enum.values:
            ctx.error(f"Enum '{enum.name}' must have at least one value", enum.name, position=enum.position)
        seen_values: set[str] = set()
        for value in enum.values:
            if value.name in seen_values:
                ctx.error(
                    f"Enum '{enum.name}' has duplicate value '{value.name}'",
                    enum.name,
                    value.name,
                    position=value.position,
                )
            seen_values.add(value.name)


# =============================================================================
# (b) Field types and attributes
# =============================================================================


def resolve_path(
    symbols: SymbolTable, entity: syntax.EntityBlock, path: list[str]
) -> str | None:
    """
    Walk a dotted field path from an entity through relation fields.

    Returns None if the path resolves, otherwise a description of the
    first segment that does not.
    """
    current = entity
    for index, segment in enumerate(path):
        fdecl = next((f for f in current.fields if f.name == segment), None)
        if fdecl is None:
            return f"'{segment}' is not a field of entity '{current.name}'"
        if index == len(path) - 1:
            return None
        target = symbols.entities.get(fdecl.type_name)
        if target is None or fdecl.is_list:
            return f"'{segment}' on entity '{current.name}' is not a single-valued relation"
        current = target
    return None


def _check_default(ctx: _Context, entity: syntax.EntityBlock, fdecl: syntax.FieldDecl, attr: syntax.AttributeCall) -> None:
    subject = f"{entity.name}.{fdecl.name}"
    if len(attr.args) != 1 or attr.args[0].key is not None:
        ctx.error(f"default(...) on '{subject}' takes exactly one value", subject, position=attr.position)
        return

    value = attr.args[0].value
    type_name = fdecl.type_name

    if type_name in ctx.symbols.entities:
        ctx.error(f"Relation field '{subject}' cannot have a default", subject, position=attr.position)
        return

    if type_name in ctx.symbols.enums:
        members = [v.name for v in ctx.symbols.enums[type_name].values]
        member = _name_of(value) if isinstance(value, syntax.NameValue) else None
        if member not in members:
            ctx.error(
                f"Default for '{subject}' must be a member of enum '{type_name}' "
                f"({', '.join(members)}), got {syntax.describe_value(value)}",
                subject,
                type_name,
                position=attr.position,
            )
        return

    expected: tuple[type, ...]
    if type_name == "Boolean":
        expected = (syntax.BooleanValue,)
    elif type_name in ("Int", "Decimal"):
        expected = (syntax.NumberValue,)
    elif type_name in ("DateTime", "UUID"):
        # default(now) / default(uuid) ask the database to generate the value
        if isinstance(value, syntax.NameValue) and value.name in ("now", "uuid"):
            return
        expected = (syntax.StringValue,)
    elif type_name == "JSON":
        expected = (syntax.StringValue, syntax.NumberValue, syntax.BooleanValue)
    else:
        expected = (syntax.StringValue, syntax.EnvValue)

    if not isinstance(value, expected):
        ctx.error(
            f"Default {syntax.describe_value(value)} does not match type {type_name} of '{subject}'",
            subject,
            position=attr.position,
        )
    elif isinstance(value, syntax.NumberValue) and type_name == "Int" and "." in value.text:
        ctx.error(f"Default for Int field '{subject}' must be an integer", subject, position=attr.position)


def _check_virtual(ctx: _Context, entity: syntax.EntityBlock, fdecl: syntax.FieldDecl, attr: syntax.AttributeCall) -> None:
    subject = f"{entity.name}.{fdecl.name}"
    source = attr.get("from")
    if source is None or not isinstance(source.value, syntax.StringValue):
        ctx.error(f"@virtual on '{subject}' requires from: \"<expression>\"", subject, position=attr.position)
        return

    try:
        expr = parse_expr(source.value.value)
    except ExpressionParseError as e:
        ctx.error(f"Invalid @virtual expression on '{subject}': {e}", subject, position=attr.position)
        return

    for ref in ir.field_refs(expr):
        if ref.root == fdecl.name:
            ctx.error(f"Virtual field '{subject}' references itself", subject, position=attr.position)
            continue
        problem = resolve_path(ctx.symbols, entity, ref.path)
        if problem:
            ctx.error(f"Virtual field '{subject}' references {ref}: {problem}", subject, str(ref), position=attr.position)

    for modifier in ("primaryKey", "unique"):
        if modifier in fdecl.modifiers:
            ctx.error(f"Virtual field '{subject}' cannot be {modifier}", subject, position=fdecl.position)


def _check_virtual_cycles(ctx: _Context, entity: syntax.EntityBlock) -> None:
    graph: dict[str, list[str]] = {}
    for fdecl in entity.fields:
        attr = fdecl.attribute("virtual")
        source = attr.get("from") if attr else None
        if source is None or not isinstance(source.value, syntax.StringValue):
            continue
        try:
            expr = parse_expr(source.value.value)
        except ExpressionParseError:
            continue
        graph[fdecl.name] = [name for name in ir.referenced_fields(expr) if name != fdecl.name]

    reported: set[str] = set()
    for start in graph:
        stack = [(start, [start])]
        while stack:
            node, trail = stack.pop()
            for nxt in graph.get(node, []):
                if nxt == start and start not in reported:
                    reported.update(trail)
                    cycle = " -> ".join(trail + [start])
                    ctx.error(
                        f"Circular virtual field dependency in entity '{entity.name}': {cycle}",
                        entity.name,
                        *trail,
                        position=entity.position,
                    )
                elif nxt in graph and nxt not in trail:
                    stack.append((nxt, trail + [nxt]))


def _check_fields(ctx: _Context) -> None:
    symbols = ctx.symbols
    for entity in symbols.entities.values():
        for fdecl in entity.fields:
            subject = f"{entity.name}.{fdecl.name}"
            type_name = fdecl.type_name
            is_entity = type_name in symbols.entities

            if type_name == "Enum":
                ctx.error(
                    f"Field '{subject}' uses 'Enum' directly; declare an enum and use its name",
                    subject,
                    position=fdecl.type_position,
                )
            elif type_name in symbols.views:
                ctx.error(
                    f"Field '{subject}' has type '{type_name}', which is a view, not an entity",
                    subject,
                    type_name,
                    position=fdecl.type_position,
                )
            elif not (type_name in ir.SCALAR_TYPE_NAMES or is_entity or type_name in symbols.enums):
                ctx.error(
                    f"Unknown type '{type_name}' for field '{subject}'",
                    subject,
                    type_name,
                    position=fdecl.type_position,
                )

            if fdecl.is_list and not is_entity:
                ctx.error(
                    f"List type '{type_name}[]' on '{subject}' is only allowed for entity types",
                    subject,
                    position=fdecl.type_position,
                )

            seen_modifiers: set[str] = set()
            for modifier in fdecl.modifiers:
                if modifier in seen_modifiers:
                    ctx.error(f"Modifier '{modifier}' repeated on '{subject}'", subject, position=fdecl.position)
                seen_modifiers.add(modifier)

            if "primaryKey" in seen_modifiers:
                if "optional" in seen_modifiers:
                    ctx.error(f"Primary key '{subject}' cannot be optional", subject, position=fdecl.position)
                if is_entity:
                    ctx.error(f"Relation field '{subject}' cannot be a primary key", subject, position=fdecl.position)

            seen_attributes: set[str] = set()
            for attr in fdecl.attributes:
                if attr.name not in ATTRIBUTES:
                    ctx.error(
                        f"Unknown attribute '{attr.name}' on '{subject}' "
                        f"(expected one of: default, @relation, @virtual)",
                        subject,
                        attr.name,
                        position=attr.position,
                    )
                    continue
                if attr.name in seen_attributes:
                    ctx.error(f"Attribute '{attr.name}' repeated on '{subject}'", subject, position=attr.position)
                    continue
                seen_attributes.add(attr.name)

                if attr.name == "default":
                    _check_default(ctx, entity, fdecl, attr)
                elif attr.name == "virtual":
                    _check_virtual(ctx, entity, fdecl, attr)
                elif not attr.is_annotation:
                    ctx.error(f"Write '@{attr.name}(...)' on '{subject}'", subject, position=attr.position)

        _check_virtual_cycles(ctx, entity)


# =============================================================================
# (c) Relations
# =============================================================================


def relation_name(fdecl: syntax.FieldDecl) -> str | None:
    """Explicit @relation(name: ...) value, if any."""
    attr = fdecl.attribute("relation")
    arg = attr.get("name") if attr else None
    if arg is not None and isinstance(arg.value, syntax.StringValue):
        return arg.value.value
    return None


def _check_relations(ctx: _Context) -> None:
    symbols = ctx.symbols
    # relation name -> [(entity, field, target)]
    named: dict[str, list[tuple[str, str, str]]] = {}

    for entity in symbols.entities.values():
        by_target: dict[str, list[syntax.FieldDecl]] = {}

        for fdecl in entity.fields:
            subject = f"{entity.name}.{fdecl.name}"
            attr = fdecl.attribute("relation")
            is_entity = fdecl.type_name in symbols.entities

            if attr is not None:
                if not is_entity:
                    ctx.error(
                        f"@relation on '{subject}' requires an entity type, got '{fdecl.type_name}'",
                        subject,
                        position=attr.position,
                    )
                    continue
                name_arg = attr.get("name")
                if name_arg is None or not isinstance(name_arg.value, syntax.StringValue):
                    ctx.error(f"@relation on '{subject}' requires name: \"<RelationName>\"", subject, position=attr.position)
                extra = [arg.key or "<positional>" for arg in attr.args if arg.key != "name"]
                if extra:
                    ctx.error(
                        f"@relation on '{subject}' has unknown argument(s): {', '.join(extra)}",
                        subject,
                        position=attr.position,
                    )

            if not is_entity or fdecl.attribute("virtual") is not None:
                continue

            by_target.setdefault(fdecl.type_name, []).append(fdecl)
            rel_name = relation_name(fdecl)
            if rel_name:
                named.setdefault(rel_name, []).append((entity.name, fdecl.name, fdecl.type_name))

        for target, fields in by_target.items():
            if len(fields) < 2:
                continue
            unnamed = [f for f in fields if relation_name(f) is None]
            field_names = [f.name for f in fields]
            if unnamed:
                ctx.error(
                    f"Entity '{entity.name}' has {len(fields)} relations to '{target}' "
                    f"({', '.join(field_names)}); add @relation(name: \"...\") to each to disambiguate",
                    entity.name,
                    *field_names,
                    position=unnamed[0].position,
                )

    for rel_name, uses in named.items():
        if len(uses) == 1:
            continue
        paired = len(uses) == 2 and (uses[0][0], uses[0][2]) == (uses[1][2], uses[1][0])
        if not paired:
            where = ", ".join(f"{e}.{f} -> {t}" for e, f, t in uses)
            ctx.error(
                f"Relation name '{rel_name}' must name exactly one pair of fields on opposite sides "
                f"of one relation, found: {where}",
                rel_name,
                *(f"{e}.{f}" for e, f, _ in uses),
            )


# =============================================================================
# (d) Pages
# =============================================================================


def _check_pages(ctx: _Context) -> None:
    symbols = ctx.symbols
    for page in symbols.pages.values():
        name = page.name or ""
        _check_unknown_keys(ctx, page.properties, PAGE_PROPERTIES, "Page", name)

        type_prop = page.get("type")
        page_type = _name_of(type_prop.value) if type_prop else None
        if type_prop is None:
            ctx.error(f"Page '{name}' is missing required property 'type'", name, position=page.position)
        elif page_type not in PAGE_TYPES:
            ctx.error(
                f"Page '{name}' has invalid type {syntax.describe_value(type_prop.value)} "
                f"(expected one of: {', '.join(sorted(PAGE_TYPES))})",
                name,
                position=type_prop.position,
            )

        entity: syntax.EntityBlock | None = None
        entity_prop = page.get("entity")
        if entity_prop is not None:
            ref = _name_of(entity_prop.value)
            if ref is None:
                ctx.error(f"Page '{name}' property 'entity' must be an entity name", name, position=entity_prop.position)
            elif ref not in symbols.entities:
                ctx.error(
                    f"Page '{name}' references unknown entity '{ref}'",
                    name,
                    ref,
                    position=entity_prop.position,
                )
            else:
                entity = symbols.entities[ref]
        elif page_type in PAGE_TYPES and page_type != "custom":
            ctx.error(f"Page '{name}' of type {page_type} requires property 'entity'", name, position=page.position)

        route = page.get("route")
        if route is not None and not (
            isinstance(route.value, syntax.StringValue) and route.value.value.startswith("/")
        ):
            ctx.error(f"Page '{name}' route must be a string starting with '/'", name, position=route.position)

        title = page.get("title")
        if title is not None and not isinstance(title.value, syntax.StringValue):
            ctx.error(f"Page '{name}' title must be a string", name, position=title.position)

        permissions = page.get("permissions")
        if permissions is not None:
            if not isinstance(permissions.value, syntax.ArrayValue):
                ctx.error(f"Page '{name}' permissions must be an array of roles", name, position=permissions.position)
            else:
                for item in permissions.value.items:
                    role = _name_of(item)
                    if role is None:
                        ctx.error(f"Page '{name}' permission {syntax.describe_value(item)} is not a role name", name, position=item.position)
                    elif role not in symbols.roles:
                        ctx.error(
                            f"Page '{name}' references unknown role '{role}' "
                            f"(known roles: {', '.join(sorted(symbols.roles))})",
                            name,
                            role,
                            position=item.position,
                        )

        columns = page.get("columns")
        if columns is not None:
            if page_type != "table":
                ctx.error(f"Page '{name}': 'columns' is only allowed on table pages", name, position=columns.position)
            elif not isinstance(columns.value, syntax.ArrayValue):
                ctx.error(f"Page '{name}' columns must be an array", name, position=columns.position)
            else:
                for item in columns.value.items:
                    _check_column(ctx, name, entity, item)

        component = page.get("component")
        if page_type == "custom":
            if component is None or not isinstance(component.value, syntax.StringValue):
                ctx.error(f"Custom page '{name}' requires a 'component' path string", name, position=page.position)
        elif component is not None:
            ctx.error(f"Page '{name}': 'component' is only allowed on custom pages", name, position=component.position)


def _check_column(ctx: _Context, page: str, entity: syntax.EntityBlock | None, item: syntax.Value) -> None:
    field_name = _name_of(item)
    if isinstance(item, syntax.ObjectValue):
        field_prop = item.get("field")
        field_name = _name_of(field_prop.value) if field_prop else None
        label = item.get("label")
        if label is not None and not isinstance(label.value, syntax.StringValue):
            ctx.error(f"Page '{page}' column label must be a string", page, position=label.position)
        unknown = [p.key for p in item.properties if p.key not in ("field", "label")]
        if unknown:
            ctx.error(f"Page '{page}' column has unknown property '{unknown[0]}'", page, position=item.position)
    if field_name is None:
        ctx.error(f"Page '{page}' column {syntax.describe_value(item)} must name a field", page, position=item.position)
        return
    if entity is not None and not any(f.name == field_name for f in entity.fields):
        ctx.error(
            f"Page '{page}' column '{field_name}' is not a field of entity '{entity.name}'",
            page,
            field_name,
            position=item.position,
        )


# =============================================================================
# (e) Views
# =============================================================================


def _check_views(ctx: _Context) -> None:
    symbols = ctx.symbols
    for view in symbols.views.values():
        name = view.name or ""
        _check_unknown_keys(ctx, view.properties, VIEW_PROPERTIES, "View", name)

        source_prop = view.get("from")
        entity: syntax.EntityBlock | None = None
        if source_prop is None:
            ctx.error(f"View '{name}' is missing required property 'from'", name, position=view.position)
        else:
            ref = _name_of(source_prop.value)
            if ref is None or ref not in symbols.entities:
                ctx.error(
                    f"View '{name}' references unknown entity '{ref or syntax.describe_value(source_prop.value)}'",
                    name,
                    ref or "",
                    position=source_prop.position,
                )
            else:
                entity = symbols.entities[ref]

        fields_prop = view.get("fields")
        if fields_prop is None or not isinstance(fields_prop.value, syntax.ArrayValue) or not fields_prop.value.items:
            ctx.error(f"View '{name}' requires a non-empty 'fields' array", name, position=view.position)
            continue
        if entity is None:
            continue

        defined: list[str] = []
        for item in fields_prop.value.items:
            field_name = _check_view_field(ctx, name, entity, item, defined)
            if field_name is None:
                continue
            if field_name in defined:
                ctx.error(f"View '{name}' has duplicate field '{field_name}'", name, field_name, position=item.position)
            defined.append(field_name)


def _check_view_field(
    ctx: _Context,
    view: str,
    entity: syntax.EntityBlock,
    item: syntax.Value,
    defined: list[str],
) -> str | None:
    """Check one view field; returns its name."""
    if isinstance(item, syntax.NameValue):
        problem = resolve_path(ctx.symbols, entity, list(item.parts))
        if problem:
            ctx.error(f"View '{view}' field {item.name}: {problem}", view, item.name, position=item.position)
        return item.parts[-1]

    if not isinstance(item, syntax.ObjectValue):
        ctx.error(f"View '{view}' field {syntax.describe_value(item)} must be a field name or an object", view, position=item.position)
        return None

    unknown = [p.key for p in item.properties if p.key not in ("name", "field", "expression", "type")]
    if unknown:
        ctx.error(f"View '{view}' field has unknown property '{unknown[0]}'", view, position=item.position)

    name_prop = item.get("name")
    field_name = _name_of(name_prop.value) if name_prop else None
    if field_name is None:
        ctx.error(f"View '{view}' field object requires 'name'", view, position=item.position)
        return None

    ref_prop = item.get("field")
    expr_prop = item.get("expression")
    if (ref_prop is None) == (expr_prop is None):
        ctx.error(
            f"View '{view}' field '{field_name}' needs exactly one of 'field' or 'expression'",
            view,
            field_name,
            position=item.position,
        )
        return field_name

    type_prop = item.get("type")
    if type_prop is not None:
        type_name = _name_of(type_prop.value)
        if type_name not in ir.SCALAR_TYPE_NAMES:
            ctx.error(f"View '{view}' field '{field_name}' has unknown type '{type_name}'", view, field_name, position=type_prop.position)

    if ref_prop is not None:
        value = ref_prop.value
        path = list(value.parts) if isinstance(value, syntax.NameValue) else None
        if path is None and isinstance(value, syntax.StringValue):
            path = value.value.split(".")
        if path is None:
            ctx.error(f"View '{view}' field '{field_name}' must reference a field name", view, field_name, position=ref_prop.position)
        else:
            problem = resolve_path(ctx.symbols, entity, path)
            if problem:
                ctx.error(f"View '{view}' field '{field_name}': {problem}", view, field_name, position=ref_prop.position)
        return field_name

    expr_prop = cast(syntax.Property, expr_prop)
    if not isinstance(expr_prop.value, syntax.StringValue):
        ctx.error(f"View '{view}' field '{field_name}' expression must be a string", view, field_name, position=expr_prop.position)
        return field_name
    try:
        expr = parse_expr(expr_prop.value.value)
    except ExpressionParseError as e:
        ctx.error(f"View '{view}' field '{field_name}' has invalid expression: {e}", view, field_name, position=expr_prop.position)
        return field_name

    for ref in ir.field_refs(expr):
        if len(ref.path) == 1 and ref.root in defined:
            continue
        problem = resolve_path(ctx.symbols, entity, ref.path)
        if problem:
            ctx.error(
                f"View '{view}' field '{field_name}' expression references {ref}: {problem}",
                view,
                field_name,
                str(ref),
                position=expr_prop.position,
            )
    return field_name


# =============================================================================
# (f) Workflows
# =============================================================================


def _check_workflows(ctx: _Context) -> None:
    symbols = ctx.symbols
    for workflow in symbols.workflows.values():
        name = workflow.name or ""
        _check_unknown_keys(ctx, workflow.properties, WORKFLOW_PROPERTIES, "Workflow", name)

        trigger = workflow.get("trigger")
        if trigger is None:
            ctx.error(f"Workflow '{name}' is missing required property 'trigger'", name, position=workflow.position)
        elif isinstance(trigger.value, syntax.ObjectValue):
            event = trigger.value.get("event")
            if event is None or _name_of(event.value) is None:
                ctx.error(f"Workflow '{name}' trigger requires an 'event' name", name, position=trigger.position)
            entity = trigger.value.get("entity")
            if entity is not None:
                ref = _name_of(entity.value)
                if ref not in symbols.entities:
                    ctx.error(
                        f"Workflow '{name}' trigger references unknown entity '{ref}'",
                        name,
                        ref or "",
                        position=entity.position,
                    )
            unknown = [p.key for p in trigger.value.properties if p.key not in ("event", "entity")]
            if unknown:
                ctx.error(f"Workflow '{name}' trigger has unknown property '{unknown[0]}'", name, position=trigger.position)
        elif not isinstance(trigger.value, syntax.StringValue):
            ctx.error(f"Workflow '{name}' trigger must be an event string or {{ event, entity }}", name, position=trigger.position)

        steps = workflow.get("steps")
        if steps is None or not isinstance(steps.value, syntax.ArrayValue) or not steps.value.items:
            ctx.error(f"Workflow '{name}' requires a non-empty 'steps' array", name, position=workflow.position)
            continue

        for index, step in enumerate(steps.value.items, start=1):
            _check_step(ctx, name, index, step)


def _check_step(ctx: _Context, workflow: str, index: int, step: syntax.Value) -> None:
    label = f"Workflow '{workflow}' step {index}"
    if not isinstance(step, syntax.ObjectValue):
        ctx.error(f"{label} must be an object with 'action'", workflow, position=step.position)
        return

    action = step.get("action")
    if action is None or _name_of(action.value) is None:
        ctx.error(f"{label} requires an 'action' name", workflow, position=step.position)

    unknown = [p.key for p in step.properties if p.key not in ("action", "inputs")]
    if unknown:
        ctx.error(f"{label} has unknown property '{unknown[0]}'", workflow, position=step.position)

    inputs = step.get("inputs")
    if inputs is None:
        return
    if not isinstance(inputs.value, syntax.ObjectValue):
        ctx.error(f"{label} inputs must be an object", workflow, position=inputs.position)
        return
    for prop in inputs.value.properties:
        value = prop.value
        if isinstance(value, (syntax.StringValue, syntax.NumberValue, syntax.BooleanValue)):
            continue
        if isinstance(value, syntax.NameValue) and (not value.is_qualified or value.parts[0] == "trigger"):
            continue
        ctx.error(
            f"{label} input '{prop.key}' must be a literal or a trigger.* reference, "
            f"got {syntax.describe_value(value)}",
            workflow,
            prop.key,
            position=prop.position,
        )


# =============================================================================
# (g) Config
# =============================================================================


def _describe_pydantic_errors(ctx: _Context, section: str, exc: PydanticValidationError, position: SourcePosition | None) -> None:
    for err in exc.errors():
        loc = [str(part) for part in err["loc"]]
        err_type = err["type"]
        provider = loc[-2] if len(loc) >= 2 else None
        prop = loc[-1] if loc else section
        where = f"{section} config" + (f" for provider '{provider}'" if provider else "")

        if err_type == "missing":
            message = f"{where[0].upper()}{where[1:]} is missing required property '{prop}'"
        elif err_type == "extra_forbidden":
            message = f"{where[0].upper()}{where[1:]} has unknown property '{prop}'"
        elif err_type == "union_tag_not_found":
            message = f"{section[0].upper()}{section[1:]} config is missing required property 'provider'"
        elif err_type == "union_tag_invalid":
            tag = err.get("ctx", {}).get("tag")
            expected = err.get("ctx", {}).get("expected_tags")
            message = f"Unknown {section} provider '{tag}' (expected one of: {expected})"
        else:
            message = f"Invalid value for '{prop}' in {where}: {err['msg']}"
        ctx.error(message, section, prop, position=position)


def _check_config(ctx: _Context) -> tuple[ir.AppConfig, str | None]:
    symbols = ctx.symbols
    sections = symbols.config

    app_name: str | None = None
    db = ir.DatabaseKind.SQLITE
    app_props = sections.get("app", ())
    _check_unknown_keys(ctx, app_props, APP_CONFIG_KEYS, "Config", "app")
    for prop in app_props:
        if prop.key == "name":
            app_name = _name_of(prop.value)
            if app_name is None:
                ctx.error("Config 'name' must be a string or identifier", "name", position=prop.position)
        elif prop.key == "db":
            kind = _name_of(prop.value)
            if kind not in {k.value for k in ir.DatabaseKind}:
                ctx.error(
                    f"Config 'db' must be one of: postgresql, sqlite (got {syntax.describe_value(prop.value)})",
                    "db",
                    position=prop.position,
                )
            else:
                db = ir.DatabaseKind(kind)
        elif prop.key in CONFIG_SECTIONS:
            ctx.error(f"Config '{prop.key}' must be an object", prop.key, position=prop.position)

    auth = None
    if "auth" in sections:
        props = sections["auth"]
        position = props[0].position if props else None
        data = {prop.key: to_python(prop.value) for prop in props}
        try:
            auth = _AUTH_ADAPTER.validate_python(data)
        except PydanticValidationError as e:
            _describe_pydantic_errors(ctx, "auth", e, position)

        for prop in props:
            if prop.key == "userEntity":
                ref = _name_of(prop.value)
                if ref not in symbols.entities:
                    ctx.error(
                        f"Auth config userEntity references unknown entity '{ref}'",
                        "auth",
                        ref or "",
                        position=prop.position,
                    )
                    auth = None
            elif prop.key == "roles":
                ref = _name_of(prop.value)
                if ref not in symbols.enums:
                    ctx.error(
                        f"Auth config roles references unknown enum '{ref}'",
                        "auth",
                        ref or "",
                        position=prop.position,
                    )
                    auth = None

    integrations = ir.IntegrationsConfig()
    if "integrations" in sections:
        props = sections["integrations"]
        position = props[0].position if props else None
        data = {prop.key: to_python(prop.value) for prop in props}
        try:
            integrations = ir.IntegrationsConfig.model_validate(data)
        except PydanticValidationError as e:
            _describe_pydantic_errors(ctx, "integrations", e, position)

    return ir.AppConfig(db=db, auth=auth, integrations=integrations), app_name


# =============================================================================
# Entry point
# =============================================================================


def validate_program(program: syntax.Program, file: Path | None = None) -> ValidatedProgram:
    """
    Validate a syntax tree.

    Args:
        program: Parsed syntax tree
        file: Source file (for diagnostics)

    Returns:
        ValidatedProgram ready for the IR builder

    Raises:
        ValidationError: With every semantic error found
    """
    ctx = _Context(program)

    _prescan(ctx)
    _check_uniqueness(ctx)
    _check_fields(ctx)
    _check_relations(ctx)
    _check_pages(ctx)
    _check_views(ctx)
    _check_workflows(ctx)
    config, app_name = _check_config(ctx)

    if ctx.errors:
        logger.debug("Validation found %d error(s)", len(ctx.errors))
        raise ValidationError(ctx.errors, file)

    for warning in ctx.warnings:
        logger.warning(warning)

    return ValidatedProgram(
        program=program,
        symbols=ctx.symbols,
        config=config,
        app_name=app_name,
        warnings=tuple(ctx.warnings),
        file=file,
    )
