"""
IR builder: turns a validated syntax tree into a canonical AppSpec.

The builder is a pure function of its input. It fills defaults, resolves
relation cardinalities, parses computed-field expressions and assigns
resolver names. It never fails on a tree that passed validation.

Relation resolution runs as a post-pass over an arena of entity records
indexed by name, so self-referential and mutually-referential entities are
handled by index lookup rather than by following references.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import cast

from . import ir, syntax
from .expression_lang import parse_expr
from .naming import kebab_case, resolver_name
from .validator import ValidatedProgram, relation_name, to_python

logger = logging.getLogger(__name__)


@dataclass
class _EntityRecord:
    """Mutable draft of one entity, addressed by its arena index."""

    block: syntax.EntityBlock
    fields: list[ir.FieldSpec]
    relations: list[ir.RelationEdge] = field(default_factory=list)
    inverse: list[ir.RelationEdge] = field(default_factory=list)

    def replace_field(self, name: str, **updates: object) -> None:
        for index, spec in enumerate(self.fields):
            if spec.name == name:
                self.fields[index] = spec.model_copy(update=updates)
                return


@dataclass(frozen=True)
class _RelationField:
    entity: int
    name: str
    target: int
    is_list: bool
    explicit_name: str | None
    order: int  # declaration order, for deterministic pairing


# =============================================================================
# Fields
# =============================================================================


def _field_type(fdecl: syntax.FieldDecl, validated: ValidatedProgram) -> ir.FieldType:
    symbols = validated.symbols
    if fdecl.type_name in symbols.entities:
        return ir.FieldType(kind=ir.FieldTypeKind.RELATION, ref_entity=fdecl.type_name, is_list=fdecl.is_list)
    if fdecl.type_name in symbols.enums:
        return ir.FieldType(kind=ir.FieldTypeKind.ENUM, enum_name=fdecl.type_name)
    return ir.FieldType(kind=ir.SCALAR_TYPE_NAMES[fdecl.type_name])


def _build_field(entity: str, fdecl: syntax.FieldDecl, validated: ValidatedProgram) -> ir.FieldSpec:
    default = None
    default_attr = fdecl.attribute("default")
    if default_attr is not None:
        default = to_python(default_attr.args[0].value)
    elif "primaryKey" in fdecl.modifiers and fdecl.type_name == "UUID":
        default = "uuid"

    virtual = None
    virtual_attr = fdecl.attribute("virtual")
    if virtual_attr is not None:
        source_arg = cast(syntax.Argument, virtual_attr.get("from"))
        source = cast(syntax.StringValue, source_arg.value).value
        expression = parse_expr(source)
        virtual = ir.VirtualFieldSpec(
            expression=expression,
            source=source,
            resolver=resolver_name(entity, fdecl.name),
            depends_on=ir.referenced_fields(expression),
        )

    return ir.FieldSpec(
        name=fdecl.name,
        type=_field_type(fdecl, validated),
        modifiers=[ir.FieldModifier(m) for m in fdecl.modifiers],
        default=default,
        virtual=virtual,
    )


def _implicit_primary_key() -> ir.FieldSpec:
    return ir.FieldSpec(
        name="id",
        type=ir.FieldType(kind=ir.FieldTypeKind.UUID),
        modifiers=[ir.FieldModifier.PRIMARY_KEY],
        default="uuid",
    )


# =============================================================================
# Relations
# =============================================================================


def _pair_cardinalities(a_list: bool, b_list: bool) -> tuple[ir.Cardinality, ir.Cardinality]:
    if a_list and b_list:
        return ir.Cardinality.MANY_TO_MANY, ir.Cardinality.MANY_TO_MANY
    if a_list:
        return ir.Cardinality.ONE_TO_MANY, ir.Cardinality.MANY_TO_ONE
    if b_list:
        return ir.Cardinality.MANY_TO_ONE, ir.Cardinality.ONE_TO_MANY
    return ir.Cardinality.ONE_TO_ONE, ir.Cardinality.ONE_TO_ONE


def _pair_relations(
    relation_fields: list[_RelationField],
) -> tuple[list[tuple[_RelationField, _RelationField]], list[_RelationField]]:
    """
    Match the two declared sides of each relation.

    Fields pair when they share an explicit relation name, or when each is
    the only unnamed field between the two entities on its side.
    """
    pairs: list[tuple[_RelationField, _RelationField]] = []
    paired: set[int] = set()

    by_name: dict[str, list[_RelationField]] = {}
    for rf in relation_fields:
        if rf.explicit_name:
            by_name.setdefault(rf.explicit_name, []).append(rf)
    for group in by_name.values():
        if len(group) == 2:
            pairs.append((group[0], group[1]))
            paired.update(rf.order for rf in group)

    unnamed: dict[tuple[int, int], list[_RelationField]] = {}
    for rf in relation_fields:
        if rf.explicit_name is None and rf.entity != rf.target:
            unnamed.setdefault((rf.entity, rf.target), []).append(rf)
    for (source, target), forward in unnamed.items():
        backward = unnamed.get((target, source), [])
        if source < target and len(forward) == 1 and len(backward) == 1:
            pairs.append((forward[0], backward[0]))
            paired.update((forward[0].order, backward[0].order))

    pairs.sort(key=lambda pair: min(pair[0].order, pair[1].order))
    unpaired = [rf for rf in relation_fields if rf.order not in paired]
    return pairs, unpaired


def _resolve_relations(arena: list[_EntityRecord], index: dict[str, int]) -> None:
    relation_fields: list[_RelationField] = []
    for entity_idx, record in enumerate(arena):
        for fdecl in record.block.fields:
            if fdecl.type_name in index and fdecl.attribute("virtual") is None:
                relation_fields.append(
                    _RelationField(
                        entity=entity_idx,
                        name=fdecl.name,
                        target=index[fdecl.type_name],
                        is_list=fdecl.is_list,
                        explicit_name=relation_name(fdecl),
                        order=len(relation_fields),
                    )
                )

    pairs, unpaired = _pair_relations(relation_fields)
    specs: dict[int, ir.RelationSpec] = {}

    for a, b in pairs:
        a_card, b_card = _pair_cardinalities(a.is_list, b.is_list)
        source, target = arena[a.entity].block.name, arena[b.entity].block.name
        name = a.explicit_name or f"{source}To{target}"
        # one_to_one keys live on the side declared first
        a_owns = a_card in (ir.Cardinality.MANY_TO_ONE, ir.Cardinality.ONE_TO_ONE)
        b_owns = b_card == ir.Cardinality.MANY_TO_ONE
        specs[a.order] = ir.RelationSpec(
            target=target, name=name, cardinality=a_card, inverse_field=b.name, owns_key=a_owns
        )
        specs[b.order] = ir.RelationSpec(
            target=source, name=name, cardinality=b_card, inverse_field=a.name, owns_key=b_owns
        )

    for rf in unpaired:
        source, target = arena[rf.entity].block.name, arena[rf.target].block.name
        cardinality = ir.Cardinality.ONE_TO_MANY if rf.is_list else ir.Cardinality.MANY_TO_ONE
        name = rf.explicit_name or f"{source}To{target}"
        specs[rf.order] = ir.RelationSpec(
            target=target,
            name=name,
            cardinality=cardinality,
            owns_key=cardinality == ir.Cardinality.MANY_TO_ONE,
        )
        arena[rf.target].inverse.append(
            ir.RelationEdge(
                name=name,
                target=source,
                cardinality=cardinality.inverse,
                inverse_field=rf.name,
            )
        )

    for rf in relation_fields:
        spec = specs[rf.order]
        record = arena[rf.entity]
        record.replace_field(rf.name, relation=spec)
        record.relations.append(
            ir.RelationEdge(
                name=spec.name,
                target=spec.target,
                cardinality=spec.cardinality,
                field=rf.name,
                inverse_field=spec.inverse_field,
            )
        )


# =============================================================================
# Pages, views, workflows
# =============================================================================


def _names(value: syntax.Value | None) -> list[str]:
    if isinstance(value, syntax.ArrayValue):
        return [str(to_python(item)) for item in value.items]
    return []


def default_route(page_name: str) -> str:
    """Route for a page without an explicit one: "/" + kebab-case name."""
    return "/" + kebab_case(page_name)


def _build_page(block: syntax.PageBlock) -> ir.PageSpec:
    name = block.name or ""
    props = {prop.key: prop.value for prop in block.properties}

    columns: list[ir.ColumnSpec] = []
    columns_value = props.get("columns")
    if isinstance(columns_value, syntax.ArrayValue):
        for item in columns_value.items:
            if isinstance(item, syntax.ObjectValue):
                data = to_python(item)
                columns.append(ir.ColumnSpec(field=data["field"], label=data.get("label", data["field"])))
            else:
                column = str(to_python(item))
                columns.append(ir.ColumnSpec(field=column, label=column))

    route = props.get("route")
    title = props.get("title")
    entity = props.get("entity")
    component = props.get("component")

    return ir.PageSpec(
        name=name,
        kind=ir.PageKind(to_python(props["type"])),
        route=to_python(route) if route is not None else default_route(name),
        entity=to_python(entity) if entity is not None else None,
        permissions=_names(props.get("permissions")),
        title=to_python(title) if title is not None else name,
        columns=columns,
        component=to_python(component) if component is not None else None,
    )


def _field_type_name(spec_by_entity: dict[str, list[ir.FieldSpec]], entity: str, path: list[str]) -> str:
    """Type name at the end of a dotted field path."""
    current = entity
    for segment in path[:-1]:
        spec = next(f for f in spec_by_entity[current] if f.name == segment)
        current = spec.type.ref_entity or current
    last = next(f for f in spec_by_entity[current] if f.name == path[-1])
    return str(last.type)


def _build_view(block: syntax.ViewBlock, spec_by_entity: dict[str, list[ir.FieldSpec]]) -> ir.ViewSpec:
    name = block.name or ""
    source_prop = cast(syntax.Property, block.get("from"))
    fields_prop = cast(syntax.Property, block.get("fields"))
    source = str(to_python(source_prop.value))

    fields: list[ir.ViewFieldSpec] = []
    for item in cast(syntax.ArrayValue, fields_prop.value).items:
        if isinstance(item, syntax.NameValue):
            fields.append(
                ir.ViewFieldSpec(
                    name=item.parts[-1],
                    field=item.name,
                    type=_field_type_name(spec_by_entity, source, list(item.parts)),
                )
            )
            continue

        data = to_python(cast(syntax.ObjectValue, item))
        field_name = data["name"]
        if "field" in data:
            ref = str(data["field"])
            fields.append(
                ir.ViewFieldSpec(
                    name=field_name,
                    field=ref,
                    type=data.get("type") or _field_type_name(spec_by_entity, source, ref.split(".")),
                )
            )
        else:
            expression = data["expression"]
            fields.append(
                ir.ViewFieldSpec(
                    name=field_name,
                    type=data.get("type", "String"),
                    expression=parse_expr(expression),
                    source=expression,
                    resolver=resolver_name(name, field_name),
                )
            )

    return ir.ViewSpec(name=name, source_entity=source, fields=fields)


def _build_step_input(value: syntax.Value) -> ir.StepInput:
    if isinstance(value, syntax.NameValue) and value.is_qualified:
        return ir.TriggerRef(path=list(value.parts[1:]))
    return ir.LiteralInput(value=to_python(value))


def _build_workflow(block: syntax.WorkflowBlock) -> ir.WorkflowSpec:
    trigger_prop = cast(syntax.Property, block.get("trigger"))
    steps_prop = cast(syntax.Property, block.get("steps"))

    if isinstance(trigger_prop.value, syntax.ObjectValue):
        data = to_python(trigger_prop.value)
        trigger = ir.TriggerSpec(event=data["event"], entity=data.get("entity"))
    else:
        trigger = ir.TriggerSpec(event=str(to_python(trigger_prop.value)))

    steps: list[ir.WorkflowStep] = []
    for item in cast(syntax.ArrayValue, steps_prop.value).items:
        step = cast(syntax.ObjectValue, item)
        action = cast(syntax.Property, step.get("action"))
        inputs = step.get("inputs")
        step_inputs: dict[str, ir.StepInput] = {}
        if inputs is not None and isinstance(inputs.value, syntax.ObjectValue):
            step_inputs = {prop.key: _build_step_input(prop.value) for prop in inputs.value.properties}
        steps.append(ir.WorkflowStep(action=str(to_python(action.value)), inputs=step_inputs))

    return ir.WorkflowSpec(name=block.name or "", trigger=trigger, steps=steps)


# =============================================================================
# Entry point
# =============================================================================


def build_appspec(validated: ValidatedProgram, default_name: str | None = None) -> ir.AppSpec:
    """
    Build the canonical IR from a validated tree.

    Args:
        validated: Output of validate_program()
        default_name: App name to use when the DSL does not set one

    Returns:
        Immutable AppSpec
    """
    program = validated.program
    symbols = validated.symbols

    arena: list[_EntityRecord] = []
    index: dict[str, int] = {}
    for block in symbols.entities.values():
        fields = [_build_field(block.name, fdecl, validated) for fdecl in block.fields]
        if not any(f.is_primary_key for f in fields):
            fields.insert(0, _implicit_primary_key())
        index[block.name] = len(arena)
        arena.append(_EntityRecord(block=block, fields=fields))

    _resolve_relations(arena, index)

    entities = [
        ir.EntitySpec(name=record.block.name, fields=record.fields, relations=record.relations + record.inverse)
        for record in arena
    ]
    spec_by_entity = {entity.name: entity.fields for entity in entities}

    enums = [ir.EnumSpec(name=block.name, values=[v.name for v in block.values]) for block in symbols.enums.values()]
    pages = [_build_page(block) for block in symbols.pages.values()]
    views = [_build_view(block, spec_by_entity) for block in symbols.views.values()]
    workflows = [_build_workflow(block) for block in symbols.workflows.values()]

    appspec = ir.AppSpec(
        name=validated.app_name or default_name or "app",
        entities=entities,
        enums=enums,
        pages=pages,
        views=views,
        workflows=workflows,
        config=validated.config,
    )
    logger.debug(
        "Built AppSpec %s: %d entities, %d pages, %d views, %d workflows from %d blocks",
        appspec.name,
        len(entities),
        len(pages),
        len(views),
        len(workflows),
        len(program.blocks),
    )
    return appspec
