"""
SQLAlchemy model generation.

Builds the per-entity column and relationship definitions rendered into
app/models.py. Foreign keys follow the relation metadata on each field:
the side that owns the key gets a `<field>_id` column, and relations whose
list side was declared alone get a hidden key column on the target.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from formwork.core import ir
from formwork.core.naming import plural, snake_case

from .types import get_column_type


@dataclass
class ModelContext:
    name: str
    table: str
    columns: list[str] = field(default_factory=list)
    relationships: list[str] = field(default_factory=list)
    properties: list[tuple[str, str]] = field(default_factory=list)  # (field, resolver)


@dataclass
class AssociationTable:
    """Join table of a many-to-many relation; `left_field` declared it first."""

    name: str
    left_field: tuple[str, str]
    left_table: str
    right_table: str
    left_column: str
    right_column: str


def table_name(entity: str) -> str:
    return plural(snake_case(entity))


def association_name(rel: ir.RelationSpec) -> str:
    return f"{snake_case(rel.name)}_table"


def hidden_key_column(edge: ir.RelationEdge) -> str:
    """Key column for a relation declared only on its list side."""
    return f"{snake_case(edge.name)}_id"


def _pk_name(spec: ir.AppSpec, entity_name: str) -> str:
    entity = spec.get_entity(entity_name)
    pk = entity.primary_key if entity else None
    return pk.name if pk else "id"


def _pk_type(spec: ir.AppSpec, entity_name: str) -> str:
    entity = spec.get_entity(entity_name)
    pk = entity.primary_key if entity else None
    return get_column_type(pk.type) if pk else "Uuid"


def _foreign_key(spec: ir.AppSpec, entity_name: str) -> str:
    return f"{table_name(entity_name)}.{_pk_name(spec, entity_name)}"


def _default_expr(spec: ir.FieldSpec) -> str | None:
    default = spec.default
    if default is None:
        return None
    kind = spec.type.kind
    if isinstance(default, ir.SecretRef):
        return f"lambda: os.environ.get({default.env!r})"
    if kind == ir.FieldTypeKind.ENUM:
        return f"{spec.type.enum_name}.{default}"
    if kind == ir.FieldTypeKind.UUID:
        return "uuid.uuid4" if default == "uuid" else f"uuid.UUID({str(default)!r})"
    if kind == ir.FieldTypeKind.DATETIME:
        return "_utcnow" if default == "now" else f"datetime.fromisoformat({str(default)!r})"
    if kind == ir.FieldTypeKind.DECIMAL:
        return f"Decimal({str(default)!r})"
    return repr(default)


def _generate_column(spec: ir.FieldSpec) -> str:
    """Generate a SQLAlchemy column definition for a scalar or enum field."""
    args = [get_column_type(spec.type)]
    if spec.is_primary_key:
        args.append("primary_key=True")
    else:
        args.append(f"nullable={spec.is_optional}")
        if spec.is_unique:
            args.append("unique=True")
    default = _default_expr(spec)
    if default is not None:
        args.append(f"default={default}")
    return f"{spec.name} = Column({', '.join(args)})"


def _many_to_many(
    entity: ir.EntitySpec,
    f: ir.FieldSpec,
    rel: ir.RelationSpec,
    tables: dict[str, AssociationTable],
    spec: ir.AppSpec,
) -> str:
    table = tables[association_name(rel)]
    args = [repr(rel.target), f"secondary={table.name}"]
    if rel.target == entity.name:
        # both join columns point at the same table
        pk = f"{entity.name}.{_pk_name(spec, entity.name)}"
        near, far = table.left_column, table.right_column
        if table.left_field != (entity.name, f.name):
            near, far = far, near
        args.append(f"primaryjoin=lambda: {pk} == {table.name}.c.{near}")
        args.append(f"secondaryjoin=lambda: {pk} == {table.name}.c.{far}")
    if rel.inverse_field:
        args.append(f"back_populates={rel.inverse_field!r}")
    return f"{f.name} = relationship({', '.join(args)})"


def build_model(spec: ir.AppSpec, entity: ir.EntitySpec, tables: dict[str, AssociationTable]) -> ModelContext:
    """Columns, relationships and computed properties for one entity."""
    model = ModelContext(name=entity.name, table=table_name(entity.name))

    for f in entity.fields:
        if f.virtual is not None:
            model.properties.append((f.name, f.virtual.resolver))
            continue
        if f.relation is None:
            model.columns.append(_generate_column(f))
            continue

        rel = f.relation
        target = rel.target

        if rel.cardinality == ir.Cardinality.MANY_TO_MANY:
            model.relationships.append(_many_to_many(entity, f, rel, tables, spec))
            continue

        back = f", back_populates={rel.inverse_field!r}" if rel.inverse_field else ""

        if rel.owns_key:
            column = f"{f.name}_id"
            unique = ", unique=True" if rel.cardinality == ir.Cardinality.ONE_TO_ONE else ""
            model.columns.append(
                f"{column} = Column({_pk_type(spec, target)}, "
                f"ForeignKey({_foreign_key(spec, target)!r}), nullable={f.is_optional}{unique})"
            )
            remote = ""
            if target == entity.name:
                remote = f", remote_side=lambda: [{entity.name}.{_pk_name(spec, entity.name)}]"
            model.relationships.append(
                f"{f.name} = relationship({target!r}, foreign_keys=lambda: [{entity.name}.{column}]{remote}{back})"
            )
            continue

        # the key lives on the target
        if rel.inverse_field:
            key = f"{target}.{rel.inverse_field}_id"
        else:
            key = f"{target}.{snake_case(rel.name)}_id"
        uselist = "" if f.type.is_list else ", uselist=False"
        model.relationships.append(f"{f.name} = relationship({target!r}, foreign_keys={key!r}{uselist}{back})")

    for edge in entity.relations:
        if edge.is_inverse and edge.cardinality == ir.Cardinality.MANY_TO_ONE:
            model.columns.append(
                f"{hidden_key_column(edge)} = Column({_pk_type(spec, edge.target)}, "
                f"ForeignKey({_foreign_key(spec, edge.target)!r}), nullable=True)"
            )

    return model


def build_association_tables(spec: ir.AppSpec) -> dict[str, AssociationTable]:
    """One association table per many-to-many relation, keyed by table name."""
    tables: dict[str, AssociationTable] = {}
    for entity in spec.entities:
        for f in entity.fields:
            rel = f.relation
            if rel is None or rel.cardinality != ir.Cardinality.MANY_TO_MANY:
                continue
            name = association_name(rel)
            if name in tables:
                continue
            left_col = f"{snake_case(entity.name)}_id"
            right_col = f"{snake_case(rel.target)}_id"
            if left_col == right_col:
                right_col = f"related_{right_col}"
            tables[name] = AssociationTable(
                name=name,
                left_field=(entity.name, f.name),
                left_table=_foreign_key(spec, entity.name),
                right_table=_foreign_key(spec, rel.target),
                left_column=left_col,
                right_column=right_col,
            )
    return dict(sorted(tables.items()))
