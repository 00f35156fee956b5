"""
Syntax tree produced by the formwork parser.

The tree is untyped with respect to the application model: page, view,
workflow and config bodies are kept as generic property lists and are only
interpreted by the semantic validator. All nodes are immutable so that
parsing the same text twice yields equal trees.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import SourcePosition

# =============================================================================
# Values
# =============================================================================


@dataclass(frozen=True)
class StringValue:
    value: str
    position: SourcePosition


@dataclass(frozen=True)
class NumberValue:
    """Numeric literal; `text` keeps the source spelling."""

    text: str
    position: SourcePosition

    @property
    def value(self) -> int | float:
        return float(self.text) if "." in self.text else int(self.text)


@dataclass(frozen=True)
class BooleanValue:
    value: bool
    position: SourcePosition


@dataclass(frozen=True)
class NameValue:
    """
    A bare or dotted identifier, e.g. `User`, `ADMIN` or `trigger.user.email`.

    Bare identifiers are references (entity, enum member, role, provider);
    their meaning is decided by the validator from context.
    """

    parts: tuple[str, ...]
    position: SourcePosition

    @property
    def name(self) -> str:
        return ".".join(self.parts)

    @property
    def is_qualified(self) -> bool:
        return len(self.parts) > 1


@dataclass(frozen=True)
class EnvValue:
    """Secret indirection: `env(VAR_NAME)`."""

    var: str
    position: SourcePosition


@dataclass(frozen=True)
class ArrayValue:
    items: tuple[Value, ...]
    position: SourcePosition


@dataclass(frozen=True)
class ObjectValue:
    properties: tuple[Property, ...]
    position: SourcePosition

    def get(self, key: str) -> Property | None:
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None


Value = StringValue | NumberValue | BooleanValue | NameValue | EnvValue | ArrayValue | ObjectValue


@dataclass(frozen=True)
class Property:
    """A `key: value` pair inside a block body or object literal."""

    key: str
    value: Value
    position: SourcePosition


# =============================================================================
# Entity fields
# =============================================================================


@dataclass(frozen=True)
class Argument:
    """An attribute-call argument; `key` is None for positional values."""

    key: str | None
    value: Value
    position: SourcePosition


@dataclass(frozen=True)
class AttributeCall:
    """`default(...)`, `@relation(...)` or `@virtual(...)`."""

    name: str
    args: tuple[Argument, ...]
    position: SourcePosition
    is_annotation: bool = True  # written with a leading @

    def get(self, key: str) -> Argument | None:
        for arg in self.args:
            if arg.key == key:
                return arg
        return None


@dataclass(frozen=True)
class FieldDecl:
    name: str
    type_name: str
    is_list: bool
    modifiers: tuple[str, ...]
    attributes: tuple[AttributeCall, ...]
    position: SourcePosition
    type_position: SourcePosition

    def attribute(self, name: str) -> AttributeCall | None:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None


# =============================================================================
# Blocks
# =============================================================================


@dataclass(frozen=True)
class EntityBlock:
    name: str
    fields: tuple[FieldDecl, ...]
    position: SourcePosition


@dataclass(frozen=True)
class EnumValueDecl:
    name: str
    position: SourcePosition


@dataclass(frozen=True)
class EnumBlock:
    name: str
    values: tuple[EnumValueDecl, ...]
    position: SourcePosition


@dataclass(frozen=True)
class PropertyBlock:
    """Common shape of page, view, workflow and config bodies."""

    name: str | None
    properties: tuple[Property, ...]
    position: SourcePosition

    def get(self, key: str) -> Property | None:
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None


@dataclass(frozen=True)
class PageBlock(PropertyBlock):
    pass


@dataclass(frozen=True)
class ViewBlock(PropertyBlock):
    pass


@dataclass(frozen=True)
class WorkflowBlock(PropertyBlock):
    pass


@dataclass(frozen=True)
class ConfigBlock(PropertyBlock):
    """A `config` block; `name` is None for the anonymous form."""


Block = EntityBlock | EnumBlock | PageBlock | ViewBlock | WorkflowBlock | ConfigBlock


@dataclass(frozen=True)
class Program:
    """Root of the syntax tree: blocks in source order."""

    blocks: tuple[Block, ...]

    def of_type(self, block_type: type) -> list:
        return [block for block in self.blocks if isinstance(block, block_type)]

    @property
    def entities(self) -> list[EntityBlock]:
        return self.of_type(EntityBlock)

    @property
    def enums(self) -> list[EnumBlock]:
        return self.of_type(EnumBlock)

    @property
    def pages(self) -> list[PageBlock]:
        return self.of_type(PageBlock)

    @property
    def views(self) -> list[ViewBlock]:
        return self.of_type(ViewBlock)

    @property
    def workflows(self) -> list[WorkflowBlock]:
        return self.of_type(WorkflowBlock)

    @property
    def configs(self) -> list[ConfigBlock]:
        return self.of_type(ConfigBlock)


def describe_value(value: Value) -> str:
    """Render a value back to DSL-like text for diagnostics."""
    if isinstance(value, StringValue):
        return repr(value.value)
    if isinstance(value, NumberValue):
        return value.text
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, NameValue):
        return value.name
    if isinstance(value, EnvValue):
        return f"env({value.var})"
    if isinstance(value, ArrayValue):
        return "[" + ", ".join(describe_value(item) for item in value.items) + "]"
    return "{" + ", ".join(f"{p.key}: {describe_value(p.value)}" for p in value.properties) + "}"
