"""
Page types for formwork IR.

DSL Syntax:

    page Posts {
      type: table
      entity: Post
      route: "/posts"
      title: "All posts"
      permissions: [ADMIN, EDITOR]
      columns: [title, { field: author, label: "Written by" }]
    }

    page Dashboard { type: custom, component: "./components/Dashboard" }
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PageKind(str, Enum):
    TABLE = "table"
    FORM = "form"
    DETAILS = "details"
    CUSTOM = "custom"


class ColumnSpec(BaseModel):
    """A table column; label defaults to the field name."""

    field: str
    label: str

    model_config = ConfigDict(frozen=True)


class PageSpec(BaseModel):
    """
    Specification for a page.

    Attributes:
        name: Page name
        kind: Page type (table, form, details, custom)
        route: URL route (defaults to "/" + kebab-case name)
        entity: Entity shown by the page (None for custom pages)
        permissions: Roles allowed to use the page; empty means public
        title: Display title (defaults to the page name)
        columns: Table columns (table pages only)
        component: Component path (custom pages only)
    """

    name: str
    kind: PageKind
    route: str
    entity: str | None = None
    permissions: list[str] = Field(default_factory=list)
    title: str
    columns: list[ColumnSpec] = Field(default_factory=list)
    component: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_public(self) -> bool:
        return not self.permissions
