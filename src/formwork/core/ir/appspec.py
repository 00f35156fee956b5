"""
Application specification types for formwork IR.

This module contains the top-level AppSpec that represents a complete,
validated application definition. An AppSpec is built fresh on every run
and is immutable once built, so every generator can be handed the same
instance.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .config import AppConfig
from .domain import EntitySpec
from .enums import EnumSpec
from .pages import PageSpec
from .views import ViewSpec
from .workflows import WorkflowSpec


class AppSpec(BaseModel):
    """
    Complete application specification.

    Attributes:
        name: Application name
        entities: Entities in declaration order
        enums: Enums in declaration order
        pages: Pages in declaration order
        views: Views in declaration order
        workflows: Workflows in declaration order
        config: Database, auth and integration configuration
    """

    name: str
    entities: list[EntitySpec] = Field(default_factory=list)
    enums: list[EnumSpec] = Field(default_factory=list)
    pages: list[PageSpec] = Field(default_factory=list)
    views: list[ViewSpec] = Field(default_factory=list)
    workflows: list[WorkflowSpec] = Field(default_factory=list)
    config: AppConfig = Field(default_factory=AppConfig)

    # Unknown keys from a newer producer are dropped, not rejected.
    model_config = ConfigDict(frozen=True, extra="ignore")

    def get_entity(self, name: str) -> EntitySpec | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_enum(self, name: str) -> EnumSpec | None:
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None

    def get_page(self, name: str) -> PageSpec | None:
        for page in self.pages:
            if page.name == name:
                return page
        return None

    def get_view(self, name: str) -> ViewSpec | None:
        for view in self.views:
            if view.name == name:
                return view
        return None

    def pages_for(self, entity_name: str) -> list[PageSpec]:
        return [page for page in self.pages if page.entity == entity_name]

    @property
    def roles(self) -> list[str]:
        """Every role named by a page permission, in first-use order."""
        seen: dict[str, None] = {}
        for page in self.pages:
            for role in page.permissions:
                seen.setdefault(role, None)
        return list(seen)
