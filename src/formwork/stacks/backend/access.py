"""
Route and access planning.

Each entity that has at least one page gets a CRUD router. Page permissions
decide who may call it: table and details pages grant read access, form
pages grant create, update and delete. A page without permissions is
public, and one public page makes the whole operation group public.
"""

from __future__ import annotations

from dataclasses import dataclass

from formwork.core import ir
from formwork.core.naming import kebab_case, plural, snake_case

READ_PAGES = (ir.PageKind.TABLE, ir.PageKind.DETAILS)
WRITE_PAGES = (ir.PageKind.FORM,)


@dataclass(frozen=True)
class EntityRoutes:
    """
    Planned endpoints for one entity.

    Attributes:
        entity: Entity name
        snake: snake_case entity name (function and module names)
        path: Collection path, e.g. "/blog-posts"
        read_roles: Roles allowed to read; None if no read endpoints, () if public
        write_roles: Roles allowed to write; None if no write endpoints, () if public
    """

    entity: str
    snake: str
    path: str
    read_roles: tuple[str, ...] | None
    write_roles: tuple[str, ...] | None

    @property
    def readable(self) -> bool:
        return self.read_roles is not None

    @property
    def writable(self) -> bool:
        return self.write_roles is not None


def collection_path(entity: str) -> str:
    return "/" + kebab_case(plural(entity))


def view_path(view: str) -> str:
    return "/views/" + kebab_case(view)


def _merge_roles(pages: list[ir.PageSpec]) -> tuple[str, ...] | None:
    if not pages:
        return None
    if any(page.is_public for page in pages):
        return ()
    roles: dict[str, None] = {}
    for page in pages:
        for role in page.permissions:
            roles.setdefault(role, None)
    return tuple(roles)


def plan_routes(spec: ir.AppSpec) -> list[EntityRoutes]:
    """Routers to generate, in entity declaration order."""
    plans: list[EntityRoutes] = []
    for entity in spec.entities:
        pages = spec.pages_for(entity.name)
        if not pages:
            continue
        plans.append(
            EntityRoutes(
                entity=entity.name,
                snake=snake_case(entity.name),
                path=collection_path(entity.name),
                read_roles=_merge_roles([p for p in pages if p.kind in READ_PAGES]),
                write_roles=_merge_roles([p for p in pages if p.kind in WRITE_PAGES]),
            )
        )
    return plans


def protected_without_auth(spec: ir.AppSpec) -> list[str]:
    """Pages that declare permissions in an app with no auth config."""
    if spec.config.auth is not None:
        return []
    return [page.name for page in spec.pages if not page.is_public]
