"""
Project scaffolding for `formwork init`.

Writes a formwork.toml manifest and a starter app.fw that validates and
builds with every generator.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from formwork.core.errors import ConfigError
from formwork.core.manifest import MANIFEST_NAME
from formwork.stacks import list_generators

logger = logging.getLogger(__name__)

DSL_NAME = "app.fw"

_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")

MANIFEST_TEMPLATE = """\
[project]
name = "{name}"
dsl = "{dsl}"

[generate]
output = "build"
generators = [{generators}]

[migrations]
enabled = false
command = ["alembic", "upgrade", "head"]
timeout = 120
"""

DSL_TEMPLATE = """\
// {name}: generated by `formwork init`
config {{ name: "{name}", db: sqlite }}

entity Item {{
  id: UUID primaryKey
  title: String
  done: Boolean default(false)
  createdAt: DateTime default(now)
}}

page Items {{ type: table, entity: Item, columns: [title, done] }}
page ItemForm {{ type: form, entity: Item }}
"""


def project_name_for(target: Path) -> str:
    """Derive a project name from a directory, e.g. 'My App' -> 'my-app'."""
    name = _UNSAFE.sub("-", target.resolve().name).strip("-").lower()
    return name or "app"


def init_project(target: Path, name: str | None = None, force: bool = False) -> list[Path]:
    """
    Create a new project in ``target``.

    Returns the written paths. Raises ConfigError if a manifest or DSL file
    already exists and ``force`` is not set; nothing is written in that case.
    """
    name = name or project_name_for(target)
    files = {
        target / MANIFEST_NAME: MANIFEST_TEMPLATE.format(
            name=name,
            dsl=DSL_NAME,
            generators=", ".join(f'"{g}"' for g in list_generators()),
        ),
        target / DSL_NAME: DSL_TEMPLATE.format(name=name),
    }

    existing = [path for path in files if path.exists()]
    if existing and not force:
        names = ", ".join(path.name for path in existing)
        raise ConfigError(f"{target} already contains {names}; use --force to overwrite")

    target.mkdir(parents=True, exist_ok=True)
    for path, content in files.items():
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
    return list(files)
