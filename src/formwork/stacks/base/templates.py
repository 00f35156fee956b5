"""
Jinja2 environment shared by the generators.

Templates live under stacks/templates/<generator>/. Undefined variables
are errors, so a template/context mismatch fails the generator instead of
rendering empty text.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from formwork.core.errors import GenerationError
from formwork.core.naming import kebab_case, pascal_case, plural, snake_case

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["snake"] = snake_case
    env.filters["kebab"] = kebab_case
    env.filters["pascal"] = pascal_case
    env.filters["plural"] = plural
    env.filters["json"] = lambda value: json.dumps(value)
    env.filters["py"] = repr
    return env


def render_template(generator: str, name: str, **context: Any) -> str:
    """
    Render stacks/templates/<generator>/<name>.

    Raises:
        GenerationError: If the template is missing or fails to render
    """
    try:
        template = get_environment().get_template(f"{generator}/{name}")
        return template.render(**context)
    except TemplateError as e:
        raise GenerationError(generator, f"Template {name} failed: {e}") from e
