"""
Project manifest (formwork.toml).

Example:

    [project]
    name = "blog"
    dsl = "app.fw"

    [generate]
    output = "build"
    generators = ["backend", "frontend", "infrastructure"]

    [generate.options]
    db = "postgresql"

    [migrations]
    enabled = false
    command = ["alembic", "upgrade", "head"]
    timeout = 120
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError

MANIFEST_NAME = "formwork.toml"
DEFAULT_MIGRATION_COMMAND = ["alembic", "upgrade", "head"]


@dataclass
class GenerateConfig:
    """What to generate and where."""

    output: Path
    generators: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass
class MigrationsConfig:
    """Post-generation migration step."""

    enabled: bool = False
    command: list[str] = field(default_factory=lambda: list(DEFAULT_MIGRATION_COMMAND))
    timeout: float = 120.0


@dataclass
class ProjectManifest:
    """
    Project manifest loaded from formwork.toml.

    Paths are resolved against the manifest's directory.
    """

    name: str
    root: Path
    dsl: Path
    generate: GenerateConfig
    migrations: MigrationsConfig = field(default_factory=MigrationsConfig)


def _table(data: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{path}: [{key}] must be a table")
    return value


def _str_list(value: Any, key: str, path: Path) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{path}: {key} must be a list of strings")
    return list(value)


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load and check a formwork.toml manifest.

    Raises:
        ConfigError: If the file is missing or malformed, names an unknown
            generator, or sets an unknown generator option
    """
    # local import: the registry pulls in every generator
    from formwork.stacks import REGISTRY
    from formwork.stacks.base import GeneratorOptions

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Manifest not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: invalid TOML: {e}") from e

    root = path.parent
    project = _table(data, "project", path)
    generate_data = _table(data, "generate", path)
    migrations_data = _table(data, "migrations", path)

    name = project.get("name", root.resolve().name)
    dsl = root / project.get("dsl", "app.fw")

    generators = _str_list(generate_data.get("generators", list(REGISTRY)), "generate.generators", path)
    unknown = [g for g in generators if g not in REGISTRY]
    if unknown:
        raise ConfigError(
            f"{path}: unknown generator(s) {', '.join(unknown)} "
            f"(available: {', '.join(REGISTRY)})"
        )

    options = _table(generate_data, "options", path)
    bad_keys = sorted(set(options) - set(GeneratorOptions.model_fields))
    if bad_keys:
        raise ConfigError(
            f"{path}: unknown generator option(s) {', '.join(bad_keys)} "
            f"(expected one of: {', '.join(GeneratorOptions.model_fields)})"
        )

    command = _str_list(
        migrations_data.get("command", DEFAULT_MIGRATION_COMMAND), "migrations.command", path
    )
    timeout = migrations_data.get("timeout", 120)
    if not isinstance(timeout, int | float) or isinstance(timeout, bool) or timeout <= 0:
        raise ConfigError(f"{path}: migrations.timeout must be a positive number")

    return ProjectManifest(
        name=name,
        root=root,
        dsl=dsl,
        generate=GenerateConfig(
            output=root / generate_data.get("output", "build"),
            generators=generators,
            options=dict(options),
        ),
        migrations=MigrationsConfig(
            enabled=bool(migrations_data.get("enabled", False)),
            command=command,
            timeout=float(timeout),
        ),
    )
