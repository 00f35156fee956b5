"""
Generator options.

Options form a closed set: database kind, auth provider and enabled
integrations. They start from the app's own config and may be narrowed by
the manifest or the command line. Unknown keys and values that contradict
the DSL config are rejected with ConfigError.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from formwork.core import ir
from formwork.core.errors import ConfigError

INTEGRATION_NAMES = ("email", "monitoring")


class GeneratorOptions(BaseModel):
    """
    Resolved options shared by every generator.

    Attributes:
        db: Database kind
        auth_provider: Auth provider, None when the app has no auth
        integrations: Enabled integration names
    """

    db: ir.DatabaseKind = ir.DatabaseKind.SQLITE
    auth_provider: ir.AuthProvider | None = None
    integrations: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def has_integration(self, name: str) -> bool:
        return name in self.integrations


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        key = ".".join(str(p) for p in err["loc"])
        if err["type"] == "extra_forbidden":
            parts.append(f"unknown option '{key}' (expected one of: {', '.join(GeneratorOptions.model_fields)})")
        else:
            parts.append(f"option '{key}': {err['msg']}")
    return "; ".join(parts)


def resolve_options(
    spec: ir.AppSpec,
    overrides: GeneratorOptions | Mapping[str, Any] | None = None,
) -> GeneratorOptions:
    """
    Build generator options from the app config and optional overrides.

    Raises:
        ConfigError: On unknown keys, bad values, or values that contradict
            the app config
    """
    config = spec.config
    base = GeneratorOptions(
        db=config.db,
        auth_provider=ir.AuthProvider(config.auth.provider) if config.auth else None,
        integrations=config.integrations.enabled,
    )
    if overrides is None:
        return base

    if isinstance(overrides, GeneratorOptions):
        supplied = overrides.model_dump(exclude_unset=True)
    else:
        try:
            supplied = GeneratorOptions.model_validate(dict(overrides)).model_dump(exclude_unset=True)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid generator options: {_describe(e)}") from e

    db = supplied.get("db")
    if db is not None and db != base.db:
        raise ConfigError(
            f"Option db={db.value} contradicts the app config (db: {base.db.value})"
        )

    provider = supplied.get("auth_provider")
    if provider is not None and provider != base.auth_provider:
        configured = base.auth_provider.value if base.auth_provider else "none"
        raise ConfigError(
            f"Option auth_provider={provider.value} contradicts the app config (auth provider: {configured})"
        )

    integrations = supplied.get("integrations")
    if integrations is not None:
        unknown = [name for name in integrations if name not in INTEGRATION_NAMES]
        if unknown:
            raise ConfigError(
                f"Unknown integration(s) {', '.join(unknown)} (expected one of: {', '.join(INTEGRATION_NAMES)})"
            )
        missing = [name for name in integrations if name not in base.integrations]
        if missing:
            raise ConfigError(
                f"Integration(s) {', '.join(missing)} enabled in options but not configured in the app"
            )
        # options may only narrow the configured set
        base = base.model_copy(update={"integrations": [n for n in base.integrations if n in integrations]})

    return base
