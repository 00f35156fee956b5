"""
Application configuration types for formwork IR.

Provider-specific configuration is modelled as tagged unions keyed by
`provider`: each variant declares its own required and optional properties
and rejects unknown ones, so a missing `userEntity` on a jwt auth block is
a model validation failure rather than a runtime lookup miss.

DSL Syntax:

    config { name: "blog", db: postgresql }

    config auth {
      provider: jwt
      userEntity: User
      secret: env(JWT_SECRET)
      roles: UserRole
    }

    config integrations {
      email: { provider: sendgrid, apiKey: env(SENDGRID_API_KEY), defaultFrom: "hi@example.com" }
      monitoring: { provider: sentry, dsn: env(SENTRY_DSN) }
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class DatabaseKind(str, Enum):
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class AuthProvider(str, Enum):
    JWT = "jwt"
    CLERK = "clerk"
    AUTH0 = "auth0"


class SecretRef(BaseModel):
    """Indirection to an environment variable, written `env(NAME)` in the DSL."""

    env: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"env({self.env})"


Secret = str | SecretRef

_VARIANT_CONFIG = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# =============================================================================
# Auth
# =============================================================================


class _AuthBase(BaseModel):
    user_entity: str = Field(alias="userEntity")
    roles: str | None = None  # enum supplying the role vocabulary

    model_config = _VARIANT_CONFIG


class JwtAuth(_AuthBase):
    provider: Literal["jwt"] = "jwt"
    secret: Secret = SecretRef(env="JWT_SECRET")
    expires_in: str = Field(default="1h", alias="expiresIn")


class ClerkAuth(_AuthBase):
    provider: Literal["clerk"] = "clerk"
    secret_key: Secret = Field(alias="secretKey")
    publishable_key: Secret | None = Field(default=None, alias="publishableKey")


class Auth0Auth(_AuthBase):
    provider: Literal["auth0"] = "auth0"
    domain: str
    audience: str
    client_id: Secret | None = Field(default=None, alias="clientId")


AuthConfig = Annotated[JwtAuth | ClerkAuth | Auth0Auth, Field(discriminator="provider")]


# =============================================================================
# Integrations
# =============================================================================


class SendgridEmail(BaseModel):
    provider: Literal["sendgrid"] = "sendgrid"
    api_key: Secret = Field(alias="apiKey")
    default_from: str | None = Field(default=None, alias="defaultFrom")

    model_config = _VARIANT_CONFIG


class SmtpEmail(BaseModel):
    provider: Literal["smtp"] = "smtp"
    host: str
    port: int = 587
    username: Secret | None = None
    password: Secret | None = None
    default_from: str | None = Field(default=None, alias="defaultFrom")

    model_config = _VARIANT_CONFIG


class SentryMonitoring(BaseModel):
    provider: Literal["sentry"] = "sentry"
    dsn: Secret
    environment: str | None = None

    model_config = _VARIANT_CONFIG


class DatadogMonitoring(BaseModel):
    provider: Literal["datadog"] = "datadog"
    api_key: Secret = Field(alias="apiKey")
    site: str = "datadoghq.com"

    model_config = _VARIANT_CONFIG


EmailIntegration = Annotated[SendgridEmail | SmtpEmail, Field(discriminator="provider")]
MonitoringIntegration = Annotated[
    SentryMonitoring | DatadogMonitoring, Field(discriminator="provider")
]


class IntegrationsConfig(BaseModel):
    email: EmailIntegration | None = None
    monitoring: MonitoringIntegration | None = None

    model_config = _VARIANT_CONFIG

    @property
    def enabled(self) -> list[str]:
        """Names of configured integrations, e.g. ["email", "monitoring"]."""
        return [name for name in ("email", "monitoring") if getattr(self, name) is not None]


class AppConfig(BaseModel):
    """
    Resolved application configuration.

    Attributes:
        db: Database kind (defaults to sqlite)
        auth: Provider-tagged auth configuration, if any
        integrations: Configured integrations
    """

    db: DatabaseKind = DatabaseKind.SQLITE
    auth: AuthConfig | None = None
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)

    model_config = ConfigDict(frozen=True)

    def secret_refs(self) -> list[SecretRef]:
        """All env() references in the configuration, in declaration order."""
        refs: list[SecretRef] = []
        for model in (self.auth, self.integrations.email, self.integrations.monitoring):
            if model is None:
                continue
            for name in type(model).model_fields:
                value = getattr(model, name)
                if isinstance(value, SecretRef):
                    refs.append(value)
        return refs
