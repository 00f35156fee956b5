"""
formwork Intermediate Representation (IR) types.

Types are organized into submodules and re-exported here.
"""

from .appspec import AppSpec
from .config import (
    AppConfig,
    Auth0Auth,
    AuthConfig,
    AuthProvider,
    ClerkAuth,
    DatabaseKind,
    DatadogMonitoring,
    EmailIntegration,
    IntegrationsConfig,
    JwtAuth,
    MonitoringIntegration,
    Secret,
    SecretRef,
    SendgridEmail,
    SentryMonitoring,
    SmtpEmail,
)
from .domain import EntitySpec, RelationEdge
from .enums import EnumSpec
from .expressions import (
    BinaryExpr,
    BinaryOp,
    Expr,
    FieldRef,
    Literal,
    UnaryExpr,
    UnaryOp,
    field_refs,
    referenced_fields,
)
from .fields import (
    SCALAR_TYPE_NAMES,
    Cardinality,
    FieldModifier,
    FieldSpec,
    FieldType,
    FieldTypeKind,
    RelationSpec,
    VirtualFieldSpec,
)
from .pages import ColumnSpec, PageKind, PageSpec
from .views import ViewFieldSpec, ViewSpec
from .workflows import LiteralInput, StepInput, TriggerRef, TriggerSpec, WorkflowSpec, WorkflowStep

__all__ = [
    # App
    "AppSpec",
    # Config
    "AppConfig",
    "Auth0Auth",
    "AuthConfig",
    "AuthProvider",
    "ClerkAuth",
    "DatabaseKind",
    "DatadogMonitoring",
    "EmailIntegration",
    "IntegrationsConfig",
    "JwtAuth",
    "MonitoringIntegration",
    "Secret",
    "SecretRef",
    "SendgridEmail",
    "SentryMonitoring",
    "SmtpEmail",
    # Domain
    "EntitySpec",
    "RelationEdge",
    "EnumSpec",
    # Expressions
    "BinaryExpr",
    "BinaryOp",
    "Expr",
    "FieldRef",
    "Literal",
    "UnaryExpr",
    "UnaryOp",
    "field_refs",
    "referenced_fields",
    # Fields
    "SCALAR_TYPE_NAMES",
    "Cardinality",
    "FieldModifier",
    "FieldSpec",
    "FieldType",
    "FieldTypeKind",
    "RelationSpec",
    "VirtualFieldSpec",
    # Pages, views, workflows
    "ColumnSpec",
    "PageKind",
    "PageSpec",
    "ViewFieldSpec",
    "ViewSpec",
    "LiteralInput",
    "StepInput",
    "TriggerRef",
    "TriggerSpec",
    "WorkflowSpec",
    "WorkflowStep",
]
