"""
Enum types for formwork IR.

DSL Syntax:

    enum UserRole { ADMIN, EDITOR, VIEWER }

Usage in entities:
    entity User {
      role: UserRole default(VIEWER)
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EnumSpec(BaseModel):
    """
    An enum definition.

    Attributes:
        name: Enum identifier (e.g. UserRole)
        values: Ordered member names
    """

    name: str
    values: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
