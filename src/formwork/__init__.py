"""
formwork - generate full-stack applications from a declarative DSL.

The front end turns DSL text into an immutable AppSpec; generators turn
the AppSpec into backend, frontend and infrastructure trees.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.errors import (
    ConfigError,
    FormworkError,
    GenerationError,
    MigrationError,
    ParseError,
    ValidationError,
)
from .core.parser import build_source, load_appspec

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "build_source",
    "load_appspec",
    "ConfigError",
    "FormworkError",
    "GenerationError",
    "MigrationError",
    "ParseError",
    "ValidationError",
]
