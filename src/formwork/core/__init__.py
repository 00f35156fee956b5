"""Core formwork functionality: lexer, parser, validator, IR, builder, manifest."""

from . import ir
from .builder import build_appspec
from .errors import (
    ConfigError,
    DSLSyntaxError,
    ErrorContext,
    FormworkError,
    GenerationError,
    LexError,
    MigrationError,
    ParseError,
    RegionError,
    SemanticError,
    ValidationError,
)
from .parser import build_source, load_appspec, parse_source, validate_source
from .validator import ValidatedProgram, validate_program

__all__ = [
    "ir",
    "build_appspec",
    "build_source",
    "load_appspec",
    "parse_source",
    "validate_source",
    "validate_program",
    "ValidatedProgram",
    "ConfigError",
    "DSLSyntaxError",
    "ErrorContext",
    "FormworkError",
    "GenerationError",
    "LexError",
    "MigrationError",
    "ParseError",
    "RegionError",
    "SemanticError",
    "ValidationError",
]
