"""
Pipeline entry points: DSL text to AppSpec.

    text -> tokens -> syntax tree -> ValidatedProgram -> AppSpec

Each stage consumes the previous stage's output without modifying it.
"""

import logging
from pathlib import Path

from . import ir, syntax
from .builder import build_appspec
from .dsl_parser_impl import parse_dsl
from .validator import ValidatedProgram, validate_program

logger = logging.getLogger(__name__)


def parse_source(text: str, file: Path | None = None) -> syntax.Program:
    """
    Lex and parse DSL text.

    Raises:
        LexError, DSLSyntaxError: On the first lexical or structural problem
    """
    file = file or Path("<string>")
    program = parse_dsl(text, file)
    logger.debug("Parsed %s: %d block(s)", file, len(program.blocks))
    return program


def validate_source(text: str, file: Path | None = None) -> ValidatedProgram:
    """
    Parse and validate DSL text.

    Raises:
        ParseError: On lexical or syntax errors
        ValidationError: With every semantic error found
    """
    program = parse_source(text, file)
    return validate_program(program, file)


def build_source(text: str, file: Path | None = None, default_name: str | None = None) -> ir.AppSpec:
    """
    Run the full front-end pipeline on DSL text.

    Args:
        text: DSL source text
        file: Source file (for diagnostics)
        default_name: App name when the DSL's config block does not set one

    Returns:
        Immutable AppSpec
    """
    validated = validate_source(text, file)
    return build_appspec(validated, default_name=default_name)


def load_appspec(path: Path, default_name: str | None = None) -> ir.AppSpec:
    """
    Read a DSL file and build its AppSpec.

    The file stem is used as the app name when neither the DSL nor the
    caller provides one.
    """
    text = path.read_text(encoding="utf-8")
    return build_source(text, path, default_name=default_name or path.stem)
