"""
Error types for formwork lexing, parsing, validation and generation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourcePosition:
    """
    A location in DSL source text.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed, in characters)
        offset: Byte offset into the UTF-8 encoded source (0-indexed)
    """

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet showing the error location
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None

    @classmethod
    def from_source(cls, file: Path, source: str | None, position: SourcePosition) -> "ErrorContext":
        """Build a context with a snippet of two lines either side of the position."""
        snippet = None
        if source:
            lines = source.splitlines()
            start = max(1, position.line - 2)
            end = min(len(lines), position.line + 2)
            snippet = "\n".join(lines[start - 1 : end])
        return cls(file=file, line=position.line, column=position.column, snippet=snippet)

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "app.fw:10:5"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        formatted = []
        start_line = max(1, self.line - 2)

        for i, line in enumerate(self.snippet.split("\n")):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


class FormworkError(Exception):
    """Base exception for all formwork errors."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(FormworkError):
    """
    Raised when DSL text cannot be turned into a syntax tree.

    Both subclasses are fail-fast: the first problem aborts the run and no
    partial result is returned.
    """

    def __init__(
        self,
        message: str,
        position: SourcePosition,
        context: Optional[ErrorContext] = None,
    ):
        self.position = position
        super().__init__(message, context)


class LexError(ParseError):
    """Raised when a character sequence matches no token rule."""

    def __init__(
        self,
        position: SourcePosition,
        unexpected_char: str,
        context: Optional[ErrorContext] = None,
        message: str | None = None,
    ):
        self.unexpected_char = unexpected_char
        super().__init__(
            message or f"Unexpected character {unexpected_char!r}",
            position,
            context,
        )


class DSLSyntaxError(ParseError):
    """Raised on the first structurally malformed construct."""

    def __init__(
        self,
        position: SourcePosition,
        expected: str,
        found: str,
        context: Optional[ErrorContext] = None,
    ):
        self.expected = expected
        self.found = found
        super().__init__(f"Expected {expected}, got {found}", position, context)


@dataclass(frozen=True)
class SemanticError:
    """
    A single semantic diagnostic.

    Semantic errors are collected rather than raised one at a time; see
    ValidationError.

    Attributes:
        message: Human-readable description
        subject: The offending declaration or reference names
        position: Source position of the offending construct
    """

    message: str
    subject: tuple[str, ...] = field(default_factory=tuple)
    position: SourcePosition | None = None

    def format(self, file: Path | None = None) -> str:
        if self.position and file:
            return f"{file}:{self.position}: {self.message}"
        if self.position:
            return f"{self.position}: {self.message}"
        return self.message


class ValidationError(FormworkError):
    """
    Raised when a syntax tree fails semantic validation.

    Carries every violation found in the pass, in discovery order.
    """

    def __init__(self, errors: list[SemanticError], file: Path | None = None):
        self.errors = list(errors)
        self.file = file
        count = len(self.errors)
        summary = f"{count} semantic error{'s' if count != 1 else ''}"
        details = "\n".join(f"  - {err.format(file)}" for err in self.errors)
        super().__init__(f"{summary}\n{details}" if details else summary)


class GenerationError(FormworkError):
    """
    Raised or recorded when a generator fails to produce output.

    Examples:
    - Template rendering errors
    - Missing required artifact from another generator
    - Output directory issues
    """

    def __init__(self, generator: str, message: str):
        self.generator = generator
        super().__init__(f"[{generator}] {message}")
        self.message = message


class RegionError(GenerationError):
    """Raised when custom-code region markers in an existing file are malformed."""


class ConfigError(FormworkError):
    """
    Raised for invalid project configuration.

    Examples:
    - Malformed formwork.toml
    - Unknown generator names
    - Unrecognized generator options
    """


class MigrationError(FormworkError):
    """Raised when the database migration subprocess fails or is aborted."""

    def __init__(self, message: str, output: str = "", returncode: int | None = None):
        self.output = output
        self.returncode = returncode
        super().__init__(message)


def make_semantic_error(
    message: str,
    *subject: str,
    position: SourcePosition | None = None,
) -> SemanticError:
    """
    Helper to create a SemanticError.

    Args:
        message: Error description
        subject: Names of the declarations/references involved
        position: Optional source position

    Returns:
        SemanticError record
    """
    return SemanticError(message=message, subject=tuple(subject), position=position)
