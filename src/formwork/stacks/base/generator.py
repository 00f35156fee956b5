"""
Base generator classes.

A generator turns the AppSpec into one artifact tree:
- backend: FastAPI application, SQLAlchemy models, API schema
- frontend: React client built against the backend's API schema
- infrastructure: Dockerfile, compose file, CI and deploy workflows

Generators are pure. They return an in-memory FileTree and never touch the
file system; the orchestrator writes trees through the region-preserving
writer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any, ClassVar

from formwork.core.errors import GenerationError

if TYPE_CHECKING:
    from formwork.core import ir

    from .options import GeneratorOptions

# Relative POSIX path -> file content
FileTree = dict[str, str]


@dataclass
class GeneratorResult:
    """
    Result from a generator execution.

    Attributes:
        generator: Name of the generator that produced the result
        files: Rendered files, keyed by relative path
        artifacts: Data to share with generators that run later
        warnings: Any warnings to display to user
    """

    generator: str
    files: FileTree = field(default_factory=dict)
    artifacts: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def add_file(self, path: str, content: str) -> None:
        """
        Record a rendered file.

        Paths are relative and may not escape the generator's directory.
        Content always ends with exactly one newline.
        """
        posix = PurePosixPath(path)
        if posix.is_absolute() or ".." in posix.parts or not posix.parts:
            raise GenerationError(self.generator, f"Invalid output path '{path}'")
        key = posix.as_posix()
        if key in self.files:
            raise GenerationError(self.generator, f"File '{key}' rendered twice")
        self.files[key] = content.rstrip("\n") + "\n"

    def add_artifact(self, key: str, value: Any) -> None:
        """Add an artifact for other generators."""
        self.artifacts[key] = value

    def add_warning(self, warning: str) -> None:
        """Record a warning."""
        self.warnings.append(warning)


class Generator(ABC):
    """
    Base class for all generators.

    Subclasses declare the artifacts they provide and require; the
    orchestrator runs providers before consumers.

    Example:
        class NotesGenerator(Generator):
            name = "notes"
            description = "Plain-text entity list"

            def render(self, spec, options, artifacts):
                result = GeneratorResult(self.name)
                result.add_file("entities.txt", "\\n".join(e.name for e in spec.entities))
                return result
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    provides: ClassVar[tuple[str, ...]] = ()
    requires: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def render(
        self,
        spec: ir.AppSpec,
        options: GeneratorOptions,
        artifacts: Mapping[str, Any],
    ) -> GeneratorResult:
        """
        Render the artifact tree.

        Args:
            spec: Immutable application specification
            options: Resolved generator options
            artifacts: Artifacts published by generators that already ran

        Returns:
            GeneratorResult with rendered files and published artifacts

        Raises:
            GenerationError: If the tree cannot be rendered
        """

    def fail(self, message: str) -> GenerationError:
        return GenerationError(self.name, message)
