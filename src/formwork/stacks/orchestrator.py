"""
Generation orchestrator.

Runs the enabled generators in registry order, passes artifacts from
providers to consumers, and writes each generator's tree under
`output_root / <generator name>` through the region-preserving writer.

A failing generator is recorded in the report; the remaining generators
still run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core import ir
from ..core.errors import ConfigError, GenerationError
from . import REGISTRY
from .base import GeneratorOptions, resolve_options, write_tree

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    """
    Outcome of one orchestrator run.

    Attributes:
        successes: Generator name -> paths written (unchanged files excluded)
        unchanged: Generator name -> paths skipped because content matched
        failures: Generator name -> the error that stopped it
        warnings: Warnings from generators and the writer, prefixed by generator
    """

    successes: dict[str, list[Path]] = field(default_factory=dict)
    unchanged: dict[str, list[Path]] = field(default_factory=dict)
    failures: dict[str, GenerationError] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def _check_enabled(enabled: Iterable[str]) -> set[str]:
    names = set(enabled)
    unknown = sorted(names - set(REGISTRY))
    if unknown:
        raise ConfigError(
            f"Unknown generator(s) {', '.join(unknown)}. Available generators: {', '.join(REGISTRY)}"
        )
    return names


def generate(
    spec: ir.AppSpec,
    output_root: Path,
    enabled: Iterable[str],
    options: GeneratorOptions | Mapping[str, Any] | None = None,
) -> GenerationReport:
    """
    Run the enabled generators.

    Args:
        spec: Validated, immutable application specification
        output_root: Directory that receives one subdirectory per generator
        enabled: Names of generators to run
        options: Option overrides, narrowed against the app config

    Returns:
        GenerationReport with per-generator outcomes

    Raises:
        ConfigError: On unknown generator names or invalid options
    """
    names = _check_enabled(enabled)
    resolved = resolve_options(spec, options)
    report = GenerationReport()
    artifacts: dict[str, Any] = {}

    for name, generator_class in REGISTRY.items():
        if name not in names:
            continue
        generator = generator_class()
        logger.debug("Running generator %s", name)
        try:
            missing = [key for key in generator.requires if key not in artifacts]
            if missing:
                raise generator.fail(
                    f"Required artifact(s) {', '.join(missing)} not available; "
                    "enable the generator that provides them"
                )
            result = generator.render(spec, resolved, artifacts)
            written = write_tree(result.files, output_root / name, name)
        except GenerationError as e:
            report.failures[name] = e
            logger.error("Generator %s failed: %s", name, e.message)
            continue
        except Exception as e:
            report.failures[name] = GenerationError(name, f"{type(e).__name__}: {e}")
            logger.error("Generator %s failed", name, exc_info=True)
            continue

        artifacts.update(result.artifacts)
        report.successes[name] = written.written
        report.unchanged[name] = written.unchanged
        report.warnings.extend(f"[{name}] {w}" for w in [*result.warnings, *written.warnings])
        logger.info(
            "Generator %s wrote %d file(s), %d unchanged",
            name,
            len(written.written),
            len(written.unchanged),
        )

    return report
