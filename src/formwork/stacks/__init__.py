"""
Generator registry for formwork.

Generators turn a validated AppSpec into artifact trees. The registry is
static and ordered: generators that provide artifacts come before the
generators that consume them.
"""

from __future__ import annotations

from ..core.errors import ConfigError
from .backend import BackendGenerator
from .base import Generator, GeneratorOptions, GeneratorResult
from .frontend import FrontendGenerator
from .infrastructure import InfrastructureGenerator

REGISTRY: dict[str, type[Generator]] = {
    BackendGenerator.name: BackendGenerator,
    InfrastructureGenerator.name: InfrastructureGenerator,
    FrontendGenerator.name: FrontendGenerator,
}


def list_generators() -> list[str]:
    """Registered generator names, in run order."""
    return list(REGISTRY)


def get_generator(name: str) -> Generator:
    """
    Get a generator instance by name.

    Raises:
        ConfigError: If no generator has that name
    """
    if name not in REGISTRY:
        raise ConfigError(f"Unknown generator '{name}'. Available generators: {', '.join(REGISTRY)}")
    return REGISTRY[name]()


__all__ = [
    "REGISTRY",
    "Generator",
    "GeneratorOptions",
    "GeneratorResult",
    "get_generator",
    "list_generators",
]
