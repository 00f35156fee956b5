"""
Infrastructure generator.
"""

from .generator import InfrastructureGenerator, env_variables

__all__ = ["InfrastructureGenerator", "env_variables"]
