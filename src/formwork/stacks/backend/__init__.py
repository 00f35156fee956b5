"""
FastAPI backend generator.
"""

from .generator import BackendGenerator

__all__ = ["BackendGenerator"]
