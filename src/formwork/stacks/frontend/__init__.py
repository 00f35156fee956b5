"""
React frontend generator.
"""

from .generator import FrontendGenerator

__all__ = ["FrontendGenerator"]
