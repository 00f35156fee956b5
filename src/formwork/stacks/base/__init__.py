"""
Shared building blocks for generators.

Provides:
- Generator / GeneratorResult: the generator contract
- GeneratorOptions: closed option set resolved against the app config
- Region-preserving file writer
- Jinja2 template rendering
"""

from .generator import FileTree, Generator, GeneratorResult
from .options import INTEGRATION_NAMES, GeneratorOptions, resolve_options
from .regions import WriteResult, extract_regions, merge_regions, write_tree
from .templates import render_template

__all__ = [
    "FileTree",
    "Generator",
    "GeneratorResult",
    "GeneratorOptions",
    "INTEGRATION_NAMES",
    "resolve_options",
    "WriteResult",
    "extract_regions",
    "merge_regions",
    "write_tree",
    "render_template",
]
