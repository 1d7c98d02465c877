"""Incremental static site builder."""

from .builder import BuildOptions, build_site
from .errors import BuildError

__all__ = ["BuildError", "BuildOptions", "build_site"]
__version__ = "0.1.0"
