"""
Source discovery package.

Finds the files in a project tree that are worth handing to the extractor.
"""
from .scanner import DEFAULT_IGNORE_PATTERNS, discover_source_files

__all__ = ["DEFAULT_IGNORE_PATTERNS", "discover_source_files"]
