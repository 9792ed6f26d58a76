"""
Chunking utilities for semantic code indexing.

Splits oversized spans into line-aligned blocks that stay within the
configured size limits and never repeat within one extraction call.
"""

from .engine import FALLBACK_TYPE, LINE_SEGMENT_SUFFIX, ChunkingEngine, DedupCache

__all__ = ["ChunkingEngine", "DedupCache", "FALLBACK_TYPE", "LINE_SEGMENT_SUFFIX"]
