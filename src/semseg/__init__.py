"""
semseg: semantic source-code segmentation for embedding pipelines.

Source files go in, size-bounded semantic blocks (functions, classes,
variables, ...) come out, ready to be summarized and embedded.
"""

from .chunking import ChunkingEngine, DedupCache
from .embedding_text import EmbeddingRecord, build_embedding_records, build_embedding_text
from .extensions import SCANNER_EXTENSIONS, SUPPORTED_EXTENSIONS, is_scannable
from .extraction import SemanticBlockExtractor, derive_module_path
from .grammars import GrammarCapability, GrammarRegistry
from .logger import configure_from_settings
from .models import SemanticBlock
from .settings import ChunkingLimits

__version__ = "0.1.0"

__all__ = [
    "ChunkingEngine",
    "ChunkingLimits",
    "DedupCache",
    "EmbeddingRecord",
    "GrammarCapability",
    "GrammarRegistry",
    "SCANNER_EXTENSIONS",
    "SUPPORTED_EXTENSIONS",
    "SemanticBlock",
    "SemanticBlockExtractor",
    "build_embedding_records",
    "build_embedding_text",
    "configure_from_settings",
    "derive_module_path",
    "is_scannable",
]
