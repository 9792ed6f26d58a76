"""
Semantic block extraction.

Maps tree-sitter captures to semantic categories, reads names, signatures
and doc comments off the syntax tree and drives the chunking engine.
"""

from .metadata import extract_name, extract_signature, get_documentation, node_text
from .orchestrator import SemanticBlockExtractor, derive_module_path
from .types import map_node_to_semantic_type

__all__ = [
    "SemanticBlockExtractor",
    "derive_module_path",
    "extract_name",
    "extract_signature",
    "get_documentation",
    "map_node_to_semantic_type",
    "node_text",
]
