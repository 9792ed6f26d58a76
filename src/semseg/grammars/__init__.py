"""
Grammar capabilities and the registry that loads them.

Tree-sitter grammars are one implementation of the capability protocol;
tests and callers may register any object that parses and queries text.
"""

from .queries import GRAMMAR_SPECS, GrammarSpec
from .registry import GrammarLoader, GrammarRegistry
from .tree_sitter_grammar import (
    Capture,
    GrammarCapability,
    GrammarLoadError,
    TreeSitterGrammar,
    load_tree_sitter_grammar,
)

__all__ = [
    "Capture",
    "GRAMMAR_SPECS",
    "GrammarCapability",
    "GrammarLoadError",
    "GrammarLoader",
    "GrammarRegistry",
    "GrammarSpec",
    "TreeSitterGrammar",
    "load_tree_sitter_grammar",
]
