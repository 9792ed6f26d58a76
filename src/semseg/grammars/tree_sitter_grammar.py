"""
Tree-sitter backed grammar capability.

A capability bundles a parser with a pre-compiled structural query for one
language. Concrete grammars come from the per-language ``tree-sitter-*``
wheels and are resolved by module name, so nothing here is hard-coded to a
particular language.
"""
from __future__ import annotations

import importlib
import threading
from typing import Any, List, NamedTuple, Protocol

from tree_sitter import Language, Node, Parser, Query, QueryCursor, Tree  # type: ignore[import]

from ..extensions import normalize_extension
from ..logger import get_logger
from .queries import GrammarSpec

log = get_logger(__name__)


class GrammarLoadError(RuntimeError):
    """Raised when a grammar wheel or its query cannot be loaded."""


class Capture(NamedTuple):
    """A syntax node matched by a structural query."""

    node: Node
    kind: str
    name: str


class GrammarCapability(Protocol):
    """Pluggable per-language parsing capability."""

    def supports(self, extension: str) -> bool:
        ...

    def parse(self, text: str) -> Any:
        ...

    def query(self, tree: Any) -> List[Capture]:
        ...


_LANGUAGE_CACHE: dict[str, Language] = {}
_LANGUAGE_LOCK = threading.Lock()


def _load_language(spec: GrammarSpec) -> Language:
    """
    Lazily load a compiled tree-sitter language.

    Grammar loads run on worker threads, hence the lock around the cache.
    """
    cache_key = f"{spec.module}:{spec.language_func}"
    with _LANGUAGE_LOCK:
        if cache_key in _LANGUAGE_CACHE:
            return _LANGUAGE_CACHE[cache_key]

        try:
            module = importlib.import_module(spec.module)
            language_fn = getattr(module, spec.language_func)
        except (ImportError, AttributeError) as exc:
            raise GrammarLoadError(
                f"Grammar '{spec.name}' is not installed. "
                f"Install it via `pip install {spec.module.replace('_', '-')}`."
            ) from exc

        language = Language(language_fn())
        _LANGUAGE_CACHE[cache_key] = language
        return language


class TreeSitterGrammar:
    """Parser plus compiled query for a single language."""

    def __init__(self, spec: GrammarSpec, language: Language) -> None:
        self.spec = spec
        self.language = language
        self.extensions = frozenset(spec.extensions)
        self._parser = Parser(language)
        self._query = Query(language, spec.query)

    @property
    def name(self) -> str:
        return self.spec.name

    def supports(self, extension: str) -> bool:
        return normalize_extension(extension) in self.extensions

    def parse(self, text: str) -> Tree:
        return self._parser.parse(text.encode("utf-8"))

    def query(self, tree: Tree) -> List[Capture]:
        """Run the structural query and return captures in document order.

        Outer nodes sort before the nodes they contain; a node matched by
        several patterns is reported once.
        """
        cursor = QueryCursor(self._query)
        captured = cursor.captures(tree.root_node)
        seen: set[tuple[int, int, str]] = set()
        captures: List[Capture] = []
        for capture_name, nodes in captured.items():
            for node in nodes:
                key = (node.start_byte, node.end_byte, node.type)
                if key in seen:
                    continue
                seen.add(key)
                captures.append(Capture(node=node, kind=node.type, name=capture_name))
        captures.sort(key=lambda capture: (capture.node.start_byte, -capture.node.end_byte))
        return captures


def load_tree_sitter_grammar(spec: GrammarSpec) -> TreeSitterGrammar:
    language = _load_language(spec)
    try:
        grammar = TreeSitterGrammar(spec, language)
    except Exception as exc:
        raise GrammarLoadError(f"Query for grammar '{spec.name}' failed to compile") from exc
    log.info("grammar_loaded", grammar=spec.name, extensions=list(spec.extensions))
    return grammar
