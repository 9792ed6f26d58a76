"""
Extension-keyed registry of grammar capabilities.

Grammars are loaded on first use and cached. Concurrent requests for the
same extension await one shared load task rather than starting their own.
"""
from __future__ import annotations

import asyncio
from functools import partial
from typing import Callable, Dict, Mapping, Optional

from ..extensions import normalize_extension
from ..logger import get_logger
from .queries import specs_by_extension
from .tree_sitter_grammar import GrammarCapability, load_tree_sitter_grammar

log = get_logger(__name__)

GrammarLoader = Callable[[], GrammarCapability]


class GrammarRegistry:
    """Lazily loads and caches one capability per extension."""

    def __init__(self, loaders: Mapping[str, GrammarLoader]) -> None:
        self._loaders: Dict[str, GrammarLoader] = {
            normalize_extension(ext): loader for ext, loader in loaders.items()
        }
        self._loaded: Dict[str, Optional[GrammarCapability]] = {}
        self._pending: Dict[str, asyncio.Task[Optional[GrammarCapability]]] = {}

    @classmethod
    def default(cls) -> "GrammarRegistry":
        """Registry wired to the bundled tree-sitter grammars."""
        loaders = {
            ext: partial(load_tree_sitter_grammar, spec)
            for ext, spec in specs_by_extension().items()
        }
        return cls(loaders)

    def supports(self, extension: str) -> bool:
        return normalize_extension(extension) in self._loaders

    @property
    def extensions(self) -> list[str]:
        return sorted(self._loaders)

    async def obtain(self, extension: str) -> Optional[GrammarCapability]:
        """Return the capability for ``extension`` or None when unsupported.

        Load failures are logged and cached as None; nothing is raised.
        """
        key = normalize_extension(extension)
        if key in self._loaded:
            return self._loaded[key]
        if key not in self._loaders:
            return None

        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._load(key))
            self._pending[key] = pending
            pending.add_done_callback(lambda _task: self._pending.pop(key, None))
        # shield keeps one caller's cancellation from cancelling the shared load
        return await asyncio.shield(pending)

    async def _load(self, key: str) -> Optional[GrammarCapability]:
        loader = self._loaders[key]
        try:
            capability: Optional[GrammarCapability] = await asyncio.to_thread(loader)
        except Exception as exc:
            log.warning("grammar_load_failed", extension=key, error=str(exc))
            capability = None
        self._loaded[key] = capability
        return capability
