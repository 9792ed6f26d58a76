"""
Per-file extraction workflow.

Sequences grammar lookup, parsing, capture mapping, metadata extraction and
chunking for one file, and fans that out over batches of files. Every
failure is contained at the file boundary: a file that cannot be read,
loaded or parsed contributes no blocks, and the batch carries on.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from ..chunking import ChunkingEngine, DedupCache
from ..grammars import Capture, GrammarRegistry
from ..ingestion import discover_source_files
from ..logger import get_logger
from ..models import SemanticBlock
from ..settings import ChunkingLimits, settings
from .metadata import extract_name, extract_signature, get_documentation, node_text
from .types import DECLARATION_KINDS, map_node_to_semantic_type

log = get_logger(__name__)

PathLike = Union[str, Path]

UNKNOWN_VARIABLE = "unknown_variable"


def derive_module_path(path: str, root_prefix: str = "src/") -> str:
    """Strip the root prefix and the extension from ``path``."""
    derived = path[len(root_prefix) :] if root_prefix and path.startswith(root_prefix) else path
    stem, ext = os.path.splitext(derived)
    return stem if ext else derived


def _extension_of(path: str) -> str:
    return os.path.splitext(path)[1].lower()


def _start_line(node: Any) -> int:
    return node.start_point[0] + 1


def _end_line(node: Any) -> int:
    return node.end_point[0] + 1


class SemanticBlockExtractor:
    """Turns source files into ordered lists of semantic blocks."""

    def __init__(
        self,
        registry: Optional[GrammarRegistry] = None,
        limits: Optional[ChunkingLimits] = None,
        module_root_prefix: Optional[str] = None,
        max_concurrency: Optional[int] = None,
    ) -> None:
        self.registry = registry or GrammarRegistry.default()
        self.engine = ChunkingEngine(limits or ChunkingLimits.from_settings())
        self.module_root_prefix = (
            settings.module_root_prefix if module_root_prefix is None else module_root_prefix
        )
        self.max_concurrency = max(1, max_concurrency or settings.extraction_concurrency)

    @property
    def limits(self) -> ChunkingLimits:
        return self.engine.limits

    async def parse_file(self, path: PathLike, content: Optional[str] = None) -> List[SemanticBlock]:
        """
        Extract blocks from ``path``, reading it from disk unless ``content`` is given.

        Unsupported extensions and unreadable files yield an empty list.
        """
        file = str(path)
        extension = _extension_of(file)
        if not extension or not self.registry.supports(extension):
            log.debug("unsupported_language", file=file, extension=extension)
            return []

        if content is None:
            content = await self._read(Path(file))
            if content is None:
                return []
        return await self.parse_content(file, content)

    async def parse_content(self, path: PathLike, content: str) -> List[SemanticBlock]:
        file = str(path)
        extension = _extension_of(file)
        if not extension or not self.registry.supports(extension):
            log.debug("unsupported_language", file=file, extension=extension)
            return []

        grammar = await self.registry.obtain(extension)
        if grammar is None:
            log.warning("grammar_unavailable", file=file)
            return []

        try:
            tree = grammar.parse(content)
            captures = grammar.query(tree)
        except Exception as exc:
            log.warning("parse_failed", file=file, error=str(exc))
            return []

        try:
            blocks = self.extract_blocks(file, content, captures, DedupCache())
        except Exception as exc:
            log.error("block_extraction_failed", file=file, error=str(exc))
            return []
        log.info("blocks_extracted", file=file, captures=len(captures), blocks=len(blocks))
        return blocks

    def extract_blocks(
        self,
        file: str,
        content: str,
        captures: Sequence[Capture],
        seen: DedupCache,
    ) -> List[SemanticBlock]:
        """Turn query captures into blocks; no captures means fallback chunking."""
        module_path = derive_module_path(file, self.module_root_prefix)
        if not captures:
            log.debug("fallback_chunking", file=file, chars=len(content))
            return self.engine.chunk_fallback(content, file=file, module_path=module_path, seen=seen)

        source = content.encode("utf-8")
        blocks: List[SemanticBlock] = []
        for capture in captures:
            node = capture.node
            semantic_type = map_node_to_semantic_type(capture.kind, node)
            if semantic_type is None:
                continue

            if semantic_type == "variable" and capture.kind in DECLARATION_KINDS:
                blocks.extend(self._fan_out_declarators(node, file, module_path, seen))
                continue

            text = node_text(node)
            if not text:
                continue
            name = extract_name(node)
            doc = get_documentation(node)
            signature = extract_signature(node, source)

            if self.engine.is_oversized(text):
                blocks.extend(
                    self.engine.chunk_lines(
                        text.split("\n"),
                        file=file,
                        module_path=module_path,
                        base_type=f"{semantic_type}_chunk",
                        start_line=_start_line(node),
                        seen=seen,
                        name=name,
                        doc=doc,
                        signature=signature,
                    )
                )
                continue

            block = SemanticBlock(
                type=semantic_type,
                name=name,
                file=file,
                start_line=_start_line(node),
                end_line=_end_line(node),
                code=text,
                module_path=module_path,
                signature=signature,
                doc=doc,
            )
            if seen.admit(block):
                blocks.append(block)
        return blocks

    def _fan_out_declarators(
        self,
        statement: Any,
        file: str,
        module_path: str,
        seen: DedupCache,
    ) -> List[SemanticBlock]:
        """One block (or chunk series) per declarator of a declaration statement."""
        doc = get_documentation(statement)
        blocks: List[SemanticBlock] = []
        for declarator in statement.children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            var_name = node_text(name_node) if name_node is not None else UNKNOWN_VARIABLE
            text = node_text(declarator)

            if self.engine.is_oversized(text):
                blocks.extend(
                    self.engine.chunk_lines(
                        text.split("\n"),
                        file=file,
                        module_path=module_path,
                        base_type="variable_chunk",
                        start_line=_start_line(declarator),
                        seen=seen,
                        name=var_name,
                        doc=doc,
                    )
                )
            elif len(text) >= self.limits.min_block_chars:
                block = SemanticBlock(
                    type="variable",
                    name=var_name,
                    file=file,
                    start_line=_start_line(declarator),
                    end_line=_end_line(declarator),
                    code=text,
                    module_path=module_path,
                    doc=doc,
                )
                if seen.admit(block):
                    blocks.append(block)
        return blocks

    async def extract_many(
        self,
        paths: Iterable[PathLike],
        max_concurrency: Optional[int] = None,
    ) -> Dict[str, List[SemanticBlock]]:
        """Extract several files concurrently, keyed by path in input order."""
        ordered = [str(path) for path in paths]
        limit = asyncio.Semaphore(max(1, max_concurrency or self.max_concurrency))

        async def _one(file: str) -> List[SemanticBlock]:
            async with limit:
                return await self._guarded(file, self.parse_file(file))

        results = await asyncio.gather(*(_one(file) for file in ordered))
        return dict(zip(ordered, results))

    async def extract_directory(
        self,
        root: PathLike,
        ignore_patterns: Optional[Iterable[str]] = None,
        max_concurrency: Optional[int] = None,
    ) -> Dict[str, List[SemanticBlock]]:
        """
        Extract every scannable file below ``root``.

        Blocks carry paths relative to ``root`` in POSIX form, so module paths
        are derived from the project layout rather than the absolute location.
        """
        root_path = Path(root)
        relative_paths = await asyncio.to_thread(discover_source_files, root_path, ignore_patterns)
        limit = asyncio.Semaphore(max(1, max_concurrency or self.max_concurrency))

        async def _one(relative: Path) -> List[SemanticBlock]:
            file = relative.as_posix()
            async with limit:
                if not self.registry.supports(_extension_of(file)):
                    return []
                content = await self._read(root_path / relative)
                if content is None:
                    return []
                return await self._guarded(file, self.parse_file(file, content=content))

        results = await asyncio.gather(*(_one(relative) for relative in relative_paths))
        extracted = {relative.as_posix(): blocks for relative, blocks in zip(relative_paths, results)}
        log.info(
            "directory_extracted",
            root=str(root_path),
            files=len(extracted),
            blocks=sum(len(blocks) for blocks in extracted.values()),
        )
        return extracted

    @staticmethod
    async def _read(path: Path) -> Optional[str]:
        try:
            raw = await asyncio.to_thread(path.read_bytes)
            return raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("file_read_failed", file=str(path), error=str(exc))
            return None

    @staticmethod
    async def _guarded(file: str, work: Any) -> List[SemanticBlock]:
        try:
            return await work
        except Exception as exc:
            log.error("file_extraction_failed", file=file, error=str(exc))
            return []
