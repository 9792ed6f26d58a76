"""
Line-level chunking of oversized spans.

A span (one node's text, or a whole file when no structure was found) is
packed greedily into size-bounded blocks, one line at a time, so chunk
boundaries never fall inside a token. Lines that cannot fit any chunk are
cut into fixed-size character segments instead.
"""
from __future__ import annotations

import hashlib
from typing import List, Optional, Sequence

from ..logger import get_logger
from ..models import SemanticBlock
from ..settings import ChunkingLimits

log = get_logger(__name__)

FALLBACK_TYPE = "fallback_chunk"
LINE_SEGMENT_SUFFIX = "_line_segment"
_FINGERPRINT_PREFIX_CHARS = 50


class DedupCache:
    """Fingerprints of blocks already emitted during one extraction call.

    Allocate one per top-level call and pass it down explicitly; sharing an
    instance between files merges their fingerprints.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    @staticmethod
    def fingerprint(file: str, start_line: int, end_line: int, code: str) -> str:
        identifier = f"{file}-{start_line}-{end_line}-{code[:_FINGERPRINT_PREFIX_CHARS]}"
        return hashlib.sha256(identifier.encode("utf-8")).hexdigest()

    def admit(self, block: SemanticBlock) -> bool:
        """Record ``block`` and report whether it had not been seen before."""
        return self.admit_key(
            self.fingerprint(block.file, block.start_line, block.end_line, block.code)
        )

    def admit_key(self, key: str) -> bool:
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, block: object) -> bool:
        if not isinstance(block, SemanticBlock):
            return False
        key = self.fingerprint(block.file, block.start_line, block.end_line, block.code)
        return key in self._seen


def _joined_suffix_lengths(lines: Sequence[str]) -> List[int]:
    """suffix[i] is the length of ``"\\n".join(lines[i:])``; suffix[len] is 0."""
    suffix = [0] * (len(lines) + 1)
    for index in range(len(lines) - 1, -1, -1):
        tail = suffix[index + 1]
        suffix[index] = len(lines[index]) + (tail + 1 if index + 1 < len(lines) else 0)
    return suffix


class _ChunkRun:
    """State for packing one span; discarded once the span is chunked."""

    def __init__(
        self,
        limits: ChunkingLimits,
        lines: Sequence[str],
        *,
        file: str,
        module_path: str,
        base_type: str,
        start_line: int,
        seen: DedupCache,
        name: Optional[str],
        doc: Optional[str],
        signature: Optional[str],
    ) -> None:
        self.limits = limits
        self.threshold = limits.oversized_threshold
        self.lines = lines
        self.file = file
        self.module_path = module_path
        self.base_type = base_type
        self.start_line = start_line
        self.seen = seen
        self.name = name
        self.doc = doc
        self.signature = signature

        self.blocks: List[SemanticBlock] = []
        self.parts = 0
        self.pending: List[str] = []
        self.pending_length = 0
        self.pending_start = 0
        self.suffix = _joined_suffix_lengths(lines)

    def run(self) -> List[SemanticBlock]:
        for index, line in enumerate(self.lines):
            if len(line) > self.threshold:
                self._finalize()
                self._emit_line_segments(index, line)
                continue

            if self.pending and self._length_with(line) > self.threshold:
                carried = self._rebalance(index, line)
                self._finalize()
                for moved in carried:
                    self._append(moved, index - len(carried))

            self._append(line, index)

        self._finalize(forced=True)
        return self.blocks

    def _length_with(self, line: str) -> int:
        if not self.pending:
            return len(line)
        return self.pending_length + 1 + len(line)

    def _append(self, line: str, index: int) -> None:
        if not self.pending:
            self.pending_start = index
        self.pending_length = self._length_with(line)
        self.pending.append(line)

    def _rebalance(self, index: int, line: str) -> List[str]:
        """Move trailing lines forward when the rest of the span is too short.

        Returns the lines taken off the pending chunk, in order. The pending
        chunk keeps at least one line and the minimum size; the next chunk
        (moved lines plus ``line``) stays within the threshold.
        """
        remainder = self.suffix[index]
        if (
            remainder >= self.limits.min_chunk_remainder_chars
            or self.pending_length < self.limits.min_block_chars
            or len(self.pending) < 2
        ):
            return []

        carried: List[str] = []
        carried_length = 0
        while len(self.pending) > 1 and remainder < self.limits.min_chunk_remainder_chars:
            candidate = self.pending[-1]
            shrunk = self.pending_length - len(candidate) - 1
            head = len(candidate) + (carried_length + 1 if carried else 0)
            if shrunk < self.limits.min_block_chars or head + 1 + len(line) > self.threshold:
                break
            self.pending.pop()
            self.pending_length = shrunk
            carried.insert(0, candidate)
            carried_length = head
            remainder += len(candidate) + 1

        if carried:
            log.debug(
                "chunk_rebalanced",
                file=self.file,
                moved_lines=len(carried),
                line=self.start_line + index,
            )
        return carried

    def _finalize(self, forced: bool = False) -> None:
        if not self.pending:
            return
        code = "\n".join(self.pending)
        start = self.start_line + self.pending_start
        end = start + len(self.pending) - 1
        self.pending = []
        self.pending_length = 0

        if not code:
            return
        if len(code) < self.limits.min_block_chars and not forced:
            log.debug("chunk_below_minimum_skipped", file=self.file, start_line=start, end_line=end)
            return

        first = self.parts == 0
        block = SemanticBlock(
            type=self.base_type,
            name=f"{self.name} (part {self.parts + 1})" if self.name else None,
            file=self.file,
            start_line=start,
            end_line=end,
            code=code,
            module_path=self.module_path,
            signature=self.signature if first else None,
            doc=self.doc if first else None,
        )
        if self.seen.admit(block):
            self.blocks.append(block)
            self.parts += 1

    def _emit_line_segments(self, index: int, line: str) -> None:
        line_number = self.start_line + index
        size = self.limits.max_block_chars
        for segment_index, offset in enumerate(range(0, len(line), size)):
            segment = line[offset : offset + size]
            # Segments of one line share a range; the index keeps repeats apart.
            key = DedupCache.fingerprint(
                self.file, line_number, line_number, f"{segment_index}-{segment}"
            )
            if not self.seen.admit_key(key):
                continue
            label = f"(line {line_number} segment {segment_index + 1})"
            block = SemanticBlock(
                type=f"{self.base_type}{LINE_SEGMENT_SUFFIX}",
                name=f"{self.name} {label}" if self.name else label,
                file=self.file,
                start_line=line_number,
                end_line=line_number,
                code=segment,
                module_path=self.module_path,
            )
            self.blocks.append(block)


class ChunkingEngine:
    """Packs spans of lines into size-bounded, deduplicated blocks."""

    def __init__(self, limits: ChunkingLimits) -> None:
        self.limits = limits

    def is_oversized(self, text: str) -> bool:
        return len(text) > self.limits.oversized_threshold

    def chunk_lines(
        self,
        lines: Sequence[str],
        *,
        file: str,
        module_path: str,
        base_type: str,
        start_line: int,
        seen: DedupCache,
        name: Optional[str] = None,
        doc: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> List[SemanticBlock]:
        """
        Chunk ``lines`` whose first line sits at absolute line ``start_line``.

        Named chunks are labelled ``"<name> (part N)"``; only part 1 carries
        ``doc`` and ``signature``. Blocks whose fingerprint is already in
        ``seen`` are not emitted again.
        """
        run = _ChunkRun(
            self.limits,
            lines,
            file=file,
            module_path=module_path,
            base_type=base_type,
            start_line=start_line,
            seen=seen,
            name=name,
            doc=doc,
            signature=signature,
        )
        blocks = run.run()
        log.debug(
            "span_chunked",
            file=file,
            base_type=base_type,
            lines=len(lines),
            blocks=len(blocks),
        )
        return blocks

    def chunk_fallback(
        self,
        content: str,
        *,
        file: str,
        module_path: str,
        seen: DedupCache,
    ) -> List[SemanticBlock]:
        """Chunk a whole file that yielded no structural captures."""
        if len(content) < self.limits.min_block_chars:
            return []
        return self.chunk_lines(
            content.split("\n"),
            file=file,
            module_path=module_path,
            base_type=FALLBACK_TYPE,
            start_line=1,
            seen=seen,
        )
