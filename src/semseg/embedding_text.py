"""
Embeddable summaries for semantic blocks.

The vector index embeds a short text per block and keeps the full block as
metadata; this module builds both halves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .models import SemanticBlock
from .settings import settings


@dataclass
class EmbeddingRecord:
    """Text to embed plus the metadata stored next to the vector."""

    text: str
    metadata: Dict[str, Any]


def build_embedding_text(block: SemanticBlock, code_prefix_chars: Optional[int] = None) -> str:
    """Name, signature, doc and a truncated code prefix, one per line."""
    limit = settings.embedding_code_prefix_chars if code_prefix_chars is None else code_prefix_chars
    return "\n".join(
        (
            block.name or "",
            block.signature or "",
            block.doc or "",
            block.code[:limit],
        )
    )


def build_embedding_records(
    blocks: Iterable[SemanticBlock],
    code_prefix_chars: Optional[int] = None,
) -> List[EmbeddingRecord]:
    return [
        EmbeddingRecord(
            text=build_embedding_text(block, code_prefix_chars),
            metadata=block.to_payload(),
        )
        for block in blocks
    ]
