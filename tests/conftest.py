"""Shared test fixtures and grammar-free stand-ins for syntax nodes."""

from __future__ import annotations

from collections import namedtuple
from typing import Dict, List, Optional

import pytest

from semseg.grammars import Capture, GrammarRegistry
from semseg.settings import ChunkingLimits

Point = namedtuple("Point", ["row", "column"])


class FakeNode:
    """Minimal syntax node exposing the attributes the extractor reads."""

    def __init__(
        self,
        type: str,
        text: str = "",
        *,
        start_row: int = 0,
        end_row: Optional[int] = None,
        start_byte: int = 0,
        is_named: bool = True,
        fields: Optional[Dict[str, "FakeNode"]] = None,
        children: Optional[List["FakeNode"]] = None,
    ) -> None:
        self.type = type
        self.text = text.encode("utf-8")
        self.start_point = Point(start_row, 0)
        self.end_point = Point(end_row if end_row is not None else start_row + text.count("\n"), 0)
        self.start_byte = start_byte
        self.end_byte = start_byte + len(self.text)
        self.is_named = is_named
        self.parent: Optional[FakeNode] = None
        self._fields = dict(fields or {})
        self.children: List[FakeNode] = []
        for child in children or []:
            self.add(child)
        for child in self._fields.values():
            if child.parent is None:
                self.add(child)

    def add(self, child: "FakeNode") -> "FakeNode":
        child.parent = self
        self.children.append(child)
        return child

    def child_by_field_name(self, name: str) -> Optional["FakeNode"]:
        return self._fields.get(name)

    @property
    def prev_named_sibling(self) -> Optional["FakeNode"]:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = siblings.index(self)
        for candidate in reversed(siblings[:index]):
            if candidate.is_named:
                return candidate
        return None


class FakeGrammar:
    """Capability returning canned captures regardless of input."""

    def __init__(self, captures: Optional[List[Capture]] = None, fail_parse: bool = False) -> None:
        self.captures = list(captures or [])
        self.fail_parse = fail_parse
        self.parsed: List[str] = []

    def supports(self, extension: str) -> bool:
        return True

    def parse(self, text: str) -> str:
        if self.fail_parse:
            raise ValueError("boom")
        self.parsed.append(text)
        return text

    def query(self, tree: str) -> List[Capture]:
        return list(self.captures)


def capture_of(node: FakeNode, name: str = "capture") -> Capture:
    return Capture(node=node, kind=node.type, name=name)


@pytest.fixture
def limits() -> ChunkingLimits:
    return ChunkingLimits(
        max_block_chars=1000,
        min_block_chars=50,
        min_chunk_remainder_chars=200,
        max_chars_tolerance_factor=1.2,
    )


@pytest.fixture
def fake_registry_factory():
    def _build(grammar: FakeGrammar, extension: str = ".fake") -> GrammarRegistry:
        return GrammarRegistry({extension: lambda: grammar})

    return _build
