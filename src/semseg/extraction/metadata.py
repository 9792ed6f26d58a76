"""
Heuristic metadata for captured syntax nodes.

Names, signatures and preceding comments are read straight off the
concrete syntax tree. The heuristics target the field names shared by the
C-family tree-sitter grammars (``name``, ``body``, ``left``) and degrade to
None when a grammar does not expose them.
"""
from __future__ import annotations

from typing import Any, Iterator, Optional

from .types import DECLARATION_KINDS, FUNCTION_LIKE_KINDS

ANONYMOUS_ARROW_FUNCTION = "anonymous_arrow_function"

COMMENT_KINDS = frozenset({"comment", "line_comment", "block_comment"})


def node_text(node: Any) -> str:
    """Decode a node's source text; tree-sitter hands back bytes."""
    text = node.text
    if text is None:
        return ""
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    return text


def _walk(node: Any) -> Iterator[Any]:
    """Pre-order traversal of ``node``'s descendants, excluding ``node``."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def first_descendant_of_type(node: Any, kind: str) -> Optional[Any]:
    return next((child for child in _walk(node) if child.type == kind), None)


def extract_name(node: Any) -> Optional[str]:
    """
    Resolve a display name for ``node``.

    Tried in order: the ``name`` field, the first declarator of a declaration
    statement, the binding an arrow function is assigned to, and the text of
    a bare ``type_identifier``.
    """
    name_node = node.child_by_field_name("name")

    if name_node is None and node.type in DECLARATION_KINDS:
        declarator = first_descendant_of_type(node, "variable_declarator")
        if declarator is not None:
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                name_node = first_descendant_of_type(declarator, "identifier")
    elif name_node is None and node.type == "function_declaration":
        name_node = first_descendant_of_type(node, "identifier")
    elif name_node is None and node.type == "type_identifier":
        return node_text(node)

    if node.type == "arrow_function":
        parent = node.parent
        if parent is not None and parent.type in ("variable_declarator", "assignment_expression"):
            target = parent.child_by_field_name("name")
            if target is None:
                target = parent.child_by_field_name("left")
            if target is not None:
                return node_text(target)
        return ANONYMOUS_ARROW_FUNCTION

    return node_text(name_node) if name_node is not None else None


def _comment_text(candidate: Any) -> Optional[str]:
    if candidate is not None and candidate.type in COMMENT_KINDS:
        return node_text(candidate)
    return None


def get_documentation(node: Any) -> Optional[str]:
    """Comment immediately preceding ``node``, or its parent's when it has no sibling."""
    previous = node.prev_named_sibling
    if previous is not None:
        return _comment_text(previous)
    parent = node.parent
    if parent is None:
        return None
    return _comment_text(parent.prev_named_sibling)


def extract_signature(node: Any, source: bytes) -> Optional[str]:
    """
    Header of a function-like node, without its body.

    ``source`` is the UTF-8 encoded file the node was parsed from; node
    offsets are byte offsets into it.
    """
    if node.type not in FUNCTION_LIKE_KINDS:
        return None

    body = node.child_by_field_name("body")
    if body is not None:
        header = source[node.start_byte : body.start_byte].decode("utf-8", errors="replace").strip()
        return header[:-1].strip() if header.endswith("{") else header

    if node.type == "arrow_function":
        arrow = next((child for child in node.children if child.type == "=>"), None)
        if arrow is not None:
            return source[node.start_byte : arrow.start_byte].decode("utf-8", errors="replace").strip()

    text = node_text(node)
    brace = text.find("{")
    if brace != -1:
        return text[:brace].strip()
    return text.strip()
