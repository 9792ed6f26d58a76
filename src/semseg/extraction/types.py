"""Mapping from raw syntax-node kinds to semantic block categories."""
from __future__ import annotations

from typing import Any, Optional

DECLARATION_KINDS = frozenset({"lexical_declaration", "variable_declaration"})

FUNCTION_LIKE_KINDS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_definition",
        "method_definition",
        "arrow_function",
    }
)

_FILE_SCOPE_KINDS = frozenset({"program", "module", "source_file"})

_CLASS_BODY_KINDS = frozenset({"block", "class_body"})


def is_file_scope(node: Any) -> bool:
    if node is None:
        return False
    return node.type in _FILE_SCOPE_KINDS or node.type.endswith("_file")


def _inside_class_body(node: Any) -> bool:
    parent = node.parent
    if parent is not None and parent.type == "decorated_definition":
        parent = parent.parent
    if parent is None or parent.type not in _CLASS_BODY_KINDS:
        return False
    owner = parent.parent
    return owner is not None and owner.type == "class_definition"


def map_node_to_semantic_type(kind: str, node: Any) -> Optional[str]:
    """Return the semantic category for ``kind`` or None to discard the node."""
    if kind in ("function_declaration", "generator_function_declaration", "arrow_function"):
        return "function"
    if kind == "function_definition":
        return "method" if _inside_class_body(node) else "function"
    if kind in ("method_definition", "method_declaration"):
        return "method"
    if kind in ("class_declaration", "abstract_class_declaration", "class_definition"):
        return "class"
    if kind in ("interface_declaration", "type_alias_declaration"):
        return "interface"
    if kind in DECLARATION_KINDS:
        # block-scoped bindings are not indexed
        return "variable" if is_file_scope(node.parent) else None
    if kind in ("struct_declaration", "enum_declaration"):
        return kind.split("_")[0]
    return None
