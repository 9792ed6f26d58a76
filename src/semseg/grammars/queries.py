"""
Structural queries and grammar wheels for the bundled languages.

Each query captures the node kinds the semantic type mapper understands;
anything captured but unmapped is discarded later, so queries may be broad.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class GrammarSpec:
    """Where to find a compiled grammar and which query to run against it."""

    name: str
    module: str
    language_func: str
    extensions: Tuple[str, ...]
    query: str


JAVASCRIPT_QUERY = """
(function_declaration) @function
(generator_function_declaration) @function
(arrow_function) @function
(class_declaration) @class
(method_definition) @method
(lexical_declaration) @variable
(variable_declaration) @variable
"""

TYPESCRIPT_QUERY = JAVASCRIPT_QUERY + """
(abstract_class_declaration) @class
(interface_declaration) @interface
(type_alias_declaration) @interface
(enum_declaration) @enum
"""

PYTHON_QUERY = """
(function_definition) @function
(class_definition) @class
"""


GRAMMAR_SPECS: Tuple[GrammarSpec, ...] = (
    GrammarSpec(
        name="javascript",
        module="tree_sitter_javascript",
        language_func="language",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        query=JAVASCRIPT_QUERY,
    ),
    GrammarSpec(
        name="typescript",
        module="tree_sitter_typescript",
        language_func="language_typescript",
        extensions=(".ts",),
        query=TYPESCRIPT_QUERY,
    ),
    GrammarSpec(
        name="tsx",
        module="tree_sitter_typescript",
        language_func="language_tsx",
        extensions=(".tsx",),
        query=TYPESCRIPT_QUERY,
    ),
    GrammarSpec(
        name="python",
        module="tree_sitter_python",
        language_func="language",
        extensions=(".py",),
        query=PYTHON_QUERY,
    ),
)


def specs_by_extension() -> Dict[str, GrammarSpec]:
    mapping: Dict[str, GrammarSpec] = {}
    for spec in GRAMMAR_SPECS:
        for ext in spec.extensions:
            mapping[ext] = spec
    return mapping
