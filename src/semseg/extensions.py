"""
Catalogue of source extensions recognized by the indexing workflow.

The scanner list decides upstream whether a file is handed to the extractor
at all; whether a grammar actually exists is the registry's call.
"""
from __future__ import annotations

import os
from typing import Sequence, Tuple

SUPPORTED_EXTENSIONS: Tuple[str, ...] = tuple(
    f".{ext}"
    for ext in (
        "tla",
        "js",
        "jsx",
        "ts",
        "vue",
        "tsx",
        "py",
        "rs",
        "go",
        "c",
        "h",
        "cpp",
        "hpp",
        "cs",
        "rb",
        "java",
        "php",
        "swift",
        "sol",
        "kt",
        "kts",
        "ex",
        "exs",
        "el",
        "html",
        "htm",
        "md",
        "markdown",
        "json",
        "css",
        "rdl",
        "ml",
        "mli",
        "lua",
        "scala",
        "toml",
        "zig",
        "elm",
        "ejs",
        "erb",
    )
)

_DOCUMENT_EXTENSIONS: Sequence[str] = (".md", ".markdown")

SCANNER_EXTENSIONS: Tuple[str, ...] = tuple(
    ext for ext in SUPPORTED_EXTENSIONS if ext not in _DOCUMENT_EXTENSIONS
)


def normalize_extension(value: str) -> str:
    """Return ``value`` as a lower-case extension with a leading dot.

    Accepts a bare extension (``"ts"``), a dotted one (``".TS"``) or a path.
    """
    _, ext = os.path.splitext(value)
    if not ext:
        ext = value if value.startswith(".") else f".{value}"
    return ext.lower()


def is_scannable(path: str) -> bool:
    _, ext = os.path.splitext(path)
    return ext.lower() in SCANNER_EXTENSIONS
