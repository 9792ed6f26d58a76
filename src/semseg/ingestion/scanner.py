"""
Source-file discovery for directory-wide extraction.

Walks a project tree, prunes ignored directories and keeps files whose
extension the indexing workflow scans.
"""
from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..extensions import SCANNER_EXTENSIONS
from ..logger import get_logger

log = get_logger(__name__)

DEFAULT_IGNORE_PATTERNS: Sequence[str] = (
    ".*",
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    ".DS_Store",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "node_modules",
    "build",
    "dist",
    "*.log",
    "*.lock",
)


def _is_ignored(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def discover_source_files(
    root: Path,
    ignore_patterns: Optional[Iterable[str]] = None,
    extensions: Sequence[str] = SCANNER_EXTENSIONS,
) -> List[Path]:
    """
    Return scannable, non-empty files under ``root`` as sorted relative paths.

    ``ignore_patterns`` extend the defaults and are matched against each
    file or directory name with :func:`fnmatch.fnmatch`.
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Source root is not a directory: {root}")

    extra = tuple(pattern.strip() for pattern in (ignore_patterns or []) if pattern.strip())
    patterns = tuple(dict.fromkeys(tuple(DEFAULT_IGNORE_PATTERNS) + extra))
    suffixes = {ext.lower() for ext in extensions}

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not _is_ignored(name, patterns))
        for filename in filenames:
            if _is_ignored(filename, patterns):
                continue
            candidate = Path(dirpath) / filename
            if candidate.suffix.lower() not in suffixes:
                continue
            try:
                if candidate.stat().st_size == 0:
                    continue
            except OSError as exc:
                log.warning("file_stat_failed", file=str(candidate), error=str(exc))
                continue
            found.append(candidate.relative_to(root))

    found.sort(key=lambda path: path.as_posix())
    log.info("source_files_discovered", root=str(root), files=len(found))
    return found
