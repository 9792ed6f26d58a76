"""Output entity shared by every stage of the extraction pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SemanticBlock:
    """Represents one named, typed unit of source code extracted for indexing."""

    type: str
    name: Optional[str]
    file: str
    start_line: int
    end_line: int
    code: str
    module_path: str
    signature: Optional[str] = None
    doc: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Metadata dictionary in the camelCase shape vector stores expect."""
        return {
            "type": self.type,
            "name": self.name,
            "file": self.file,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "signature": self.signature,
            "doc": self.doc,
            "code": self.code,
            "modulePath": self.module_path,
        }
