"""
Centralized engine settings.

Thresholds for block sizing are read from the environment (``SEMSEG_*``) or
from a grouped TOML file, then validated before the engine sees them.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[attr-defined]

from pydantic import BaseModel, PositiveInt, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SemsegSettings(BaseSettings):
    """Project-wide settings loaded from env or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="SEMSEG_",
        env_nested_delimiter="__",
        extra="allow",
    )

    max_block_chars: int = 1000
    min_block_chars: int = 50
    min_chunk_remainder_chars: int = 200
    max_chars_tolerance_factor: float = 1.15
    module_root_prefix: str = "src/"
    extraction_concurrency: int = 8
    embedding_code_prefix_chars: int = 500
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ChunkingLimits(BaseModel):
    """Size thresholds consumed by the chunking engine.

    Every field is required; callers either pass explicit values or bridge
    from :class:`SemsegSettings` via :meth:`from_settings`.
    """

    max_block_chars: PositiveInt
    min_block_chars: PositiveInt
    min_chunk_remainder_chars: PositiveInt
    max_chars_tolerance_factor: float

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkingLimits":
        if self.max_chars_tolerance_factor < 1.0:
            raise ValueError("max_chars_tolerance_factor must be >= 1.0")
        if self.min_block_chars > self.max_block_chars:
            raise ValueError("min_block_chars cannot exceed max_block_chars")
        return self

    @property
    def oversized_threshold(self) -> float:
        return self.max_block_chars * self.max_chars_tolerance_factor

    @classmethod
    def from_settings(cls, source: SemsegSettings | None = None) -> "ChunkingLimits":
        current = source or settings
        return cls(
            max_block_chars=current.max_block_chars,
            min_block_chars=current.min_block_chars,
            min_chunk_remainder_chars=current.min_chunk_remainder_chars,
            max_chars_tolerance_factor=current.max_chars_tolerance_factor,
        )


_CONFIG_ENV_VAR = "SEMSEG_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("semseg_settings.toml")


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from the primary TOML file on disk."""
    candidates: List[Path] = []
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)

    for candidate in candidates:
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections into SemsegSettings keyword arguments."""
    data: Dict[str, Any] = {}

    chunking = raw.get("chunking", {})
    if "max_block_chars" in chunking:
        data["max_block_chars"] = int(chunking["max_block_chars"])
    if "min_block_chars" in chunking:
        data["min_block_chars"] = int(chunking["min_block_chars"])
    if "min_chunk_remainder_chars" in chunking:
        data["min_chunk_remainder_chars"] = int(chunking["min_chunk_remainder_chars"])
    if "tolerance_factor" in chunking:
        data["max_chars_tolerance_factor"] = float(chunking["tolerance_factor"])

    modules = raw.get("modules", {})
    if "root_prefix" in modules:
        data["module_root_prefix"] = modules["root_prefix"]

    extraction = raw.get("extraction", {})
    if "concurrency" in extraction:
        data["extraction_concurrency"] = int(extraction["concurrency"])
    if "embedding_code_prefix_chars" in extraction:
        data["embedding_code_prefix_chars"] = int(extraction["embedding_code_prefix_chars"])

    logging_section = raw.get("logging", {})
    if "level" in logging_section:
        data["log_level"] = str(logging_section["level"]).upper()
    if "file" in logging_section:
        data["log_file"] = str(logging_section["file"])

    return data


def load_settings() -> SemsegSettings:
    raw = _load_toml_config()
    flattened = _flatten_config(raw)
    return SemsegSettings(**flattened)


settings = load_settings()
