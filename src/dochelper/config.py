"""Configuration system for dochelper.

Manages project configuration via .dochelper/config.toml with typed
dataclasses and sensible defaults for all values.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import tomli_w

from dochelper.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

_T = TypeVar("_T")

__all__ = [
    "ChunkConfig",
    "DocHelperConfig",
    "EmbeddingConfig",
    "GithubConfig",
    "IndexConfig",
    "LlmConfig",
    "ProjectConfig",
    "RetrievalConfig",
    "StoreConfig",
    "default_config",
    "load_config",
    "save_config",
]

logger = logging.getLogger(__name__)


@dataclass
class ProjectConfig:
    """[project] section."""

    name: str = ""
    description: str = ""


@dataclass
class GithubConfig:
    """[github] section."""

    token_env: str = "GITHUB_TOKEN"
    default_branch: str = "master"
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    timeout: int = 30


@dataclass
class ChunkConfig:
    """[chunk] section. Sizes are in characters."""

    size: int = 500
    overlap: int = 100


@dataclass
class EmbeddingConfig:
    """[embedding] section."""

    model: str = "nomic-embed-text"
    provider: str = "ollama"
    base_url: str = ""
    api_key_env: str = ""
    dimension: int = 0
    max_retries: int = 3
    backoff_seconds: float = 1.0
    max_input_chars: int = 8000
    timeout: int = 120


@dataclass
class LlmConfig:
    """[llm] section."""

    provider: str = "ollama"
    model: str = "llama3.2"
    base_url: str = ""
    api_key_env: str = ""
    folder_id_env: str = "YANDEX_FOLDER_ID"
    temperature: float = 0.6
    review_temperature: float = 0.3
    max_tokens: int = 2000
    timeout: int = 180


@dataclass
class StoreConfig:
    """[store] section."""

    collection_name: str = "dochelper"


@dataclass
class IndexConfig:
    """[index] section."""

    embed_delay_seconds: float = 0.1


@dataclass
class RetrievalConfig:
    """[retrieval] section."""

    qa_top_k: int = 3
    review_top_k: int = 2
    review_max_queries: int = 5
    review_max_results: int = 5
    history_messages: int = 6
    max_context_chars: int = 1000
    max_patch_chars: int = 2000


@dataclass
class DocHelperConfig:
    """Root configuration combining all sections."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    github: GithubConfig = field(default_factory=GithubConfig)
    chunk: ChunkConfig = field(default_factory=ChunkConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    llm: LlmConfig = field(default_factory=LlmConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)


_SECTIONS: dict[str, type] = {
    "project": ProjectConfig,
    "github": GithubConfig,
    "chunk": ChunkConfig,
    "embedding": EmbeddingConfig,
    "llm": LlmConfig,
    "store": StoreConfig,
    "index": IndexConfig,
    "retrieval": RetrievalConfig,
}


def default_config() -> DocHelperConfig:
    """Return a config with all default values."""
    return DocHelperConfig()


def _config_to_dict(config: DocHelperConfig) -> dict[str, object]:
    """Convert DocHelperConfig to a nested dict suitable for TOML serialization."""
    return {name: dict(vars(getattr(config, name))) for name in _SECTIONS}


def save_config(config: DocHelperConfig, path: Path) -> None:
    """Save configuration to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = _config_to_dict(config)
    try:
        with path.open("wb") as f:
            tomli_w.dump(data, f)
        logger.info("Saved config to %s", path)
    except OSError as e:
        logger.error("Failed to save config to %s: %s", path, e)
        raise ConfigError(f"Failed to save config to {path}: {e}") from e


def _load_section(cls: type[_T], data: dict[str, object]) -> _T:
    """Load a dataclass section from a dict, ignoring unknown keys."""
    known_fields = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    filtered = {k: v for k, v in data.items() if k in known_fields}
    return cls(**filtered)


def load_config(path: Path) -> DocHelperConfig:
    """Load configuration from a TOML file.

    Missing sections or keys get default values.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_bytes()
        data = tomllib.loads(raw.decode("utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    config = DocHelperConfig()
    for name, cls in _SECTIONS.items():
        if name in data:
            section = data[name]
            if not isinstance(section, dict):
                raise ConfigError(f"Config section [{name}] must be a table")
            setattr(config, name, _load_section(cls, section))

    logger.info("Loaded config from %s", path)
    return config
