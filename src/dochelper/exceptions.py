"""Custom exception hierarchy for dochelper."""

__all__ = [
    "ChunkError",
    "ConfigError",
    "DocHelperError",
    "DocumentNotFoundError",
    "EmbeddingError",
    "LlmError",
    "ManifestError",
    "PipelineError",
    "PluginError",
    "ProjectError",
    "PromptError",
    "SourceError",
    "StoreError",
    "TerminalEmbeddingError",
    "TransientEmbeddingError",
]


class DocHelperError(Exception):
    """Base exception for all dochelper errors."""


class ConfigError(DocHelperError):
    """Raised when configuration loading or validation fails."""


class ManifestError(DocHelperError):
    """Raised when manifest operations fail."""


class ProjectError(DocHelperError):
    """Raised when the project directory cannot be created or read."""


class ChunkError(DocHelperError):
    """Raised when chunking parameters are invalid."""


class EmbeddingError(DocHelperError):
    """Raised when embedding generation fails."""


class TransientEmbeddingError(EmbeddingError):
    """A single embedding request failed; the call may be retried."""


class TerminalEmbeddingError(EmbeddingError):
    """Embedding retries were exhausted; the caller decides to skip or abort."""


class StoreError(DocHelperError):
    """Raised when vector store operations fail."""


class LlmError(DocHelperError):
    """Raised when the chat model call fails."""


class PromptError(DocHelperError):
    """Raised when a prompt template cannot be loaded or rendered."""


class SourceError(DocHelperError):
    """Raised when fetching documents or changesets fails."""


class DocumentNotFoundError(SourceError):
    """Raised when a requested document path does not exist."""


class PipelineError(DocHelperError):
    """Raised when pipeline orchestration fails."""


class PluginError(DocHelperError):
    """Raised when provider lookup or registration fails."""
