"""ChromaDB built-in embedding provider using ONNX runtime.

No extra dependency (ChromaDB already backs the index). Uses the
all-MiniLM-L6-v2 model via ONNX — no GPU, no server, no API key.
Model is auto-downloaded on first use (~80MB).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chromadb.utils.embedding_functions import DefaultEmbeddingFunction

from dochelper.embed.base import BaseEmbedder
from dochelper.exceptions import EmbeddingError, TransientEmbeddingError

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["ChromaDBEmbedder"]

logger = logging.getLogger(__name__)


class ChromaDBEmbedder(BaseEmbedder):
    """Embedding provider using ChromaDB's built-in ONNX embedding function.

    Uses ``all-MiniLM-L6-v2`` (384 dimensions). Useful for trying dochelper
    without an Ollama server.

    Config fields used::

        [embedding]
        provider = "chromadb"
        model = "all-MiniLM-L6-v2"
    """

    _FIXED_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, config: DocHelperConfig) -> None:
        super().__init__(config)
        if config.embedding.model and config.embedding.model != self._FIXED_MODEL:
            logger.warning(
                "ChromaDB provider only supports %s, ignoring model=%r",
                self._FIXED_MODEL,
                config.embedding.model,
            )

        try:
            self._ef = DefaultEmbeddingFunction()
        except Exception as e:
            raise EmbeddingError(f"Failed to initialize ChromaDB embedding function: {e}") from e

        logger.info("ChromaDBEmbedder initialized (ONNX %s)", self._FIXED_MODEL)

    def _request_embedding(self, text: str) -> list[float]:
        try:
            vectors = self._ef([text])
        except Exception as e:
            raise TransientEmbeddingError(f"ChromaDB embedding failed: {e}") from e

        if len(vectors) != 1:
            raise TransientEmbeddingError(
                f"ChromaDB returned {len(vectors)} embeddings for 1 input"
            )
        return [float(x) for x in vectors[0]]
