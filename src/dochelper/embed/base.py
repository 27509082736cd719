"""Abstract base class for embedding providers.

Providers implement a single request (:meth:`BaseEmbedder._request_embedding`);
the base class adds blank-input short-circuiting, truncation, dimension
checks and retry with linear backoff.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from dochelper.exceptions import EmbeddingError, TerminalEmbeddingError, TransientEmbeddingError
from dochelper.types import EmbeddedChunk

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig
    from dochelper.types import Chunk

__all__ = ["BaseEmbedder"]

logger = logging.getLogger(__name__)


class BaseEmbedder(ABC):
    """Base class for all embedding providers.

    Config fields used::

        [embedding]
        dimension = 0            # 0 = learn from the first response
        max_retries = 3          # total attempts per call
        backoff_seconds = 1.0    # delay before attempt n+1 is n * backoff
        max_input_chars = 8000
    """

    def __init__(self, config: DocHelperConfig) -> None:
        self._max_retries = config.embedding.max_retries
        self._backoff_seconds = config.embedding.backoff_seconds
        self._max_input_chars = config.embedding.max_input_chars
        self._dimension: int | None = config.embedding.dimension or None

    @abstractmethod
    def _request_embedding(self, text: str) -> list[float]:
        """Perform one request to the embedding service.

        Raises:
            TransientEmbeddingError: On transport failure, non-success
                response, or a malformed body.
        """

    def generate_embedding(self, text: str, max_retries: int | None = None) -> list[float]:
        """Embed ``text``, retrying failed requests.

        Args:
            text: Text to embed. Blank text returns ``[]`` without a request.
            max_retries: Total attempts; defaults to ``embedding.max_retries``.

        Returns:
            Embedding vector.

        Raises:
            TerminalEmbeddingError: If every attempt failed.
            EmbeddingError: If ``max_retries`` is less than 1.
        """
        if not text or not text.strip():
            logger.warning("Skipping embedding of blank text")
            return []

        attempts = self._max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise EmbeddingError(f"max_retries must be >= 1, got {attempts}")

        if len(text) > self._max_input_chars:
            logger.warning(
                "Truncating embedding input from %d to %d chars",
                len(text),
                self._max_input_chars,
            )
            text = text[: self._max_input_chars]

        last_error: TransientEmbeddingError | None = None
        for attempt in range(1, attempts + 1):
            try:
                vector = self._request_embedding(text)
                self._check_dimension(vector)
                logger.debug("Got embedding of dimension %d", len(vector))
                return vector
            except TransientEmbeddingError as e:
                last_error = e
                logger.warning("Embedding attempt %d/%d failed: %s", attempt, attempts, e)
                if attempt < attempts:
                    delay = attempt * self._backoff_seconds
                    logger.info("Retrying embedding in %.1fs", delay)
                    time.sleep(delay)

        raise TerminalEmbeddingError(
            f"Embedding failed after {attempts} attempt(s): {last_error}"
        ) from last_error

    def embed_query(self, text: str) -> list[float]:
        """Embed a search query with the configured retries."""
        return self.generate_embedding(text)

    def embed_chunk(self, chunk: Chunk) -> EmbeddedChunk:
        """Embed one chunk and attach the vector."""
        vector = self.generate_embedding(chunk.content)
        return EmbeddedChunk(chunk=chunk, embedding=tuple(vector))

    @property
    def dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Warning:
            If neither configured nor observed yet, the first access makes a
            network call to query the model.
        """
        if self._dimension is None:
            vec = self.generate_embedding("dimension check")
            self._dimension = len(vec)
        return self._dimension

    def _check_dimension(self, vector: list[float]) -> None:
        if not vector:
            raise TransientEmbeddingError("Embedding service returned an empty vector")
        if self._dimension is None:
            self._dimension = len(vector)
        elif len(vector) != self._dimension:
            raise TransientEmbeddingError(
                f"Expected embedding of dimension {self._dimension}, got {len(vector)}"
            )
