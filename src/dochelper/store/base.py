"""Abstract base class for vector stores.

Search is exact and brute-force: every stored embedding is scored against
the query. Sized for per-repository documentation, not large corpora.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from dochelper.types import IndexStats, SearchResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dochelper.types import EmbeddedChunk

__all__ = ["BaseStore", "cosine_similarity"]

logger = logging.getLogger(__name__)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    Vectors of different dimension, and zero vectors, score 0.0.
    """
    if len(vec_a) != len(vec_b):
        return 0.0

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b, strict=True))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


class BaseStore(ABC):
    """Base class for all vector stores.

    Subclasses persist embedded chunks; ranking is shared.
    """

    @abstractmethod
    def upsert(self, chunk: EmbeddedChunk) -> None:
        """Insert a chunk, or replace the stored chunk with the same id.

        Raises:
            StoreError: If storage fails.
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove all stored chunks.

        Raises:
            StoreError: If the store cannot be cleared.
        """

    @abstractmethod
    def get_all(self) -> list[EmbeddedChunk]:
        """Return every stored chunk with its embedding, in storage order.

        Raises:
            StoreError: If the scan fails.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the total number of chunks in the store."""

    def search(self, query_embedding: Sequence[float], k: int = 5) -> list[SearchResult]:
        """Rank all stored chunks by cosine similarity to the query.

        Args:
            query_embedding: Query vector.
            k: Number of results to return.

        Returns:
            At most ``k`` results, most similar first. Equal similarities
            keep storage order.

        Raises:
            StoreError: If the scan fails.
        """
        if k <= 0:
            return []

        scored = [
            SearchResult(
                chunk=stored.chunk,
                similarity=cosine_similarity(query_embedding, stored.embedding),
            )
            for stored in self.get_all()
        ]
        scored.sort(key=lambda r: r.similarity, reverse=True)
        logger.debug("Scored %d chunks, returning top %d", len(scored), k)
        return scored[:k]

    def stats(self) -> IndexStats:
        """Return chunk and distinct document counts."""
        chunks = self.get_all()
        return IndexStats(
            chunk_count=len(chunks),
            document_count=len({c.chunk.document_path for c in chunks}),
        )
