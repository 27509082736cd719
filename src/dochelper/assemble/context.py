"""Context assembly: turn one or many queries into a bounded prompt block.

Single-query mode serves direct questions. Multi-query mode serves changeset
review: each derived query is searched independently, then all hits are
merged, deduplicated by chunk id, re-ranked and truncated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dochelper.assemble.queries import derive_queries
from dochelper.exceptions import DocHelperError
from dochelper.types import AssembledContext

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dochelper.config import DocHelperConfig
    from dochelper.embed.base import BaseEmbedder
    from dochelper.store.base import BaseStore
    from dochelper.types import Changeset, SearchResult

__all__ = [
    "NO_QUESTION_CONTEXT",
    "NO_REVIEW_CONTEXT",
    "ContextAssembler",
    "format_question_context",
    "format_review_context",
    "merge_results",
]

logger = logging.getLogger(__name__)

NO_QUESTION_CONTEXT = "No relevant documentation was found."
NO_REVIEW_CONTEXT = "Project documentation context is unavailable."


def merge_results(results: Iterable[SearchResult], limit: int) -> list[SearchResult]:
    """Deduplicate by chunk id (first occurrence wins), rank, and truncate."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.chunk.chunk_id in seen:
            continue
        seen.add(result.chunk.chunk_id)
        unique.append(result)

    unique.sort(key=lambda r: r.similarity, reverse=True)
    return unique[:limit]


def format_question_context(results: list[SearchResult]) -> str:
    if not results:
        return NO_QUESTION_CONTEXT
    return "\n\n".join(
        f"Document: {r.chunk.source_label}\n"
        f"Relevance: {r.similarity * 100:.2f}%\n"
        f"Content:\n{r.chunk.content}"
        for r in results
    )


def format_review_context(results: list[SearchResult], max_chars: int) -> str:
    if not results:
        return NO_REVIEW_CONTEXT
    return "\n\n---\n\n".join(
        f"[source] {r.chunk.source_label}\n{r.chunk.content[:max_chars]}" for r in results
    )


class ContextAssembler:
    """Retrieves and formats documentation context for prompts.

    Config fields used::

        [retrieval]
        qa_top_k = 3
        review_top_k = 2
        review_max_queries = 5
        review_max_results = 5
        max_context_chars = 1000
    """

    def __init__(self, embedder: BaseEmbedder, store: BaseStore, config: DocHelperConfig) -> None:
        self.embedder = embedder
        self.store = store
        self.config = config

    def retrieve(self, query: str, k: int) -> list[SearchResult]:
        """Embed a query and return its top-``k`` matches.

        Raises:
            EmbeddingError: If the query cannot be embedded.
            StoreError: If the index cannot be scanned.
        """
        vector = self.embedder.embed_query(query)
        if not vector:
            return []
        return self.store.search(vector, k)

    def for_question(self, question: str) -> AssembledContext:
        """Single-query mode. Embedding and store errors propagate."""
        results = self.retrieve(question, self.config.retrieval.qa_top_k)
        logger.info("Found %d relevant chunks for question", len(results))
        return AssembledContext(
            text=format_question_context(results),
            results=tuple(results),
            queries=(question,),
        )

    def for_changeset(self, changeset: Changeset) -> AssembledContext:
        """Multi-query mode. A failing query contributes nothing."""
        retrieval = self.config.retrieval
        queries = derive_queries(changeset, limit=retrieval.review_max_queries)

        collected: list[SearchResult] = []
        for query in queries:
            try:
                collected.extend(self.retrieve(query, retrieval.review_top_k))
            except DocHelperError as e:
                logger.warning("Search failed for query %r: %s", query, e)

        results = merge_results(collected, retrieval.review_max_results)
        logger.info(
            "Assembled %d chunks from %d queries (%d hits before dedup)",
            len(results),
            len(queries),
            len(collected),
        )
        return AssembledContext(
            text=format_review_context(results, retrieval.max_context_chars),
            results=tuple(results),
            queries=tuple(queries),
        )
