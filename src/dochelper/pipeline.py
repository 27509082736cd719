"""Pipeline orchestrator for dochelper.

Composes chunker → embedder → store for indexing, and
assembler → prompts → chat model for questions and reviews. All
dependencies are injected via the constructor.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from dochelper.assemble.context import ContextAssembler
from dochelper.exceptions import DocHelperError, PipelineError
from dochelper.prompts import PromptEngine, QuestionPrompt, ReviewPrompt
from dochelper.review import build_diff_summary, parse_review_issues
from dochelper.types import Answer, IndexReport, ReviewResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dochelper.chunk.base import BaseChunker
    from dochelper.config import DocHelperConfig
    from dochelper.embed.base import BaseEmbedder
    from dochelper.llm.base import BaseChatModel
    from dochelper.store.base import BaseStore
    from dochelper.types import Changeset, ChatMessage, Document, IndexStats

__all__ = ["Pipeline"]

logger = logging.getLogger(__name__)

_PROGRESS_EVERY = 10


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class Pipeline:
    """Orchestrates indexing, question answering and changeset review.

    Usage::

        pipeline = Pipeline(
            chunker=WindowChunker.from_config(config),
            embedder=OllamaEmbedder(config),
            store=ChromaStore(index_path),
            chat_model=OllamaChatModel(config),
            config=config,
        )
        report = pipeline.index_corpus(documents)
        answer = pipeline.answer_question("How do I install it?", history=[])
    """

    def __init__(
        self,
        chunker: BaseChunker,
        embedder: BaseEmbedder,
        store: BaseStore,
        chat_model: BaseChatModel,
        config: DocHelperConfig,
        prompts: PromptEngine | None = None,
        assembler: ContextAssembler | None = None,
    ) -> None:
        self.chunker = chunker
        self.embedder = embedder
        self.store = store
        self.chat_model = chat_model
        self.config = config
        self.prompts = prompts or PromptEngine()
        self.assembler = assembler or ContextAssembler(embedder, store, config)

    def index_corpus(self, documents: Sequence[Document]) -> IndexReport:
        """Rebuild the index from scratch.

        The index is cleared first. A chunk that fails to embed or store is
        logged and skipped; the rest of the corpus is still indexed.

        Raises:
            PipelineError: If the index cannot be cleared or a document
                cannot be chunked.
        """
        try:
            self.store.clear()
        except DocHelperError as e:
            raise PipelineError(f"Failed to clear index: {e}") from e

        delay = self.config.index.embed_delay_seconds
        stored = 0
        skipped = 0
        calls = 0
        per_document: dict[str, int] = {}

        for document in documents:
            try:
                chunks = self.chunker.chunk(document)
            except DocHelperError as e:
                raise PipelineError(f"Failed to chunk {document.path}: {e}") from e
            logger.info("Chunked %s into %d chunks", document.path, len(chunks))
            per_document[document.path] = 0

            for chunk in chunks:
                if calls and delay > 0:
                    time.sleep(delay)
                calls += 1

                try:
                    embedded = self.embedder.embed_chunk(chunk)
                    if not embedded.embedding:
                        raise PipelineError(f"Empty embedding for {chunk.chunk_id}")
                    self.store.upsert(embedded)
                except DocHelperError as e:
                    skipped += 1
                    logger.warning("Skipping chunk %s: %s", chunk.chunk_id, e)
                    continue

                stored += 1
                per_document[document.path] += 1
                if stored % _PROGRESS_EVERY == 0:
                    logger.info("Indexed %d chunks", stored)

        logger.info(
            "Indexing finished: %d documents, %d chunks stored, %d skipped",
            len(documents),
            stored,
            skipped,
        )
        return IndexReport(
            documents=len(documents),
            chunks_stored=stored,
            chunks_skipped=skipped,
            stored_per_document=per_document,
        )

    def answer_question(self, question: str, history: Sequence[ChatMessage] = ()) -> Answer:
        """Answer a question from retrieved documentation.

        Only the most recent ``retrieval.history_messages`` history
        messages are included in the prompt.
        """
        started = time.monotonic()

        context = self.assembler.for_question(question)
        window = self.config.retrieval.history_messages
        recent = tuple(history[-window:]) if window > 0 else ()

        messages = self.prompts.question_messages(
            QuestionPrompt(question=question, context=context.text, history=recent)
        )
        reply = self.chat_model.chat(messages, temperature=self.config.llm.temperature)

        latency = _elapsed_ms(started)
        logger.info("Answered question in %d ms using %d chunks", latency, len(context.results))
        return Answer(answer=reply, sources=context.results, latency_ms=latency)

    def review_changeset(self, changeset: Changeset) -> ReviewResult:
        """Review a changeset against the indexed documentation."""
        started = time.monotonic()
        pull_request = changeset.pull_request

        context = self.assembler.for_changeset(changeset)
        diff_summary = build_diff_summary(
            changeset, max_patch_chars=self.config.retrieval.max_patch_chars
        )

        messages = self.prompts.review_messages(
            ReviewPrompt.build(pull_request, context=context.text, diff_summary=diff_summary)
        )
        reply = self.chat_model.chat(messages, temperature=self.config.llm.review_temperature)
        issues = parse_review_issues(reply, changeset)

        latency = _elapsed_ms(started)
        logger.info(
            "Reviewed %r: %d issues, %d context chunks, %d ms",
            pull_request.title,
            len(issues),
            len(context.results),
            latency,
        )
        return ReviewResult(
            pull_request=pull_request,
            issues=tuple(issues),
            summary=reply,
            context=context.results,
            latency_ms=latency,
        )

    def stats(self) -> IndexStats:
        return self.store.stats()
