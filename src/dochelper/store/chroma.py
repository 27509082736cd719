"""ChromaDB vector store using PersistentClient.

ChromaDB provides persistence (upsert by id, full scans); ranking is done
by :meth:`BaseStore.search` with exact cosine similarity.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import chromadb

from dochelper.exceptions import StoreError
from dochelper.store.base import BaseStore
from dochelper.types import Chunk, EmbeddedChunk, IndexStats

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

__all__ = ["ChromaStore"]

logger = logging.getLogger(__name__)


class ChromaStore(BaseStore):
    """Vector store backed by ChromaDB with file-based persistence.

    Uses ``chromadb.PersistentClient`` so no external server is needed.
    All data lives in the ``persist_path`` directory. Each record holds the
    chunk content as the document and ``doc_path``, ``chunk_index`` and
    ``metadata_json`` as metadata.

    Usage::

        store = ChromaStore(persist_path=project_root / ".dochelper" / "index")
        store.upsert(embedded_chunk)
        results = store.search(query_embedding, k=3)
    """

    def __init__(self, persist_path: Path, collection_name: str = "dochelper") -> None:
        self._persist_path = persist_path
        self._collection_name = collection_name

        try:
            self._client = chromadb.PersistentClient(path=str(persist_path))
            self._collection = self._client.get_or_create_collection(name=collection_name)
        except Exception as e:
            raise StoreError(f"Failed to initialize ChromaDB at {persist_path}: {e}") from e

        logger.info(
            "ChromaDB store initialized at %s (collection=%s)", persist_path, collection_name
        )

    def upsert(self, chunk: EmbeddedChunk) -> None:
        """Insert or replace a chunk by id.

        Raises:
            StoreError: If storage fails, e.g. the embedding dimension differs
                from the vectors already in the collection.
        """
        if not chunk.embedding:
            raise StoreError(f"Refusing to store chunk {chunk.chunk.chunk_id} without embedding")

        try:
            self._collection.upsert(
                ids=[chunk.chunk.chunk_id],
                embeddings=[list(chunk.embedding)],  # type: ignore[arg-type]
                documents=[chunk.chunk.content],
                metadatas=[self._meta_to_dict(chunk.chunk)],  # type: ignore[list-item]
            )
        except Exception as e:
            raise StoreError(f"Failed to store chunk {chunk.chunk.chunk_id}: {e}") from e

        logger.debug("Stored chunk %s", chunk.chunk.chunk_id)

    def clear(self) -> None:
        """Drop and recreate the collection."""
        try:
            self._client.delete_collection(name=self._collection_name)
            self._collection = self._client.get_or_create_collection(name=self._collection_name)
        except Exception as e:
            raise StoreError(f"Failed to clear collection {self._collection_name}: {e}") from e

        logger.info("Cleared collection %s", self._collection_name)

    def get_all(self) -> list[EmbeddedChunk]:
        """Materialize every stored chunk with its embedding.

        Raises:
            StoreError: If the query fails.
        """
        try:
            results = self._collection.get(include=["embeddings", "documents", "metadatas"])
        except Exception as e:
            raise StoreError(f"Failed to read chunks: {e}") from e

        ids = results.get("ids") or []
        documents = results.get("documents")
        metadatas = results.get("metadatas")
        # Newer ChromaDB versions return a numpy array here.
        embeddings = results.get("embeddings")
        if documents is None:
            documents = [""] * len(ids)
        if metadatas is None:
            metadatas = [None] * len(ids)
        if embeddings is None:
            embeddings = [[]] * len(ids)

        chunks: list[EmbeddedChunk] = []
        for chunk_id, doc, meta, emb in zip(ids, documents, metadatas, embeddings, strict=True):
            chunks.append(
                EmbeddedChunk(
                    chunk=self._chunk_from_record(chunk_id, doc or "", meta),
                    embedding=tuple(float(x) for x in emb),
                )
            )
        return chunks

    def stats(self) -> IndexStats:
        """Return chunk and distinct document counts without loading embeddings."""
        try:
            results = self._collection.get(include=["metadatas"])
        except Exception as e:
            raise StoreError(f"Failed to read chunk metadata: {e}") from e

        metadatas = results.get("metadatas") or []
        paths = {str(m.get("doc_path", "")) for m in metadatas if m}
        return IndexStats(chunk_count=len(results.get("ids") or []), document_count=len(paths))

    def count(self) -> int:
        """Return the total number of chunks in the store."""
        try:
            return self._collection.count()
        except Exception as e:
            raise StoreError(f"Failed to count chunks: {e}") from e

    @staticmethod
    def _meta_to_dict(chunk: Chunk) -> dict[str, object]:
        return {
            "doc_path": chunk.document_path,
            "chunk_index": chunk.sequence_index,
            "metadata_json": json.dumps(chunk.metadata, ensure_ascii=False, sort_keys=True),
        }

    @staticmethod
    def _chunk_from_record(
        chunk_id: str,
        content: str,
        meta: Mapping[str, object] | None,
    ) -> Chunk:
        """Reconstruct a Chunk from a ChromaDB record."""
        if not meta:
            return Chunk(chunk_id=chunk_id, document_path="", content=content, sequence_index=0)

        index_val = meta.get("chunk_index", 0)
        try:
            extra = json.loads(str(meta.get("metadata_json", "{}")))
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed metadata for chunk %s", chunk_id)
            extra = {}

        return Chunk(
            chunk_id=chunk_id,
            document_path=str(meta.get("doc_path", "")),
            content=content,
            sequence_index=int(index_val) if index_val is not None else 0,  # type: ignore[call-overload]
            metadata={str(k): str(v) for k, v in extra.items()},
        )
