"""Abstract base class for chunking strategies."""

from __future__ import annotations

import hashlib
import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from dochelper.types import Chunk

if TYPE_CHECKING:
    from dochelper.types import Document

__all__ = ["BaseChunker", "make_chunk_id"]

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def make_chunk_id(document_path: str, index: int, content: str) -> str:
    """Generate a deterministic unique chunk ID."""
    slug = _SLUG_RE.sub("_", document_path.lower()).strip("_") or "doc"
    content_hash = hashlib.sha256(content.encode("utf-8")).hexdigest()[:8]
    return f"{slug}_chunk_{index:04d}_{content_hash}"


class BaseChunker(ABC):
    """Base class for all chunking strategies.

    Subclasses implement :meth:`split`; :meth:`chunk` turns the pieces into
    ``Chunk`` objects carrying ids, sequence indices and metadata.
    """

    @abstractmethod
    def split(self, text: str) -> list[str]:
        """Split raw text into ordered chunk strings.

        Raises:
            ChunkError: If chunking parameters are invalid.
        """

    def chunk(self, document: Document) -> list[Chunk]:
        """Split a document into chunks numbered from 0 in text order."""
        pieces = self.split(document.content)
        total = len(pieces)
        chunks = [
            Chunk(
                chunk_id=make_chunk_id(document.path, index, text),
                document_path=document.path,
                content=text,
                sequence_index=index,
                metadata={
                    **document.metadata,
                    "chunkIndex": str(index),
                    "totalChunks": str(total),
                },
            )
            for index, text in enumerate(pieces)
        ]
        logger.debug("Split %s into %d chunks", document.path, total)
        return chunks
