"""Overlapping fixed-size window chunker.

Text is tokenized on whitespace. Tokens accumulate until their length (one
separator counted per token) reaches the target size; the window is then
emitted and the next one is seeded with trailing tokens worth at least
``overlap`` characters.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dochelper.chunk.base import BaseChunker
from dochelper.exceptions import ChunkError

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["WindowChunker", "chunk_text"]

logger = logging.getLogger(__name__)


def _validate(target_size: int, overlap: int) -> None:
    if target_size < 1:
        raise ChunkError(f"target_size must be >= 1, got {target_size}")
    if overlap < 0:
        raise ChunkError(f"overlap must be >= 0, got {overlap}")
    if overlap >= target_size:
        raise ChunkError(f"overlap ({overlap}) must be smaller than target_size ({target_size})")


def _overlap_tail(tokens: list[str], overlap: int) -> list[str]:
    """Collect trailing tokens until their combined length reaches ``overlap``."""
    tail: list[str] = []
    length = 0
    i = len(tokens) - 1
    while i >= 0 and length < overlap:
        tail.append(tokens[i])
        length += len(tokens[i]) + 1
        i -= 1
    tail.reverse()
    return tail


def chunk_text(text: str, target_size: int, overlap: int) -> list[str]:
    """Split text into overlapping windows of roughly ``target_size`` characters.

    Args:
        text: Input text. Whitespace runs collapse to single spaces.
        target_size: Window length that triggers emission.
        overlap: Minimum length of the tail carried into the next window.

    Returns:
        Ordered chunk strings; empty for empty or whitespace-only input.

    Raises:
        ChunkError: If the size parameters are inconsistent.
    """
    _validate(target_size, overlap)

    tokens = text.split()
    if not tokens:
        return []

    chunks: list[str] = []
    current: list[str] = []
    length = 0

    for token in tokens:
        current.append(token)
        length += len(token) + 1

        if length >= target_size:
            chunks.append(" ".join(current))
            current = _overlap_tail(current, overlap)
            length = sum(len(t) + 1 for t in current)

    if current:
        chunks.append(" ".join(current))

    return chunks


class WindowChunker(BaseChunker):
    """Chunker producing overlapping windows (default 500 chars, 100 overlap)."""

    def __init__(self, target_size: int = 500, overlap: int = 100) -> None:
        _validate(target_size, overlap)
        self.target_size = target_size
        self.overlap = overlap

    @classmethod
    def from_config(cls, config: DocHelperConfig) -> WindowChunker:
        return cls(target_size=config.chunk.size, overlap=config.chunk.overlap)

    def split(self, text: str) -> list[str]:
        return chunk_text(text, self.target_size, self.overlap)
