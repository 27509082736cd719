"""Chunking engine — overlapping fixed-size windows over whitespace tokens."""

from dochelper.chunk.base import BaseChunker
from dochelper.chunk.window import WindowChunker, chunk_text

__all__ = ["BaseChunker", "WindowChunker", "chunk_text"]
