"""Vector store — ChromaDB persistence with exact cosine ranking."""

from dochelper.store.base import BaseStore, cosine_similarity
from dochelper.store.chroma import ChromaStore

__all__ = ["BaseStore", "ChromaStore", "cosine_similarity"]
