"""Embedding engine — retrying provider interface and concrete providers."""

from dochelper.embed.base import BaseEmbedder
from dochelper.embed.chromadb_embed import ChromaDBEmbedder
from dochelper.embed.ollama import OllamaEmbedder
from dochelper.embed.openai_compat import OpenAICompatEmbedder
from dochelper.registry import default_registry

__all__ = ["BaseEmbedder", "ChromaDBEmbedder", "OllamaEmbedder", "OpenAICompatEmbedder"]

# Register built-in embedding providers
default_registry.register("embedding", "ollama", lambda cfg: OllamaEmbedder(cfg))
default_registry.register("embedding", "openai", lambda cfg: OpenAICompatEmbedder(cfg))
default_registry.register("embedding", "chromadb", lambda cfg: ChromaDBEmbedder(cfg))
