"""Context assembly — query derivation, retrieval, merge and formatting."""

from dochelper.assemble.context import ContextAssembler, merge_results
from dochelper.assemble.queries import derive_queries, extract_keywords

__all__ = ["ContextAssembler", "derive_queries", "extract_keywords", "merge_results"]
