"""dochelper — repository documentation Q&A and changeset review over RAG."""

__version__ = "0.1.0"
