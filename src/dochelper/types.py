"""Data contracts for dochelper.

Frozen dataclasses that flow between pipeline stages:
  Document → list[Chunk] → list[EmbeddedChunk] → stored
  query → list[SearchResult] → AssembledContext → Answer / ReviewResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = [
    "Answer",
    "AssembledContext",
    "ChangedFile",
    "Changeset",
    "ChatMessage",
    "Chunk",
    "Document",
    "EmbeddedChunk",
    "IndexReport",
    "IndexStats",
    "IssueSeverity",
    "PullRequest",
    "ReviewIssue",
    "ReviewResult",
    "SearchResult",
]


@dataclass(frozen=True)
class Document:
    """A documentation file read from a repository."""

    path: str
    content: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Chunk:
    """A window of document text, ready for embedding."""

    chunk_id: str
    document_path: str
    content: str
    sequence_index: int
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def source_label(self) -> str:
        """Human-readable source: the file name if known, else the path."""
        return self.metadata.get("fileName") or self.document_path


@dataclass(frozen=True)
class EmbeddedChunk:
    """A chunk with its embedding vector attached."""

    chunk: Chunk
    embedding: tuple[float, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SearchResult:
    """A search result: chunk + cosine similarity in [-1, 1]."""

    chunk: Chunk
    similarity: float


@dataclass(frozen=True)
class IndexStats:
    """Size of the vector index."""

    chunk_count: int
    document_count: int


@dataclass(frozen=True)
class IndexReport:
    """Outcome of one indexing run."""

    documents: int
    chunks_stored: int
    chunks_skipped: int
    stored_per_document: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatMessage:
    """One message of a chat exchange. Roles: system, user, assistant."""

    role: str
    text: str


@dataclass(frozen=True)
class AssembledContext:
    """Ranked, deduplicated retrieval results formatted for a prompt."""

    text: str
    results: tuple[SearchResult, ...] = ()
    queries: tuple[str, ...] = ()


@dataclass(frozen=True)
class Answer:
    """Answer to a documentation question."""

    answer: str
    sources: tuple[SearchResult, ...]
    latency_ms: int


@dataclass(frozen=True)
class PullRequest:
    """Metadata of the change under review."""

    number: int
    title: str
    description: str = ""
    owner: str = ""
    repo: str = ""
    head_branch: str = ""
    base_branch: str = ""
    author: str = ""
    state: str = ""
    url: str = ""


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by a changeset. Status: added, removed, modified, renamed."""

    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    patch: str | None = None


@dataclass(frozen=True)
class Changeset:
    """A pull request (or local diff) together with its changed files."""

    pull_request: PullRequest
    files: tuple[ChangedFile, ...] = ()

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @property
    def total_changed_files(self) -> int:
        return len(self.files)


class IssueSeverity(str, Enum):
    """Severity of a review finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ReviewIssue:
    """A finding scraped from the review text."""

    severity: IssueSeverity
    file: str
    description: str


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of a changeset review."""

    pull_request: PullRequest
    issues: tuple[ReviewIssue, ...]
    summary: str
    context: tuple[SearchResult, ...]
    latency_ms: int
