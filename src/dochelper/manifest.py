"""Index manifest for dochelper.

Records which repository and branch the index was built from, when, and how
many chunks each document produced.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from dochelper.exceptions import ManifestError

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "DocumentEntry",
    "Manifest",
    "load_manifest",
    "save_manifest",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentEntry:
    """Immutable record of an indexed document."""

    path: str
    chars: int = 0
    chunks: int = 0


@dataclass
class Manifest:
    """Describes the current content of the index.

    Uses a dict internally for O(1) lookups by document path.
    Serializes to/from a list in JSON for readability.
    """

    schema_version: str = "1"
    repository: str = ""
    branch: str = ""
    indexed_at: str = ""
    _documents: dict[str, DocumentEntry] = field(default_factory=dict)

    @property
    def documents(self) -> list[DocumentEntry]:
        """Return documents as a list (for iteration and serialization)."""
        return list(self._documents.values())

    @property
    def is_indexed(self) -> bool:
        return bool(self.indexed_at) and bool(self._documents)

    def add_document(self, entry: DocumentEntry) -> None:
        """Add or replace a document entry."""
        self._documents[entry.path] = entry

    def record_index(
        self,
        repository: str,
        branch: str,
        entries: list[DocumentEntry],
    ) -> None:
        """Replace the manifest content after a full rebuild of the index."""
        self.repository = repository
        self.branch = branch
        self.indexed_at = datetime.now(UTC).isoformat()
        self._documents = {}
        for entry in entries:
            self.add_document(entry)


def _entry_to_dict(entry: DocumentEntry) -> dict[str, object]:
    return {"path": entry.path, "chars": entry.chars, "chunks": entry.chunks}


def _entry_from_dict(data: dict[str, object]) -> DocumentEntry:
    if "path" not in data:
        raise ManifestError("Document entry missing required field: path")
    return DocumentEntry(
        path=str(data["path"]),
        chars=int(str(data.get("chars", 0))),
        chunks=int(str(data.get("chunks", 0))),
    )


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Save manifest to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "schema_version": manifest.schema_version,
        "repository": manifest.repository,
        "branch": manifest.branch,
        "indexed_at": manifest.indexed_at,
        "documents": [_entry_to_dict(d) for d in manifest.documents],
    }
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        logger.info("Saved manifest to %s", path)
    except OSError as e:
        logger.error("Failed to save manifest to %s: %s", path, e)
        raise ManifestError(f"Failed to save manifest to {path}: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """Load manifest from a JSON file."""
    if not path.exists():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load manifest from %s: %s", path, e)
        raise ManifestError(f"Failed to load manifest from {path}: {e}") from e

    manifest = Manifest(
        schema_version=str(data.get("schema_version", "1")),
        repository=str(data.get("repository", "")),
        branch=str(data.get("branch", "")),
        indexed_at=str(data.get("indexed_at", "")),
    )
    for doc_data in data.get("documents", []):
        manifest.add_document(_entry_from_dict(doc_data))

    logger.info("Loaded manifest from %s (%d documents)", path, len(manifest.documents))
    return manifest
