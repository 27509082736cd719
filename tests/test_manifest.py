"""Tests for dochelper.manifest module."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dochelper.exceptions import ManifestError
from dochelper.manifest import DocumentEntry, Manifest, load_manifest, save_manifest

if TYPE_CHECKING:
    from pathlib import Path


class TestManifestCRUD:
    def test_empty_manifest(self):
        m = Manifest()
        assert m.documents == []
        assert m.schema_version == "1"
        assert not m.is_indexed

    def test_add_document_replaces_existing(self):
        m = Manifest()
        m.add_document(DocumentEntry(path="README.md", chars=100, chunks=1))
        m.add_document(DocumentEntry(path="README.md", chars=900, chunks=3))
        assert len(m.documents) == 1
        assert m.documents[0].chunks == 3

    def test_documents_keep_insertion_order(self):
        m = Manifest()
        m.add_document(DocumentEntry(path="docs/api.md", chars=10, chunks=1))
        m.add_document(DocumentEntry(path="README.md", chars=5, chunks=1))
        assert [d.path for d in m.documents] == ["docs/api.md", "README.md"]

    def test_entry_is_frozen(self):
        entry = DocumentEntry(path="README.md")
        with pytest.raises(AttributeError):
            entry.chunks = 5  # type: ignore[misc]


class TestRecordIndex:
    def test_record_index_replaces_documents(self):
        m = Manifest()
        m.add_document(DocumentEntry(path="old.md", chunks=2))

        m.record_index(
            repository="https://github.com/octo/docs",
            branch="main",
            entries=[
                DocumentEntry(path="README.md", chars=299, chunks=1),
                DocumentEntry(path="docs/guide.md", chars=1199, chunks=3),
            ],
        )

        assert m.repository == "https://github.com/octo/docs"
        assert m.branch == "main"
        assert m.indexed_at
        assert [d.path for d in m.documents] == ["README.md", "docs/guide.md"]
        assert m.is_indexed

    def test_no_documents_not_indexed(self):
        m = Manifest()
        m.record_index(repository="r", branch="master", entries=[])
        assert not m.is_indexed


class TestManifestPersistence:
    def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        m = Manifest()
        m.record_index(
            repository="https://github.com/octo/docs",
            branch="main",
            entries=[DocumentEntry(path="README.md", chars=299, chunks=1)],
        )

        save_manifest(m, path)
        loaded = load_manifest(path)

        assert loaded.repository == m.repository
        assert loaded.branch == "main"
        assert loaded.indexed_at == m.indexed_at
        assert loaded.documents == [DocumentEntry(path="README.md", chars=299, chunks=1)]
        assert loaded.is_indexed

    def test_creates_parent_directories(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "manifest.json"
        save_manifest(Manifest(), path)
        assert path.exists()

    def test_load_nonexistent_raises(self, tmp_path: Path):
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(tmp_path / "missing.json")

    def test_load_invalid_json_raises(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ManifestError, match="Failed to load"):
            load_manifest(path)

    def test_entry_without_path_raises(self, tmp_path: Path):
        path = tmp_path / "manifest.json"
        path.write_text('{"documents": [{"chunks": 1}]}', encoding="utf-8")
        with pytest.raises(ManifestError, match="path"):
            load_manifest(path)
