"""Shared fixtures for dochelper tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dochelper.config import DocHelperConfig, save_config
from dochelper.manifest import Manifest, save_manifest
from dochelper.project import CONFIG_FILE, INDEX_DIR, MANIFEST_FILE, PROJECT_DIR

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A temporary directory simulating a project root."""
    return tmp_path


@pytest.fixture
def config() -> DocHelperConfig:
    """Default config with the ingestion delay and retry backoff disabled."""
    cfg = DocHelperConfig()
    cfg.index.embed_delay_seconds = 0.0
    cfg.embedding.backoff_seconds = 0.0
    return cfg


@pytest.fixture
def initialized_project(tmp_path: Path) -> Path:
    """A temporary project with .dochelper/ already initialized."""
    project = tmp_path / PROJECT_DIR
    (project / INDEX_DIR).mkdir(parents=True)

    cfg = DocHelperConfig()
    cfg.project.name = "test-project"
    save_config(cfg, project / CONFIG_FILE)
    save_manifest(Manifest(), project / MANIFEST_FILE)

    return tmp_path
