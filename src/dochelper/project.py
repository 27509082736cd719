"""Project manager for dochelper.

Handles project initialization, status reporting, and project root discovery.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from dochelper.config import DocHelperConfig, default_config, load_config, save_config
from dochelper.exceptions import ProjectError
from dochelper.manifest import Manifest, load_manifest, save_manifest

__all__ = [
    "CONFIG_FILE",
    "INDEX_DIR",
    "MANIFEST_FILE",
    "PROJECT_DIR",
    "TEMPLATES_DIR",
    "ProjectManager",
    "ProjectStatus",
]

logger = logging.getLogger(__name__)

PROJECT_DIR = ".dochelper"
CONFIG_FILE = "config.toml"
MANIFEST_FILE = "manifest.json"
INDEX_DIR = "index"
TEMPLATES_DIR = "templates"


@dataclass
class ProjectStatus:
    """Summary of the current project state."""

    initialized: bool
    root: Path
    repository: str
    branch: str
    document_count: int
    chunk_count: int
    config: DocHelperConfig | None


class ProjectManager:
    """Manages the .dochelper/ project directory."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or Path.cwd()

    @property
    def project_dir(self) -> Path:
        return self.root / PROJECT_DIR

    @property
    def config_path(self) -> Path:
        return self.project_dir / CONFIG_FILE

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / MANIFEST_FILE

    @property
    def index_path(self) -> Path:
        return self.project_dir / INDEX_DIR

    @property
    def is_initialized(self) -> bool:
        return (
            self.project_dir.is_dir()
            and self.config_path.exists()
            and self.manifest_path.exists()
        )

    def init(
        self,
        name: str = "",
        llm_provider: str = "",
        embedding_provider: str = "",
    ) -> Path:
        """Initialize a new dochelper project.

        Creates .dochelper/ directory structure, default config, and empty
        manifest. Safe to call on an already-initialized project (idempotent).

        Returns the .dochelper/ directory path.

        Raises:
            ProjectError: If the directory structure cannot be created.
        """
        try:
            self.project_dir.mkdir(parents=True, exist_ok=True)
            self.index_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ProjectError(f"Cannot create {self.project_dir}: {e}") from e

        if self.config_path.exists():
            config = load_config(self.config_path)
            logger.info("Existing config found at %s", self.config_path)
        else:
            config = default_config()

        if llm_provider:
            config.llm.provider = llm_provider
        if embedding_provider:
            config.embedding.provider = embedding_provider
        if name:
            config.project.name = name
        elif not config.project.name:
            config.project.name = self.root.name

        save_config(config, self.config_path)

        if not self.manifest_path.exists():
            save_manifest(Manifest(), self.manifest_path)

        logger.info("Initialized dochelper project at %s", self.project_dir)
        return self.project_dir

    def load_config(self) -> DocHelperConfig:
        return load_config(self.config_path)

    def load_manifest(self) -> Manifest:
        return load_manifest(self.manifest_path)

    def save_manifest(self, manifest: Manifest) -> None:
        save_manifest(manifest, self.manifest_path)

    def status(self) -> ProjectStatus:
        """Get current project state from config and manifest."""
        if not self.is_initialized:
            return ProjectStatus(
                initialized=False,
                root=self.root,
                repository="",
                branch="",
                document_count=0,
                chunk_count=0,
                config=None,
            )

        config = self.load_config()
        manifest = self.load_manifest()

        return ProjectStatus(
            initialized=True,
            root=self.root,
            repository=manifest.repository,
            branch=manifest.branch,
            document_count=len(manifest.documents),
            chunk_count=sum(d.chunks for d in manifest.documents),
            config=config,
        )

    @staticmethod
    def find_project_root(start: Path | None = None) -> Path | None:
        """Walk up from start directory to find a .dochelper/ directory.

        Returns the project root (parent of .dochelper/) or None if not found.
        """
        current = (start or Path.cwd()).resolve()
        while True:
            if (current / PROJECT_DIR).is_dir():
                return current
            parent = current.parent
            if parent == current:
                return None
            current = parent
