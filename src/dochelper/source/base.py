"""Abstract base class for documentation sources."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dochelper.types import Changeset, Document

__all__ = ["BaseSource"]

logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """Base class for all documentation sources.

    Subclasses must implement ``read_documents`` and ``fetch_changeset``.
    """

    @abstractmethod
    def read_documents(self, owner: str, repo: str, branch: str) -> list[Document]:
        """Read the documentation files of a repository branch.

        Missing files are skipped, so an empty list is a valid result.

        Raises:
            SourceError: If the source as a whole cannot be reached.
        """

    @abstractmethod
    def fetch_changeset(self, owner: str, repo: str, number: int) -> Changeset:
        """Fetch a pull request with its changed files.

        Raises:
            SourceError: If the pull request cannot be fetched.
        """
