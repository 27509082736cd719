"""Documentation and changeset sources."""

from dochelper.source.base import BaseSource
from dochelper.source.diff import changeset_from_diff
from dochelper.source.github import DOC_CANDIDATES, GitHubSource

__all__ = [
    "DOC_CANDIDATES",
    "BaseSource",
    "GitHubSource",
    "changeset_from_diff",
]
