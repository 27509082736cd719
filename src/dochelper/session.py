"""Interactive session state.

A ``Session`` belongs to one interactive run and is passed explicitly to
every operation that needs the active repository or conversation history.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from dochelper.exceptions import SourceError
from dochelper.types import ChatMessage

__all__ = ["DEFAULT_BRANCH", "Session", "parse_pr_url", "parse_repo_url"]

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "master"

_REPO_URL_RE = re.compile(r"github\.com[:/]([^/\s]+)/([^/\s.]+)(?:\.git)?")
_PR_URL_RE = re.compile(r"github\.com/([^/\s]+)/([^/\s]+)/pull/(\d+)")


def parse_repo_url(url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub repository URL.

    Accepts HTTPS (``https://github.com/owner/repo``) and SSH
    (``git@github.com:owner/repo.git``) forms.

    Raises:
        SourceError: If the URL does not name a GitHub repository.
    """
    match = _REPO_URL_RE.search(url)
    if match is None:
        raise SourceError(f"Not a GitHub repository URL: {url!r}")
    return match.group(1), match.group(2)


def parse_pr_url(url: str) -> tuple[str, str, int]:
    """Extract ``(owner, repo, number)`` from a GitHub pull request URL.

    Raises:
        SourceError: If the URL does not name a pull request.
    """
    match = _PR_URL_RE.search(url)
    if match is None:
        raise SourceError(f"Not a GitHub pull request URL: {url!r}")
    return match.group(1), match.group(2), int(match.group(3))


@dataclass
class Session:
    """State of one interactive run. Never persisted."""

    repository_url: str | None = None
    owner: str | None = None
    repo: str | None = None
    branch: str = DEFAULT_BRANCH
    history: list[ChatMessage] = field(default_factory=list)
    is_indexed: bool = False

    @property
    def has_repository(self) -> bool:
        return self.owner is not None and self.repo is not None

    def set_repository(self, url: str, branch: str = DEFAULT_BRANCH) -> None:
        """Point the session at a new repository; it is not indexed yet."""
        owner, repo = parse_repo_url(url)
        self.repository_url = url
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.is_indexed = False
        logger.info("Session repository set to %s/%s@%s", owner, repo, branch)

    def add_exchange(self, question: str, answer: str) -> None:
        self.history.append(ChatMessage(role="user", text=question))
        self.history.append(ChatMessage(role="assistant", text=answer))

    def clear_history(self) -> None:
        self.history.clear()
