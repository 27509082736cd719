"""GitHub source: raw documentation files and pull request changesets.

Documentation is read from ``raw.githubusercontent.com`` by probing a fixed
list of well-known paths. Pull requests come from the REST API.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from dochelper.exceptions import DocHelperError, DocumentNotFoundError, SourceError
from dochelper.source.base import BaseSource
from dochelper.types import ChangedFile, Changeset, Document, PullRequest

if TYPE_CHECKING:
    from dochelper.config import DocHelperConfig

__all__ = ["DOC_CANDIDATES", "GitHubSource"]

logger = logging.getLogger(__name__)

DOC_CANDIDATES: tuple[str, ...] = (
    "README.md",
    "README.MD",
    "readme.md",
    "Readme.md",
    "app/README.md",
    "docs/README.md",
    "docs/index.md",
    "docs/getting-started.md",
    "docs/api.md",
    "docs/tutorial.md",
    "docs/guide.md",
    "doc/README.md",
    "documentation/README.md",
)

_PER_PAGE = 100


class GitHubSource(BaseSource):
    """Reads documentation and pull requests from GitHub.

    Config fields used::

        [github]
        token_env = "GITHUB_TOKEN"   # optional; raises rate limits
        api_url = "https://api.github.com"
        raw_url = "https://raw.githubusercontent.com"
        timeout = 30
    """

    def __init__(self, config: DocHelperConfig) -> None:
        gh = config.github
        self._api_url = gh.api_url.rstrip("/")
        self._raw_url = gh.raw_url.rstrip("/")
        self._timeout = gh.timeout
        self._token = os.environ.get(gh.token_env, "") if gh.token_env else ""

    def _headers(self, accept: str) -> dict[str, str]:
        headers = {"Accept": accept, "User-Agent": "dochelper"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, url: str, accept: str) -> bytes:
        req = Request(url, headers=self._headers(accept))
        try:
            with urlopen(req, timeout=self._timeout) as resp:
                return resp.read()
        except HTTPError as e:
            if e.code == 404:
                raise DocumentNotFoundError(f"Not found: {url}") from e
            raise SourceError(f"GitHub request failed (HTTP {e.code}): {e.reason}") from e
        except (ConnectionError, URLError, TimeoutError) as e:
            raise SourceError(f"GitHub not reachable at {url}. Error: {e}") from e

    def _get_json(self, url: str) -> Any:
        body = self._get(url, "application/vnd.github+json")
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise SourceError(f"GitHub returned invalid JSON from {url}") from e

    def fetch_file(self, owner: str, repo: str, branch: str, path: str) -> str:
        """Fetch one raw file.

        Raises:
            DocumentNotFoundError: If the file does not exist on the branch.
            SourceError: On any other failure.
        """
        url = f"{self._raw_url}/{owner}/{repo}/{branch}/{path}"
        body = self._get(url, "text/plain")
        return body.decode("utf-8", errors="replace")

    def read_documents(self, owner: str, repo: str, branch: str) -> list[Document]:
        documents: list[Document] = []

        for path in DOC_CANDIDATES:
            try:
                content = self.fetch_file(owner, repo, branch, path)
            except DocumentNotFoundError:
                logger.debug("No %s in %s/%s@%s", path, owner, repo, branch)
                continue
            except DocHelperError as e:
                logger.warning("Could not fetch %s: %s", path, e)
                continue

            if not content.strip():
                logger.debug("Skipping empty document %s", path)
                continue

            documents.append(
                Document(
                    path=path,
                    content=content,
                    metadata={
                        "fileName": PurePosixPath(path).name,
                        "type": "readme" if "README" in path else "documentation",
                        "owner": owner,
                        "repo": repo,
                        "branch": branch,
                        "source": "github",
                    },
                )
            )
            logger.info("Fetched %s (%d chars)", path, len(content))

        logger.info("Found %d documents in %s/%s@%s", len(documents), owner, repo, branch)
        return documents

    def fetch_changeset(self, owner: str, repo: str, number: int) -> Changeset:
        base = f"{self._api_url}/repos/{owner}/{repo}/pulls/{number}"
        try:
            data = self._get_json(base)
        except DocumentNotFoundError as e:
            raise SourceError(f"Pull request not found: {owner}/{repo}#{number}") from e

        if not isinstance(data, dict):
            raise SourceError(f"Unexpected pull request payload from {base}")

        pull_request = _pull_request_from_json(data, owner, repo, number)

        files: list[ChangedFile] = []
        page = 1
        while True:
            batch = self._get_json(f"{base}/files?per_page={_PER_PAGE}&page={page}")
            if not isinstance(batch, list):
                raise SourceError(f"Unexpected files payload for {owner}/{repo}#{number}")
            files.extend(_changed_file_from_json(item) for item in batch)
            if len(batch) < _PER_PAGE:
                break
            page += 1

        logger.info("Fetched %s/%s#%d with %d changed files", owner, repo, number, len(files))
        return Changeset(pull_request=pull_request, files=tuple(files))


def _pull_request_from_json(
    data: dict[str, Any], owner: str, repo: str, number: int
) -> PullRequest:
    head = data.get("head") or {}
    base = data.get("base") or {}
    user = data.get("user") or {}
    return PullRequest(
        number=int(data.get("number", number)),
        title=data.get("title") or "",
        description=data.get("body") or "",
        owner=owner,
        repo=repo,
        head_branch=head.get("ref", ""),
        base_branch=base.get("ref", ""),
        author=user.get("login", ""),
        state=data.get("state", ""),
        url=data.get("html_url", ""),
    )


def _changed_file_from_json(item: dict[str, Any]) -> ChangedFile:
    return ChangedFile(
        filename=item.get("filename", ""),
        status=item.get("status", "modified"),
        additions=int(item.get("additions", 0)),
        deletions=int(item.get("deletions", 0)),
        patch=item.get("patch"),
    )
