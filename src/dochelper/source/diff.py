"""Build a changeset from local ``git diff`` output."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from dochelper.types import ChangedFile, Changeset, PullRequest

__all__ = ["changeset_from_diff"]

logger = logging.getLogger(__name__)

_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+)$")


@dataclass
class _FileDiff:
    """Mutable per-file state while the diff is being read."""

    filename: str
    old_path: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    hunks: list[str] = field(default_factory=list)

    def to_changed_file(self) -> ChangedFile:
        return ChangedFile(
            filename=self.filename,
            status=self.status,
            additions=self.additions,
            deletions=self.deletions,
            patch="\n".join(self.hunks) if self.hunks else None,
        )


def changeset_from_diff(
    text: str,
    title: str = "Local changes",
    description: str = "",
) -> Changeset:
    """Parse unified ``git diff`` output into a changeset.

    Each file's patch keeps only its hunks (from the first ``@@`` line),
    matching the patch text GitHub reports for a pull request file.
    """
    files: list[_FileDiff] = []
    current: _FileDiff | None = None
    in_hunk = False

    for line in text.splitlines():
        header = _HEADER_RE.match(line)
        if header:
            current = _FileDiff(filename=header.group(2), old_path=header.group(1))
            files.append(current)
            in_hunk = False
            continue
        if current is None:
            continue

        if not in_hunk:
            if line.startswith("new file mode"):
                current.status = "added"
            elif line.startswith("deleted file mode"):
                current.status = "removed"
                current.filename = current.old_path
            elif line.startswith("rename to "):
                current.status = "renamed"
                current.filename = line[len("rename to ") :]
            elif line.startswith("@@"):
                in_hunk = True
                current.hunks.append(line)
            continue

        current.hunks.append(line)
        if line.startswith("+"):
            current.additions += 1
        elif line.startswith("-"):
            current.deletions += 1

    logger.debug("Parsed %d files from diff", len(files))
    return Changeset(
        pull_request=PullRequest(number=0, title=title, description=description),
        files=tuple(f.to_changed_file() for f in files),
    )
