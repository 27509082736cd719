"""Search query derivation for changeset review.

Queries come only from structured changeset metadata: changed file names,
their directories, the title, and identifiers declared or imported in the
patches.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dochelper.types import Changeset

__all__ = ["derive_queries", "extract_keywords"]

# fun (Kotlin), function (JS/PHP), def (Python/Ruby), func (Go/Swift)
_FUNC_RE = re.compile(r"(?:fun|function|def|func)\s+(\w+)")
_TYPE_RE = re.compile(r"(?:class|interface|object|struct)\s+(\w+)")
_IMPORT_RE = re.compile(r"import\s+[\w.]+\.(\w+)")

_MIN_FILENAME_LEN = 3
_MIN_KEYWORD_LEN = 4


def extract_keywords(patch: str) -> list[str]:
    """Extract function, type and imported names from unified-diff text."""
    keywords: list[str] = []
    for pattern in (_FUNC_RE, _TYPE_RE, _IMPORT_RE):
        keywords.extend(m.group(1) for m in pattern.finditer(patch))
    return list(dict.fromkeys(keywords))


def derive_queries(changeset: Changeset, limit: int = 5) -> list[str]:
    """Build up to ``limit`` distinct search queries for a changeset.

    Order: file base names (extension stripped), directory paths, title,
    then identifiers from the patches.
    """
    queries: list[str] = []

    for f in changeset.files:
        stem = PurePosixPath(f.filename).name.rsplit(".", 1)[0]
        if len(stem.strip()) >= _MIN_FILENAME_LEN:
            queries.append(stem)

    for f in changeset.files:
        directory = f.filename.rpartition("/")[0]
        if directory.strip():
            queries.append(directory.replace("/", " "))

    queries.append(changeset.pull_request.title)

    for f in changeset.files:
        if f.patch:
            queries.extend(k for k in extract_keywords(f.patch) if len(k) >= _MIN_KEYWORD_LEN)

    distinct = [q for q in dict.fromkeys(queries) if q.strip()]
    return distinct[:limit]
