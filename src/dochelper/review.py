"""Changeset review helpers.

``parse_review_issues`` is the only place that interprets free-text model
output; the review prompt asks for one finding per line, prefixed by a
severity marker.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from dochelper.types import IssueSeverity, ReviewIssue

if TYPE_CHECKING:
    from dochelper.types import Changeset

__all__ = [
    "GENERAL_FILE",
    "SEVERITY_MARKERS",
    "build_diff_summary",
    "parse_review_issues",
]

logger = logging.getLogger(__name__)

GENERAL_FILE = "general"

# Checked in order; a line is classified by the first severity that matches.
SEVERITY_MARKERS: tuple[tuple[IssueSeverity, tuple[str, ...]], ...] = (
    (IssueSeverity.ERROR, ("🔴", "[CRITICAL]")),
    (IssueSeverity.WARNING, ("🟡", "[WARNING]")),
    (IssueSeverity.INFO, ("🔵", "[SUGGESTION]")),
)

_TRUNCATION_MARK = "... (truncated)"


def build_diff_summary(changeset: Changeset, max_patch_chars: int = 2000) -> str:
    """Summarize a changeset: totals, then each file with its truncated patch."""
    lines = [
        f"Files changed: {changeset.total_changed_files}",
        f"Lines added: +{changeset.total_additions}",
        f"Lines removed: -{changeset.total_deletions}",
        "",
    ]

    for f in changeset.files:
        lines.append(f"[{f.status}] {f.filename} (+{f.additions}/-{f.deletions})")
        if f.patch:
            patch = f.patch
            if len(patch) > max_patch_chars:
                patch = f"{patch[:max_patch_chars]}\n{_TRUNCATION_MARK}"
            lines.extend(["```diff", patch, "```"])
        lines.append("")

    return "\n".join(lines)


def _match_file(line: str, changeset: Changeset) -> str:
    lowered = line.lower()
    for f in changeset.files:
        if PurePosixPath(f.filename).name.lower() in lowered:
            return f.filename
    return GENERAL_FILE


def parse_review_issues(text: str, changeset: Changeset) -> list[ReviewIssue]:
    """Scrape severity-tagged findings from review text.

    Each line carrying a marker becomes one issue. The issue's file is the
    first changed file whose base name appears in the line, else
    ``"general"``.
    """
    issues: list[ReviewIssue] = []

    for line in text.splitlines():
        for severity, markers in SEVERITY_MARKERS:
            if not any(marker in line for marker in markers):
                continue

            stripped = line
            for marker in markers:
                stripped = stripped.replace(marker, "")
            stripped = stripped.strip(" \t-*")

            _, sep, tail = stripped.partition(":")
            description = tail.strip() if sep and tail.strip() else stripped

            issues.append(
                ReviewIssue(
                    severity=severity,
                    file=_match_file(stripped, changeset),
                    description=description,
                )
            )
            break

    logger.debug("Parsed %d review issues", len(issues))
    return issues
