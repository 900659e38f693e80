"""Squash commit messages, release notes and release tags."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from squashcat.hosting.types import CommitInfo

MAX_LISTED_COMMITS = 10
MAX_SUBJECT_LENGTH = 60


def render_template(template: str, source: str, target: str) -> str:
    """Fill {source} and {target} in a commit message template.

    Only the first occurrence of each placeholder is replaced.
    """
    return template.replace("{source}", source, 1).replace("{target}", target, 1)


def commit_trailer(
    commits: Sequence[CommitInfo], total: int | None = None
) -> str:
    """List the squashed commits, at most MAX_LISTED_COMMITS of them.

    total is the real number of commits when commits is a truncated
    page (the compare API lists at most 250); defaults to len(commits).
    """
    total = len(commits) if total is None else total
    lines = [f"Merged {total} commits:"]
    for commit in commits[:MAX_LISTED_COMMITS]:
        subject = commit.first_line[:MAX_SUBJECT_LENGTH]
        lines.append(f"- {commit.short_sha}: {subject}")
    if total > MAX_LISTED_COMMITS:
        lines.append(f"... and {total - MAX_LISTED_COMMITS} more commits")
    return "\n".join(lines)


def compose_commit_message(
    template: str,
    source: str,
    target: str,
    commits: Sequence[CommitInfo],
    total: int | None = None,
) -> str:
    """Commit message for template mode.

    Example:
        >>> compose_commit_message(
        ...     "Merge {source} into {target}", "staging", "main",
        ...     [CommitInfo("0123456789ab", "fix: typo")])
        'Merge staging into main\\n\\nMerged 1 commits:\\n- 01234567: fix: typo'
    """
    header = render_template(template, source, target)
    return f"{header}\n\n{commit_trailer(commits, total)}"


def release_notes(commits: Sequence[CommitInfo]) -> str:
    """Markdown body for a release, one bullet per commit."""
    notes = "## Changes\n\n"
    for commit in commits:
        notes += f"- {commit.first_line} ({commit.short_sha})\n"
    return notes


def release_tag(now: datetime | None = None) -> str:
    """Time-based tag such as release-20250301-141502 (UTC)."""
    now = now or datetime.now(UTC)
    return f"release-{now.astimezone(UTC):%Y%m%d-%H%M%S}"


def convention_message(content: str | None, default: str) -> str:
    """Commit message from a convention file's content.

    Whitespace is trimmed; a missing or blank file yields default.
    """
    message = (content or "").strip()
    return message or default
