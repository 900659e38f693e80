"""State and dependencies of one repository's pipeline run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from squashcat.core.config import BatchConfig
from squashcat.core.result import SkippedOutcome, SuccessOutcome
from squashcat.hosting.github import GitHubClient
from squashcat.hosting.types import Comparison, ReleaseInfo, RepositoryRef
from squashcat.strategy.base import MergeResult, MergeStrategy

# A pipeline run ends in one of these; failures are raised instead
PipelineOutcome = SuccessOutcome | SkippedOutcome


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class PipelineState:
    """Mutable state for a single repository.

    A fresh instance is created per repository; nothing carries over
    to the next one.
    """

    repo: RepositoryRef
    comparison: Comparison | None = None
    merge: MergeResult | None = None
    source_branch_deletion_refused: bool = False
    source_branch_recreated: bool = False
    release: ReleaseInfo | None = None


@dataclass
class PipelineDeps:
    """Collaborators shared by every repository in a batch."""

    batch: BatchConfig
    client: GitHubClient
    strategy: MergeStrategy
    clock: Callable[[], datetime] = field(default=utc_now)
