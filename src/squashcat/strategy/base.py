"""Base merge strategy interface."""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol

from squashcat.hosting.types import RepositoryRef


@dataclass
class MergeResult:
    """Commit produced by a squash merge."""

    sha: str
    commit_message: str


class MergeStrategy(Protocol):
    """Protocol for squash-merge strategies.

    A strategy turns every commit on source that target lacks into
    one commit on target, and pushes it.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name (local, hosted)."""

    @abstractmethod
    def perform_squash_merge(
        self,
        repo: RepositoryRef,
        source: str,
        target: str,
        message: str | None,
    ) -> MergeResult:
        """Squash source into target.

        Args:
            repo: Repository to merge in
            source: Branch whose changes are squashed
            target: Branch receiving the squash commit
            message: Commit message, or None to read it from the
                release file on source

        Returns:
            MergeResult with the new commit SHA and its message

        Raises:
            MergeConflictError: If the merge needs manual resolution
            NothingToMergeError: If the squash changes nothing
        """
