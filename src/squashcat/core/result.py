"""Per-repository outcomes and their batch aggregate."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from squashcat.hosting.types import ReleaseInfo


class SuccessOutcome(BaseModel):
    """Repository merged."""

    status: Literal["success"] = "success"
    repo: str
    source_branch: str
    target_branch: str
    commits_count: int
    merge_commit_sha: str
    commit_message: str
    source_branch_deleted: bool = Field(
        default=False,
        description=(
            "Deletion was requested. Stays True when the branch was "
            "protected and nothing was deleted; see "
            "source_branch_deletion_refused."
        ),
    )
    source_branch_deletion_refused: bool = False
    source_branch_recreated: bool = False
    release: ReleaseInfo | None = None


class SkippedOutcome(BaseModel):
    """Nothing to do for this repository."""

    status: Literal["skipped"] = "skipped"
    repo: str
    reason: str


class FailedOutcome(BaseModel):
    """Repository could not be merged."""

    status: Literal["failed"] = "failed"
    repo: str
    error: str
    error_kind: str = "SquashcatError"


RepositoryOutcome = Annotated[
    SuccessOutcome | SkippedOutcome | FailedOutcome,
    Field(discriminator="status"),
]


class Summary(BaseModel):
    """Counts serialized as the merge_summary output."""

    total: int
    successful: int
    failed: int
    skipped: int


class BatchResult(BaseModel):
    """Outcomes of one batch, bucketed in input order."""

    successful: list[SuccessOutcome] = Field(default_factory=list)
    failed: list[FailedOutcome] = Field(default_factory=list)
    skipped: list[SkippedOutcome] = Field(default_factory=list)

    def add(self, outcome: SuccessOutcome | SkippedOutcome | FailedOutcome):
        """File an outcome into its bucket."""
        if isinstance(outcome, SuccessOutcome):
            self.successful.append(outcome)
        elif isinstance(outcome, SkippedOutcome):
            self.skipped.append(outcome)
        elif isinstance(outcome, FailedOutcome):
            self.failed.append(outcome)
        else:
            raise TypeError(f"Not a repository outcome: {outcome!r}")

    @property
    def summary(self) -> Summary:
        successful = len(self.successful)
        failed = len(self.failed)
        skipped = len(self.skipped)
        return Summary(
            total=successful + failed + skipped,
            successful=successful,
            failed=failed,
            skipped=skipped,
        )

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
