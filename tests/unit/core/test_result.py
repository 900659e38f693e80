"""Tests for repository outcomes and the batch summary."""

import pytest
from pydantic import TypeAdapter

from squashcat.core.result import (
    BatchResult,
    FailedOutcome,
    RepositoryOutcome,
    SkippedOutcome,
    SuccessOutcome,
)


def success(repo: str) -> SuccessOutcome:
    return SuccessOutcome(
        repo=repo,
        source_branch="staging",
        target_branch="main",
        commits_count=2,
        merge_commit_sha="f" * 40,
        commit_message="chore: squash merge",
    )


class TestBatchResult:
    def test_buckets_keep_input_order(self):
        result = BatchResult()
        result.add(success("o/a"))
        result.add(FailedOutcome(repo="o/b", error="boom"))
        result.add(success("o/c"))
        result.add(SkippedOutcome(repo="o/d", reason="No changes"))

        assert [o.repo for o in result.successful] == ["o/a", "o/c"]
        assert [o.repo for o in result.failed] == ["o/b"]
        assert [o.repo for o in result.skipped] == ["o/d"]

    def test_summary_counts_add_up(self):
        result = BatchResult()
        for outcome in (
            success("o/a"),
            FailedOutcome(repo="o/b", error="boom"),
            SkippedOutcome(repo="o/c", reason="No changes"),
            SkippedOutcome(repo="o/d", reason="No changes"),
        ):
            result.add(outcome)

        summary = result.summary
        assert summary.model_dump() == {
            "total": 4,
            "successful": 1,
            "failed": 1,
            "skipped": 2,
        }
        assert summary.total == (
            summary.successful + summary.failed + summary.skipped
        )
        assert result.has_failures

    def test_empty(self):
        result = BatchResult()
        assert result.summary.total == 0
        assert not result.has_failures

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            BatchResult().add("o/a")


def test_outcomes_discriminated_by_status():
    adapter = TypeAdapter(RepositoryOutcome)
    outcome = adapter.validate_python(
        {"status": "skipped", "repo": "o/a", "reason": "No changes"}
    )
    assert isinstance(outcome, SkippedOutcome)

    outcome = adapter.validate_python(
        {"status": "failed", "repo": "o/a", "error": "boom"}
    )
    assert isinstance(outcome, FailedOutcome)
    assert outcome.error_kind == "SquashcatError"


def test_success_defaults():
    outcome = success("o/a")
    assert outcome.status == "success"
    assert outcome.source_branch_deleted is False
    assert outcome.source_branch_deletion_refused is False
    assert outcome.source_branch_recreated is False
    assert outcome.release is None
