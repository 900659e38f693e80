"""Tests for the batch loop over target repositories."""

import asyncio
import os

from squashcat.core.config import BatchState
from squashcat.core.errors import MergeConflictError
from squashcat.hosting.exceptions import AuthenticationError
from squashcat.workflow import run_batch


def run(deps, state=None):
    return asyncio.run(run_batch(deps, state))


def test_failure_in_one_repository_does_not_stop_the_others(
    github, strategy, make_deps, commits
):
    github.add("octo/a", ahead=commits(1))
    github.add("octo/b", ahead=commits(2))
    github.add("octo/c", ahead=commits(3))
    strategy.errors["octo/b"] = MergeConflictError()
    cwd_before = os.getcwd()

    result = run(make_deps(target_repos=["octo/a", "octo/b", "octo/c"]))

    assert [o.repo for o in result.successful] == ["octo/a", "octo/c"]
    assert [o.commits_count for o in result.successful] == [1, 3]
    assert len(result.failed) == 1
    failure = result.failed[0]
    assert failure.repo == "octo/b"
    assert failure.error == "Merge conflict detected - manual resolution required"
    assert failure.error_kind == "MergeConflictError"
    assert os.getcwd() == cwd_before


def test_invalid_identifiers_fail_without_api_calls(github, make_deps, commits):
    github.add("octo/a", ahead=commits(1))

    result = run(
        make_deps(target_repos=["just-a-name", "octo/a", "a/b/c", "/x", "y/"])
    )

    assert [o.repo for o in result.successful] == ["octo/a"]
    assert [(o.repo, o.error) for o in result.failed] == [
        ("just-a-name", "Invalid repository format"),
        ("a/b/c", "Invalid repository format"),
        ("/x", "Invalid repository format"),
        ("y/", "Invalid repository format"),
    ]
    assert {call[1] for call in github.calls} == {"octo/a"}


def test_unknown_repository_fails(github, make_deps):
    result = run(make_deps(target_repos=["octo/missing"]))

    assert result.failed[0].error == "[HTTP 404] Not Found"
    assert result.failed[0].error_kind == "NotFoundError"


def test_mixed_outcomes_summary(github, strategy, make_deps, commits):
    github.add("octo/merged", ahead=commits(1))
    github.add("octo/same", ahead=[])
    github.add("octo/nosource", branches={"main": "a" * 40})
    github.add("octo/denied", error=AuthenticationError(401, "Bad credentials"))

    result = run(
        make_deps(
            target_repos=[
                "octo/merged", "octo/same", "octo/nosource", "octo/denied", "bad"
            ]
        )
    )

    summary = result.summary
    assert summary.model_dump() == {
        "total": 5, "successful": 1, "failed": 2, "skipped": 2
    }
    assert [o.reason for o in result.skipped] == [
        "No changes to merge - branches are identical",
        "Source branch 'staging' not found",
    ]


def test_duplicates_are_processed_twice(github, strategy, make_deps, commits):
    github.add("octo/a", ahead=commits(1))

    result = run(make_deps(target_repos=["octo/a", "octo/a"]))

    assert len(strategy.calls) == 2
    assert result.summary.total == 2


def test_progress_recorded_in_state(github, make_deps, commits):
    github.add("octo/a", ahead=commits(1))
    state = BatchState()

    result = run(make_deps(target_repos=["octo/a"]), state)

    assert result is state.result
    assert state.status == "complete"
    assert state.current_repo is None


def test_empty_batch(make_deps):
    result = run(make_deps(target_repos=[]))
    assert result.summary.total == 0
