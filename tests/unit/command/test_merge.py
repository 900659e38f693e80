"""Tests for the merge command: outputs, exit codes, bump hint."""

import asyncio
import json

import pytest

from squashcat.command.bump import BumpCommand
from squashcat.command.merge import MergeCommand
from squashcat.core.actions import ActionOutputs
from squashcat.core.config import State
from squashcat.core.errors import MergeConflictError


@pytest.fixture
def outputs(tmp_path):
    return ActionOutputs(environ={"GITHUB_OUTPUT": str(tmp_path / "output")})


@pytest.fixture
def patched(monkeypatch, github, strategy):
    """Route MergeCommand to the in-memory fakes."""
    import squashcat.hosting.github
    import squashcat.strategy

    class FakeClientFactory:
        def __init__(self, token, base_url, timeout):
            self.token = token

        def __enter__(self):
            return github

        def __exit__(self, *args):
            return False

    monkeypatch.setattr(squashcat.hosting.github, "GitHubClient", FakeClientFactory)
    monkeypatch.setattr(
        squashcat.strategy, "create_strategy", lambda config, client: strategy
    )


def make_state(**batch):
    batch.setdefault("source_branch", "staging")
    batch.setdefault("target_branch", "main")
    return State(config={"github": {"token": "ghs_x"}, "batch": batch})


def run(state, outputs):
    return asyncio.run(MergeCommand().run_workflow(state, outputs))


def test_all_merged(clean_environment, patched, github, commits, outputs):
    github.add("octo/a", ahead=commits(1))
    github.add("octo/b", ahead=commits(1))
    state = make_state(
        target_repos="octo/a,octo/b",
        commit_message_template="minor: merge {source} into {target}",
    )

    assert run(state, outputs) == 0

    assert outputs.values["merged_repos"] == "octo/a,octo/b"
    assert outputs.values["success_count"] == "2"
    assert outputs.values["failed_repos"] == ""
    assert json.loads(outputs.values["merge_summary"]) == {
        "total": 2, "successful": 2, "failed": 0, "skipped": 0
    }
    assert outputs.values["highest_bump_type"] == "minor"
    assert "merged_repos<<ghadelimiter_" in outputs.output_file.read_text()


def test_failure_sets_exit_code_and_annotation(
    clean_environment, patched, github, strategy, commits, outputs, capsys
):
    github.add("octo/a", ahead=commits(1))
    github.add("octo/b", ahead=commits(1))
    strategy.errors["octo/a"] = MergeConflictError()
    state = make_state(target_repos="octo/a,octo/b,bad")

    assert run(state, outputs) == 1

    assert outputs.values["merged_repos"] == "octo/b"
    assert outputs.values["failed_repos"] == "octo/a,bad"
    assert (
        "::error::Failed to merge in repositories: octo/a, bad"
        in capsys.readouterr().out
    )


def test_all_skipped_is_success(clean_environment, patched, github, outputs):
    github.add("octo/a", ahead=[])
    state = make_state(target_repos="octo/a")

    assert run(state, outputs) == 0

    assert outputs.values["success_count"] == "0"
    assert outputs.values["highest_bump_type"] == ""
    assert json.loads(outputs.values["merge_summary"])["skipped"] == 1


def test_missing_settings_fail_before_any_work(
    clean_environment, patched, github, outputs, capsys
):
    state = State(config={"batch": {"target_repos": "octo/a"}})

    assert run(state, outputs) == 1

    assert github.calls == []
    assert outputs.values == {}
    out = capsys.readouterr().out
    assert "::error::GitHub token is required" in out
    assert "Source branch is required" in out


def test_bump_command_prints_highest_label(clean_environment, capsys):
    command = BumpCommand(messages=["patch: a", "major: b", "minor: c"])

    assert asyncio.run(command.run_workflow(State())) == 0

    assert capsys.readouterr().out.strip().splitlines()[-1] == "major"
