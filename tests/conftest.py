"""Pytest configuration and fixtures for squashcat tests."""

import sys
import tempfile
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from squashcat.core.config import BatchConfig
from squashcat.core.log import ConsoleSink, setup_logger
from squashcat.hosting.exceptions import NotFoundError
from squashcat.hosting.types import CommitInfo, Comparison, ReleaseInfo
from squashcat.strategy.base import MergeResult
from squashcat.workflow.state import PipelineDeps

FIXED_NOW = datetime(2025, 3, 1, 14, 15, 2, tzinfo=UTC)


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only mode during tests.

    This enables debug output during test runs without requiring
    authentication or sending logs to logfire.dev.
    """
    test_log_root = Path(tempfile.gettempdir()) / "squashcat-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
        instrument_httpx=False,
    )


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Isolate settings loading from the host.

    Runs in an empty directory with no action inputs, no SQUASHCAT_*
    variables and a plain argv.
    """
    import os

    for key in list(os.environ):
        if key.startswith(("INPUT_", "SQUASHCAT_")) or key == "GITHUB_OUTPUT":
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "argv", ["squashcat"])
    return tmp_path


# ============================================================
# In-memory hosting fakes
# ============================================================

@dataclass
class FakeRepository:
    """Branches (name -> tip SHA) and the commits source is ahead by."""

    branches: dict[str, str] = field(
        default_factory=lambda: {"main": "a" * 40, "staging": "b" * 40}
    )
    ahead: list[CommitInfo] = field(default_factory=list)
    # Set when the API lists fewer commits than the branch is ahead by
    ahead_by: int | None = None
    error: Exception | None = None


class FakeGitHub:
    """Stands in for GitHubClient; records every call."""

    def __init__(self):
        self.repos: dict[str, FakeRepository] = {}
        self.calls: list[tuple] = []
        self.releases: list[dict] = []

    def add(self, full_name: str, **kwargs) -> FakeRepository:
        repo = FakeRepository(**kwargs)
        self.repos[full_name] = repo
        return repo

    def _repo(self, repo) -> FakeRepository:
        try:
            return self.repos[repo.full_name]
        except KeyError:
            raise NotFoundError(404, "Not Found") from None

    def get_repository(self, repo):
        self.calls.append(("get_repository", repo.full_name))
        fake = self._repo(repo)
        if fake.error:
            raise fake.error
        return {"full_name": repo.full_name}

    def get_branch_sha(self, repo, branch):
        self.calls.append(("get_branch_sha", repo.full_name, branch))
        fake = self._repo(repo)
        if branch not in fake.branches:
            raise NotFoundError(404, "Branch not found")
        return fake.branches[branch]

    get_ref_sha = get_branch_sha

    def create_ref(self, repo, branch, sha):
        self.calls.append(("create_ref", repo.full_name, branch, sha))
        self._repo(repo).branches[branch] = sha

    def delete_ref(self, repo, branch):
        self.calls.append(("delete_ref", repo.full_name, branch))
        fake = self._repo(repo)
        if branch not in fake.branches:
            raise NotFoundError(404, "Reference does not exist")
        del fake.branches[branch]

    def compare(self, repo, base, head):
        self.calls.append(("compare", repo.full_name, base, head))
        fake = self._repo(repo)
        ahead_by = len(fake.ahead) if fake.ahead_by is None else fake.ahead_by
        return Comparison(ahead_by=ahead_by, commits=list(fake.ahead))

    def create_release(self, repo, tag_name, target_commitish, name, body,
                       draft=False, prerelease=False):
        self.calls.append(("create_release", repo.full_name, tag_name))
        self.releases.append({
            "repo": repo.full_name,
            "tag_name": tag_name,
            "target_commitish": target_commitish,
            "name": name,
            "body": body,
        })
        return ReleaseInfo(
            id=len(self.releases),
            tag_name=tag_name,
            name=name,
            target_commitish=target_commitish,
        )

    def called(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]


class FakeStrategy:
    """Squash strategy that moves the target tip in a FakeGitHub."""

    name = "fake"

    def __init__(self, client: FakeGitHub):
        self.client = client
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple] = []

    def perform_squash_merge(self, repo, source, target, message):
        self.calls.append((repo.full_name, source, target, message))
        if repo.full_name in self.errors:
            raise self.errors[repo.full_name]
        sha = f"squash-{repo.name}".ljust(40, "0")
        self.client.repos[repo.full_name].branches[target] = sha
        return MergeResult(
            sha=sha, commit_message=message or "chore: squash merge"
        )


def make_commits(count: int) -> list[CommitInfo]:
    return [
        CommitInfo(sha=f"{i:02d}".ljust(40, "c"), message=f"fix: change {i}")
        for i in range(count)
    ]


@pytest.fixture
def commits():
    """Factory for CommitInfo lists: commits(3)."""
    return make_commits


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def strategy(github):
    return FakeStrategy(github)


@pytest.fixture
def make_deps(github, strategy):
    """Build PipelineDeps around the fakes with a fixed clock."""

    def _make(**batch):
        batch.setdefault("source_branch", "staging")
        batch.setdefault("target_branch", "main")
        return PipelineDeps(
            batch=BatchConfig(**batch),
            client=github,
            strategy=strategy,
            clock=lambda: FIXED_NOW,
        )

    return _make
