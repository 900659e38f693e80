"""Hosted strategy: squash through the REST API, no clone."""

from __future__ import annotations

import uuid

from squashcat.core.config import GitConfig
from squashcat.core.errors import MergeConflictError, NothingToMergeError
from squashcat.core.log import logger
from squashcat.hosting.exceptions import ConflictError, HostingError, NotFoundError
from squashcat.hosting.github import GitHubClient
from squashcat.hosting.types import RepositoryRef
from squashcat.message.compose import convention_message
from squashcat.strategy.base import MergeResult


class HostedSquashStrategy:
    """Squash merge using only API calls.

    The platform merges source into a scratch branch cut from target;
    the merged tree is then committed onto target with a single
    parent, which is what a squash is. The target ref is
    fast-forwarded, so a concurrent push to target fails the
    repository instead of being overwritten.
    """

    def __init__(self, client: GitHubClient, git: GitConfig):
        self.client = client
        self.git = git

    @property
    def name(self) -> str:
        return "hosted"

    def perform_squash_merge(
        self,
        repo: RepositoryRef,
        source: str,
        target: str,
        message: str | None,
    ) -> MergeResult:
        if message is None:
            message = self._read_release_file(repo, source)

        target_sha = self.client.get_ref_sha(repo, target)
        scratch = f"squashcat/{target}-{uuid.uuid4().hex[:8]}"
        self.client.create_ref(repo, scratch, target_sha)
        logger.debug(f"Created scratch branch {scratch}", sha=target_sha)

        try:
            try:
                merged_sha = self.client.merge(
                    repo,
                    base=scratch,
                    head=source,
                    commit_message=f"Merge {source} into {scratch}",
                )
            except ConflictError as e:
                raise MergeConflictError() from e
            if merged_sha is None:
                raise NothingToMergeError()

            tree = self.client.get_tree_sha(repo, merged_sha)
            if tree == self.client.get_tree_sha(repo, target_sha):
                raise NothingToMergeError()

            sha = self.client.create_commit(repo, message, tree, [target_sha])
            self.client.update_ref(repo, target, sha)
        finally:
            try:
                self.client.delete_ref(repo, scratch)
            except HostingError as e:
                logger.warn(f"Could not delete scratch branch {scratch}: {e}")

        return MergeResult(sha=sha, commit_message=message)

    def _read_release_file(self, repo: RepositoryRef, source: str) -> str:
        path = self.git.release_file
        try:
            content = self.client.get_file_text(repo, path, ref=source)
        except NotFoundError:
            content = None
        if content is None or not content.strip():
            logger.warn(
                f"Could not read {path} from {source}; using default "
                f"commit message"
            )
        return convention_message(content, self.git.default_message)
