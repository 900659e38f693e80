"""Local strategy: clone, squash with git, push."""

from __future__ import annotations

import shlex
import tempfile
from pathlib import Path

from invoke import Result

from squashcat.core.config import GitConfig
from squashcat.core.errors import (
    ConfigurationError,
    GitCommandError,
    translate_git_failure,
)
from squashcat.core.log import logger
from squashcat.core.runner import Runner
from squashcat.hosting.types import RepositoryRef
from squashcat.message.compose import convention_message
from squashcat.strategy.base import MergeResult


class LocalSquashStrategy:
    """Squash merge in a throwaway clone.

    Each repository gets its own temporary directory, removed on
    every exit path. Commands run with an explicit cwd; the process
    working directory is left alone.
    """

    def __init__(
        self,
        token: str,
        clone_url: str,
        commands: dict[str, str],
        git: GitConfig,
        runner: Runner | None = None,
        tmp_root: Path | None = None,
    ):
        """
        Args:
            token: Credential substituted into clone_url
            clone_url: Template with {token}, {owner} and {repo}
            commands: git command templates (config.commands.git)
            git: Identity and release file settings
            runner: Command runner (a redacting Runner by default)
            tmp_root: Parent for temporary clones (system default
                when None)
        """
        self.token = token
        self.clone_url = clone_url
        self.commands = commands
        self.git = git
        self.runner = runner or Runner(secrets=[token])
        self.tmp_root = tmp_root

    @property
    def name(self) -> str:
        return "local"

    def perform_squash_merge(
        self,
        repo: RepositoryRef,
        source: str,
        target: str,
        message: str | None,
    ) -> MergeResult:
        url = self.clone_url.format(
            token=self.token, owner=repo.owner, repo=repo.name
        )
        with tempfile.TemporaryDirectory(
            prefix=f"squashcat-{repo.name}-", dir=self.tmp_root
        ) as tmp:
            try:
                return self._squash(Path(tmp), url, source, target, message)
            except GitCommandError as e:
                translated = translate_git_failure(e)
                if translated is e:
                    raise
                raise translated from e

    def _squash(
        self,
        workdir: Path,
        url: str,
        source: str,
        target: str,
        message: str | None,
    ) -> MergeResult:
        logger.info("Cloning repository", workdir=str(workdir))
        self._git("clone", url=url, workdir=workdir)

        self._git("set_user_name", cwd=workdir, name=self.git.user_name)
        self._git("set_user_email", cwd=workdir, email=self.git.user_email)
        self._git("checkout", cwd=workdir, branch=target)
        self._git("fetch", cwd=workdir, branch=source)

        if message is None:
            message = self._read_release_file(workdir, source)

        logger.info(f"Squash merging {source} into {target}")
        self._git("merge_squash", cwd=workdir, branch=source)
        self._git("commit", cwd=workdir, message=message)

        logger.info(f"Pushing {target}")
        self._git("push", cwd=workdir, branch=target)

        sha = self._git("rev_parse", cwd=workdir).stdout.strip()
        return MergeResult(sha=sha, commit_message=message)

    def _read_release_file(self, workdir: Path, source: str) -> str:
        """Commit message from the release file at the source tip."""
        path = self.git.release_file
        result = self._git(
            "show_file", cwd=workdir, check=False, branch=source, path=path
        )
        content = result.stdout if result.exited == 0 else None
        message = convention_message(content, self.git.default_message)
        if content is None or not content.strip():
            logger.warn(
                f"Could not read {path} from {source}; using default "
                f"commit message"
            )
        else:
            logger.info(f"Using commit message from {path}", message=message)
        return message

    def _git(
        self, command: str, cwd: Path | None = None, check: bool = True, **params
    ) -> Result:
        try:
            template = self.commands[command]
        except KeyError:
            raise ConfigurationError(
                f"No git command template named '{command}'"
            ) from None
        quoted = {key: shlex.quote(str(value)) for key, value in params.items()}
        return self.runner.execute(
            template.format(**quoted),
            cwd=cwd,
            timeout=self.git.timeout,
            check=check,
        )
