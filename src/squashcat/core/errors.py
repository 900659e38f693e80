"""Exception hierarchy for squash-merge batches."""

from __future__ import annotations


class SquashcatError(Exception):
    """Base exception for all squashcat errors."""


class ConfigurationError(SquashcatError):
    """Batch-level configuration is unusable; nothing was processed."""


class InvalidRepositoryFormatError(SquashcatError):
    """A target is not of the form owner/repo."""

    def __init__(self, repo: str) -> None:
        self.repo = repo
        super().__init__("Invalid repository format")


class BranchNotFoundError(SquashcatError):
    """The source or target branch does not exist.

    The pipeline turns this into a skip, never a failure.
    """

    def __init__(self, role: str, branch: str) -> None:
        self.role = role
        self.branch = branch
        super().__init__(f"{role.capitalize()} branch '{branch}' not found")


class MergeConflictError(SquashcatError):
    """The merge needs manual resolution. Never retried."""

    def __init__(
        self, message: str = "Merge conflict detected - manual resolution required"
    ) -> None:
        super().__init__(message)


class NothingToMergeError(SquashcatError):
    """The squash produced no change to commit."""

    def __init__(
        self, message: str = "Nothing to merge - branches are identical"
    ) -> None:
        super().__init__(message)


class GitCommandError(SquashcatError):
    """A git command exited non-zero.

    command, stdout and stderr are already redacted by the Runner.
    """

    def __init__(
        self, command: str, exit_code: int, stdout: str = "", stderr: str = ""
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        detail = (stderr.strip() or stdout.strip()).splitlines()
        reason = detail[-1] if detail else "no output"
        super().__init__(
            f"Command '{command}' failed with exit code {exit_code}: {reason}"
        )


# Substring of git's output -> normalized error. Order matters: the
# first match wins.
GIT_FAILURE_PATTERNS: tuple[tuple[str, type[SquashcatError]], ...] = (
    ("refusing to merge unrelated histories", MergeConflictError),
    ("automatic merge failed", MergeConflictError),
    ("conflict (", MergeConflictError),
    ("nothing to commit", NothingToMergeError),
)


def translate_git_failure(error: GitCommandError) -> SquashcatError:
    """Normalize a failed git command into a named error.

    git reports conflicts and no-op commits only as text, so this is
    the one place that text is inspected.

    Args:
        error: The failed command

    Returns:
        MergeConflictError or NothingToMergeError when the output
        matches GIT_FAILURE_PATTERNS, otherwise error itself
    """
    output = f"{error.stderr}\n{error.stdout}".lower()
    for pattern, error_type in GIT_FAILURE_PATTERNS:
        if pattern in output:
            return error_type()
    return error
