"""Hosting platform collaborators."""

from squashcat.hosting.github import GitHubClient
from squashcat.hosting.types import (
    CommitInfo,
    Comparison,
    ReleaseInfo,
    RepositoryRef,
)

__all__ = [
    "GitHubClient",
    "CommitInfo",
    "Comparison",
    "ReleaseInfo",
    "RepositoryRef",
]
