"""Squash-merge strategy implementations."""

from squashcat.core.config import Config
from squashcat.hosting.github import GitHubClient
from squashcat.strategy.base import MergeResult, MergeStrategy
from squashcat.strategy.hosted import HostedSquashStrategy
from squashcat.strategy.local import LocalSquashStrategy


def create_strategy(config: Config, client: GitHubClient) -> MergeStrategy:
    """Build the strategy named by config.batch.merge_strategy."""
    if config.batch.merge_strategy == "hosted":
        return HostedSquashStrategy(client, config.git)
    return LocalSquashStrategy(
        token=config.github.token or "",
        clone_url=config.github.clone_url,
        commands=config.commands.get("git", {}),
        git=config.git,
    )


__all__ = [
    "MergeResult",
    "MergeStrategy",
    "LocalSquashStrategy",
    "HostedSquashStrategy",
    "create_strategy",
]
