"""Merge command - runs the batch and publishes its outputs."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import BaseModel

from squashcat.core.actions import ActionOutputs
from squashcat.core.errors import ConfigurationError
from squashcat.core.log import logger
from squashcat.core.result import BatchResult
from squashcat.message.bump import BumpHint, classify, highest

if TYPE_CHECKING:
    from squashcat.core.config import State


def bump_hint_for(result: BatchResult) -> BumpHint:
    """Highest bump hint over the successful repositories' messages."""
    hints = []
    for outcome in result.successful:
        if not outcome.commit_message:
            continue
        hint = classify(outcome.commit_message)
        logger.info(
            f"Detected bump type: {hint.label or 'none'}",
            repo=outcome.repo,
            message=outcome.commit_message,
        )
        hints.append(hint)
    return highest(hints)


def publish_outputs(
    result: BatchResult, hint: BumpHint, outputs: ActionOutputs
) -> None:
    outputs.set_output(
        "merged_repos", ",".join(o.repo for o in result.successful)
    )
    outputs.set_output("success_count", len(result.successful))
    outputs.set_output("failed_repos", ",".join(o.repo for o in result.failed))
    outputs.set_output(
        "merge_summary", json.dumps(result.summary.model_dump())
    )
    outputs.set_output("highest_bump_type", hint.label)


class MergeCommand(BaseModel):
    """Squash-merge the source branch into the target branch of every
    target repository.

    Repositories are processed one at a time; a failing repository
    never stops the others. The run fails only when at least one
    repository failed.
    """

    async def run_workflow(
        self, state: State, outputs: ActionOutputs | None = None
    ) -> int:
        """Run the batch.

        Args:
            state: State with configuration loaded
            outputs: Output writer (GITHUB_OUTPUT from the
                environment by default)

        Returns:
            Exit code (0=success, 1=failure)
        """
        from squashcat.hosting.github import GitHubClient
        from squashcat.strategy import create_strategy
        from squashcat.workflow import PipelineDeps, run_batch

        outputs = outputs or ActionOutputs()
        config = state.config

        try:
            config.check_runnable()
        except ConfigurationError as e:
            outputs.set_failed(str(e))
            return 1

        with GitHubClient(
            config.github.token,
            base_url=config.github.api_url,
            timeout=config.github.timeout,
        ) as client:
            deps = PipelineDeps(
                batch=config.batch,
                client=client,
                strategy=create_strategy(config, client),
            )
            result = await run_batch(deps, state.runtime.batch)

        hint = bump_hint_for(result)
        logger.info(f"Final highest bump type: {hint.label or 'none'}")
        publish_outputs(result, hint, outputs)

        if result.has_failures:
            failed_repos = ", ".join(o.repo for o in result.failed)
            outputs.set_failed(f"Failed to merge in repositories: {failed_repos}")
            return 1

        if not result.successful and result.skipped:
            logger.info("All repositories were skipped - no merges needed")

        logger.info("Squash merge operation completed successfully")
        return 0
