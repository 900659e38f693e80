"""SquashMerge node - compose the message and run the strategy."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from squashcat.core.log import logger
from squashcat.message.compose import compose_commit_message
from squashcat.workflow.nodes.cleanup import CleanupSourceBranch
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState


@dataclass
class SquashMerge(BaseNode[PipelineState, PipelineDeps, PipelineOutcome]):
    """Squash the source branch into the target branch."""

    async def run(
        self, ctx: GraphRunContext[PipelineState, PipelineDeps]
    ) -> CleanupSourceBranch:
        """Perform the squash merge with the configured strategy.

        With a template the message is composed here; without one the
        strategy reads it from the release file.

        Raises:
            MergeConflictError: If the merge needs manual resolution
            NothingToMergeError: If the squash changes nothing
        """
        state = ctx.state
        batch = ctx.deps.batch
        strategy = ctx.deps.strategy

        message = None
        if batch.commit_message_template:
            message = compose_commit_message(
                batch.commit_message_template,
                batch.source_branch,
                batch.target_branch,
                state.comparison.commits,
                total=state.comparison.ahead_by,
            )

        state.merge = strategy.perform_squash_merge(
            state.repo, batch.source_branch, batch.target_branch, message
        )
        logger.info(
            "Squash merge completed",
            strategy=strategy.name,
            sha=state.merge.sha,
        )
        return CleanupSourceBranch()
