"""CompareBranches node - find the commits to squash."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from squashcat.core.log import logger
from squashcat.core.result import SkippedOutcome
from squashcat.workflow.nodes.squash import SquashMerge
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState

NO_CHANGES_REASON = "No changes to merge - branches are identical"


@dataclass
class CompareBranches(BaseNode[PipelineState, PipelineDeps, PipelineOutcome]):
    """Compare target...source and stop when source adds nothing."""

    async def run(
        self, ctx: GraphRunContext[PipelineState, PipelineDeps]
    ) -> SquashMerge | End[SkippedOutcome]:
        state = ctx.state
        batch = ctx.deps.batch

        comparison = ctx.deps.client.compare(
            state.repo, base=batch.target_branch, head=batch.source_branch
        )
        if comparison.ahead_by == 0:
            return End(
                SkippedOutcome(repo=state.repo.full_name, reason=NO_CHANGES_REASON)
            )

        state.comparison = comparison
        logger.info(f"Found {comparison.ahead_by} commits to merge")
        return SquashMerge()
