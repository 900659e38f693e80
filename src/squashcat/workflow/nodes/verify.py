"""VerifyRepository node - check the repository and both branches."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from squashcat.core.errors import BranchNotFoundError
from squashcat.core.log import logger
from squashcat.core.result import SkippedOutcome
from squashcat.hosting.exceptions import NotFoundError
from squashcat.workflow.nodes.compare import CompareBranches
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState


@dataclass
class VerifyRepository(BaseNode[PipelineState, PipelineDeps, PipelineOutcome]):
    """Make sure the repository is reachable and both branches exist."""

    async def run(
        self, ctx: GraphRunContext[PipelineState, PipelineDeps]
    ) -> CompareBranches | End[SkippedOutcome]:
        """Verify access, then each branch.

        An inaccessible repository raises (the repository fails); a
        missing branch skips it.

        Returns:
            CompareBranches, or End with a skip naming the missing
            branch
        """
        state = ctx.state
        batch = ctx.deps.batch
        client = ctx.deps.client

        client.get_repository(state.repo)

        for role, branch in (
            ("source", batch.source_branch),
            ("target", batch.target_branch),
        ):
            try:
                client.get_branch_sha(state.repo, branch)
            except NotFoundError:
                missing = BranchNotFoundError(role, branch)
                logger.warn(str(missing), repo=state.repo.full_name)
                return End(
                    SkippedOutcome(repo=state.repo.full_name, reason=str(missing))
                )

        return CompareBranches()
