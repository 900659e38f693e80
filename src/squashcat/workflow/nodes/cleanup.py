"""CleanupSourceBranch node - delete and recreate the source branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from squashcat.core.config import PROTECTED_BRANCHES
from squashcat.core.log import logger
from squashcat.workflow.nodes.release import PublishRelease
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState


@dataclass
class CleanupSourceBranch(BaseNode[PipelineState, PipelineDeps, PipelineOutcome]):
    """Delete the merged source branch when requested.

    main and master are never deleted; asking for it only logs a
    warning. After a deletion the branch can be recreated at the new
    target tip so it exists again for the next release cycle.
    """

    async def run(
        self, ctx: GraphRunContext[PipelineState, PipelineDeps]
    ) -> PublishRelease:
        state = ctx.state
        batch = ctx.deps.batch
        client = ctx.deps.client
        source = batch.source_branch

        if not batch.delete_source_branch:
            return PublishRelease()

        if source in PROTECTED_BRANCHES:
            logger.warn(f"Refusing to delete protected branch '{source}'")
            state.source_branch_deletion_refused = True
            return PublishRelease()

        client.delete_ref(state.repo, source)
        logger.info(f"Deleted source branch '{source}'")

        if batch.recreate_source_branch:
            sha = client.get_ref_sha(state.repo, batch.target_branch)
            client.create_ref(state.repo, source, sha)
            state.source_branch_recreated = True
            logger.info(
                f"Recreated '{source}' from '{batch.target_branch}'", sha=sha
            )

        return PublishRelease()
