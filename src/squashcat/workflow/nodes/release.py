"""PublishRelease node - tag a release and finish the pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from squashcat.core.log import logger
from squashcat.core.result import SuccessOutcome
from squashcat.message.compose import release_notes, release_tag
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState


@dataclass
class PublishRelease(BaseNode[PipelineState, PipelineDeps, PipelineOutcome]):
    """Create a release on the target branch when requested."""

    async def run(
        self, ctx: GraphRunContext[PipelineState, PipelineDeps]
    ) -> End[SuccessOutcome]:
        """Create the release, then report success.

        Returns:
            End[SuccessOutcome]: The repository's outcome
        """
        state = ctx.state
        batch = ctx.deps.batch
        client = ctx.deps.client

        if batch.create_release:
            tag = release_tag(ctx.deps.clock())
            tip = client.get_ref_sha(state.repo, batch.target_branch)
            release = client.create_release(
                state.repo,
                tag_name=tag,
                target_commitish=batch.target_branch,
                name=f"Release {tag}",
                body=release_notes(state.comparison.commits),
                draft=False,
                prerelease=False,
            )
            release.target_sha = tip
            state.release = release
            logger.info(f"Created release: {release.tag_name}", sha=tip)

        return End(
            SuccessOutcome(
                repo=state.repo.full_name,
                source_branch=batch.source_branch,
                target_branch=batch.target_branch,
                commits_count=state.comparison.ahead_by,
                merge_commit_sha=state.merge.sha,
                commit_message=state.merge.commit_message,
                source_branch_deleted=batch.delete_source_branch,
                source_branch_deletion_refused=(
                    state.source_branch_deletion_refused
                ),
                source_branch_recreated=state.source_branch_recreated,
                release=state.release,
            )
        )
