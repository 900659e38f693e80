"""Repository iterator: run the pipeline for each target in turn."""

from __future__ import annotations

from pydantic_graph import End

from squashcat.core.config import BatchState
from squashcat.core.errors import InvalidRepositoryFormatError
from squashcat.core.log import logger
from squashcat.core.result import (
    BatchResult,
    FailedOutcome,
    SkippedOutcome,
    SuccessOutcome,
)
from squashcat.hosting.types import RepositoryRef
from squashcat.workflow.graph import create_workflow
from squashcat.workflow.nodes import VerifyRepository
from squashcat.workflow.state import PipelineDeps, PipelineOutcome, PipelineState


async def run_repository(
    repo: RepositoryRef, deps: PipelineDeps
) -> PipelineOutcome:
    """Run the merge pipeline for one repository.

    Returns:
        SuccessOutcome or SkippedOutcome

    Raises:
        Exception: Whatever a node raised; the caller turns it into
            a failure
    """
    workflow = create_workflow()
    state = PipelineState(repo=repo)

    async with workflow.iter(VerifyRepository(), state=state, deps=deps) as run:
        async for node in run:
            if isinstance(node, End):
                return node.data

    raise RuntimeError(f"Pipeline for {repo} ended without an outcome")


def failed(repo: str, error: Exception) -> FailedOutcome:
    return FailedOutcome(repo=repo, error=str(error), error_kind=type(error).__name__)


async def run_batch(
    deps: PipelineDeps, state: BatchState | None = None
) -> BatchResult:
    """Process deps.batch.target_repos sequentially.

    A repository that raises is recorded as failed and the loop
    moves on; nothing one repository does can stop the others.

    Args:
        deps: Batch configuration and collaborators
        state: Runtime state to record progress into (optional)

    Returns:
        BatchResult with one outcome per input identifier
    """
    state = state or BatchState()
    state.status = "running"
    result = state.result
    batch = deps.batch

    logger.info(
        f"Starting squash merge: {batch.source_branch} → {batch.target_branch}",
        repos=", ".join(batch.target_repos),
        strategy=deps.strategy.name,
        delete_source_branch=batch.delete_source_branch,
        create_release=batch.create_release,
    )

    for identifier in batch.target_repos:
        state.current_repo = identifier
        repo = RepositoryRef.parse(identifier)
        if repo is None:
            outcome = failed(identifier, InvalidRepositoryFormatError(identifier))
            logger.error(f"Invalid repository format: {identifier}")
            result.add(outcome)
            continue

        with logger.span(f"Processing {identifier}", repo=identifier):
            try:
                outcome = await run_repository(repo, deps)
            except Exception as e:
                outcome = failed(identifier, e)

        result.add(outcome)
        if isinstance(outcome, SuccessOutcome):
            logger.info(f"Successfully processed {identifier}")
        elif isinstance(outcome, SkippedOutcome):
            logger.info(f"Skipped {identifier}: {outcome.reason}")
        else:
            logger.error(
                f"Failed to process {identifier}: {outcome.error}",
                error_kind=outcome.error_kind,
            )

    state.current_repo = None
    state.status = "complete"

    summary = result.summary
    logger.info(
        "Final summary",
        total=summary.total,
        successful=summary.successful,
        failed=summary.failed,
        skipped=summary.skipped,
    )
    return result
