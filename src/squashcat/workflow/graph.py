"""Graph workflow definition."""

from pydantic_graph import Graph

from squashcat.core.log import logger
from squashcat.workflow.state import PipelineState


def create_workflow():
    """Create the per-repository merge graph.

    VerifyRepository → CompareBranches → SquashMerge →
        CleanupSourceBranch → PublishRelease → End

    The first two nodes may end early with a skip.

    Returns:
        Graph workflow with PipelineState as state_type
    """
    logger.spew("Building workflow graph")

    from squashcat.workflow.nodes import (
        CleanupSourceBranch,
        CompareBranches,
        PublishRelease,
        SquashMerge,
        VerifyRepository,
    )

    return Graph(
        nodes=(
            VerifyRepository,
            CompareBranches,
            SquashMerge,
            CleanupSourceBranch,
            PublishRelease,
        ),
        state_type=PipelineState,
    )
