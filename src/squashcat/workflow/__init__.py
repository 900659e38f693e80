"""Per-repository merge pipeline and the batch loop around it."""

from squashcat.workflow.batch import run_batch, run_repository
from squashcat.workflow.state import PipelineDeps, PipelineState

__all__ = ["run_batch", "run_repository", "PipelineDeps", "PipelineState"]
