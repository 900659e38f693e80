"""Pipeline nodes, in execution order."""

from squashcat.workflow.nodes.cleanup import CleanupSourceBranch
from squashcat.workflow.nodes.compare import CompareBranches
from squashcat.workflow.nodes.release import PublishRelease
from squashcat.workflow.nodes.squash import SquashMerge
from squashcat.workflow.nodes.verify import VerifyRepository

__all__ = [
    "VerifyRepository",
    "CompareBranches",
    "SquashMerge",
    "CleanupSourceBranch",
    "PublishRelease",
]
