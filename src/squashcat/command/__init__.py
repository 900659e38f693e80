"""CLI command modules for squashcat."""

from squashcat.command.bump import BumpCommand
from squashcat.command.merge import MergeCommand

__all__ = ["BumpCommand", "MergeCommand"]
