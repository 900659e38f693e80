#!/usr/bin/env python3
"""squashcat CLI - squash-merge a branch across many repositories."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from squashcat.command.bump import BumpCommand
from squashcat.command.merge import MergeCommand
from squashcat.core.config import State
from squashcat.core.log import logger


class CliState(State):
    """Squash-merge a source branch into a target branch across a list
    of repositories, optionally deleting the source branch and
    creating a release in each.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.batch.source_branch staging)
    2. GitHub Actions inputs (INPUT_SOURCE_BRANCH=staging)
    3. squashcat.yaml in the current directory, user config, --include
    4. .env file for secrets
    5. Environment variables
       (SQUASHCAT_CONFIG__BATCH__SOURCE_BRANCH=staging)
    """

    merge: CliSubCommand[MergeCommand]
    bump: CliSubCommand[BumpCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Leaving the block closes the log sinks, flushing the file log
        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            logger.debug(f"Exiting with code {exit_code}")
            raise SystemExit(exit_code)


def main():
    """Console script entry point."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
