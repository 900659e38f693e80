"""Bump command - classify commit messages offline."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from pydantic_settings import CliPositionalArg

from squashcat.message.bump import classify, highest

if TYPE_CHECKING:
    from squashcat.core.config import State


class BumpCommand(BaseModel):
    """Print the highest version-bump hint found in the given commit
    messages (major, minor, patch, or an empty line)."""

    messages: CliPositionalArg[list[str]] = Field(
        description="Commit messages to classify",
    )

    async def run_workflow(self, state: State) -> int:  # noqa: ARG002
        hint = highest(classify(message) for message in self.messages)
        print(hint.label, flush=True)
        return 0
