"""Commit message composition and bump classification."""

from squashcat.message.bump import BumpHint, classify, highest, highest_for_messages
from squashcat.message.compose import (
    compose_commit_message,
    convention_message,
    release_notes,
    release_tag,
)

__all__ = [
    "BumpHint",
    "classify",
    "highest",
    "highest_for_messages",
    "compose_commit_message",
    "convention_message",
    "release_notes",
    "release_tag",
]
