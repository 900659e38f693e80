"""Version-bump hints inferred from commit messages."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum


class BumpHint(IntEnum):
    """Severity-ordered hint: NONE < PATCH < MINOR < MAJOR."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    @property
    def label(self) -> str:
        """Output value; empty for NONE."""
        return "" if self is BumpHint.NONE else self.name.lower()


# Checked in order, most severe first
_KEYWORDS = (
    ("major", BumpHint.MAJOR),
    ("minor", BumpHint.MINOR),
    ("patch", BumpHint.PATCH),
)


def classify(message: str) -> BumpHint:
    """Classify one commit message.

    A keyword anywhere in the lower-cased message counts, which
    already covers the "major:" prefix form.
    """
    text = message.lower().strip()
    for keyword, hint in _KEYWORDS:
        if keyword in text:
            return hint
    return BumpHint.NONE


def highest(hints: Iterable[BumpHint]) -> BumpHint:
    """Most severe hint; NONE for an empty input."""
    return max(hints, default=BumpHint.NONE)


def highest_for_messages(messages: Iterable[str]) -> BumpHint:
    return highest(classify(message) for message in messages if message)
