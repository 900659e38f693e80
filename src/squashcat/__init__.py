"""Squash-merge a branch across many repositories."""

__version__ = "0.1.0"
