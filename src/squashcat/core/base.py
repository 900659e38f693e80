"""Base classes for configuration and runtime models.

Kept in their own module so that config.py and log.py can both
depend on them without importing each other.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Anything with a close() method."""

    def close(self) -> None:
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its closeable fields on close().

    The cascade runs Config → Logger → Sink, so leaving a
    ``with config:`` block flushes and closes every log sink even
    when the batch raised.
    """

    def close(self):
        """Close every field that implements Closeable.

        A failing child is reported on stderr and the remaining
        children are still closed.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: Error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections (YAML/env/CLI)."""


class BaseState(BaseCloseable):
    """Marker base for runtime sections mutated during a batch."""


__all__ = ["Closeable", "BaseCloseable", "BaseConfig", "BaseState"]
