# src/logging/context.py - v2
"""Contextual logging support: attach the cache path and key to log records.

Context variables are copied into each asyncio task, so paths processed
concurrently keep their own context.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_cache_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_path", default=None
)
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    cache_path: str | None = None
    cache_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(cache_path=_cache_path.get(), cache_key=_cache_key.get())


@contextmanager
def path_context(cache_path: str, cache_key: str | None = None) -> Iterator[None]:
    """Attach ``cache_path`` and ``cache_key`` to records logged inside the block."""
    path_token = _cache_path.set(cache_path)
    key_token = _cache_key.set(cache_key)
    try:
        yield
    finally:
        _cache_key.reset(key_token)
        _cache_path.reset(path_token)


def clear_context() -> None:
    """Reset all context variables."""
    _cache_path.set(None)
    _cache_key.set(None)
