"""Core storage - state persistence backends."""

from core.storage.backends import (
    StateBackend,
    InMemoryStateBackend,
    FileStateBackend,
)

__all__ = [
    "StateBackend",
    "InMemoryStateBackend",
    "FileStateBackend",
]
