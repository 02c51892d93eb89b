"""Repository layer for fragment metadata and data."""

from fragments.repositories.base import FragmentRepository
from fragments.repositories.memory_repository import MemoryFragmentRepository
from fragments.repositories.sqlite_repository import SqliteFragmentRepository

__all__ = [
    "FragmentRepository",
    "MemoryFragmentRepository",
    "SqliteFragmentRepository",
]
