"""Test fixtures for in-memory implementations."""

from .in_memory_storage import (
    InMemoryKeyValueStore,
    InMemorySubscription,
    UnavailableKeyValueStore,
)
from .in_memory_repositories import InMemoryTransactionRepository

__all__ = [
    "InMemoryKeyValueStore",
    "InMemorySubscription",
    "InMemoryTransactionRepository",
    "UnavailableKeyValueStore",
]
