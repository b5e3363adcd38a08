"""In-process implementations of the store protocols."""

from rateboard.infrastructure.memory.activity_repository_memory import InMemoryActivityRepository
from rateboard.infrastructure.memory.rate_store_memory import InMemoryRateStore

__all__ = ["InMemoryActivityRepository", "InMemoryRateStore"]
