"""Mock objects for testing."""

from .memory_provider import InMemoryThreadProvider

__all__ = ["InMemoryThreadProvider"]
