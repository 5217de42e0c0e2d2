"""Flag store implementations for the moderation engine."""

from moderation_engine.database.repositories.base import FlagStore
from moderation_engine.database.repositories.flag_store import PostgresFlagStore
from moderation_engine.database.repositories.memory import InMemoryFlagStore

__all__ = [
    "FlagStore",
    "InMemoryFlagStore",
    "PostgresFlagStore",
]
