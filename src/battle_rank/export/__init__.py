"""
Output materialization: document shapes and JSON file persistence.
"""

from .writer import (
    EntityStore,
    JsonDirectoryStore,
    OutputBundle,
    PersistenceError,
    entity_filename,
    load_leaderboard,
    materialize,
)

__all__ = [
    "EntityStore",
    "JsonDirectoryStore",
    "OutputBundle",
    "PersistenceError",
    "entity_filename",
    "load_leaderboard",
    "materialize",
]
