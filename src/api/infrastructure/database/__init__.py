"""Database infrastructure - engines, sessions and shared model primitives."""

from infrastructure.database.exceptions import (
    PersistenceConflictError,
    PersistenceError,
    PersistenceUnavailableError,
)

__all__ = [
    "PersistenceConflictError",
    "PersistenceError",
    "PersistenceUnavailableError",
]
