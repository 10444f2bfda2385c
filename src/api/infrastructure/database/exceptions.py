"""Persistence exceptions shared by the registry and tenant databases.

These are raised in place of driver and SQLAlchemy errors so callers can
tell a retryable outage from a constraint violation without knowing which
database backend a tenant runs on.
"""


class PersistenceError(Exception):
    """Base exception for persistence operations."""

    pass


class PersistenceUnavailableError(PersistenceError):
    """Raised when a database cannot be reached or the connection was lost.

    Callers may retry the whole operation; nothing in this layer retries.
    """

    pass


class PersistenceConflictError(PersistenceError):
    """Raised when a commit violates a constraint. Never retried."""

    pass
