"""Exceptions for the identity bounded context."""


class UserNotFoundError(Exception):
    """Raised when a user does not exist in the current tenant."""

    def __init__(self, username: str):
        super().__init__(f"User {username!r} not found")
        self.username = username
