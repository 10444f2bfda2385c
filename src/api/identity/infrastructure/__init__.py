"""Infrastructure for the identity bounded context."""
