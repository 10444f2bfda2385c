"""HTTP presentation layer for the identity bounded context."""
