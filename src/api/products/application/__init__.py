"""Application layer for the products bounded context."""
