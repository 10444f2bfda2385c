"""Ports for the identity bounded context."""
