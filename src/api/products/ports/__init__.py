"""Ports for the products bounded context."""
