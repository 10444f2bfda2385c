"""Ports for the tenancy bounded context."""

from tenancy.ports.repositories import ITenantRegistry

__all__ = ["ITenantRegistry"]
