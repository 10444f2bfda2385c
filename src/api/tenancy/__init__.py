"""Tenancy bounded context.

Owns the tenant registry, per-request tenant resolution and the explicit
tenant scopes used by background jobs.
"""
