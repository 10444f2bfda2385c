"""Shared Kernel module.

Contracts every bounded context agrees on: the resolved tenant identity,
the tenant routing errors and lookup port, token validation and the
observation context used by domain probes.
"""
