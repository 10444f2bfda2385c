"""Identity bounded context.

Keeps each tenant's user directory in that tenant's own database.
"""
