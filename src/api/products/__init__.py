"""Products bounded context.

Stores each tenant's product catalog in that tenant's own database.
"""
