"""Persistence layout of the identity module inside a tenant database."""

from identity.infrastructure.models import IdentityBase, UserModel
from infrastructure.persistence import ModuleSchema, RepositoryRegistry

IDENTITY_MODULE = ModuleSchema(
    name="identity",
    metadata=IdentityBase.metadata,
    repositories=RepositoryRegistry().register(UserModel),
)
