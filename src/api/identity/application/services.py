"""Application service for the identity bounded context."""

from __future__ import annotations

from identity.application.projections import UserSummary
from identity.infrastructure.models import UserModel
from identity.ports.exceptions import UserNotFoundError
from infrastructure.database.models import new_ulid
from infrastructure.persistence import Repository, UnitOfWork


class UserService:
    """User directory operations for the current tenant."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    @property
    def _users(self) -> Repository[UserModel]:
        return self._uow.get_repository(UserModel)

    async def register_user(
        self,
        username: str,
        email: str,
        display_name: str | None = None,
    ) -> UserModel:
        """Register a user in the tenant's directory.

        Raises:
            PersistenceConflictError: If the username or email is taken
        """
        user = UserModel(
            id=new_ulid(),
            username=username,
            email=email,
            display_name=display_name,
            is_active=True,
        )
        self._users.add(user)
        await self._uow.commit()
        return user

    async def get_by_username(self, username: str) -> UserSummary:
        """Look up a user's directory entry.

        Raises:
            UserNotFoundError: If no user has that username
        """
        matches = await self._users.find_as(
            UserSummary, UserModel.username == username
        )
        if not matches:
            raise UserNotFoundError(username)
        return matches[0]

    async def list_users(self, active_only: bool = False) -> list[UserSummary]:
        """List directory entries ordered by username."""
        criteria = [UserModel.is_active.is_(True)] if active_only else []
        return await self._users.find_as(
            UserSummary, *criteria, order_by=[UserModel.username]
        )
