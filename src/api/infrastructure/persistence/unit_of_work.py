"""Request-scoped unit of work over one tenant-bound session.

A unit of work owns exactly one session, opened by a module's context
factory for exactly one tenant. Repositories handed out by it share that
session, so everything they stage commits or rolls back together.

Lifecycle:

    OPEN --commit()--> COMMITTED --dispose()--> DISPOSED
    OPEN --rollback() / failed commit--> ROLLED_BACK --dispose()--> DISPOSED
    OPEN --dispose()--> DISPOSED (rolled back first)

Only an OPEN unit of work hands out repositories or commits.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.exceptions import (
    PersistenceConflictError,
    PersistenceUnavailableError,
)
from infrastructure.persistence.observability import (
    DefaultUnitOfWorkProbe,
    UnitOfWorkProbe,
)
from infrastructure.persistence.repository import Repository, RepositoryRegistry
from shared_kernel.middleware.tenant_context import TenantContext

E = TypeVar("E")


class UnitOfWorkState(StrEnum):
    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    DISPOSED = "disposed"


class UnitOfWorkClosedError(RuntimeError):
    """Raised when a unit of work is used after commit, rollback or disposal."""

    def __init__(self, state: UnitOfWorkState):
        super().__init__(f"Unit of work is {state}, not open")
        self.state = state


class UnitOfWork:
    """Transaction boundary and repository provider for one tenant session.

    Not safe for concurrent use; one request or one job owns it.
    """

    def __init__(
        self,
        session: AsyncSession,
        repositories: RepositoryRegistry,
        tenant: TenantContext,
        module: str,
        probe: UnitOfWorkProbe | None = None,
    ) -> None:
        """Wrap an open session.

        Args:
            session: Session opened for the tenant; owned from here on
            repositories: The module's entity registration table
            tenant: Tenant the session is bound to
            module: Module name, for observability
            probe: Optional domain probe for observability
        """
        self._session = session
        self._registry = repositories
        self._tenant = tenant
        self._module = module
        self._probe = probe or DefaultUnitOfWorkProbe()
        self._repositories: dict[type, Repository] = {}
        self._state = UnitOfWorkState.OPEN

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    @property
    def tenant(self) -> TenantContext:
        return self._tenant

    def get_repository(self, entity: type[E]) -> Repository[E]:
        """Repository for an entity type, created once per unit of work.

        Raises:
            UnitOfWorkClosedError: If the unit of work is not open
            UnregisteredEntityError: If the module does not expose the entity
        """
        self._ensure_open()
        repository = self._repositories.get(entity)
        if repository is None:
            repository = self._registry.create(entity, self._session)
            self._repositories[entity] = repository
        return repository

    async def commit(self) -> int:
        """Persist every staged change atomically.

        Returns:
            Number of records inserted, updated or deleted

        Raises:
            UnitOfWorkClosedError: If the unit of work is not open
            PersistenceConflictError: If a constraint was violated (rolled back)
            PersistenceUnavailableError: If the connection was lost (rolled back)
        """
        self._ensure_open()
        affected = self._pending_count()
        tenant_id = self._tenant.tenant_id

        try:
            await self._session.commit()
        except IntegrityError as e:
            self._probe.commit_conflicted(self._module, tenant_id, e)
            await self._abort("conflict")
            raise PersistenceConflictError(str(e.orig)) from e
        except (OperationalError, InterfaceError, OSError) as e:
            self._probe.commit_unavailable(self._module, tenant_id, e)
            await self._abort("unavailable")
            raise PersistenceUnavailableError(
                f"Tenant {tenant_id} database became unavailable during commit"
            ) from e
        except asyncio.CancelledError:
            self._probe.commit_cancelled(self._module, tenant_id)
            await self._abort("cancelled")
            raise

        self._state = UnitOfWorkState.COMMITTED
        self._probe.changes_committed(self._module, tenant_id, affected)
        return affected

    async def rollback(self) -> None:
        """Discard every staged change.

        Raises:
            UnitOfWorkClosedError: If the unit of work is not open
        """
        self._ensure_open()
        await self._abort("requested")

    async def dispose(self) -> None:
        """Release the session. Safe to call any number of times.

        Rolls back first if nothing was committed. Failures while releasing
        are reported through the probe and never raised.
        """
        if self._state is UnitOfWorkState.DISPOSED:
            return

        try:
            if self._state is UnitOfWorkState.OPEN:
                await self._abort("disposed_uncommitted")
        finally:
            try:
                await self._session.close()
            except Exception as e:
                self._probe.release_failed(self._module, self._tenant.tenant_id, e)
            finally:
                self._repositories.clear()
                self._state = UnitOfWorkState.DISPOSED

    def _pending_count(self) -> int:
        session = self._session
        modified = sum(1 for obj in session.dirty if session.is_modified(obj))
        return len(session.new) + len(session.deleted) + modified

    async def _abort(self, reason: str) -> None:
        self._state = UnitOfWorkState.ROLLED_BACK
        try:
            await self._session.rollback()
        except Exception as e:
            self._probe.rollback_failed(self._module, self._tenant.tenant_id, e)
            return
        self._probe.rolled_back(self._module, self._tenant.tenant_id, reason)

    def _ensure_open(self) -> None:
        if self._state is not UnitOfWorkState.OPEN:
            raise UnitOfWorkClosedError(self._state)
