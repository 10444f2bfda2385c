"""Generic repository over one mapped entity type.

Repositories only stage changes; nothing is written until the owning
unit of work commits. Read methods come in two flavors: full entities,
and projections that select just the columns a caller needs.

A projection is a dataclass or a pydantic model whose field names match
mapped column attributes of the entity:

    @dataclass(frozen=True)
    class ProductSummary:
        id: str
        name: str
        price: Decimal

    summaries = await repository.find_as(ProductSummary, ProductModel.stock > 0)
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

E = TypeVar("E")
P = TypeVar("P")


class ProjectionError(TypeError):
    """Raised when a projection type cannot be mapped onto an entity."""

    pass


class UnregisteredEntityError(LookupError):
    """Raised when a unit of work is asked for an entity it has no repository for."""

    pass


@dataclass(frozen=True)
class Page(Generic[P]):
    """One page of projected results."""

    items: list[P]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size) if self.total_count else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def projection_fields(projection: type) -> tuple[str, ...]:
    """Field names of a dataclass or pydantic model projection.

    Raises:
        ProjectionError: If the type is neither
    """
    if dataclasses.is_dataclass(projection):
        return tuple(f.name for f in dataclasses.fields(projection))

    model_fields = getattr(projection, "model_fields", None)
    if isinstance(model_fields, dict):
        return tuple(model_fields)

    raise ProjectionError(
        f"{projection.__name__} is not a dataclass or pydantic model"
    )


@lru_cache(maxsize=None)
def _projection_columns(entity: type, projection: type) -> tuple[Any, ...]:
    """Labelled column expressions for a projection, validated once per pair."""
    fields = projection_fields(projection)
    column_attrs = inspect(entity).column_attrs
    missing = [name for name in fields if name not in column_attrs]
    if missing:
        raise ProjectionError(
            f"{projection.__name__} fields {missing} are not mapped columns "
            f"of {entity.__name__}"
        )
    return tuple(getattr(entity, name).label(name) for name in fields)


class Repository(Generic[E]):
    """CRUD and query surface for one entity type within a session.

    Instances are created by a unit of work and share its session; do not
    construct them directly in application code.
    """

    def __init__(self, session: AsyncSession, entity: type[E]) -> None:
        self._session = session
        self._entity = entity

        primary_key = inspect(entity).primary_key
        if len(primary_key) != 1:
            raise TypeError(f"{entity.__name__} must have a single-column primary key")
        self._id_column: InstrumentedAttribute[Any] = getattr(
            entity, inspect(entity).get_property_by_column(primary_key[0]).key
        )

    @property
    def entity(self) -> type[E]:
        return self._entity

    async def get_by_id(self, entity_id: Any) -> E | None:
        """Fetch one entity by primary key."""
        return await self._session.get(self._entity, entity_id)

    async def get_by_id_as(self, projection: type[P], entity_id: Any) -> P | None:
        """Fetch one entity by primary key as a projection."""
        stmt = self._select_as(projection).where(self._id_column == entity_id)
        items = await self._project(stmt, projection)
        return items[0] if items else None

    async def get_all(self) -> list[E]:
        """Fetch every entity, ordered by primary key."""
        return await self.find()

    async def get_all_as(self, projection: type[P]) -> list[P]:
        """Fetch every entity as projections, ordered by primary key."""
        return await self.find_as(projection)

    async def find(
        self,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] | None = None,
    ) -> list[E]:
        """Fetch entities matching every criterion.

        Args:
            *criteria: SQLAlchemy boolean expressions, ANDed together
            order_by: Ordering expressions (defaults to primary key)
        """
        stmt = select(self._entity).where(*criteria)
        stmt = stmt.order_by(*self._ordering(order_by))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def find_as(
        self,
        projection: type[P],
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] | None = None,
    ) -> list[P]:
        """Fetch projections of entities matching every criterion."""
        stmt = self._select_as(projection).where(*criteria)
        stmt = stmt.order_by(*self._ordering(order_by))
        return await self._project(stmt, projection)

    async def first(
        self,
        *criteria: ColumnElement[bool],
        order_by: Iterable[Any] | None = None,
    ) -> E | None:
        """Fetch the first matching entity, or None."""
        stmt = select(self._entity).where(*criteria)
        stmt = stmt.order_by(*self._ordering(order_by)).limit(1)
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        """Count entities matching every criterion."""
        stmt = select(func.count()).select_from(self._entity).where(*criteria)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def exists(self, *criteria: ColumnElement[bool]) -> bool:
        """Whether any entity matches every criterion."""
        stmt = select(self._id_column).where(*criteria).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_page_as(
        self,
        projection: type[P],
        *criteria: ColumnElement[bool],
        page: int = 1,
        page_size: int = 20,
        order_by: Iterable[Any] | None = None,
    ) -> Page[P]:
        """Fetch one page of projections plus the total match count.

        Args:
            projection: Projection type
            *criteria: SQLAlchemy boolean expressions, ANDed together
            page: 1-based page number
            page_size: Items per page
            order_by: Ordering expressions (defaults to primary key)

        Raises:
            ValueError: If page or page_size is less than 1
        """
        if page < 1:
            raise ValueError("page must be at least 1")
        if page_size < 1:
            raise ValueError("page_size must be at least 1")

        total = await self.count(*criteria)
        stmt = (
            self._select_as(projection)
            .where(*criteria)
            .order_by(*self._ordering(order_by))
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        items = await self._project(stmt, projection) if total else []
        return Page(items=items, total_count=total, page=page, page_size=page_size)

    def add(self, entity: E) -> None:
        """Stage a new entity for insertion at commit."""
        self._check_type(entity)
        self._session.add(entity)

    def add_all(self, entities: Iterable[E]) -> None:
        """Stage several new entities for insertion at commit."""
        for entity in entities:
            self.add(entity)

    async def remove(self, entity: E) -> None:
        """Stage an entity for deletion at commit.

        An entity that was added in this unit of work and never committed
        is simply unstaged.
        """
        self._check_type(entity)
        if entity in self._session.new:
            self._session.expunge(entity)
            return
        await self._session.delete(entity)

    def _select_as(self, projection: type[P]) -> Select[Any]:
        return select(*_projection_columns(self._entity, projection))

    def _ordering(self, order_by: Iterable[Any] | None) -> tuple[Any, ...]:
        return (self._id_column,) if order_by is None else tuple(order_by)

    async def _project(self, stmt: Select[Any], projection: type[P]) -> list[P]:
        result = await self._session.execute(stmt)
        return [projection(**row) for row in result.mappings().all()]

    def _check_type(self, entity: E) -> None:
        if not isinstance(entity, self._entity):
            raise TypeError(
                f"{type(entity).__name__} is not a {self._entity.__name__}"
            )


RepositoryFactory = Callable[[AsyncSession, type[Any]], Repository[Any]]


class RepositoryRegistry:
    """Explicit table of the entity types a module exposes through its units of work.

    Built once at import time per module:

        PRODUCT_REPOSITORIES = RepositoryRegistry().register(ProductModel)
    """

    def __init__(self) -> None:
        self._factories: dict[type, RepositoryFactory] = {}

    def __contains__(self, entity: object) -> bool:
        return entity in self._factories

    @property
    def entities(self) -> frozenset[type]:
        return frozenset(self._factories)

    def register(
        self,
        entity: type[E],
        repository_class: type[Repository[E]] = Repository,
    ) -> RepositoryRegistry:
        """Register an entity, optionally with a specialised repository class.

        Returns:
            The registry itself, for chaining
        """
        if entity in self._factories:
            raise ValueError(f"{entity.__name__} is already registered")
        self._factories[entity] = repository_class
        return self

    def create(self, entity: type[E], session: AsyncSession) -> Repository[E]:
        """Build a repository for an entity over the given session.

        Raises:
            UnregisteredEntityError: If the entity was never registered
        """
        factory = self._factories.get(entity)
        if factory is None:
            raise UnregisteredEntityError(
                f"No repository registered for {entity.__name__}"
            )
        return factory(session, entity)
