"""Unit tests for the generic repository, its registry and projections."""

from dataclasses import dataclass
from decimal import Decimal

import pytest
from pydantic import BaseModel

from identity.infrastructure.models import UserModel
from infrastructure.persistence import (
    Page,
    ProjectionError,
    Repository,
    RepositoryRegistry,
    UnregisteredEntityError,
)
from infrastructure.persistence.repository import projection_fields
from products.application.projections import ProductSummary
from products.infrastructure.models import ProductModel


@dataclass(frozen=True)
class PriceOnly:
    price: Decimal


class NameModel(BaseModel):
    id: str
    name: str


@dataclass(frozen=True)
class WithUnknownField:
    id: str
    colour: str


class TestProjectionFields:
    def test_dataclass_fields(self):
        assert projection_fields(ProductSummary) == ("id", "name", "price")

    def test_pydantic_fields(self):
        assert projection_fields(NameModel) == ("id", "name")

    def test_other_types_rejected(self):
        with pytest.raises(ProjectionError):
            projection_fields(dict)


class TestRepositoryProjections:
    @pytest.mark.asyncio
    async def test_unmapped_field_raises_before_query(self, mock_session):
        repository = Repository(mock_session, ProductModel)

        with pytest.raises(ProjectionError, match="colour"):
            await repository.find_as(WithUnknownField)

        mock_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_projection_maps_rows(self, mock_session):
        mock_session.execute.return_value.mappings.return_value.all.return_value = [
            {"price": Decimal("1.50")},
        ]
        repository = Repository(mock_session, ProductModel)

        assert await repository.find_as(PriceOnly) == [PriceOnly(Decimal("1.50"))]

    @pytest.mark.asyncio
    async def test_projection_selects_only_projected_columns(self, mock_session):
        mock_session.execute.return_value.mappings.return_value.all.return_value = []
        repository = Repository(mock_session, ProductModel)

        await repository.find_as(ProductSummary)

        stmt = mock_session.execute.await_args.args[0]
        assert [column.name for column in stmt.selected_columns] == [
            "id",
            "name",
            "price",
        ]


class TestRepositoryStaging:
    def test_add_stages_entity(self, mock_session):
        repository = Repository(mock_session, ProductModel)
        product = ProductModel(name="Lamp", price=Decimal("10.00"))

        repository.add(product)

        mock_session.add.assert_called_once_with(product)

    def test_add_rejects_foreign_entity(self, mock_session):
        repository = Repository(mock_session, ProductModel)

        with pytest.raises(TypeError):
            repository.add(UserModel(username="ada", email="ada@example.com"))

    @pytest.mark.asyncio
    async def test_remove_unstages_new_entity(self, mock_session):
        repository = Repository(mock_session, ProductModel)
        product = ProductModel(name="Lamp", price=Decimal("10.00"))
        mock_session.new = {product}

        await repository.remove(product)

        mock_session.expunge.assert_called_once_with(product)
        mock_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remove_stages_delete_for_persistent_entity(self, mock_session):
        repository = Repository(mock_session, ProductModel)
        product = ProductModel(name="Lamp", price=Decimal("10.00"))

        await repository.remove(product)

        mock_session.delete.assert_awaited_once_with(product)

    @pytest.mark.asyncio
    async def test_page_arguments_validated(self, mock_session):
        repository = Repository(mock_session, ProductModel)

        with pytest.raises(ValueError):
            await repository.get_page_as(ProductSummary, page=0)
        with pytest.raises(ValueError):
            await repository.get_page_as(ProductSummary, page_size=0)


class TestRepositoryRegistry:
    def test_register_is_chainable(self):
        registry = RepositoryRegistry().register(ProductModel).register(UserModel)

        assert registry.entities == frozenset({ProductModel, UserModel})
        assert ProductModel in registry

    def test_duplicate_registration_rejected(self):
        registry = RepositoryRegistry().register(ProductModel)

        with pytest.raises(ValueError):
            registry.register(ProductModel)

    def test_create_returns_repository_for_entity(self, mock_session):
        registry = RepositoryRegistry().register(ProductModel)

        repository = registry.create(ProductModel, mock_session)

        assert isinstance(repository, Repository)
        assert repository.entity is ProductModel

    def test_create_uses_custom_repository_class(self, mock_session):
        class ProductRepository(Repository):
            pass

        registry = RepositoryRegistry().register(ProductModel, ProductRepository)

        assert isinstance(registry.create(ProductModel, mock_session), ProductRepository)

    def test_unregistered_entity_rejected(self, mock_session):
        registry = RepositoryRegistry().register(ProductModel)

        with pytest.raises(UnregisteredEntityError):
            registry.create(UserModel, mock_session)


class TestPage:
    def test_total_pages_rounds_up(self):
        page = Page(items=[], total_count=21, page=1, page_size=10)

        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_previous is False

    def test_last_page(self):
        page = Page(items=[], total_count=21, page=3, page_size=10)

        assert page.has_next is False
        assert page.has_previous is True

    def test_empty_result(self):
        page = Page(items=[], total_count=0, page=1, page_size=10)

        assert page.total_pages == 0
        assert page.has_next is False
