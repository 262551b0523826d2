"""
Catalog repositories: branches, tables, categories, menus, add-ons.
"""

from dataclasses import dataclass

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from food_api.models import AddOn, Branch, Category, MenuItem, Table
from .base import BaseRepository, RepositoryFilters


class BranchRepository(BaseRepository[Branch]):
    @property
    def model(self) -> type[Branch]:
        return Branch


class TableRepository(BaseRepository[Table]):
    @property
    def model(self) -> type[Table]:
        return Table


class CategoryRepository(BaseRepository[Category]):
    @property
    def model(self) -> type[Category]:
        return Category


@dataclass
class MenuFilters(RepositoryFilters):
    """Filters specific to menus."""

    category_id: int | None = None
    is_available: bool | None = None


class MenuRepository(BaseRepository[MenuItem]):
    """
    Repository for MenuItem entities.

    Guarantees eager loading of add_ons.
    """

    @property
    def model(self) -> type[MenuItem]:
        return MenuItem

    def _base_query(self) -> Select:
        return (
            select(MenuItem)
            .options(selectinload(MenuItem.add_ons))
            .order_by(MenuItem.id)
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        query = super()._apply_filters(query, filters)
        if isinstance(filters, MenuFilters):
            if filters.category_id is not None:
                query = query.where(MenuItem.category_id == filters.category_id)
            if filters.is_available is not None:
                query = query.where(MenuItem.is_available.is_(filters.is_available))
        if filters.search:
            # Case-insensitive substring match; LIKE wildcards in the term are literal
            escaped = (
                filters.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            query = query.where(MenuItem.title.ilike(f"%{escaped}%", escape="\\"))
        return query


@dataclass
class AddOnFilters(RepositoryFilters):
    menu_id: int | None = None


class AddOnRepository(BaseRepository[AddOn]):
    @property
    def model(self) -> type[AddOn]:
        return AddOn

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        if isinstance(filters, AddOnFilters) and filters.menu_id is not None:
            query = query.where(AddOn.menu_id == filters.menu_id)
        if filters.branch_id is not None:
            query = query.join(MenuItem, AddOn.menu_id == MenuItem.id).where(
                MenuItem.branch_id == filters.branch_id
            )
        return query
