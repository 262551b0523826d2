"""
Sale Repository.
"""

from dataclasses import dataclass

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from food_api.models import Sale
from .base import BaseRepository, RepositoryFilters


@dataclass
class SaleFilters(RepositoryFilters):
    table_id: int | None = None


class SaleRepository(BaseRepository[Sale]):
    @property
    def model(self) -> type[Sale]:
        return Sale

    def _base_query(self) -> Select:
        return (
            select(Sale)
            .options(selectinload(Sale.order_links))
            .order_by(Sale.created_at.desc(), Sale.id.desc())
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        query = super()._apply_filters(query, filters)
        if isinstance(filters, SaleFilters) and filters.table_id is not None:
            query = query.where(Sale.table_id == filters.table_id)
        return query
