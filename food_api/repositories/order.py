"""
Order Repository - Data access for orders and their priced lines.
Lines and line add-ons are always eager loaded.
"""

from dataclasses import dataclass

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from food_api.models import Order, OrderLine
from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    table_id: int | None = None
    status: str | None = None


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of:
    - lines -> add_ons
    """

    @property
    def model(self) -> type[Order]:
        return Order

    def _base_query(self) -> Select:
        # selectinload keeps FOR UPDATE off outer joins
        return (
            select(Order)
            .options(selectinload(Order.lines).selectinload(OrderLine.add_ons))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        query = super()._apply_filters(query, filters)
        if isinstance(filters, OrderFilters):
            if filters.table_id is not None:
                query = query.where(Order.table_id == filters.table_id)
            if filters.status is not None:
                query = query.where(Order.status == filters.status)
        return query

    def find_for_settlement(self, order_ids: list[int]) -> dict[int, Order]:
        """Lock and load orders by id, keyed by id. Missing ids are absent."""
        query = (
            select(Order)
            .where(Order.id.in_(order_ids))
            .order_by(Order.id)
            .with_for_update()
        )
        return {order.id: order for order in self._db.execute(query).scalars().all()}
