"""
Sale Domain Service.

Creation goes through the Sale Aggregator; this service adds the read and
delete side.
"""

from sqlalchemy.orm import Session

from food_api.models import Sale
from food_api.repositories import SaleFilters, SaleRepository
from food_shared.config.logging import sale_logger as logger
from food_shared.infrastructure.db import safe_commit, store_step
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import NotFoundError
from food_shared.utils.money import to_cents
from food_shared.utils.schemas import SaleCreate, SaleOutput
from .sale_aggregator import SaleAggregator, SettlementRequest


class SaleService:
    def __init__(self, db: Session, deadline: Deadline | None = None):
        self._db = db
        self._deadline = deadline
        self._repo = SaleRepository(db)

    def create(self, body: SaleCreate) -> SaleOutput:
        request = SettlementRequest(
            branch_id=body.branch_id,
            table_id=body.table_id,
            order_ids=tuple(body.order_ids),
            discount_cents=to_cents(body.discount),
            tax_cents=to_cents(body.tax),
            payment_method=body.payment_method,
            note=body.note,
        )
        sale = SaleAggregator(self._db, self._deadline).settle(request)
        return SaleOutput.from_model(sale)

    def get(self, sale_id: int) -> SaleOutput:
        return SaleOutput.from_model(self._load(sale_id))

    def list_sales(self, filters: SaleFilters) -> list[SaleOutput]:
        with store_step(self._db, "list sales", self._deadline):
            sales = self._repo.find_all(filters)
        return [SaleOutput.from_model(s) for s in sales]

    def delete(self, sale_id: int) -> None:
        """Delete a sale record. Its orders stay COMPLETED and paid."""
        sale = self._load(sale_id)
        with store_step(self._db, "delete sale", self._deadline, write=True):
            self._repo.delete(sale)
            safe_commit(self._db)
        logger.info("Sale deleted", sale_id=sale_id)

    def _load(self, sale_id: int) -> Sale:
        with store_step(self._db, "load sale", self._deadline):
            sale = self._repo.find_by_id(sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale
