"""
Branch and Table Domain Services.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from food_api.models import Branch, Category, MenuItem, Order, Table
from food_api.repositories import BranchRepository, RepositoryFilters, TableRepository
from food_api.services.base_service import BaseCRUDService
from food_shared.infrastructure.deadline import Deadline
from food_shared.utils.exceptions import ConflictError, InvalidBranchError
from food_shared.utils.schemas import BranchOutput, TableOutput


class BranchService(BaseCRUDService[Branch, BranchOutput]):
    """Branch CRUD. A branch with tables or catalog entries cannot be deleted."""

    def __init__(self, db: Session, deadline: Deadline | None = None):
        super().__init__(
            db=db,
            repo=BranchRepository(db),
            output_schema=BranchOutput,
            entity_name="Branch",
            deadline=deadline,
        )

    def _validate_delete(self, entity: Branch) -> None:
        with self._read("check branch dependents"):
            dependents = sum(
                self._db.scalar(select(func.count()).select_from(model).where(model.branch_id == entity.id)) or 0
                for model in (Table, Category, MenuItem)
            )
        if dependents:
            raise ConflictError(
                "Branch still has tables, categories or menus",
                branch_id=entity.id,
            )


class TableService(BaseCRUDService[Table, TableOutput]):
    """Dining table CRUD."""

    def __init__(self, db: Session, deadline: Deadline | None = None):
        super().__init__(
            db=db,
            repo=TableRepository(db),
            output_schema=TableOutput,
            entity_name="Table",
            deadline=deadline,
        )

    def list_by_branch(self, branch_id: int, limit: int, offset: int) -> list[TableOutput]:
        return self.list_all(RepositoryFilters(branch_id=branch_id, limit=limit, offset=offset))

    def _validate_create(self, data: dict[str, Any]) -> None:
        with self._read("validate branch"):
            branch = self._db.get(Branch, data["branch_id"])
        if branch is None:
            raise InvalidBranchError(data["branch_id"])

    def _validate_delete(self, entity: Table) -> None:
        with self._read("check table orders"):
            orders = self._db.scalar(
                select(func.count()).select_from(Order).where(Order.table_id == entity.id)
            ) or 0
        if orders:
            raise ConflictError("Table has orders and cannot be deleted", table_id=entity.id)
