"""
Sale endpoints.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from food_api.repositories import SaleFilters
from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import SaleService
from food_api.services.permissions import Action, Resource, require
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import SaleCreate, SaleOutput

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post("", response_model=SaleOutput, status_code=status.HTTP_201_CREATED)
def create_sale(
    body: SaleCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.SALE, Action.CREATE)),
) -> SaleOutput:
    """
    Settle orders into a sale.

    Every listed order must be IN_PROGRESS and belong to the branch. They
    are completed and marked paid together with the sale insert; on any
    error nothing is changed.
    """
    return SaleService(db, deadline).create(body)


@router.get("", response_model=list[SaleOutput])
def list_sales(
    branch_id: int | None = Query(default=None),
    table_id: int | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.SALE, Action.READ)),
) -> list[SaleOutput]:
    filters = pagination.filters(SaleFilters, branch_id=branch_id, table_id=table_id)
    return SaleService(db, deadline).list_sales(filters)


@router.get("/{sale_id}", response_model=SaleOutput)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.SALE, Action.READ)),
) -> SaleOutput:
    return SaleService(db, deadline).get(sale_id)


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.SALE, Action.DELETE)),
) -> None:
    SaleService(db, deadline).delete(sale_id)
