"""
Order endpoints.

Placing an order prices the cart against the current catalog and stores
the result; later catalog changes never alter a placed order.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from food_api.repositories import OrderFilters
from food_api.routers._common import Pagination, get_pagination
from food_api.services.domain import OrderService
from food_api.services.permissions import Action, Resource, require
from food_shared.infrastructure.db import get_db
from food_shared.infrastructure.deadline import Deadline, request_deadline
from food_shared.utils.schemas import OrderCreate, OrderOutput, OrderStatusLiteral, OrderUpdate

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderCreate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ORDER, Action.CREATE)),
) -> OrderOutput:
    """
    Place an order. The response carries the computed ``total_amount``.

    Errors: INVALID_MENU_REFERENCE, INVALID_ADD_ON_REFERENCE,
    INVALID_QUANTITY, UNAVAILABLE, INVALID_BRANCH, INVALID_TABLE.
    """
    return OrderService(db, deadline).create(body)


@router.get("", response_model=list[OrderOutput])
def list_orders(
    branch_id: int | None = Query(default=None),
    table_id: int | None = Query(default=None),
    order_status: OrderStatusLiteral | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ORDER, Action.READ)),
) -> list[OrderOutput]:
    filters = pagination.filters(OrderFilters, branch_id=branch_id, table_id=table_id, status=order_status)
    return OrderService(db, deadline).list_orders(filters)


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ORDER, Action.READ)),
) -> OrderOutput:
    return OrderService(db, deadline).get(order_id)


@router.patch("/{order_id}", response_model=OrderOutput)
def update_order(
    order_id: int,
    body: OrderUpdate,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ORDER, Action.UPDATE)),
) -> OrderOutput:
    """
    Update status, note or paid flag.

    Status changes follow PENDING -> IN_PROGRESS, and CANCELLED from either;
    COMPLETED is set by creating a sale.
    """
    return OrderService(db, deadline).update(order_id, body)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    deadline: Deadline = Depends(request_deadline),
    user: dict = Depends(require(Resource.ORDER, Action.DELETE)),
) -> None:
    OrderService(db, deadline).delete(order_id)
