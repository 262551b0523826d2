"""
Order State Machine.

    PENDING --start--> IN_PROGRESS --complete--> COMPLETED
       |                    |
       +------cancel--------+-----> CANCELLED

COMPLETED and CANCELLED are terminal. ``complete`` is reserved for sale
settlement; callers outside it get InvalidTransitionError.
"""

from typing import Final

from food_shared.config.constants import OrderEvent, OrderStatus
from food_shared.utils.exceptions import InvalidTransitionError, ValidationError

# (from_status, event) -> to_status
ORDER_TRANSITIONS: Final[dict[tuple[str, str], str]] = {
    (OrderStatus.PENDING, OrderEvent.START): OrderStatus.IN_PROGRESS,
    (OrderStatus.PENDING, OrderEvent.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.IN_PROGRESS, OrderEvent.COMPLETE): OrderStatus.COMPLETED,
    (OrderStatus.IN_PROGRESS, OrderEvent.CANCEL): OrderStatus.CANCELLED,
}

# Target status -> event that reaches it
_EVENT_FOR_TARGET: Final[dict[str, str]] = {
    OrderStatus.IN_PROGRESS: OrderEvent.START,
    OrderStatus.CANCELLED: OrderEvent.CANCEL,
    OrderStatus.COMPLETED: OrderEvent.COMPLETE,
}


def next_status(current: str, event: str, *, allow_complete: bool = False) -> str:
    """
    Status reached by applying ``event`` to ``current``.

    Raises:
        InvalidTransitionError: The event is not allowed from ``current``,
            or it is ``complete`` and the caller is not settling a sale.
    """
    target = ORDER_TRANSITIONS.get((current, event))
    if target is None:
        raise InvalidTransitionError("order", current, event)
    if event == OrderEvent.COMPLETE and not allow_complete:
        raise InvalidTransitionError("order", current, event, reason="complete is reserved for sale settlement")
    return target


def can_apply(current: str, event: str) -> bool:
    return (current, event) in ORDER_TRANSITIONS


def event_for_target(current: str, target: str) -> str:
    """
    Map a requested target status to the event reaching it.

    Requesting PENDING (the initial state) never corresponds to an event;
    it is reported as an invalid transition from ``current``.
    """
    if target not in OrderStatus.ALL:
        raise ValidationError(f"Unknown order status: {target}", status=target)
    event = _EVENT_FOR_TARGET.get(target)
    if event is None:
        raise InvalidTransitionError("order", current, f"set {target}")
    return event


def is_terminal(status: str) -> bool:
    return status in OrderStatus.TERMINAL
