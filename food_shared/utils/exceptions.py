"""
Centralized HTTP exceptions for consistent error handling.

Every exception logs itself on construction and carries enough context for
the caller to decide what to do next:

- code: machine-readable error class (NOT_FOUND, INVALID_TRANSITION, ...)
- step: the store step that failed, when the failure happened mid-operation
- partial: True only when side effects were committed before the failure
- retriable: True when repeating the same request is safe

Usage:
    from food_shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Menu", menu_id)
    raise ValidationError("Quantity must be positive", field="quantity")
"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from food_shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    code: str = "ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        *,
        code: str | None = None,
        step: str | None = None,
        partial: bool = False,
        retriable: bool = False,
        **log_context: Any,
    ):
        if code is not None:
            self.code = code
        self.step = step
        self.partial = partial
        self.retriable = retriable

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, code=self.code, step=step, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": self.detail,
            "code": self.code,
            "step": self.step,
            "partial": self.partial,
            "retriable": self.retriable,
        }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render AppException subclasses as structured JSON bodies."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", 123)
    """

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order referenced by id does not exist."""

    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: int | str | None = None, **log_context: Any):
        self.order_id = order_id
        super().__init__("Order", order_id, **log_context)


class CatalogEntryNotFoundError(NotFoundError):
    """No menu item or add-on matches the requested id."""

    def __init__(self, kind: str, entry_id: int | str, **log_context: Any):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(kind, entry_id, **log_context)


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("delete sales")
    """

    code = "FORBIDDEN"

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            action=action,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Discount cannot exceed price")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    code = "INVALID_INPUT"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            **log_context,
        )


class InvalidQuantityError(ValidationError):
    """Requested quantity is not a positive integer."""

    code = "INVALID_QUANTITY"

    def __init__(self, quantity: int, **log_context: Any):
        super().__init__(f"Quantity must be positive, got {quantity}", quantity=quantity, **log_context)


class InvalidReferenceError(ValidationError):
    """A referenced entity id cannot be resolved."""

    code = "INVALID_REFERENCE"
    entity = "Entity"

    def __init__(self, entity_id: int | str | None = None, reason: str | None = None, **log_context: Any):
        self.entity_id = entity_id
        detail = f"Invalid {self.entity} ID: {entity_id}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail, entity_id=entity_id, **log_context)


class InvalidMenuReferenceError(InvalidReferenceError):
    code = "INVALID_MENU_REFERENCE"
    entity = "menu"


class InvalidAddOnReferenceError(InvalidReferenceError):
    code = "INVALID_ADD_ON_REFERENCE"
    entity = "add-on"


class InvalidBranchError(InvalidReferenceError):
    code = "INVALID_BRANCH"
    entity = "branch"


class InvalidTableError(InvalidReferenceError):
    code = "INVALID_TABLE"
    entity = "table"


class InvalidCategoryError(InvalidReferenceError):
    code = "INVALID_CATEGORY"
    entity = "category"


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("User already exists")
    """

    code = "CONFLICT"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Order state machine violation."""

    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, from_status: str, event: str, **log_context: Any):
        self.from_status = from_status
        self.event = event
        detail = f"Invalid transition for {entity}: cannot '{event}' from '{from_status}'"
        super().__init__(detail, entity=entity, from_status=from_status, event=event, **log_context)


class CatalogUnavailableError(ConflictError):
    """Catalog entry exists but is marked unavailable."""

    code = "UNAVAILABLE"

    def __init__(self, kind: str, entry_id: int | str, **log_context: Any):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"{kind} {entry_id} is not available", kind=kind, entry_id=entry_id, **log_context)


# =============================================================================
# 5xx Upstream Errors
# =============================================================================


class UpstreamError(AppException):
    """
    A collaborator (store, blob store, notifier) failed (502).

    Usage:
        raise UpstreamError("store", step="insert sale", retriable=False)
    """

    code = "UPSTREAM"

    def __init__(
        self,
        service: str,
        *,
        step: str | None = None,
        partial: bool = False,
        retriable: bool = False,
        **log_context: Any,
    ):
        self.service = service
        detail = f"Error communicating with {service}"
        if step:
            detail = f"{detail} during {step}"
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            log_level="error",
            step=step,
            partial=partial,
            retriable=retriable,
            service=service,
            **log_context,
        )


class StoreTimeoutError(AppException):
    """The request deadline expired before a store step finished (504)."""

    code = "TIMEOUT"

    def __init__(
        self,
        step: str | None = None,
        *,
        partial: bool = False,
        retriable: bool = True,
        **log_context: Any,
    ):
        detail = "Request deadline exceeded"
        if step:
            detail = f"{detail} during {step}"
        super().__init__(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=detail,
            log_level="error",
            step=step,
            partial=partial,
            retriable=retriable,
            **log_context,
        )
