"""
Pydantic request/response schemas shared by the routers.

Money crosses the wire as decimals with at most two fractional digits and
is converted to integer cents at this boundary (see ``utils.money``).
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from food_shared.config.constants import Limits
from food_shared.utils.money import from_cents


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["STAFF", "ASSISTANT", "MANAGER", "OWNER", "ROOT"]
OrderStatusLiteral = Literal["PENDING", "IN_PROGRESS", "COMPLETED", "CANCELLED"]
PaymentMethodLiteral = Literal["CASH", "CARD", "MOBILE", "OTHER"]
Gender = Literal["MALE", "FEMALE", "OTHER"]

Money = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
Title = Annotated[str, Field(min_length=1, max_length=200)]


# =============================================================================
# Authentication / User Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    """Self-service registration."""

    name: Title
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH, max_length=128)
    branch_id: int | None = None


class VerifyRequest(BaseModel):
    email: EmailStr
    verification_code: str = Field(min_length=1, max_length=16)


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str


class UserOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int | None = None
    name: str
    email: str
    role: Role
    address: str | None = None
    nrc: str | None = None
    gender: str | None = None
    avatar_url: str | None = None
    is_verified: bool
    created_at: datetime


class LoginResponse(BaseModel):
    """Login response with JWT token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserOutput


class RegisterResponse(BaseModel):
    user: UserOutput
    message: str = "Verification code sent"


class ProfileUpdate(BaseModel):
    name: Title | None = None
    address: str | None = Field(default=None, max_length=500)
    nrc: str | None = Field(default=None, max_length=50)
    gender: Gender | None = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH, max_length=128)


class UserCreate(BaseModel):
    """Staff account created by an administrator (already verified)."""

    name: Title
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH, max_length=128)
    role: Role = "STAFF"
    branch_id: int | None = None


class RoleUpdate(BaseModel):
    role: Role


# =============================================================================
# Branch / Table Schemas
# =============================================================================


class BranchCreate(BaseModel):
    name: Title
    address: str | None = None
    contact: str | None = None


class BranchUpdate(BaseModel):
    name: Title | None = None
    address: str | None = None
    contact: str | None = None


class BranchOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: str | None = None
    contact: str | None = None
    created_at: datetime


class TableCreate(BaseModel):
    branch_id: int
    name: Title
    capacity: int = Field(default=4, ge=1, le=100)


class TableUpdate(BaseModel):
    name: Title | None = None
    capacity: int | None = Field(default=None, ge=1, le=100)


class TableOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    name: str
    capacity: int
    created_at: datetime


# =============================================================================
# Catalog Schemas
# =============================================================================


class CategoryCreate(BaseModel):
    branch_id: int
    title: Title
    description: str | None = None


class CategoryUpdate(BaseModel):
    title: Title | None = None
    description: str | None = None


class CategoryOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    title: str
    description: str | None = None
    created_at: datetime


class AddOnCreate(BaseModel):
    menu_id: int | None = None
    title: Title
    description: str | None = None
    price: Money
    is_available: bool = True


class AddOnUpdate(BaseModel):
    title: Title | None = None
    description: str | None = None
    price: Money | None = None
    is_available: bool | None = None


class AddOnOutput(BaseModel):
    id: int
    menu_id: int | None = None
    title: str
    description: str | None = None
    price: Decimal
    is_available: bool
    cover_url: str | None = None

    @classmethod
    def from_model(cls, add_on) -> "AddOnOutput":
        return cls(
            id=add_on.id,
            menu_id=add_on.menu_id,
            title=add_on.title,
            description=add_on.description,
            price=from_cents(add_on.price_cents),
            is_available=add_on.is_available,
            cover_url=add_on.cover_url,
        )


class MenuCreate(BaseModel):
    branch_id: int
    category_id: int
    title: Title
    short_title: str | None = Field(default=None, max_length=50)
    description: str | None = None
    price: Money
    discount: Money = Decimal("0")
    is_available: bool = True


class MenuUpdate(BaseModel):
    category_id: int | None = None
    title: Title | None = None
    short_title: str | None = Field(default=None, max_length=50)
    description: str | None = None
    price: Money | None = None
    discount: Money | None = None
    is_available: bool | None = None


class MenuOutput(BaseModel):
    id: int
    branch_id: int
    category_id: int
    title: str
    short_title: str | None = None
    description: str | None = None
    price: Decimal
    discount: Decimal
    is_available: bool
    cover_url: str | None = None
    add_ons: list[AddOnOutput] = []

    @classmethod
    def from_model(cls, menu, *, with_add_ons: bool = False) -> "MenuOutput":
        return cls(
            id=menu.id,
            branch_id=menu.branch_id,
            category_id=menu.category_id,
            title=menu.title,
            short_title=menu.short_title,
            description=menu.description,
            price=from_cents(menu.price_cents),
            discount=from_cents(menu.discount_cents),
            is_available=menu.is_available,
            cover_url=menu.cover_url,
            add_ons=[AddOnOutput.from_model(a) for a in menu.add_ons] if with_add_ons else [],
        )


# =============================================================================
# Order Schemas
# =============================================================================


class CartAddOnInput(BaseModel):
    add_on_id: int
    # Non-positive quantities are rejected by the pricer with INVALID_QUANTITY
    quantity: int = Field(default=1, le=Limits.MAX_LINE_QUANTITY)
    note: str | None = Field(default=None, max_length=500)


class CartLineInput(BaseModel):
    menu_id: int
    quantity: int = Field(default=1, le=Limits.MAX_LINE_QUANTITY)
    add_on_items: list[CartAddOnInput] = Field(default_factory=list, max_length=50)
    note: str | None = Field(default=None, max_length=500)


class OrderCreate(BaseModel):
    branch_id: int
    table_id: int
    menu_items: list[CartLineInput] = Field(min_length=1, max_length=Limits.MAX_CART_LINES)
    note: str | None = Field(default=None, max_length=1000)


class OrderUpdate(BaseModel):
    """Generic update. ``status`` goes through the state machine."""

    status: OrderStatusLiteral | None = None
    is_paid: bool | None = None
    note: str | None = Field(default=None, max_length=1000)


class OrderLineAddOnOutput(BaseModel):
    add_on_id: int | None = None
    title: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    note: str | None = None


class OrderLineOutput(BaseModel):
    menu_id: int | None = None
    title: str
    quantity: int
    unit_price: Decimal
    unit_discount: Decimal
    add_on_subtotal: Decimal
    subtotal: Decimal
    note: str | None = None
    add_on_items: list[OrderLineAddOnOutput] = []


class OrderOutput(BaseModel):
    id: int
    branch_id: int
    table_id: int
    status: OrderStatusLiteral
    is_paid: bool
    total_amount: Decimal
    note: str | None = None
    menu_items: list[OrderLineOutput] = []
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, order) -> "OrderOutput":
        return cls(
            id=order.id,
            branch_id=order.branch_id,
            table_id=order.table_id,
            status=order.status,
            is_paid=order.is_paid,
            total_amount=from_cents(order.total_cents),
            note=order.note,
            created_at=order.created_at,
            updated_at=order.updated_at,
            menu_items=[
                OrderLineOutput(
                    menu_id=line.menu_id,
                    title=line.menu_title,
                    quantity=line.quantity,
                    unit_price=from_cents(line.unit_price_cents),
                    unit_discount=from_cents(line.unit_discount_cents),
                    add_on_subtotal=from_cents(line.add_on_subtotal_cents),
                    subtotal=from_cents(line.subtotal_cents),
                    note=line.note,
                    add_on_items=[
                        OrderLineAddOnOutput(
                            add_on_id=item.add_on_id,
                            title=item.add_on_title,
                            quantity=item.quantity,
                            unit_price=from_cents(item.unit_price_cents),
                            subtotal=from_cents(item.subtotal_cents),
                            note=item.note,
                        )
                        for item in line.add_ons
                    ],
                )
                for line in order.lines
            ],
        )


# =============================================================================
# Sale Schemas
# =============================================================================


class SaleCreate(BaseModel):
    branch_id: int
    table_id: int
    # Emptiness and duplicates are reported by the settlement service
    order_ids: list[int] = Field(max_length=Limits.MAX_ORDERS_PER_SALE)
    discount: Money = Decimal("0")
    tax: Money = Decimal("0")
    payment_method: PaymentMethodLiteral | None = None
    note: str | None = Field(default=None, max_length=1000)


class SaleOutput(BaseModel):
    id: int
    branch_id: int
    table_id: int
    order_ids: list[int]
    total: Decimal
    discount: Decimal
    tax: Decimal
    grand_total: Decimal
    payment_method: str | None = None
    note: str | None = None
    created_at: datetime

    @classmethod
    def from_model(cls, sale) -> "SaleOutput":
        return cls(
            id=sale.id,
            branch_id=sale.branch_id,
            table_id=sale.table_id,
            order_ids=sale.order_ids,
            total=from_cents(sale.total_cents),
            discount=from_cents(sale.discount_cents),
            tax=from_cents(sale.tax_cents),
            grand_total=from_cents(sale.grand_total_cents),
            payment_method=sale.payment_method,
            note=sale.note,
            created_at=sale.created_at,
        )


# =============================================================================
# Misc
# =============================================================================


class CoverOutput(BaseModel):
    id: int
    cover_url: str | None = None
