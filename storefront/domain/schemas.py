# storefront/domain/schemas.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    """One product entry in the cart. Identity is `id`."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable product identifier")
    name: str
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1, description="Always >= 1 while in the cart")
    image_ref: str | None = None
    note: str | None = None
    category: str | None = None


class ProductRef(BaseModel):
    """Catalog projection used for recommendations and recently viewed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    price: Decimal = Field(..., ge=0)
    category: str
    image_ref: str | None = Field(None, validation_alias=AliasChoices("image_ref", "image_url"))


class CartSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[LineItem, ...] = ()
    saved_items: Tuple[LineItem, ...] = ()
    recently_viewed: Tuple[ProductRef, ...] = ()
    discount_amount: Decimal = Decimal("0")


class CartTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    tax: Decimal
    shipping: Decimal
    total: Decimal


class OrderDraft(BaseModel):
    """Payload submitted to the order-creation collaborator at checkout."""

    id: str
    total: Decimal
    status: str = "completed"
    payment_method_id: str
    payment_status: str = "paid"
    items: List[LineItem] = []
    discount_amount: Decimal = Decimal("0")


class Order(BaseModel):
    id: str
    total: Decimal
    status: str
    payment_method_id: str | None = None
    payment_status: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    items: List[LineItem] = []
    discount_amount: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


# ---- HTTP payloads ----

class QuantityIn(BaseModel):
    """Zero or negative removes the line item."""

    quantity: int


class NoteIn(BaseModel):
    note: str = Field(..., max_length=500)


class DiscountIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class DiscountOut(BaseModel):
    applied: bool
    discount_amount: Decimal


class CheckoutIn(BaseModel):
    payment_method_id: str = Field(..., min_length=1)


class CheckoutOut(BaseModel):
    order_id: str


class CartOut(BaseModel):
    items: List[LineItem]
    saved_items: List[LineItem]
    recently_viewed: List[ProductRef]
    item_count: int
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    recommendations: List[ProductRef]
