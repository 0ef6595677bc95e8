# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


# ---------------------------------------------------------------- cart
class CartLineIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(1, gt=0, description="Ilość produktu (musi być > 0)")
    color: str | None = None
    size: str | None = None


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0, description="Nowa ilość (musi być > 0)")


class CartLineIdsIn(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class CartLineOut(BaseModel):
    """Schema dla linii koszyka (response)."""

    id: int
    product_id: int
    name: str
    price: Decimal
    old_price: Decimal | None = None
    image: str | None = None
    brand: str | None = None
    shipping_fee: Decimal
    quantity: int
    color: str | None = None
    size: str | None = None
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- coupons
class ApplyCouponIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    total_amount: Decimal = Field(..., ge=0)


class DiscountOut(BaseModel):
    discount_type: str
    discount_value: Decimal


class CouponCreate(BaseModel):
    """Schema dla tworzenia kuponu (admin)."""

    code: str = Field(..., min_length=1, max_length=64)
    discount_type: Literal["percentage", "fixed"]
    discount_value: Decimal = Field(..., gt=0)
    min_order_amount: Decimal = Field(Decimal("0"), ge=0)
    max_order_amount: Decimal | None = Field(None, ge=0)
    expires_at: datetime
    is_active: bool = True
    usage_limit: int = Field(0, ge=0, description="0 = bez limitu")


class CouponUpdate(BaseModel):
    """
    Czesciowa aktualizacja kuponu. Pole nieobecne w requescie = bez zmian,
    pole obecne (takze 0 / false) jest zapisywane. Patrz model_fields_set.
    """

    code: str | None = Field(None, min_length=1, max_length=64)
    discount_type: Literal["percentage", "fixed"] | None = None
    discount_value: Decimal | None = Field(None, gt=0)
    min_order_amount: Decimal | None = Field(None, ge=0)
    max_order_amount: Decimal | None = Field(None, ge=0)
    expires_at: datetime | None = None
    is_active: bool | None = None
    usage_limit: int | None = Field(None, ge=0)


class CouponOut(BaseModel):
    id: int
    code: str
    discount_type: str
    discount_value: Decimal
    min_order_amount: Decimal
    max_order_amount: Decimal | None = None
    expires_at: datetime
    is_active: bool
    usage_limit: int

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- orders
class ShippingAddressIn(BaseModel):
    username: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    landmark: str | None = None
    ship_to: Literal["home", "office"] = "home"


class ShippingAddressOut(BaseModel):
    username: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    region: str | None = None
    district: str | None = None
    landmark: str | None = None
    ship_to: str | None = None


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia z wybranych linii koszyka."""

    cart_line_ids: List[int] = Field(default_factory=list)
    address_id: int | None = Field(None, gt=0)
    shipping_address: ShippingAddressIn | None = None
    shipping_price: Decimal = Field(Decimal("0"), ge=0)
    tax_price: Decimal = Field(Decimal("0"), ge=0)
    coupon_code: str | None = Field(None, min_length=1, max_length=64)


class OrderCreated(BaseModel):
    order_id: str


class OrderItemOut(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int
    image: str | None = None
    color: str | None = None
    size: str | None = None


class PaymentResultIn(BaseModel):
    id: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    update_time: str | None = None
    email_address: str | None = None


class PaymentResultOut(BaseModel):
    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class OrderOut(BaseModel):
    """Schema dla zamówienia (response) - bez wyniku platnosci."""

    order_id: str
    user_id: int | None = None
    order_status: str
    shipping_address: ShippingAddressOut
    items: List[OrderItemOut]
    payment_method: str | None = None
    coupon_code: str | None = None
    items_price: Decimal
    discount_price: Decimal
    shipping_price: Decimal
    tax_price: Decimal
    total_price: Decimal
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    created_at: datetime


class AdminOrderOut(OrderOut):
    payment_result: PaymentResultOut


class PaymentMethodIn(BaseModel):
    payment_method: str = Field(..., min_length=1)


class OrderStatusIn(BaseModel):
    order_status: str = Field(..., min_length=1)


class Ack(BaseModel):
    success: bool = True
    message: str
