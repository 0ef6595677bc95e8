# storefront/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Discount:
    """Deskryptor rabatu zwracany przez walidator kuponu."""

    type: DiscountType
    value: Decimal
    code: str | None = None


@dataclass(frozen=True)
class PriceBreakdown:
    items_price: Decimal
    discount_price: Decimal
    shipping_price: Decimal
    tax_price: Decimal
    total_price: Decimal


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def apply_discount(amount, discount: Discount | None) -> Decimal:
    amount = money(amount)
    if discount is None:
        return amount

    value = Decimal(str(discount.value))
    if discount.type == DiscountType.PERCENTAGE:
        discounted = amount * (Decimal("1") - value / Decimal("100"))
    else:
        discounted = amount - value

    # rabat kwotowy nie schodzi ponizej zera
    return max(money(discounted), ZERO)


def price_order(
    line_totals: Iterable,
    discount: Discount | None = None,
    shipping_price=ZERO,
    tax_price=ZERO,
) -> PriceBreakdown:
    items_price = money(sum((Decimal(str(t)) for t in line_totals), ZERO))
    discounted = apply_discount(items_price, discount)
    shipping = money(shipping_price)
    tax = money(tax_price)

    return PriceBreakdown(
        items_price=items_price,
        discount_price=items_price - discounted,
        shipping_price=shipping,
        tax_price=tax,
        total_price=discounted + shipping + tax,
    )
