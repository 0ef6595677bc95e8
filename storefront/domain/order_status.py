# storefront/domain/order_status.py
"""
Maszyna stanow zamowienia.

    pending -> processing -> shipped -> delivered
    pending -> cancelled

pending -> processing nastepuje tylko przez platnosc (COD albo wynik platnosci),
nie przez panel admina.
"""
from datetime import datetime
from enum import Enum

from storefront.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    COD = "cod"
    JAZZCASH = "jazzcash"
    EASYPAISA = "easypaisa"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# przejscia ktore admin moze zlecic recznie
_ADMIN_TRANSITIONS = {
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def assert_admin_transition(current: str, target: str) -> None:
    try:
        pair = (OrderStatus(current), OrderStatus(target))
    except ValueError:
        raise InvalidTransition("You cannot update this order status.")

    if pair not in _ADMIN_TRANSITIONS:
        raise InvalidTransition("You cannot update this order status.")


def transition_fields(target: OrderStatus, payment_method: str | None, now: datetime) -> dict:
    """Pola do zapisania przy wejsciu w stan target."""
    fields = {"order_status": target.value, "updated_at": now}

    if target == OrderStatus.DELIVERED:
        fields["is_delivered"] = True
        fields["delivered_at"] = now
        # przy COD dostawa = zaplata
        if payment_method == PaymentMethod.COD.value:
            fields["is_paid"] = True
            fields["paid_at"] = now

    return fields
