# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, get_inventory_dispatcher, http_errors
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import Ack, OrderCreate, OrderCreated, OrderOut, PaymentMethodIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(
    db: Session = Depends(get_db),
    inventory_dispatcher=Depends(get_inventory_dispatcher),
) -> OrderService:
    return OrderService(db, inventory_dispatcher=inventory_dispatcher)


@router.post("/", response_model=OrderCreated, status_code=201)
def create_order(
    payload: OrderCreate,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    """
    Tworzy zamówienie z wybranych linii koszyka.
    Liczniki sprzedazy aktualizowane sa po zapisie zamowienia.
    """
    with http_errors():
        return svc.create_order(
            identity,
            cart_line_ids=payload.cart_line_ids,
            address_id=payload.address_id,
            shipping_address=payload.shipping_address,
            shipping_price=payload.shipping_price,
            tax_price=payload.tax_price,
            coupon_code=payload.coupon_code,
        )


@router.get("/", response_model=List[OrderOut])
def list_orders(
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    return svc.list_orders(identity)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    with http_errors():
        return svc.get_order(identity, order_id)


@router.post("/{order_id}/cancel", response_model=Ack)
def cancel_order(
    order_id: str,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    with http_errors():
        svc.cancel_order(identity, order_id)
    return Ack(message="Order cancelled successfully.")


@router.put("/{order_id}/payment-method", response_model=Ack)
def set_payment_method(
    order_id: str,
    payload: PaymentMethodIn,
    identity: Identity = Depends(get_identity),
    svc: OrderService = Depends(get_service),
):
    with http_errors():
        svc.set_payment_method(identity, order_id, payload.payment_method)
    return Ack(message="Payment added successfully.")
