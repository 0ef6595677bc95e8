# storefront/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import http_errors, require_admin
from storefront.api.routers.orders import get_service as get_order_service
from storefront.data.database import get_db
from storefront.domain.schemas import (
    Ack,
    AdminOrderOut,
    CouponCreate,
    CouponOut,
    CouponUpdate,
    OrderStatusIn,
    PaymentResultIn,
)
from storefront.services.coupon_service import CouponService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------------------------------------------------------- orders
@router.get("/orders", response_model=List[AdminOrderOut])
def list_all_orders(svc: OrderService = Depends(get_order_service)):
    return svc.list_all_orders()


@router.get("/orders/{order_id}", response_model=AdminOrderOut)
def get_order(order_id: str, svc: OrderService = Depends(get_order_service)):
    with http_errors():
        return svc.get_order_admin(order_id)


@router.patch("/orders/{order_id}/status", response_model=Ack)
def transition_order_status(
    order_id: str,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_order_service),
):
    with http_errors():
        svc.transition_order_status(order_id, payload.order_status)
    return Ack(message="Order status updated successfully.")


@router.put("/orders/{order_id}/payment-result", response_model=Ack)
def record_payment_result(
    order_id: str,
    payload: PaymentResultIn,
    svc: OrderService = Depends(get_order_service),
):
    with http_errors():
        svc.record_payment_result(order_id, payload.model_dump())
    return Ack(message="Payment result recorded.")


@router.delete("/orders/{order_id}", response_model=Ack)
def purge_order(order_id: str, svc: OrderService = Depends(get_order_service)):
    with http_errors():
        svc.purge_order(order_id)
    return Ack(message="Order deleted successfully.")


# ---------------------------------------------------------------- coupons
@router.get("/coupons", response_model=List[CouponOut])
def list_coupons(db: Session = Depends(get_db)):
    return CouponService(db).list_coupons()


@router.post("/coupons", response_model=CouponOut, status_code=201)
def create_coupon(payload: CouponCreate, db: Session = Depends(get_db)):
    with http_errors():
        return CouponService(db).create_coupon(payload)


@router.patch("/coupons/{code}", response_model=CouponOut)
def update_coupon(code: str, payload: CouponUpdate, db: Session = Depends(get_db)):
    with http_errors():
        return CouponService(db).update_coupon(code, payload)
