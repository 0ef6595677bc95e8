#storefront/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, get_product_client, http_errors
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import Ack, CartLineIdsIn, CartLineIn, CartLineOut, QuantityIn
from storefront.services.cart_service import CartService
from storefront.services.product_client import ProductClient

router = APIRouter(prefix="/cart-lines", tags=["cart"])


def get_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
) -> CartService:
    return CartService(db=db, product_client=product_client)


@router.get("/", response_model=List[CartLineOut])
def list_lines(
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    with http_errors():
        return svc.list_lines(identity)


@router.post("/", response_model=CartLineOut, status_code=201)
def add_line(
    payload: CartLineIn,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    with http_errors():
        return svc.add_line(
            identity,
            product_id=payload.product_id,
            quantity=payload.quantity,
            color=payload.color,
            size=payload.size,
        )


@router.patch("/{line_id}", response_model=CartLineOut)
def update_quantity(
    line_id: int,
    payload: QuantityIn,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    with http_errors():
        return svc.update_quantity(identity, line_id, payload.quantity)


@router.delete("/{line_id}", response_model=Ack)
def remove_line(
    line_id: int,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    with http_errors():
        svc.remove_line(identity, line_id)
    return Ack(message="Cart deleted successfully.")


@router.post("/remove", response_model=Ack)
def remove_lines(
    payload: CartLineIdsIn,
    identity: Identity = Depends(get_identity),
    svc: CartService = Depends(get_service),
):
    with http_errors():
        removed = svc.remove_lines(identity, payload.ids)
    return Ack(message=f"{removed} carts deleted successfully.")
