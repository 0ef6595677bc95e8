# storefront/api/routers/coupons.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_identity, http_errors
from storefront.data.database import get_db
from storefront.domain.identity import Identity
from storefront.domain.schemas import ApplyCouponIn, DiscountOut
from storefront.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/apply", response_model=DiscountOut)
def apply_coupon(
    payload: ApplyCouponIn,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Waliduje kupon i zapisuje uzycie. Gosc (bez X-User-Id) nie jest liczony
    do limitu uzyc.
    """
    svc = CouponService(db)
    with http_errors():
        return svc.apply_coupon(payload.code, identity.user_id, payload.total_amount)
