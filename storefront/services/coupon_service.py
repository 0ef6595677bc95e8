# storefront/services/coupon_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel, CouponUsageModel
from storefront.domain.errors import (
    Conflict,
    CouponNotFound,
    EmptySelection,
    Expired,
    InvalidCoupon,
    LimitExceeded,
    OutOfBounds,
)
from storefront.domain.pricing import Discount, DiscountType
from storefront.domain.schemas import CouponCreate, CouponUpdate
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# pola, ktorych nie mozna wyczyscic przez PATCH
_REQUIRED_FIELDS = (
    "code",
    "discount_type",
    "discount_value",
    "min_order_amount",
    "expires_at",
    "is_active",
    "usage_limit",
)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _as_utc(value: datetime) -> datetime:
    # sqlite zwraca naive datetime
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _validate_coupon_fields(fields: Dict[str, Any]) -> None:
    if fields["discount_type"] not in (DiscountType.PERCENTAGE.value, DiscountType.FIXED.value):
        raise InvalidCoupon("Discount type must be percentage or fixed.")

    if fields["discount_type"] == DiscountType.PERCENTAGE.value and Decimal(str(fields["discount_value"])) > 100:
        raise InvalidCoupon("Percentage discount cannot exceed 100.")

    max_amount = fields.get("max_order_amount")
    if max_amount is not None and Decimal(str(max_amount)) < Decimal(str(fields["min_order_amount"])):
        raise InvalidCoupon("Maximum order amount cannot be lower than minimum order amount.")


def _coupon_to_dict(coupon: CouponModel) -> Dict[str, Any]:
    return {
        "id": coupon.id,
        "code": coupon.code,
        "discount_type": coupon.discount_type,
        "discount_value": coupon.discount_value,
        "min_order_amount": coupon.min_order_amount,
        "max_order_amount": coupon.max_order_amount,
        "expires_at": coupon.expires_at,
        "is_active": coupon.is_active,
        "usage_limit": coupon.usage_limit,
    }


class CouponValidator:
    """
    Bezstanowy ewaluator regul kuponu. Kolejnosc sprawdzen jest stala,
    kazde niepowodzenie to osobny blad domenowy.
    """

    def check(
        self,
        coupon: CouponModel | None,
        total_amount,
        now: datetime,
        usage: CouponUsageModel | None = None,
    ) -> Discount:
        if coupon is None or not coupon.is_active:
            raise CouponNotFound()

        if now >= _as_utc(coupon.expires_at):
            raise Expired()

        total = Decimal(str(total_amount))

        if total < coupon.min_order_amount:
            raise OutOfBounds(
                f"Sorry, this coupon requires a minimum order of {coupon.min_order_amount}",
                bound=coupon.min_order_amount,
            )

        if coupon.max_order_amount is not None and total > coupon.max_order_amount:
            raise OutOfBounds(
                f"This coupon is valid only for orders of {coupon.max_order_amount} or less.",
                bound=coupon.max_order_amount,
            )

        if coupon.usage_limit and usage is not None and usage.used_count >= coupon.usage_limit:
            raise LimitExceeded()

        return Discount(
            type=DiscountType(coupon.discount_type),
            value=coupon.discount_value,
            code=coupon.code,
        )


class CouponService:
    def __init__(self, db: Session):
        self.repo = CouponRepo(db)
        self.validator = CouponValidator()

    def redeem(
        self,
        code: str,
        user_id: int | None,
        total_amount,
        commit: bool = True,
        hold: bool = False,
    ) -> Discount:
        """
        Waliduje kupon i zapisuje uzycie w ledgerze usera.

        Sprawdzenia i inkrement dzialaja na tym samym zaladowanym kuponie;
        o limicie ostatecznie decyduje warunkowy UPDATE w bazie.
        Gosc (user_id None) nie jest liczony w ledgerze.
        commit=False gdy kupon jest czescia wiekszej transakcji (zamowienie).
        hold=True gdy uzycie ma zostac skonsumowane przez pozniejsze zamowienie.
        """
        coupon = self.repo.get_by_code(normalize_code(code))

        usage = None
        if coupon is not None and user_id is not None and coupon.usage_limit:
            usage = self.repo.get_usage(coupon.id, user_id)

        discount = self.validator.check(coupon, total_amount, datetime.now(timezone.utc), usage)

        if user_id is not None:
            if not self.repo.increment_usage(coupon.id, user_id, coupon.usage_limit, hold=hold):
                logger.info(f"Kupon {coupon.code}: limit uzyc osiagniety dla usera {user_id}")
                raise LimitExceeded()

        if commit:
            self.repo.commit()

        logger.info(f"Kupon {coupon.code} uzyty przez {user_id or 'goscia'}")
        return discount

    def redeem_for_order(self, code: str, user_id: int | None, total_amount) -> Discount:
        """
        Kupon przy skladaniu zamowienia, bez commit.

        Jesli user wczesniej zrobil applyCoupon, zamowienie zuzywa to uzycie
        zamiast liczyc drugie. Bez wczesniejszego apply dziala jak redeem.
        """
        coupon = self.repo.get_by_code(normalize_code(code))
        if coupon is not None and user_id is not None:
            discount = self.validator.check(coupon, total_amount, datetime.now(timezone.utc))
            if self.repo.consume_hold(coupon.id, user_id):
                logger.info(f"Kupon {coupon.code}: zamowienie zuzywa wczesniejsze uzycie usera {user_id}")
                return discount

        return self.redeem(code, user_id, total_amount, commit=False)

    def apply_coupon(self, code: str, user_id: int | None, total_amount) -> Dict[str, Any]:
        if Decimal(str(total_amount)) <= 0:
            raise EmptySelection("Please select at least 1 Product to apply coupon code.")

        try:
            discount = self.redeem(code, user_id, total_amount, hold=True)
        except Exception:
            self.repo.rollback()
            raise

        return {
            "discount_type": discount.type.value,
            "discount_value": discount.value,
        }

    # ------------------------------------------------------------- admin
    def list_coupons(self) -> List[Dict[str, Any]]:
        return [_coupon_to_dict(c) for c in self.repo.list_coupons()]

    def create_coupon(self, payload: CouponCreate) -> Dict[str, Any]:
        fields = payload.model_dump()
        fields["code"] = normalize_code(fields["code"])
        _validate_coupon_fields(fields)

        if self.repo.get_by_code(fields["code"]):
            raise Conflict("Coupon already exist. Please try another coupon code.")

        try:
            coupon = self.repo.add_coupon(CouponModel(**fields))
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise Conflict("Coupon already exist. Please try another coupon code.")

        logger.info(f"Utworzono kupon {coupon.code}")
        return _coupon_to_dict(coupon)

    def update_coupon(self, code: str, patch: CouponUpdate) -> Dict[str, Any]:
        coupon = self.repo.get_by_code(normalize_code(code))
        if not coupon:
            raise CouponNotFound("Coupon not found.")

        # tylko pola obecne w requescie; 0 i false sa poprawnymi wartosciami
        changes = patch.model_dump(exclude_unset=True)

        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise InvalidCoupon(f"Field {field} cannot be cleared.")

        if "code" in changes:
            changes["code"] = normalize_code(changes["code"])
            if changes["code"] != coupon.code and self.repo.get_by_code(changes["code"]):
                raise Conflict("Coupon already exist. Please try another coupon code.")

        merged = _coupon_to_dict(coupon)
        merged.update(changes)
        _validate_coupon_fields(merged)

        if not changes:
            return _coupon_to_dict(coupon)

        try:
            rowcount = self.repo.update_coupon_version(
                coupon_id=coupon.id,
                old_version=coupon.version,
                new_data={**changes, "version": coupon.version + 1},
            )
            if rowcount == 0:
                raise Conflict("Coupon was modified by another operation.")
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise Conflict("Coupon already exist. Please try another coupon code.")
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Zaktualizowano kupon {coupon.code}: {sorted(changes)}")
        return _coupon_to_dict(coupon)
