# storefront/repos/coupon_repo.py
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel, CouponUsageModel

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(CouponModel.code == code)
        ).scalar_one_or_none()

    def list_coupons(self) -> list[CouponModel]:
        return list(self.db.execute(select(CouponModel).order_by(CouponModel.id)).scalars())

    def add_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def update_coupon_version(self, coupon_id: int, old_version: int, new_data: dict) -> int:
        result = self.db.execute(
            update(CouponModel)
            .where(CouponModel.id == coupon_id, CouponModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def get_usage(self, coupon_id: int, user_id: int) -> CouponUsageModel | None:
        return self.db.execute(
            select(CouponUsageModel).where(
                CouponUsageModel.coupon_id == coupon_id,
                CouponUsageModel.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def increment_usage(self, coupon_id: int, user_id: int, usage_limit: int, hold: bool = False) -> bool:
        """
        Atomowy inkrement z sufitem:
            UPDATE coupon_usages SET used_count = used_count + 1
            WHERE coupon_id = :c AND user_id = :u AND used_count < :limit

        Pierwsze uzycie to INSERT ... ON CONFLICT DO NOTHING. Jesli rownolegly
        request wstawil wiersz pierwszy, konczymy warunkowym UPDATE.
        hold=True zostawia uzycie do skonsumowania przez zamowienie.
        Zwraca False gdy limit osiagniety.
        """
        if self._bump_usage(coupon_id, user_id, usage_limit, hold):
            return True

        if self._insert_first_usage(coupon_id, user_id, hold):
            return True

        return self._bump_usage(coupon_id, user_id, usage_limit, hold)

    def consume_hold(self, coupon_id: int, user_id: int) -> bool:
        """Zamowienie zuzywa wczesniejsze applyCoupon zamiast liczyc drugi raz."""
        table = CouponUsageModel.__table__
        result = self.db.execute(
            update(table)
            .where(
                table.c.coupon_id == coupon_id,
                table.c.user_id == user_id,
                table.c.held_count > 0,
            )
            .values(held_count=table.c.held_count - 1)
        )
        return result.rowcount == 1

    def _bump_usage(self, coupon_id: int, user_id: int, usage_limit: int, hold: bool) -> bool:
        table = CouponUsageModel.__table__
        stmt = update(table).where(
            table.c.coupon_id == coupon_id,
            table.c.user_id == user_id,
        )
        if usage_limit:
            stmt = stmt.where(table.c.used_count < usage_limit)

        values = {"used_count": table.c.used_count + 1}
        if hold:
            values["held_count"] = table.c.held_count + 1

        result = self.db.execute(stmt.values(**values))
        return result.rowcount == 1

    def _insert_first_usage(self, coupon_id: int, user_id: int, hold: bool) -> bool:
        dialect = self.db.get_bind().dialect.name
        insert_fn = _UPSERT_INSERTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"Coupon ledger upsert not supported for dialect {dialect}")

        stmt = (
            insert_fn(CouponUsageModel.__table__)
            .values(coupon_id=coupon_id, user_id=user_id, used_count=1, held_count=1 if hold else 0)
            .on_conflict_do_nothing(index_elements=["coupon_id", "user_id"])
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
