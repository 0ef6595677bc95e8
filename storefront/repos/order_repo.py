# storefront/repos/order_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.domain.identity import Identity
from storefront.repos.owner import owned_by


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # flush nadaje id, commit robi serwis po zlozeniu calego agregatu
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.order_id == order_id)
        ).scalar_one_or_none()

    def get_owned_order(self, order_id: str, identity: Identity) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.order_id == order_id, owned_by(OrderModel, identity))
        ).scalar_one_or_none()

    def list_owned_orders(self, identity: Identity) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(owned_by(OrderModel, identity))
                .order_by(OrderModel.created_at.desc())
            ).scalars()
        )

    def list_orders(self) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.created_at.desc())
            ).scalars()
        )

    def update_order_version(self, pk: str, old_version: int, new_data: dict) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == pk, OrderModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def delete_order(self, order: OrderModel):
        self.db.delete(order)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
