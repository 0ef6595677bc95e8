# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.identity import Identity
from storefront.repos.owner import owned_by


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_lines(self, identity: Identity) -> list[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(owned_by(CartLineModel, identity))
                .order_by(CartLineModel.id)
            ).scalars()
        )

    def get_lines_by_ids(self, identity: Identity, line_ids) -> list[CartLineModel]:
        ids = list(line_ids)
        if not ids:
            return []
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.id.in_(ids), owned_by(CartLineModel, identity))
                .order_by(CartLineModel.id)
            ).scalars()
        )

    def get_line(self, identity: Identity, line_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.id == line_id,
                owned_by(CartLineModel, identity),
            )
        ).scalar_one_or_none()

    def find_line(self, identity: Identity, product_id: int, color, size) -> CartLineModel | None:
        stmt = select(CartLineModel).where(
            owned_by(CartLineModel, identity),
            CartLineModel.product_id == product_id,
        )
        # NULL != NULL w SQL, wiec osobno dla brakujacego koloru / rozmiaru
        stmt = stmt.where(CartLineModel.color.is_(None) if color is None else CartLineModel.color == color)
        stmt = stmt.where(CartLineModel.size.is_(None) if size is None else CartLineModel.size == size)
        return self.db.execute(stmt).scalars().first()

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def update_line_version(self, line_id: int, old_version: int, new_data: dict) -> int:
        result = self.db.execute(
            update(CartLineModel)
            .where(CartLineModel.id == line_id, CartLineModel.version == old_version)
            .values(**new_data)
        )
        return result.rowcount

    def delete_lines(self, line_ids) -> int:
        ids = list(line_ids)
        if not ids:
            return 0
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
