# storefront/repos/inventory_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from storefront.data.models.inventory import InventoryModel


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> InventoryModel | None:
        return self.db.get(InventoryModel, product_id)

    def increment_sold(self, product_id: int, quantity: int) -> int:
        # sold = sold + n po stronie bazy, bez read-modify-write
        result = self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(sold=InventoryModel.sold + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
