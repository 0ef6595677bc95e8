from sqlalchemy import Column, Integer

from storefront.data.database import Base


class InventoryModel(Base):
    """Fasada magazynowa produktu - reszta pol nalezy do katalogu."""

    __tablename__ = "inventory"

    product_id = Column(Integer, primary_key=True, autoincrement=False)
    stock = Column(Integer, nullable=False, default=0)
    sold = Column(Integer, nullable=False, default=0)
