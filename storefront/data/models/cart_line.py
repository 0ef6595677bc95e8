#storefront/data/models/cart_line.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, CheckConstraint

from storefront.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True)

    # wlasciciel: zalogowany user albo gosc (token sesji)
    user_id = Column(Integer, nullable=True, index=True)
    guest_token = Column(String(64), nullable=True, index=True)

    product_id = Column(Integer, nullable=False)

    # kopia danych produktu z momentu dodania, bez synchronizacji z katalogiem
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    old_price = Column(Numeric(10, 2), nullable=True)
    image = Column(String, nullable=True)
    brand = Column(String, nullable=True)
    shipping_fee = Column(Numeric(10, 2), nullable=False, default=0)

    quantity = Column(Integer, nullable=False, default=1)
    color = Column(String, nullable=True)
    size = Column(String, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_line_quantity"),)

    @property
    def line_total(self):
        return self.price * self.quantity
