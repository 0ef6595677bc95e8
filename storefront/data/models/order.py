import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Boolean
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    # tozsamosc nadawana przy pierwszym flush, order_id = id.upper()
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    order_id = Column(String(32), unique=True, nullable=True, index=True)

    user_id = Column(Integer, nullable=True, index=True)  # None dla goscia
    guest_token = Column(String(64), nullable=True, index=True)

    order_status = Column(String, nullable=False, default="pending")

    # snapshot adresu wysylki
    ship_username = Column(String, nullable=True)
    ship_phone = Column(String, nullable=True)
    ship_address = Column(String, nullable=True)
    ship_city = Column(String, nullable=True)
    ship_region = Column(String, nullable=True)
    ship_district = Column(String, nullable=True)
    ship_landmark = Column(String, nullable=True)
    ship_to = Column(String, nullable=True)

    payment_method = Column(String, nullable=True)  # stripe, paypal, cod, jazzcash, easypaisa
    payment_result_id = Column(String, nullable=True)
    payment_result_status = Column(String, nullable=True)
    payment_result_update_time = Column(String, nullable=True)
    payment_result_email = Column(String, nullable=True)

    coupon_code = Column(String(64), nullable=True)
    items_price = Column(Numeric(10, 2), nullable=False)
    discount_price = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_price = Column(Numeric(10, 2), nullable=False, default=0)
    tax_price = Column(Numeric(10, 2), nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False)

    is_paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    is_delivered = Column(Boolean, nullable=False, default=False)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )


class OrderItemModel(Base):
    """Zamrozona kopia linii koszyka."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_pk = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    product_id = Column(Integer, nullable=False)  # tylko do sledzenia
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    image = Column(String, nullable=True)
    color = Column(String, nullable=True)
    size = Column(String, nullable=True)

    order = relationship("OrderModel", back_populates="items")
