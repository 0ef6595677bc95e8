from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    Numeric,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(64), nullable=False, unique=True)  # zawsze uppercase

    discount_type = Column(String, nullable=False)  # percentage, fixed
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_order_amount = Column(Numeric(10, 2), nullable=False, default=0)
    max_order_amount = Column(Numeric(10, 2), nullable=True)  # brak = bez gornej granicy

    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    usage_limit = Column(Integer, nullable=False, default=0)  # 0 = bez limitu

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    usages = relationship(
        "CouponUsageModel",
        back_populates="coupon",
        cascade="all, delete-orphan",
    )


class CouponUsageModel(Base):
    """Ledger: ile razy dany user wykorzystal kupon."""

    __tablename__ = "coupon_usages"

    id = Column(Integer, primary_key=True)
    coupon_id = Column(Integer, ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False)
    used_count = Column(Integer, nullable=False, default=1)
    # uzycia z applyCoupon, jeszcze nie skonsumowane przez zamowienie
    held_count = Column(Integer, nullable=False, default=0)

    coupon = relationship("CouponModel", back_populates="usages")

    __table_args__ = (UniqueConstraint("coupon_id", "user_id", name="u_coupon_user"),)
