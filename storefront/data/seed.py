# storefront/data/seed.py
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from storefront.data import database
from storefront.data.models import AddressModel, CouponModel, InventoryModel, UserModel
from storefront.product_service.main import PRODUCTS


def seed(db=None):
    """Dane demo: magazyn dla produktow z mocka katalogu, user z adresem, kupon SAVE10."""
    own_session = db is None
    if own_session:
        if database.SessionLocal is None:
            database.init_db()
        db = database.SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(InventoryModel).first():
            return

        for product_id in PRODUCTS:
            db.add(InventoryModel(product_id=product_id, stock=100, sold=0))

        user = UserModel(id=1, name="Demo User", role="user")
        user.addresses.append(
            AddressModel(
                name="Demo User",
                phone="03001234567",
                address="12 Main Boulevard, Block C",
                city="Lahore",
                region="Punjab",
                district="Lahore",
                landmark="Near the park",
                ship_to="home",
                default_shipping=True,
            )
        )
        db.add(user)
        db.add(UserModel(id=2, name="Admin", role="admin"))

        db.add(
            CouponModel(
                code="SAVE10",
                discount_type="percentage",
                discount_value=Decimal("10"),
                min_order_amount=Decimal("0"),
                max_order_amount=Decimal("5000"),
                expires_at=datetime.now(timezone.utc) + timedelta(days=365),
                is_active=True,
                usage_limit=0,
            )
        )
        db.commit()
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    import storefront.data.models  # noqa: F401

    database.init_db()
    database.Base.metadata.create_all(bind=database.engine)
    seed()
