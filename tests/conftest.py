import os

# przed importem storefront.utils.settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("INVENTORY_DISPATCH", "inline")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

import storefront.data.models  # noqa: F401
from storefront.api import include_routers
from storefront.api.deps import get_inventory_dispatcher, get_product_client
from storefront.data import database
from storefront.data.models import (
    AddressModel,
    CartLineModel,
    CouponModel,
    InventoryModel,
    UserModel,
)
from storefront.services.inventory_service import InlineInventoryDispatcher


class FakeProductClient:
    """Katalog w pamieci zamiast HTTP do product-service."""

    def __init__(self, products=None):
        self.products = products if products is not None else {
            1: {"id": 1, "name": "Keyboard", "price": 500, "old_price": 650, "image": "kb.png",
                "brand": "Keychron", "shipping_price": 15},
            2: {"id": 2, "name": "Mouse", "price": 300, "old_price": None, "image": "mouse.png",
                "brand": "Logitech", "shipping_price": 0},
        }
        self.calls = []

    def fetch_product(self, product_id):
        self.calls.append(product_id)
        return self.products.get(product_id)


@pytest.fixture
def engine():
    engine = database.build_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    database.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = database.build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def product_client():
    return FakeProductClient()


@pytest.fixture
def client(db, product_client):
    app = FastAPI()
    include_routers(app)

    def _get_db():
        yield db

    app.dependency_overrides[database.get_db] = _get_db
    app.dependency_overrides[get_product_client] = lambda: product_client
    app.dependency_overrides[get_inventory_dispatcher] = lambda: InlineInventoryDispatcher(db)
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(user_id=1, role="user", with_address=True):
        user = UserModel(id=user_id, name=f"User {user_id}", role=role)
        if with_address:
            user.addresses.append(
                AddressModel(
                    name="Ali Raza",
                    phone="03001234567",
                    address="12 Main Boulevard, Block C",
                    city="Lahore",
                    region="Punjab",
                    district="Lahore",
                    landmark="Near the park",
                    ship_to="home",
                )
            )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_cart_line(db):
    def _make(user_id=1, product_id=1, price="500", quantity=1, guest_token=None, **extra):
        line = CartLineModel(
            user_id=user_id,
            guest_token=guest_token,
            product_id=product_id,
            name=extra.pop("name", f"Product {product_id}"),
            price=Decimal(str(price)),
            shipping_fee=Decimal("0"),
            quantity=quantity,
            **extra,
        )
        db.add(line)
        db.commit()
        return line

    return _make


@pytest.fixture
def make_coupon(db):
    def _make(code="SAVE10", **overrides):
        fields = {
            "discount_type": "percentage",
            "discount_value": Decimal("10"),
            "min_order_amount": Decimal("0"),
            "max_order_amount": Decimal("5000"),
            "expires_at": datetime.now(timezone.utc) + timedelta(days=30),
            "is_active": True,
            "usage_limit": 0,
        }
        fields.update(overrides)
        coupon = CouponModel(code=code, **fields)
        db.add(coupon)
        db.commit()
        return coupon

    return _make


@pytest.fixture
def make_inventory(db):
    def _make(product_id, stock=100, sold=0):
        row = InventoryModel(product_id=product_id, stock=stock, sold=sold)
        db.add(row)
        db.commit()
        return row

    return _make
