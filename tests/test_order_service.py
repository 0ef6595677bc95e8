from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.data.models import CartLineModel, CouponUsageModel, InventoryModel, OrderModel
from storefront.domain.errors import (
    AddressNotFound,
    EmptySelection,
    Expired,
    InvalidPaymentMethod,
    InvalidTransition,
    LimitExceeded,
    MissingShippingInfo,
    OrderNotFound,
)
from storefront.domain.identity import Identity
from storefront.services.coupon_service import CouponService
from storefront.services.inventory_service import InlineInventoryDispatcher
from storefront.services.order_service import OrderService

USER = Identity(user_id=1)
OTHER = Identity(user_id=2)
GUEST = Identity(guest_token="guest-abc")

INLINE_ADDRESS = {
    "username": "Sara Khan",
    "phone": "03111234567",
    "address": "House 4, Street 9",
    "city": "Karachi",
    "region": "Sindh",
    "district": "South",
    "landmark": None,
    "ship_to": "office",
}


class RecordingDispatcher:
    def __init__(self):
        self.calls = []

    def dispatch(self, pairs):
        self.calls.append(list(pairs))


class FailingDispatcher:
    def dispatch(self, pairs):
        raise RuntimeError("broker unavailable")


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def svc(db, dispatcher):
    return OrderService(db, inventory_dispatcher=dispatcher)


@pytest.fixture
def checkout(db, make_user, make_cart_line, make_coupon):
    """User 1 z adresem, dwie linie koszyka (2 x 500 + 1 x 300) i kupon SAVE10."""
    user = make_user(1)
    lines = [
        make_cart_line(user_id=1, product_id=1, price="500", quantity=2, name="Keyboard"),
        make_cart_line(user_id=1, product_id=2, price="300", quantity=1, name="Mouse", color="black"),
    ]
    make_coupon("SAVE10")
    return user, lines


class TestCreateOrder:
    def test_order_with_coupon(self, db, svc, dispatcher, checkout):
        user, lines = checkout

        result = svc.create_order(
            USER,
            cart_line_ids=[line.id for line in lines],
            address_id=user.addresses[0].id,
            coupon_code="SAVE10",
        )

        order = svc.get_order(USER, result["order_id"])
        assert order["items_price"] == Decimal("1300.00")
        assert order["discount_price"] == Decimal("130.00")
        assert order["total_price"] == Decimal("1170.00")
        assert order["order_status"] == "pending"
        assert order["coupon_code"] == "SAVE10"
        assert [(i["name"], i["quantity"]) for i in order["items"]] == [("Keyboard", 2), ("Mouse", 1)]
        assert order["items"][1]["color"] == "black"
        assert order["shipping_address"]["city"] == "Lahore"
        assert order["shipping_address"]["username"] == "Ali Raza"
        assert "payment_result" not in order

        assert dispatcher.calls == [[(1, 2), (2, 1)]]

    def test_shipping_and_tax_added_to_total(self, svc, checkout):
        user, lines = checkout
        result = svc.create_order(
            USER,
            cart_line_ids=[lines[1].id],
            address_id=user.addresses[0].id,
            shipping_price=Decimal("50"),
            tax_price=Decimal("20.50"),
        )

        order = svc.get_order(USER, result["order_id"])
        assert order["items_price"] == Decimal("300.00")
        assert order["total_price"] == Decimal("370.50")

    def test_order_id_is_uppercased_identity(self, db, svc, checkout):
        user, lines = checkout
        first = svc.create_order(USER, [lines[0].id], address_id=user.addresses[0].id)["order_id"]
        second = svc.create_order(USER, [lines[1].id], address_id=user.addresses[0].id)["order_id"]

        assert first != second
        for order_id in (first, second):
            stored = db.execute(select(OrderModel).where(OrderModel.order_id == order_id)).scalar_one()
            assert order_id == stored.id.upper()

    def test_consumed_cart_lines_are_deleted(self, db, svc, checkout, make_cart_line):
        user, lines = checkout
        untouched = make_cart_line(user_id=1, product_id=3, price="20")

        svc.create_order(USER, [line.id for line in lines], address_id=user.addresses[0].id)

        remaining = db.execute(select(CartLineModel.id)).scalars().all()
        assert remaining == [untouched.id]

    def test_empty_selection(self, db, svc, checkout):
        user, _ = checkout
        with pytest.raises(EmptySelection):
            svc.create_order(USER, [], address_id=user.addresses[0].id)
        assert _count(db, OrderModel) == 0

    def test_foreign_lines_are_dropped(self, db, svc, checkout, make_cart_line):
        user, lines = checkout
        foreign = make_cart_line(user_id=2, product_id=1, price="999")

        result = svc.create_order(USER, [lines[0].id, foreign.id], address_id=user.addresses[0].id)

        order = svc.get_order(USER, result["order_id"])
        assert len(order["items"]) == 1
        assert order["items_price"] == Decimal("1000.00")
        # cudza linia zostaje w koszyku wlasciciela
        assert db.get(CartLineModel, foreign.id) is not None

    def test_only_foreign_lines_is_empty_selection(self, db, svc, checkout, make_cart_line):
        user, _ = checkout
        foreign = make_cart_line(user_id=2, product_id=1)

        with pytest.raises(EmptySelection):
            svc.create_order(USER, [foreign.id], address_id=user.addresses[0].id)
        assert _count(db, OrderModel) == 0

    def test_missing_shipping_info(self, db, svc, checkout):
        _, lines = checkout
        with pytest.raises(MissingShippingInfo):
            svc.create_order(USER, [lines[0].id])
        assert _count(db, OrderModel) == 0

    def test_unknown_address(self, db, svc, checkout):
        _, lines = checkout
        with pytest.raises(AddressNotFound):
            svc.create_order(USER, [lines[0].id], address_id=9999)
        assert _count(db, OrderModel) == 0

    def test_someone_elses_address(self, svc, checkout, make_user):
        _, lines = checkout
        other = make_user(2)
        with pytest.raises(AddressNotFound):
            svc.create_order(USER, [lines[0].id], address_id=other.addresses[0].id)

    def test_inline_address_copied_verbatim(self, svc, checkout):
        _, lines = checkout
        result = svc.create_order(USER, [lines[0].id], shipping_address=INLINE_ADDRESS)

        order = svc.get_order(USER, result["order_id"])
        assert order["shipping_address"] == INLINE_ADDRESS

    def test_address_book_wins_over_inline(self, svc, checkout):
        user, lines = checkout
        result = svc.create_order(
            USER,
            [lines[0].id],
            address_id=user.addresses[0].id,
            shipping_address=INLINE_ADDRESS,
        )
        assert svc.get_order(USER, result["order_id"])["shipping_address"]["city"] == "Lahore"

    def test_coupon_failure_rolls_back_everything(self, db, svc, dispatcher, checkout, make_coupon):
        user, lines = checkout
        make_coupon("GONE", expires_at=datetime.now(timezone.utc) - timedelta(days=1))

        with pytest.raises(Expired):
            svc.create_order(USER, [line.id for line in lines], address_id=user.addresses[0].id, coupon_code="GONE")

        assert _count(db, OrderModel) == 0
        assert _count(db, CartLineModel) == 2
        assert dispatcher.calls == []

    def test_coupon_limit_checked_at_checkout(self, db, svc, checkout, make_coupon, make_cart_line):
        user, lines = checkout
        make_coupon("ONCE", usage_limit=1)

        svc.create_order(USER, [lines[0].id], address_id=user.addresses[0].id, coupon_code="ONCE")
        with pytest.raises(LimitExceeded):
            svc.create_order(USER, [lines[1].id], address_id=user.addresses[0].id, coupon_code="ONCE")

        assert _count(db, OrderModel) == 1
        assert db.get(CartLineModel, lines[1].id) is not None

    def test_checkout_consumes_earlier_apply(self, db, svc, checkout, make_coupon):
        user, lines = checkout
        make_coupon("ONCE", usage_limit=1)
        CouponService(db).apply_coupon("ONCE", 1, Decimal("1000"))

        result = svc.create_order(USER, [lines[0].id], address_id=user.addresses[0].id, coupon_code="ONCE")

        assert svc.get_order(USER, result["order_id"])["coupon_code"] == "ONCE"
        db.expire_all()
        usage = db.execute(select(CouponUsageModel)).scalar_one()
        assert usage.used_count == 1
        assert usage.held_count == 0

        # uzycie skonsumowane, kolejne zamowienie przekracza limit
        with pytest.raises(LimitExceeded):
            svc.create_order(USER, [lines[1].id], address_id=user.addresses[0].id, coupon_code="ONCE")

    def test_failed_checkout_keeps_held_use(self, db, svc, checkout, make_coupon):
        user, lines = checkout
        make_coupon("ONCE", usage_limit=1)
        CouponService(db).apply_coupon("ONCE", 1, Decimal("1000"))

        with pytest.raises(AddressNotFound):
            svc.create_order(USER, [lines[0].id], address_id=424242, coupon_code="ONCE")

        db.expire_all()
        assert db.execute(select(CouponUsageModel)).scalar_one().held_count == 1

    def test_failed_checkout_leaves_no_redemption(self, db, svc, checkout, make_coupon):
        _, lines = checkout
        make_coupon("ONCE", usage_limit=1)

        with pytest.raises(AddressNotFound):
            svc.create_order(USER, [lines[0].id], address_id=424242, coupon_code="ONCE")

        assert _count(db, CouponUsageModel) == 0

    def test_guest_checkout(self, db, svc, make_cart_line, make_coupon):
        line = make_cart_line(user_id=None, guest_token=GUEST.guest_token, product_id=2, price="300")
        make_coupon("ONCE", usage_limit=1)

        result = svc.create_order(GUEST, [line.id], shipping_address=INLINE_ADDRESS, coupon_code="ONCE")

        order = svc.get_order(GUEST, result["order_id"])
        assert order["user_id"] is None
        assert order["total_price"] == Decimal("270.00")
        assert _count(db, CouponUsageModel) == 0

    def test_guest_cannot_use_address_book(self, svc, make_user, make_cart_line):
        user = make_user(1)
        line = make_cart_line(user_id=None, guest_token=GUEST.guest_token)
        with pytest.raises(AddressNotFound):
            svc.create_order(GUEST, [line.id], address_id=user.addresses[0].id)

    def test_anonymous_caller_rejected(self, svc):
        with pytest.raises(PermissionError):
            svc.create_order(Identity(), [1], shipping_address=INLINE_ADDRESS)


class TestInventoryAfterCommit:
    def test_sold_counters_incremented(self, db, checkout, make_inventory):
        user, lines = checkout
        make_inventory(1, sold=5)
        make_inventory(2)

        svc = OrderService(db, inventory_dispatcher=InlineInventoryDispatcher(db))
        svc.create_order(USER, [line.id for line in lines], address_id=user.addresses[0].id)

        db.expire_all()
        assert db.get(InventoryModel, 1).sold == 7
        assert db.get(InventoryModel, 2).sold == 1

    def test_dispatch_failure_keeps_order(self, db, checkout):
        user, lines = checkout
        svc = OrderService(db, inventory_dispatcher=FailingDispatcher())

        result = svc.create_order(USER, [lines[0].id], address_id=user.addresses[0].id)

        assert svc.get_order(USER, result["order_id"])["order_status"] == "pending"

    def test_unknown_product_does_not_fail_order(self, db, checkout, make_inventory):
        user, lines = checkout
        make_inventory(1)

        svc = OrderService(db, inventory_dispatcher=InlineInventoryDispatcher(db))
        result = svc.create_order(USER, [line.id for line in lines], address_id=user.addresses[0].id)

        db.expire_all()
        assert db.get(InventoryModel, 1).sold == 2
        assert svc.get_order(USER, result["order_id"])


class TestOrderLifecycle:
    @pytest.fixture
    def order_id(self, svc, checkout):
        user, lines = checkout
        return svc.create_order(USER, [lines[0].id], address_id=user.addresses[0].id)["order_id"]

    def test_owner_can_cancel_pending(self, svc, order_id):
        svc.cancel_order(USER, order_id)
        assert svc.get_order(USER, order_id)["order_status"] == "cancelled"

    def test_cancel_after_processing_rejected(self, svc, order_id):
        svc.set_payment_method(USER, order_id, "cod")
        with pytest.raises(InvalidTransition):
            svc.cancel_order(USER, order_id)

    def test_other_user_does_not_see_order(self, svc, order_id):
        with pytest.raises(OrderNotFound):
            svc.get_order(OTHER, order_id)
        with pytest.raises(OrderNotFound):
            svc.cancel_order(OTHER, order_id)
        assert svc.list_orders(OTHER) == []

    def test_list_orders(self, svc, order_id):
        assert [o["order_id"] for o in svc.list_orders(USER)] == [order_id]

    def test_cod_moves_to_processing(self, svc, order_id):
        svc.set_payment_method(USER, order_id, "COD")
        order = svc.get_order(USER, order_id)
        assert order["payment_method"] == "cod"
        assert order["order_status"] == "processing"
        assert order["is_paid"] is False

    def test_online_method_stays_pending(self, svc, order_id):
        svc.set_payment_method(USER, order_id, "stripe")
        assert svc.get_order(USER, order_id)["order_status"] == "pending"

    def test_unknown_payment_method(self, svc, order_id):
        with pytest.raises(InvalidPaymentMethod):
            svc.set_payment_method(USER, order_id, "bitcoin")

    def test_delivered_cod_marks_paid(self, svc, order_id):
        svc.set_payment_method(USER, order_id, "cod")
        svc.transition_order_status(order_id, "shipped")
        svc.transition_order_status(order_id, "delivered")

        order = svc.get_order_admin(order_id)
        assert order["order_status"] == "delivered"
        assert order["is_delivered"] is True
        assert order["is_paid"] is True
        assert order["delivered_at"] is not None
        assert order["paid_at"] is not None

    def test_completed_payment_result(self, svc, order_id):
        svc.set_payment_method(USER, order_id, "paypal")
        svc.record_payment_result(
            order_id,
            {"id": "PAY-1", "status": "COMPLETED", "update_time": "2024-01-01T10:00:00Z", "email_address": "a@b.pk"},
        )

        order = svc.get_order_admin(order_id)
        assert order["order_status"] == "processing"
        assert order["is_paid"] is True
        assert order["payment_result"]["id"] == "PAY-1"
        assert order["payment_result"]["email_address"] == "a@b.pk"

        svc.transition_order_status(order_id, "shipped")
        svc.transition_order_status(order_id, "delivered")
        assert svc.get_order_admin(order_id)["is_delivered"] is True

    def test_failed_payment_result_keeps_pending(self, svc, order_id):
        svc.record_payment_result(order_id, {"id": "PAY-2", "status": "FAILED"})

        order = svc.get_order_admin(order_id)
        assert order["order_status"] == "pending"
        assert order["is_paid"] is False
        assert order["payment_result"]["status"] == "FAILED"

    def test_admin_cannot_skip_payment(self, svc, order_id):
        with pytest.raises(InvalidTransition):
            svc.transition_order_status(order_id, "processing")
        with pytest.raises(InvalidTransition):
            svc.transition_order_status(order_id, "shipped")

    def test_admin_cancels_pending(self, svc, order_id):
        svc.transition_order_status(order_id, "cancelled")
        assert svc.get_order_admin(order_id)["order_status"] == "cancelled"

    def test_payment_method_only_while_pending(self, svc, order_id):
        svc.transition_order_status(order_id, "cancelled")
        with pytest.raises(InvalidTransition):
            svc.set_payment_method(USER, order_id, "stripe")

    def test_purge(self, db, svc, order_id):
        svc.purge_order(order_id)
        assert _count(db, OrderModel) == 0
        with pytest.raises(OrderNotFound):
            svc.purge_order(order_id)

    def test_list_all_orders_includes_payment_result(self, svc, order_id):
        orders = svc.list_all_orders()
        assert [o["order_id"] for o in orders] == [order_id]
        assert "payment_result" in orders[0]
