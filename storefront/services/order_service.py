# storefront/services/order_service.py
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderItemModel
from storefront.domain.errors import (
    Conflict,
    EmptySelection,
    InvalidPaymentMethod,
    InvalidTransition,
    MissingShippingInfo,
    OrderNotFound,
)
from storefront.domain.identity import Identity
from storefront.domain.order_status import (
    OrderStatus,
    PaymentMethod,
    assert_admin_transition,
    can_transition,
    transition_fields,
)
from storefront.domain.pricing import price_order
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.address_service import AddressResolver
from storefront.services.cart_service import CartSnapshotReader
from storefront.services.coupon_service import CouponService
from storefront.services.inventory_service import build_dispatcher
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _order_to_dict(order: OrderModel, include_payment_result: bool = False) -> Dict[str, Any]:
    data = {
        "order_id": order.order_id,
        "user_id": order.user_id,
        "order_status": order.order_status,
        "shipping_address": {
            "username": order.ship_username,
            "phone": order.ship_phone,
            "address": order.ship_address,
            "city": order.ship_city,
            "region": order.ship_region,
            "district": order.ship_district,
            "landmark": order.ship_landmark,
            "ship_to": order.ship_to,
        },
        "items": [
            {
                "product_id": i.product_id,
                "name": i.name,
                "price": i.price,
                "quantity": i.quantity,
                "image": i.image,
                "color": i.color,
                "size": i.size,
            }
            for i in order.items
        ],
        "payment_method": order.payment_method,
        "coupon_code": order.coupon_code,
        "items_price": order.items_price,
        "discount_price": order.discount_price,
        "shipping_price": order.shipping_price,
        "tax_price": order.tax_price,
        "total_price": order.total_price,
        "is_paid": order.is_paid,
        "paid_at": order.paid_at,
        "is_delivered": order.is_delivered,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
    }
    if include_payment_result:
        data["payment_result"] = {
            "id": order.payment_result_id,
            "status": order.payment_result_status,
            "update_time": order.payment_result_update_time,
            "email_address": order.payment_result_email,
        }
    return data


class OrderService:
    """
    Serwis domeny zamowien.
    create_order sklada caly agregat w jednej transakcji: kupon, pozycje,
    adres, id zamowienia i zuzyte linie koszyka. Rekoncyliacja magazynu
    idzie osobno, po commit.
    """

    def __init__(self, db: Session, inventory_dispatcher=None):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.cart_reader = CartSnapshotReader(db)
        self.address_resolver = AddressResolver(db)
        self.coupons = CouponService(db)
        self.inventory = inventory_dispatcher or build_dispatcher(db)

    #commands
    def create_order(
        self,
        identity: Identity,
        cart_line_ids: Iterable[int],
        address_id: int | None = None,
        shipping_address=None,
        shipping_price=0,
        tax_price=0,
        coupon_code: str | None = None,
    ) -> Dict[str, Any]:
        """
        Use Case: Tworzenie zamowienia z wybranych linii koszyka.

        1. Pusta selekcja -> EmptySelection, nic nie jest zapisywane
        2. Adres z ksiazki adresowej albo z requestu
        3. Snapshot linii koszyka (tylko wlasne)
        4. Kupon (walidacja + ledger w tej samej transakcji)
        5. Zamrozenie pozycji, flush -> id, order_id = id.upper()
        6. Commit, potem rekoncyliacja magazynu
        """
        if identity.is_anonymous:
            raise PermissionError("Login or guest session required.")

        line_ids = list(cart_line_ids or [])
        if not line_ids:
            raise EmptySelection()

        if address_id is None and shipping_address is None:
            raise MissingShippingInfo()

        try:
            address = self.address_resolver.resolve(identity, address_id, shipping_address)

            lines = self.cart_reader.read(identity, line_ids)
            if not lines:
                raise EmptySelection()

            line_totals = [line.line_total for line in lines]

            discount = None
            if coupon_code:
                items_price = price_order(line_totals).items_price
                discount = self.coupons.redeem_for_order(coupon_code, identity.user_id, items_price)

            pricing = price_order(line_totals, discount, shipping_price, tax_price)

            order = OrderModel(
                user_id=identity.user_id,
                guest_token=None if identity.user_id is not None else identity.guest_token,
                order_status=OrderStatus.PENDING.value,
                coupon_code=discount.code if discount else None,
                items_price=pricing.items_price,
                discount_price=pricing.discount_price,
                shipping_price=pricing.shipping_price,
                tax_price=pricing.tax_price,
                total_price=pricing.total_price,
                items=[
                    OrderItemModel(
                        product_id=line.product_id,
                        name=line.name,
                        price=line.price,
                        quantity=line.quantity,
                        image=line.image,
                        color=line.color,
                        size=line.size,
                    )
                    for line in lines
                ],
                **address.to_columns(),
            )

            # id nadaje baza przy flush, dopiero wtedy mozna ustawic order_id
            self.repo.create_order(order)
            order.order_id = order.id.upper()

            sold = [(line.product_id, line.quantity) for line in lines]
            self.cart_repo.delete_lines([line.id for line in lines])

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {order.order_id} created: {len(sold)} items, total {order.total_price}"
        )

        self._reconcile_inventory(order.order_id, sold)

        return {"order_id": order.order_id}

    def cancel_order(self, identity: Identity, order_id: str) -> None:
        order = self.repo.get_owned_order(order_id, identity)
        if not order:
            raise OrderNotFound()

        if order.order_status != OrderStatus.PENDING.value:
            raise InvalidTransition("You cannot cancel this order.")

        now = datetime.now(timezone.utc)
        self._apply(order, transition_fields(OrderStatus.CANCELLED, order.payment_method, now))
        logger.info(f"Order {order_id} cancelled by owner")

    def set_payment_method(self, identity: Identity, order_id: str, method: str) -> None:
        try:
            payment_method = PaymentMethod(method.strip().lower())
        except ValueError:
            raise InvalidPaymentMethod(f"Unsupported payment method: {method}.")

        order = self.repo.get_owned_order(order_id, identity)
        if not order:
            raise OrderNotFound()

        if order.order_status != OrderStatus.PENDING.value:
            raise InvalidTransition("Payment method can only be set on a pending order.")

        now = datetime.now(timezone.utc)
        fields = {"payment_method": payment_method.value, "updated_at": now}

        # COD: zamowienie idzie do realizacji od razu, zaplata przy dostawie
        if payment_method == PaymentMethod.COD:
            fields.update(transition_fields(OrderStatus.PROCESSING, payment_method.value, now))

        self._apply(order, fields)
        logger.info(f"Order {order_id}: payment method {payment_method.value}")

    def record_payment_result(self, order_id: str, result: Dict[str, Any]) -> None:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound()

        current = OrderStatus(order.order_status)
        if current not in (OrderStatus.PENDING, OrderStatus.PROCESSING):
            raise InvalidTransition("Payment cannot be recorded for this order.")

        now = datetime.now(timezone.utc)
        fields = {
            "payment_result_id": result.get("id"),
            "payment_result_status": result.get("status"),
            "payment_result_update_time": result.get("update_time"),
            "payment_result_email": result.get("email_address"),
            "updated_at": now,
        }

        if str(result.get("status", "")).upper() == "COMPLETED":
            fields["is_paid"] = True
            fields["paid_at"] = now
            if can_transition(current, OrderStatus.PROCESSING):
                fields.update(transition_fields(OrderStatus.PROCESSING, order.payment_method, now))

        self._apply(order, fields)
        logger.info(f"Order {order_id}: payment result {result.get('status')}")

    def transition_order_status(self, order_id: str, target_status: str) -> None:
        """Use Case: reczna zmiana statusu przez admina."""
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound()

        assert_admin_transition(order.order_status, target_status)

        now = datetime.now(timezone.utc)
        self._apply(order, transition_fields(OrderStatus(target_status), order.payment_method, now))
        logger.info(f"Order {order_id}: status -> {target_status}")

    def purge_order(self, order_id: str) -> None:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound()

        self.repo.delete_order(order)
        self.repo.commit()
        logger.info(f"Order {order_id} purged")

    #query
    def get_order(self, identity: Identity, order_id: str) -> Dict[str, Any]:
        order = self.repo.get_owned_order(order_id, identity)
        if not order:
            raise OrderNotFound()
        return _order_to_dict(order)

    def list_orders(self, identity: Identity) -> List[Dict[str, Any]]:
        return [_order_to_dict(o) for o in self.repo.list_owned_orders(identity)]

    def list_all_orders(self) -> List[Dict[str, Any]]:
        return [_order_to_dict(o, include_payment_result=True) for o in self.repo.list_orders()]

    def get_order_admin(self, order_id: str) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound()
        return _order_to_dict(order, include_payment_result=True)

    def _apply(self, order: OrderModel, fields: Dict[str, Any]) -> None:
        # Optimistic locking, np. update set version 2 where id X and version 1
        rowcount = self.repo.update_order_version(
            pk=order.id,
            old_version=order.version,
            new_data={**fields, "version": order.version + 1},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise Conflict("Order was modified by another operation.")

        self.repo.commit()

    def _reconcile_inventory(self, order_id: str, sold) -> None:
        # zamowienie jest juz zapisane; blad licznikow nie moze go cofnac
        try:
            self.inventory.dispatch(sold)
        except Exception as e:
            logger.error(f"Inventory reconciliation for order {order_id} failed: {e}")
