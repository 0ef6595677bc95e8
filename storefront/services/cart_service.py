# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.errors import CartLineNotFound, Conflict, NotFound
from storefront.domain.identity import Identity
from storefront.repos.cart_repo import CartRepo
from storefront.services.product_client import ProductClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _line_to_dict(line: CartLineModel) -> Dict[str, Any]:
    return {
        "id": line.id,
        "product_id": line.product_id,
        "name": line.name,
        "price": line.price,
        "old_price": line.old_price,
        "image": line.image,
        "brand": line.brand,
        "shipping_fee": line.shipping_fee,
        "quantity": line.quantity,
        "color": line.color,
        "size": line.size,
        "line_total": line.line_total,
    }


def _require_owner(identity: Identity):
    if identity.is_anonymous:
        raise PermissionError("Login or guest session required.")


class CartSnapshotReader:
    """
    Zwraca wybrane linie koszyka z cena z momentu dodania.
    Linie innych wlascicieli sa po cichu pomijane.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)

    def read(self, identity: Identity, line_ids: Iterable[int]) -> List[CartLineModel]:
        requested = set(line_ids)
        lines = self.repo.get_lines_by_ids(identity, requested)

        if len(lines) != len(requested):
            logger.info(
                f"Pominieto {len(requested) - len(lines)} linii koszyka spoza wlasciciela"
            )
        return lines


class CartService:
    """
    Use case'y dla linii koszyka
    commands (add, update, remove) modyfikuja stan
    query (list) tylko odczyt
    """

    def __init__(self, db: Session, product_client: ProductClient):
        self.repo = CartRepo(db)
        self.product_client = product_client

    #query - odczyt
    def list_lines(self, identity: Identity) -> List[Dict[str, Any]]:
        _require_owner(identity)
        return [_line_to_dict(line) for line in self.repo.get_lines(identity)]

    #commands
    def add_line(
        self,
        identity: Identity,
        product_id: int,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> Dict[str, Any]:
        _require_owner(identity)

        if quantity < 1:
            raise ValueError("Product quantity required at least 1.")

        logger.info(f"Pobieranie danych produktu {product_id} z product-service")
        pdata = self.product_client.fetch_product(product_id)
        if not pdata:
            raise NotFound("Product not found.")

        existing = self.repo.find_line(identity, product_id, color, size)

        try:
            if existing:
                logger.info(
                    f"Produkt {product_id} już jest w koszyku, zwiekszam ilosc "
                    f"z {existing.quantity} do {existing.quantity + quantity}"
                )
                rowcount = self.repo.update_line_version(
                    line_id=existing.id,
                    old_version=existing.version,
                    new_data={
                        "quantity": existing.quantity + quantity,
                        "version": existing.version + 1,
                    },
                )
                if rowcount == 0:
                    raise Conflict("Cart was modified by another operation.")
                line = existing
            else:
                line = self.repo.add_line(
                    CartLineModel(
                        user_id=identity.user_id,
                        guest_token=None if identity.user_id is not None else identity.guest_token,
                        product_id=product_id,
                        name=pdata["name"],
                        price=Decimal(str(pdata["price"])),
                        old_price=_optional_decimal(pdata.get("old_price")),
                        image=pdata.get("image"),
                        brand=pdata.get("brand"),
                        shipping_fee=Decimal(str(pdata.get("shipping_price") or 0)),
                        quantity=quantity,
                        color=color,
                        size=size,
                    )
                )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Produkt {product_id} dodany do koszyka, linia {line.id}")
        return _line_to_dict(line)

    def update_quantity(self, identity: Identity, line_id: int, quantity: int) -> Dict[str, Any]:
        _require_owner(identity)

        if quantity < 1:
            raise ValueError("Product quantity required at least 1.")

        line = self.repo.get_line(identity, line_id)
        if not line:
            raise CartLineNotFound()

        # Optimistic locking na polu version
        rowcount = self.repo.update_line_version(
            line_id=line.id,
            old_version=line.version,
            new_data={"quantity": quantity, "version": line.version + 1},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise Conflict("Cart was modified by another operation.")

        self.repo.commit()
        return _line_to_dict(line)

    def remove_line(self, identity: Identity, line_id: int) -> None:
        _require_owner(identity)

        line = self.repo.get_line(identity, line_id)
        if not line:
            raise CartLineNotFound("Invalid cart.")

        self.repo.delete_lines([line.id])
        self.repo.commit()
        logger.info(f"Linia koszyka {line_id} usunieta")

    def remove_lines(self, identity: Identity, line_ids: Iterable[int]) -> int:
        _require_owner(identity)

        # tylko wlasne linie, cudze id sa ignorowane
        owned = self.repo.get_lines_by_ids(identity, set(line_ids))
        removed = self.repo.delete_lines([line.id for line in owned])
        self.repo.commit()
        return removed


def _optional_decimal(value):
    return None if value is None else Decimal(str(value))
