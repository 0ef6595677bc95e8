# storefront/services/inventory_service.py
"""
Rekoncyliacja magazynu po zamowieniu: sold += ilosc dla kazdego produktu.

Dziala po commit zamowienia i nigdy go nie cofa. Blad jest logowany,
ponowienie odbywa sie poza requestem (task celery + tenacity).
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from storefront.repos.inventory_repo import InventoryRepo
from storefront.utils.retry import db_retry
from storefront.utils.settings import INVENTORY_DISPATCH
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def merge_pairs(pairs: Iterable[Tuple[int, int]]) -> Dict[int, int]:
    # kilka linii tego samego produktu (np. rozne rozmiary) -> jeden inkrement
    merged: Dict[int, int] = OrderedDict()
    for product_id, quantity in pairs:
        merged[int(product_id)] = merged.get(int(product_id), 0) + int(quantity)
    return merged


class InventoryReconciler:
    def __init__(self, db: Session):
        self.repo = InventoryRepo(db)

    def reconcile(self, pairs: Iterable[Tuple[int, int]]) -> List[int]:
        """Zwraca id produktow bez wpisu magazynowego (do wyjasnienia recznie)."""
        return self._increment_all(merge_pairs(pairs))

    @db_retry()
    def _increment_all(self, merged: Dict[int, int]) -> List[int]:
        missing = []
        try:
            for product_id, quantity in merged.items():
                if self.repo.increment_sold(product_id, quantity) == 0:
                    missing.append(product_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        for product_id in missing:
            logger.warning(f"Brak wpisu magazynowego dla produktu {product_id}, sold nie zaktualizowany")
        return missing


class CeleryInventoryDispatcher:
    """Wysyla rekoncyliacje do workera celery."""

    def dispatch(self, pairs: Iterable[Tuple[int, int]]) -> None:
        from storefront.tasks.inventory import reconcile_inventory_task

        reconcile_inventory_task.delay([[int(p), int(q)] for p, q in pairs])


class InlineInventoryDispatcher:
    """Rekoncyliacja w tym samym procesie, po commit zamowienia (dev / testy)."""

    def __init__(self, db: Session):
        self.db = db

    def dispatch(self, pairs: Iterable[Tuple[int, int]]) -> None:
        InventoryReconciler(self.db).reconcile(pairs)


def build_dispatcher(db: Session, mode: str = INVENTORY_DISPATCH):
    if mode == "inline":
        return InlineInventoryDispatcher(db)
    if mode == "celery":
        return CeleryInventoryDispatcher()
    raise ValueError(f"Unknown INVENTORY_DISPATCH mode: {mode}")
