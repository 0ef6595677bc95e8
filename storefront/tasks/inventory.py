# storefront/tasks/inventory.py
from storefront.celery_worker import celery_app
from storefront.data import database
from storefront.services.inventory_service import InventoryReconciler
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.inventory.reconcile_inventory_task")
def reconcile_inventory_task(pairs):
    """pairs: [[product_id, quantity], ...] z zamowienia juz zapisanego w bazie."""
    logger.info(f"Reconcile inventory task started: {len(pairs)} pairs")

    if database.SessionLocal is None:
        database.init_db()

    db = database.SessionLocal()
    try:
        missing = InventoryReconciler(db).reconcile(pairs)
    except Exception as e:
        # zamowienie zostaje, licznik do poprawy recznie
        logger.error(f"Inventory reconciliation failed for {pairs}: {e}")
        raise
    finally:
        db.close()

    return {"pairs": len(pairs), "missing": missing}
