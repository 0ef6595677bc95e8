# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "storefront.tasks.inventory",
)

celery_app.conf.timezone = "UTC"
celery_app.conf.task_acks_late = True
