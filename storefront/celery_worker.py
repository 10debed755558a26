# storefront/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

# every mapper has to be registered before a task touches the session
import storefront.data.models  # noqa: F401
from storefront.utils.logging import configure_logging
from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    CART_EXPIRY_INTERVAL_SECONDS,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#explicit imports so the worker registers every task
celery_app.conf.imports = (
    "storefront.tasks.expire",
    "storefront.services.analytics_service",
)

celery_app.conf.beat_schedule = {
    "expire-carts": {
        "task": "storefront.tasks.expire.expire_carts_task",
        "schedule": CART_EXPIRY_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
# analytics tasks are fire-and-forget, an eager failure must not reach the caller
celery_app.conf.task_eager_propagates = False


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()
