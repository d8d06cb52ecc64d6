# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import (
    BROKER_CONNECT_TIMEOUT,
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
)

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#taski trzeba zaimportowac jawnie, inaczej worker ich nie zarejestruje
celery_app.conf.imports = (
    "storefront.tasks.persist",
    "storefront.services.notification_service",
)

celery_app.conf.timezone = "UTC"

#publikacja bez retry, zadania sa fire-and-forget
celery_app.conf.task_publish_retry = False
celery_app.conf.broker_connection_timeout = BROKER_CONNECT_TIMEOUT
