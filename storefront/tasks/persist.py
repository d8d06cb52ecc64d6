# storefront/tasks/persist.py
from redis.exceptions import RedisError

from storefront.celery_worker import celery_app
from storefront.repos.cart_storage_repo import CartStorageRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_storage: CartStorageRepo | None = None


def get_storage() -> CartStorageRepo:
    global _storage
    if _storage is None:
        _storage = CartStorageRepo()
    return _storage


@celery_app.task(name="storefront.tasks.persist.persist_cart_key_task")
def persist_cart_key_task(session_id: str, name: str, payload: str):
    """
    Mirror one serialized cart key into the local store.
    A failed write is logged and dropped, the in-memory cart stays authoritative.
    """
    try:
        get_storage().write(session_id, name, payload)
    except RedisError as e:
        logger.warning(f"Failed to persist {name} for session {session_id}: {e}")
        return {"session_id": session_id, "key": name, "status": "failed"}

    logger.info(f"Persisted {name} for session {session_id}")
    return {"session_id": session_id, "key": name, "status": "written"}
