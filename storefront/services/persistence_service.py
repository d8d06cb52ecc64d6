# storefront/services/persistence_service.py
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Tuple

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError
from redis.exceptions import RedisError

from storefront.domain.schemas import CartSnapshot, LineItem, ProductRef
from storefront.repos.cart_storage_repo import (
    CartStorageRepo,
    CART_KEY,
    SAVED_ITEMS_KEY,
    RECENTLY_VIEWED_KEY,
)
from storefront.tasks.persist import persist_cart_key_task
from storefront.utils.logging import get_logger
from storefront.utils.settings import PERSIST_IN_BACKGROUND

logger = get_logger(__name__)

_line_items = TypeAdapter(List[LineItem])
_products = TypeAdapter(List[ProductRef])


class PersistenceAdapter:
    """
    Mirrors cart state into the local key-value store.

    - load: read all three keys once, when a cart session starts
    - mirror: rewrite the keys a mutation touched

    Mirroring never blocks the caller. Payloads are serialized right away and
    handed to a single writer thread, so keys land in the order the mutations
    happened. The writer either publishes a celery task (`background=True`)
    or writes the store directly. A failing store or broker is logged and
    ignored.
    """

    def __init__(
        self,
        storage: CartStorageRepo | None = None,
        background: bool = PERSIST_IN_BACKGROUND,
    ):
        self.storage = storage or CartStorageRepo()
        self.background = background
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cart-mirror")

    def load(self, session_id: str) -> CartSnapshot:
        #zapisy w kolejce musza trafic do store przed odczytem
        self.flush()

        items = self._read(session_id, CART_KEY, _line_items)
        saved = self._read(session_id, SAVED_ITEMS_KEY, _line_items)
        viewed = self._read(session_id, RECENTLY_VIEWED_KEY, _products)

        logger.info(
            f"Loaded session {session_id}: {len(items)} items, "
            f"{len(saved)} saved, {len(viewed)} recently viewed"
        )
        return CartSnapshot(
            items=tuple(items),
            saved_items=tuple(saved),
            recently_viewed=tuple(viewed),
        )

    def mirror(self, session_id: str, snapshot: CartSnapshot, keys: Iterable[str]) -> None:
        payloads = [(name, serialize(snapshot, name)) for name in keys]
        if payloads:
            self._writer.submit(self._write_all, session_id, payloads)

    def flush(self, timeout: float | None = None) -> None:
        """Wait until every mirror queued so far has been handed off."""
        #jeden worker, wiec pusty task konczy sie po wszystkich wczesniejszych
        self._writer.submit(lambda: None).result(timeout=timeout)

    def close(self) -> None:
        self._writer.shutdown(wait=True)
        self.storage.close()

    def _read(self, session_id: str, name: str, adapter: TypeAdapter) -> list:
        try:
            raw = self.storage.read(session_id, name)
        except RedisError as e:
            logger.warning(f"Could not read {name} for session {session_id}: {e}")
            return []

        if not raw:
            return []

        try:
            return adapter.validate_json(raw)
        except SchemaError as e:
            logger.warning(f"Discarding unreadable {name} for session {session_id}: {e}")
            return []

    def _write_all(self, session_id: str, payloads: List[Tuple[str, str]]) -> None:
        for name, payload in payloads:
            self._dispatch(session_id, name, payload)

    def _dispatch(self, session_id: str, name: str, payload: str) -> None:
        try:
            if self.background:
                persist_cart_key_task.apply_async(args=(session_id, name, payload), retry=False)
            else:
                self.storage.write(session_id, name, payload)
        except Exception as e:
            #broker albo redis nie dziala, pamiec zostaje zrodlem prawdy
            logger.warning(f"Persisting {name} for session {session_id} failed: {e}")


def serialize(snapshot: CartSnapshot, name: str) -> str:
    if name == CART_KEY:
        return _line_items.dump_json(list(snapshot.items)).decode()
    if name == SAVED_ITEMS_KEY:
        return _line_items.dump_json(list(snapshot.saved_items)).decode()
    if name == RECENTLY_VIEWED_KEY:
        return _products.dump_json(list(snapshot.recently_viewed)).decode()
    raise ValueError(f"Unknown cart storage key {name!r}")
