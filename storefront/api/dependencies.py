# storefront/api/dependencies.py
import threading
import time
from typing import Dict, List, Tuple

from fastapi import Query, Request
from requests import RequestException

from storefront.domain.schemas import ProductRef
from storefront.services.cart_service import CartService
from storefront.services.catalog_client import CatalogClient
from storefront.services.notification_service import NotificationService
from storefront.services.order_client import OrderApiClient
from storefront.services.order_service import OrderCreator, OrderService
from storefront.services.persistence_service import PersistenceAdapter
from storefront.utils.logging import get_logger
from storefront.utils.settings import CATALOG_CACHE_SECONDS

logger = get_logger(__name__)


class SessionRegistry:
    """
    One CartService (and its OrderService) per storefront session.
    Carts are initialized on first use and disposed with the application.

    The recommendation pool is fetched from the catalog at most once per
    `catalog_ttl` seconds and shared by all sessions.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter | None = None,
        order_client: OrderCreator | None = None,
        catalog_client: CatalogClient | None = None,
        notification_service: NotificationService | None = None,
        catalog_ttl: float = CATALOG_CACHE_SECONDS,
    ):
        #zamykamy tylko store otwarty tutaj
        self._owns_persistence = persistence is None
        self.persistence = persistence if persistence is not None else PersistenceAdapter()
        self.order_client = order_client or OrderApiClient()
        self.catalog_client = catalog_client or CatalogClient()
        self.notification_service = notification_service or NotificationService()
        self.catalog_ttl = catalog_ttl

        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[CartService, OrderService]] = {}

        self._pool_lock = threading.Lock()
        self._pool: List[ProductRef] = []
        self._pool_fetched_at: float | None = None

    def _session(self, session_id: str) -> Tuple[CartService, OrderService]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                cart = CartService(session_id, persistence=self.persistence).init()
                orders = OrderService(
                    cart,
                    self.order_client,
                    notification_service=self.notification_service,
                )
                session = (cart, orders)
                self._sessions[session_id] = session
            return session

    def cart(self, session_id: str) -> CartService:
        return self._session(session_id)[0]

    def orders(self, session_id: str) -> OrderService:
        return self._session(session_id)[1]

    def candidate_pool(self) -> List[ProductRef]:
        with self._pool_lock:
            now = time.monotonic()
            if self._pool_fetched_at is not None and now - self._pool_fetched_at < self.catalog_ttl:
                return list(self._pool)

            try:
                self._pool = self.catalog_client.fetch_products()
            except (RequestException, ValueError) as e:
                #rekomendacje sa opcjonalne, koszyk dziala bez nich
                logger.warning(f"Catalog unavailable, no recommendations: {e}")
                self._pool = []

            #pusta pula po awarii tez zostaje na ttl
            self._pool_fetched_at = now
            return list(self._pool)

    def dispose_all(self) -> None:
        with self._lock:
            for cart, _ in self._sessions.values():
                cart.dispose()
            self._sessions.clear()
        if self._owns_persistence:
            self.persistence.close()


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def session_param(session_id: str = Query(..., min_length=1, max_length=128)) -> str:
    return session_id
