# storefront/repos/cart_storage_repo.py
import redis

from storefront.utils.retry import redis_retry, redis_write_retry
from storefront.utils.settings import REDIS_SOCKET_TIMEOUT, REDIS_URL, STOREFRONT_KEY_PREFIX

CART_KEY = "cart"
SAVED_ITEMS_KEY = "savedItems"
RECENTLY_VIEWED_KEY = "recentlyViewed"


class CartStorageRepo:
    """
    Key-value store for serialized cart state, one redis string per key:
    <prefix>:<session_id>:cart / :savedItems / :recentlyViewed
    Values are JSON arrays, the repo does not interpret them.
    """

    def __init__(
        self,
        client: redis.Redis | None = None,
        url: str | None = None,
        prefix: str = STOREFRONT_KEY_PREFIX,
        socket_timeout: float = REDIS_SOCKET_TIMEOUT,
    ):
        #krotkie timeouty, niedzialajacy redis nie moze wieszac zapisow koszyka
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self.prefix = prefix

    def key(self, session_id: str, name: str) -> str:
        return f"{self.prefix}:{session_id}:{name}"

    @redis_retry()
    def read(self, session_id: str, name: str) -> str | None:
        value = self.redis.get(self.key(session_id, name))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    @redis_write_retry()
    def write(self, session_id: str, name: str, payload: str) -> None:
        self.redis.set(self.key(session_id, name), payload)

    def close(self) -> None:
        self.redis.close()
