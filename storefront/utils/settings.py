# storefront/utils/settings.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

ORDER_SERVICE_URL = os.getenv("ORDER_SERVICE_URL", "http://mock-backend:8000")
CATALOG_SERVICE_URL = os.getenv("CATALOG_SERVICE_URL", ORDER_SERVICE_URL)
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 5))
#ile sekund trzymamy pule produktow do rekomendacji
CATALOG_CACHE_SECONDS = float(os.getenv("CATALOG_CACHE_SECONDS", 60))

#klucze redis: <prefix>:<session>:cart, :savedItems, :recentlyViewed
STOREFRONT_KEY_PREFIX = os.getenv("STOREFRONT_KEY_PREFIX", "storefront")
PERSIST_IN_BACKGROUND = os.getenv("PERSIST_IN_BACKGROUND", "1").lower() in ("1", "true", "yes")
REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", 1))
BROKER_CONNECT_TIMEOUT = float(os.getenv("BROKER_CONNECT_TIMEOUT", 2))

TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.10"))
FLAT_SHIPPING_FEE = Decimal(os.getenv("FLAT_SHIPPING_FEE", "5"))
RECENTLY_VIEWED_LIMIT = int(os.getenv("RECENTLY_VIEWED_LIMIT", 8))
RECOMMENDATION_LIMIT = int(os.getenv("RECOMMENDATION_LIMIT", 4))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
