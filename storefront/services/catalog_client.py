# storefront/services/catalog_client.py
from typing import List

import requests

from storefront.domain.schemas import ProductRef
from storefront.utils.retry import http_retry
from storefront.utils.settings import CATALOG_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _unwrap(body):
    #backend owija odpowiedzi w {"data": ...}
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class CatalogClient:
    """Read-only access to the catalog: candidate pool and single products."""

    def __init__(self, base_url: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or CATALOG_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_products(self) -> List[ProductRef]:
        url = f"{self.base_url}/products"
        logger.info(f"CatalogClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        data = _unwrap(resp.json())
        if not isinstance(data, list):
            raise ValueError(f"Unexpected catalog payload from {url}")
        return [ProductRef.model_validate(p) for p in data]

    @http_retry()
    def fetch_product(self, product_id: str) -> ProductRef:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"CatalogClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return ProductRef.model_validate(_unwrap(resp.json()))
