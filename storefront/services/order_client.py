# storefront/services/order_client.py
import requests
from pydantic import ValidationError as PydanticValidationError
from requests import RequestException

from storefront.domain.errors import OrderSubmissionError
from storefront.domain.schemas import Order, OrderDraft
from storefront.utils.settings import ORDER_SERVICE_URL, HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"Failed to create order (HTTP {resp.status_code})"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return f"Failed to create order (HTTP {resp.status_code})"


def _accepted_order(draft: OrderDraft, resp: requests.Response) -> Order:
    """
    Any 2xx means the backend took the order. Fields it echoes back override
    the draft; a missing, empty or unreadable body still yields the order.
    """
    fields = draft.model_dump()

    try:
        body = resp.json()
    except ValueError:
        body = None
    data = body.get("data", body) if isinstance(body, dict) else None

    if isinstance(data, dict):
        #id zostaje z draftu, to on wraca do klienta
        echoed = {
            k: v for k, v in data.items()
            if k in Order.model_fields and k != "id" and v is not None
        }
        try:
            return Order.model_validate({**fields, **echoed})
        except PydanticValidationError as e:
            logger.warning(f"Order {draft.id} accepted but response body ignored: {e}")

    return Order.model_validate(fields)


class OrderApiClient:
    """
    Order-creation collaborator backed by the storefront REST API.

    Not retried: a repeated POST could place the same cart twice, retrying is
    left to whoever calls checkout.
    """

    def __init__(self, base_url: str | None = None, timeout: float = HTTP_TIMEOUT_SECONDS):
        self.base_url = (base_url or ORDER_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    def create_order(self, draft: OrderDraft) -> Order:
        url = f"{self.base_url}/orders"
        logger.info(f"OrderApiClient POST {url} ({draft.id})")

        try:
            resp = requests.post(
                url,
                data=draft.model_dump_json(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except RequestException as e:
            raise OrderSubmissionError(f"Order service unreachable: {e}") from e

        if not resp.ok:
            raise OrderSubmissionError(_error_message(resp), status_code=resp.status_code)

        return _accepted_order(draft, resp)
