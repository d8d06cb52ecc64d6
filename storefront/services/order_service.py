# storefront/services/order_service.py
import secrets
import string
import threading
from datetime import datetime, timezone
from typing import Callable, Protocol

from storefront.domain.errors import CheckoutInProgressError, ValidationError
from storefront.domain.schemas import Order, OrderDraft
from storefront.services import pricing
from storefront.services.cart_service import CartService
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_ID_ALPHABET = string.digits + string.ascii_uppercase
ORDER_ID_SUFFIX_LENGTH = 4


def generate_order_id(now: datetime | None = None) -> str:
    """
    ORD-<YYYYMMDD>-<4 base-36 chars>, e.g. ORD-20261018-7KQ2.

    The suffix is random per call and not checked for uniqueness
    (36**4 ids per day).
    """
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_SUFFIX_LENGTH))
    return f"ORD-{now:%Y%m%d}-{suffix}"


class OrderCreator(Protocol):
    def create_order(self, draft: OrderDraft) -> Order: ...


class OrderService:
    """
    Use Case: Zlozenie zamowienia z aktualnego koszyka.

    1. Odrzuca pusty koszyk
    2. Buduje draft z nowym id i biezacymi totalami
    3. Wysyla go do serwisu zamowien
    4. Dopiero po akceptacji czysci koszyk

    Nieudane wyslanie zostawia koszyk bez zmian.
    """

    def __init__(
        self,
        cart: CartService,
        order_client: OrderCreator,
        notification_service: NotificationService | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.cart = cart
        self.order_client = order_client
        self.notification_service = notification_service
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.last_order: Order | None = None

        self._in_flight = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._in_flight.locked()

    def complete_order(self, payment_method_id: str) -> str:
        #jeden checkout na koszyk naraz, podwojny klik nie zlozy dwoch zamowien
        if not self._in_flight.acquire(blocking=False):
            raise CheckoutInProgressError()

        try:
            draft = self._build_draft(payment_method_id)

            logger.info(
                f"Submitting order {draft.id} for cart {self.cart.session_id}, total {draft.total}"
            )
            try:
                order = self.order_client.create_order(draft)
            except Exception as e:
                logger.error(f"Order {draft.id} was not created, cart left untouched: {e}")
                raise

            self.cart.clear_cart()
            self.last_order = order

            logger.info(f"Order {draft.id} completed for cart {self.cart.session_id}")

            if self.notification_service is not None:
                self.notification_service.send_order_notification(
                    self.cart.session_id, draft.id, str(draft.total)
                )

            return draft.id
        finally:
            self._in_flight.release()

    def _build_draft(self, payment_method_id: str) -> OrderDraft:
        snapshot = self.cart.snapshot

        if not snapshot.items:
            raise ValidationError("cannot complete an empty order")

        subtotal = pricing.subtotal(snapshot.items)
        totals = pricing.compute_totals(subtotal, snapshot.discount_amount)

        return OrderDraft(
            id=generate_order_id(self.clock()),
            total=totals.total,
            status="completed",
            payment_method_id=payment_method_id,
            payment_status="paid",
            items=list(snapshot.items),
            discount_amount=snapshot.discount_amount,
        )
