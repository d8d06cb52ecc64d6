# storefront/services/cart_service.py
import threading
from decimal import Decimal
from typing import Any, Callable, Dict, List, Sequence

from storefront.domain.schemas import CartSnapshot, CartTotals, LineItem, ProductRef
from storefront.repos.cart_storage_repo import CART_KEY, SAVED_ITEMS_KEY, RECENTLY_VIEWED_KEY
from storefront.services import pricing
from storefront.services.discount_service import DiscountCodeTable
from storefront.services.persistence_service import PersistenceAdapter
from storefront.services.recommendation_service import recommend
from storefront.utils.logging import get_logger
from storefront.utils.settings import RECENTLY_VIEWED_LIMIT

logger = get_logger(__name__)

#pole snapshotu -> klucz w store (rabat tylko w pamieci)
_PERSISTED_FIELDS = {
    "items": CART_KEY,
    "saved_items": SAVED_ITEMS_KEY,
    "recently_viewed": RECENTLY_VIEWED_KEY,
}


def _find(items: Sequence[LineItem], item_id: str) -> LineItem | None:
    return next((i for i in items if i.id == item_id), None)


def _without(items: Sequence[LineItem], item_id: str) -> tuple[LineItem, ...]:
    return tuple(i for i in items if i.id != item_id)


def _merge(items: Sequence[LineItem], item: LineItem) -> tuple[LineItem, ...]:
    """Add `item` to `items`, summing quantities when the id is already there."""
    existing = _find(items, item.id)
    if existing is None:
        return tuple(items) + (item,)

    merged = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
    return tuple(merged if i.id == item.id else i for i in items)


def _dedupe_products(products: Sequence[ProductRef], limit: int) -> tuple[ProductRef, ...]:
    seen: set[str] = set()
    result = []
    for p in products:
        if p.id not in seen:
            seen.add(p.id)
            result.append(p)
    return tuple(result[:limit])


def normalize_snapshot(snapshot: CartSnapshot, recently_viewed_limit: int = RECENTLY_VIEWED_LIMIT) -> CartSnapshot:
    """
    Restore the cart invariants on state read back from storage:
    one entry per id in each list, no id both in the cart and saved,
    recently viewed deduplicated and capped.
    """
    items: tuple[LineItem, ...] = ()
    for i in snapshot.items:
        items = _merge(items, i)

    in_cart = {i.id for i in items}
    saved: tuple[LineItem, ...] = ()
    for i in snapshot.saved_items:
        if i.id not in in_cart:
            saved = _merge(saved, i)

    return CartSnapshot(
        items=items,
        saved_items=saved,
        recently_viewed=_dedupe_products(snapshot.recently_viewed, recently_viewed_limit),
        discount_amount=snapshot.discount_amount,
    )


class CartService:
    """
    Stan koszyka jednej sesji sklepu (cqrs jak w reszcie serwisow).
    query (snapshot, items, totals, recommendations) tylko czytaja,
    commands (add, remove, save, discount...) podmieniaja CartSnapshot.

    Kazda komenda to read-modify-write na najnowszym snapshocie pod lockiem,
    wiec szybkie przeplatane wywolania nie gubia zmian. Snapshoty sa frozen,
    wartosci pochodne liczone sa z `items` przy kazdym odczycie.

    Nieznane id = no-op, nigdy blad.
    """

    def __init__(
        self,
        session_id: str,
        persistence: PersistenceAdapter | None = None,
        discounts: DiscountCodeTable | None = None,
        candidate_pool: Sequence[ProductRef] = (),
        recently_viewed_limit: int = RECENTLY_VIEWED_LIMIT,
    ):
        self.session_id = session_id
        self.persistence = persistence
        self.discounts = discounts or DiscountCodeTable()
        self.candidate_pool = tuple(candidate_pool)
        self.recently_viewed_limit = recently_viewed_limit

        self._lock = threading.RLock()
        self._snapshot = CartSnapshot()
        self._initialized = False

    # =====================================================
    # LIFECYCLE
    # =====================================================
    def init(self) -> "CartService":
        with self._lock:
            if self._initialized:
                return self

            if self.persistence is not None:
                loaded = self.persistence.load(self.session_id)
                self._snapshot = normalize_snapshot(loaded, self.recently_viewed_limit)

            self._initialized = True

        logger.info(f"Cart session {self.session_id} initialized")
        return self

    def dispose(self) -> None:
        with self._lock:
            if not self._initialized:
                return
            self._snapshot = CartSnapshot()
            self._initialized = False

        logger.info(f"Cart session {self.session_id} disposed")

    @property
    def initialized(self) -> bool:
        return self._initialized

    # =====================================================
    # QUERY
    # =====================================================
    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def items(self) -> List[LineItem]:
        return list(self._snapshot.items)

    @property
    def saved_items(self) -> List[LineItem]:
        return list(self._snapshot.saved_items)

    @property
    def recently_viewed(self) -> List[ProductRef]:
        return list(self._snapshot.recently_viewed)

    @property
    def discount_amount(self) -> Decimal:
        return self._snapshot.discount_amount

    @property
    def item_count(self) -> int:
        return pricing.item_count(self._snapshot.items)

    @property
    def subtotal(self) -> Decimal:
        return pricing.subtotal(self._snapshot.items)

    def totals(self) -> CartTotals:
        snapshot = self._snapshot
        return pricing.compute_totals(pricing.subtotal(snapshot.items), snapshot.discount_amount)

    def recommendations(self, pool: Sequence[ProductRef] | None = None) -> List[ProductRef]:
        candidates = self.candidate_pool if pool is None else pool
        return recommend(self._snapshot.items, candidates)

    def get_cart(self, pool: Sequence[ProductRef] | None = None) -> Dict[str, Any]:
        #jeden odczyt snapshotu, wszystkie liczby z tego samego koszyka
        snapshot = self._snapshot
        subtotal = pricing.subtotal(snapshot.items)
        totals = pricing.compute_totals(subtotal, snapshot.discount_amount)
        candidates = self.candidate_pool if pool is None else pool

        return {
            "items": list(snapshot.items),
            "saved_items": list(snapshot.saved_items),
            "recently_viewed": list(snapshot.recently_viewed),
            "item_count": pricing.item_count(snapshot.items),
            "subtotal": subtotal,
            "discount_amount": snapshot.discount_amount,
            "tax": totals.tax,
            "shipping": totals.shipping,
            "total": totals.total,
            "recommendations": recommend(snapshot.items, candidates),
        }

    # =====================================================
    # COMMANDS
    # =====================================================
    def add_item(self, item: LineItem) -> None:
        def change(s: CartSnapshot) -> CartSnapshot:
            #koszyk przejmuje id z listy saved
            return s.model_copy(update={
                "items": _merge(s.items, item),
                "saved_items": _without(s.saved_items, item.id),
            })

        self._mutate(change)
        logger.info(f"Added {item.quantity} x {item.id} to cart {self.session_id}")

    def remove_item(self, item_id: str) -> None:
        def change(s: CartSnapshot) -> CartSnapshot | None:
            if _find(s.items, item_id) is None:
                return None
            return s.model_copy(update={"items": _without(s.items, item_id)})

        if self._mutate(change):
            logger.info(f"Removed {item_id} from cart {self.session_id}")

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(item_id)
            return

        def change(s: CartSnapshot) -> CartSnapshot | None:
            if _find(s.items, item_id) is None:
                return None
            items = tuple(
                i.model_copy(update={"quantity": quantity}) if i.id == item_id else i
                for i in s.items
            )
            return s.model_copy(update={"items": items})

        if self._mutate(change):
            logger.info(f"Set quantity of {item_id} to {quantity} in cart {self.session_id}")

    def clear_cart(self) -> None:
        self._mutate(lambda s: s.model_copy(update={"items": (), "discount_amount": Decimal("0")}))
        logger.info(f"Cart {self.session_id} cleared")

    def save_for_later(self, item_id: str) -> None:
        def change(s: CartSnapshot) -> CartSnapshot | None:
            entry = _find(s.items, item_id)
            if entry is None:
                return None
            return s.model_copy(update={
                "items": _without(s.items, item_id),
                "saved_items": _merge(s.saved_items, entry),
            })

        if self._mutate(change):
            logger.info(f"Saved {item_id} for later in cart {self.session_id}")

    def move_to_cart(self, item_id: str) -> None:
        def change(s: CartSnapshot) -> CartSnapshot | None:
            entry = _find(s.saved_items, item_id)
            if entry is None:
                return None
            return s.model_copy(update={
                "items": _merge(s.items, entry),
                "saved_items": _without(s.saved_items, item_id),
            })

        if self._mutate(change):
            logger.info(f"Moved {item_id} back to cart {self.session_id}")

    def remove_saved_item(self, item_id: str) -> None:
        def change(s: CartSnapshot) -> CartSnapshot | None:
            if _find(s.saved_items, item_id) is None:
                return None
            return s.model_copy(update={"saved_items": _without(s.saved_items, item_id)})

        if self._mutate(change):
            logger.info(f"Removed saved item {item_id} from cart {self.session_id}")

    def add_note(self, item_id: str, text: str) -> None:
        def change(s: CartSnapshot) -> CartSnapshot | None:
            if _find(s.items, item_id) is None:
                return None
            items = tuple(
                i.model_copy(update={"note": text}) if i.id == item_id else i
                for i in s.items
            )
            return s.model_copy(update={"items": items})

        self._mutate(change)

    def add_to_recently_viewed(self, product: ProductRef) -> None:
        def change(s: CartSnapshot) -> CartSnapshot:
            others = tuple(p for p in s.recently_viewed if p.id != product.id)
            viewed = ((product,) + others)[: self.recently_viewed_limit]
            return s.model_copy(update={"recently_viewed": viewed})

        self._mutate(change)

    def apply_discount(self, code: str) -> bool:
        """
        Apply a discount code to the current subtotal.

        The amount is fixed at application time: later cart changes do not
        re-derive it until the code is applied again or cleared.
        """
        rate = self.discounts.validate(code)
        if rate is None:
            return False

        def change(s: CartSnapshot) -> CartSnapshot:
            amount = pricing.to_money(pricing.subtotal(s.items) * rate)
            return s.model_copy(update={"discount_amount": amount})

        updated = self._mutate(change) or self._snapshot
        logger.info(
            f"Discount code {code!r} applied to cart {self.session_id}: -{updated.discount_amount}"
        )
        return True

    def clear_discount(self) -> None:
        self._mutate(lambda s: s.model_copy(update={"discount_amount": Decimal("0")}))

    # =====================================================
    # INTERNALS
    # =====================================================
    def _mutate(self, change: Callable[[CartSnapshot], CartSnapshot | None]) -> CartSnapshot | None:
        """
        Apply `change` to the latest snapshot and mirror the touched keys.
        Returns the new snapshot, or None when nothing changed.
        """
        with self._lock:
            current = self._snapshot
            updated = change(current)
            if updated is None or updated == current:
                return None

            self._snapshot = updated

            if self.persistence is not None:
                keys = [
                    key for field, key in _PERSISTED_FIELDS.items()
                    if getattr(current, field) != getattr(updated, field)
                ]
                #pod lockiem, kolejka zapisow ma kolejnosc mutacji (samo submit, bez I/O)
                self.persistence.mirror(self.session_id, updated, keys)

        return updated
