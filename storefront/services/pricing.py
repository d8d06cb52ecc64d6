# storefront/services/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.domain.schemas import CartTotals, LineItem
from storefront.utils.settings import TAX_RATE, FLAT_SHIPPING_FEE

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def item_count(items: Iterable[LineItem]) -> int:
    return sum(i.quantity for i in items)


def subtotal(items: Iterable[LineItem]) -> Decimal:
    return sum((i.unit_price * i.quantity for i in items), ZERO)


def compute_totals(
    subtotal: Decimal,
    discount_amount: Decimal = ZERO,
    tax_rate: Decimal = TAX_RATE,
    shipping_fee: Decimal = FLAT_SHIPPING_FEE,
) -> CartTotals:
    """
    Tax, shipping and grand total for a cart subtotal.

    - tax = subtotal * tax_rate (rounded to cents)
    - shipping = flat fee, but only when there is something to ship
    - total = subtotal + tax + shipping - discount, never below zero
    """
    subtotal = Decimal(subtotal)
    discount_amount = Decimal(discount_amount)

    tax = to_money(subtotal * tax_rate)
    shipping = to_money(shipping_fee) if subtotal > ZERO else to_money(ZERO)

    #rabat wiekszy niz rachunek nie robi sie zwrotem
    total = max(subtotal + tax + shipping - discount_amount, ZERO)

    return CartTotals(tax=tax, shipping=shipping, total=to_money(total))
