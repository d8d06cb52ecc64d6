# storefront/services/discount_service.py
from decimal import Decimal
from typing import Mapping

from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#statyczna tabela kodow, kod -> stawka (0 < stawka <= 1)
DISCOUNT_CODES: dict[str, Decimal] = {
    "WELCOME10": Decimal("0.10"),
    "SAVE20": Decimal("0.20"),
    "SPECIAL50": Decimal("0.50"),
}


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


class DiscountCodeTable:
    """
    Lookup of discount codes.

    Codes are matched case-insensitively and ignoring surrounding whitespace;
    the same normalization is applied to the table keys and to the lookup.
    Swap in another table (or a subclass backed by a service) to change the
    available codes, the cart only calls `validate`.
    """

    def __init__(self, rates: Mapping[str, Decimal] | None = None):
        source = DISCOUNT_CODES if rates is None else rates
        self._rates: dict[str, Decimal] = {}

        for code, rate in source.items():
            rate = Decimal(str(rate))
            if not Decimal("0") < rate <= Decimal("1"):
                raise ValueError(f"Discount rate for {code!r} must be in (0, 1], got {rate}")
            self._rates[normalize_code(code)] = rate

    def validate(self, code: str) -> Decimal | None:
        rate = self._rates.get(normalize_code(code))
        if rate is None:
            logger.info(f"Discount code {code!r} not recognised")
        return rate

    def __contains__(self, code: str) -> bool:
        return normalize_code(code) in self._rates
