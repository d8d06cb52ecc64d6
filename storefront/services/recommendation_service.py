# storefront/services/recommendation_service.py
from decimal import Decimal
from typing import List, Sequence

from storefront.domain.schemas import LineItem, ProductRef
from storefront.utils.settings import RECOMMENDATION_LIMIT

CATEGORY_MATCH_SCORE = 5
PRICE_MATCH_SCORE = 3
PRICE_BAND_LOW = Decimal("0.7")
PRICE_BAND_HIGH = Decimal("1.3")


def cart_profile(items: Sequence[LineItem]) -> tuple[set[str], Decimal]:
    """
    Distinct categories in the cart and the average unit price.

    The average counts every line item once regardless of its quantity.
    """
    categories = {i.category for i in items if i.category}
    average = sum((i.unit_price for i in items), Decimal("0")) / len(items)
    return categories, average


def score_candidate(product: ProductRef, categories: set[str], average: Decimal) -> int:
    score = 0

    if product.category in categories:
        score += CATEGORY_MATCH_SCORE

    #darmowy koszyk nie ma przedzialu cenowego
    if average > 0:
        ratio = product.price / average
        if PRICE_BAND_LOW <= ratio <= PRICE_BAND_HIGH:
            score += PRICE_MATCH_SCORE

    return score


def recommend(
    items: Sequence[LineItem],
    pool: Sequence[ProductRef],
    limit: int = RECOMMENDATION_LIMIT,
) -> List[ProductRef]:
    """
    Rank the candidate pool against the current cart.

    An empty cart gets the first `limit` candidates in pool order ("popular
    items"). Otherwise each candidate earns +5 for sharing a category with the
    cart and +3 when its price is within 30% of the cart's average unit price.
    Products already in the cart are never recommended. Ties keep pool order,
    so the result depends only on the inputs.
    """
    if not items:
        return list(pool[:limit])

    categories, average = cart_profile(items)
    in_cart = {i.id for i in items}

    scored = [
        (score_candidate(product, categories, average), product)
        for product in pool
        if product.id not in in_cart
    ]

    #sorted() jest stabilne, rowne wyniki zostaja w kolejnosci puli
    ranked = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [product for _, product in ranked[:limit]]
