"""
Ranking policy for candidate products.

Ordering, each stage breaking ties of the one before:
1. products without allergy warnings before any product with one (absolute)
2. higher match score
3. lower NOVA group (unclassified products after NOVA 4)
4. lower price (missing price last)

Python's sort is stable, so products equal on every stage keep input order.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import ProductInfo, RankedProduct, UserPreferenceProfile
from .nova_classifier import NovaClassifier
from .preference_matcher import PreferenceMatcher, calculate_renvare_score

logger = logging.getLogger(__name__)

UNCLASSIFIED_NOVA = 5
RENVARE_ONLY_THRESHOLD = 70


def _sort_key(item: RankedProduct) -> Tuple[bool, int, int, float]:
    nova = item.nova_group if item.nova_group is not None else UNCLASSIFIED_NOVA
    price = item.price if item.price is not None else math.inf
    return (item.match_info.has_allergy_warning(), -item.match_info.match_score, nova, price)


def sort_by_preference(
    products: Iterable[RankedProduct],
    profile: Optional[UserPreferenceProfile] = None,
) -> List[RankedProduct]:
    """
    Return a new list in preference order. The profile is already folded into
    each product's match info; it is accepted so callers can pass it through.
    """
    return sorted(products, key=_sort_key)


def filter_renvare_only(
    ranked: Sequence[RankedProduct],
    profile: Optional[UserPreferenceProfile],
    threshold: int = RENVARE_ONLY_THRESHOLD,
) -> List[RankedProduct]:
    """Drop products below the clean-food threshold when the user asked for renvare only."""
    if profile is None or not profile.renvare_only:
        return list(ranked)
    return [item for item in ranked if item.renvare_score >= threshold]


def rank_products(
    products: Iterable[ProductInfo],
    profile: Optional[UserPreferenceProfile],
    classifier: Optional[NovaClassifier] = None,
    matcher: Optional[PreferenceMatcher] = None,
) -> List[RankedProduct]:
    """
    Classify and match every product independently, then order them with
    sort_by_preference. Neither step shares state between products.
    """
    classifier = classifier or NovaClassifier()
    matcher = matcher or PreferenceMatcher()

    ranked: List[RankedProduct] = []
    for product in products:
        classification = classifier.classify_text(
            product.ingredients_text, product_category=product.category
        )
        ranked.append(
            RankedProduct(
                product=product,
                match_info=matcher.match(product, profile),
                nova_group=classification.nova_group,
                renvare_score=calculate_renvare_score(
                    product.ingredients_text, product.filters
                ),
            )
        )

    ordered = filter_renvare_only(sort_by_preference(ranked, profile), profile)
    logger.debug("Ranked %d of %d products", len(ordered), len(ranked))
    return ordered
