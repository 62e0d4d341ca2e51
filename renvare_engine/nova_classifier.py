"""
Rule-based NOVA processing classifier.

Scores how industrially processed a product is from its free-text (Norwegian)
ingredient list:

- no ingredient text: estimate from the product category, with
  low confidence, or return no classification at all
- normalize, count fragments and collect E-numbers
- run the strong / weak / real-food rule tables over the whole text
- pick a NOVA group with a fixed first-match-wins decision policy
- clamp confidence into [0.1, 0.98] and attach a templated rationale

Every path is total over well-shaped input: odd ingredient text never raises,
it just produces few or no signals (level 2 by default).
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .models import (
    ClassificationDebug,
    ClassificationInput,
    ClassificationResult,
    InvalidInputError,
    Signal,
)
from .nova_rules import (
    REAL_FOOD_RULES,
    RULESET_VERSION,
    STRONG_RULES,
    WEAK_RULES,
    match_rules,
)
from .text import extract_e_numbers, normalize, split_fragments

DEFAULT_MAX_BATCH_SIZE = 100
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.98
ESTIMATED_CONFIDENCE = 0.15


class ProductCategory(str, Enum):
    SNACKS = "snacks"
    BREAKFAST_CEREAL = "breakfast_cereal"
    BEVERAGE = "beverage"
    COOKIES = "cookies"
    SPREAD = "spread"
    DAIRY = "dairy"
    READY_MEAL = "ready_meal"
    OTHER = "other"


# Norwegian category ids used by the app -> canonical category.
CATEGORY_ALIASES: Dict[str, ProductCategory] = {
    "frokostblanding": ProductCategory.BREAKFAST_CEREAL,
    "drikke": ProductCategory.BEVERAGE,
    "kjeks": ProductCategory.COOKIES,
    "pålegg": ProductCategory.SPREAD,
    "meieri": ProductCategory.DAIRY,
    "ferdigrett": ProductCategory.READY_MEAL,
    "annet": ProductCategory.OTHER,
}

# Categories where a couple of weak signals are enough for NOVA 4.
WEAK_SIGNAL_HIGH_RISK: FrozenSet[ProductCategory] = frozenset(
    {
        ProductCategory.SNACKS,
        ProductCategory.COOKIES,
        ProductCategory.BREAKFAST_CEREAL,
        ProductCategory.SPREAD,
        ProductCategory.READY_MEAL,
    }
)

# Free-form category terms that justify a NOVA 4 estimate without ingredients.
ESTIMATE_HIGH_RISK_TERMS: Tuple[str, ...] = (
    "pizza",
    "ready_meal",
    "ready meal",
    "ferdigrett",
    "chips",
    "candy",
    "godteri",
    "snacks",
    "soda",
    "brus",
    "cookies",
    "kjeks",
    "ice_cream",
    "ice cream",
    "iskrem",
    "sausage",
    "pølse",
    "bacon",
)


def resolve_category(category: Optional[str]) -> Optional[ProductCategory]:
    """Map a category id (English or Norwegian) to ProductCategory, else None."""
    if not category:
        return None
    key = category.strip().lower().replace("-", "_").replace(" ", "_")
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    try:
        return ProductCategory(key)
    except ValueError:
        return None


def is_estimate_high_risk(category: Optional[str]) -> bool:
    lowered = (category or "").lower()
    return any(term in lowered for term in ESTIMATE_HIGH_RISK_TERMS)


def _clamp_confidence(value: float) -> float:
    return round(min(max(value, MIN_CONFIDENCE), MAX_CONFIDENCE), 2)


def _merge_additives(detected: List[str], additives: Iterable[str]) -> List[str]:
    merged = list(detected)
    for additive in additives:
        code = additive.replace(" ", "").upper()
        if code and code not in merged:
            merged.append(code)
    return merged


class NovaClassifier:
    """
    Classifies products into NOVA groups 1-4 from ingredient text.
    Inject a cache (see renvare_engine.cache) to memoize repeated lists.
    """

    def __init__(
        self,
        cache=None,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cache = cache
        self.max_batch_size = max_batch_size
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.log = logging.getLogger(self.__class__.__name__)

    def classify(self, request: ClassificationInput) -> ClassificationResult:
        if not request.ingredients_text or not request.ingredients_text.strip():
            return self._estimate_without_ingredients(request.product_category)

        key = self._cache_key(request)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                result = copy.deepcopy(cached)
                result.timestamp = self._timestamp()
                return result

        result = self._classify_text(request)
        if self.cache is not None:
            self.cache.set(key, copy.deepcopy(result))
        return result

    def classify_text(
        self,
        ingredients_text: str,
        product_category: Optional[str] = None,
        additives: Optional[Iterable[str]] = None,
    ) -> ClassificationResult:
        return self.classify(
            ClassificationInput(
                ingredients_text=ingredients_text or "",
                additives=list(additives or []),
                product_category=product_category,
            )
        )

    def classify_batch(
        self, requests: Sequence[ClassificationInput]
    ) -> List[ClassificationResult]:
        """
        Classify up to max_batch_size inputs, one independent result per input
        in input order. Oversized batches are rejected before any work is done.
        """
        if len(requests) > self.max_batch_size:
            raise InvalidInputError(
                f"Batch of {len(requests)} exceeds the limit of {self.max_batch_size}"
            )
        return [self.classify(request) for request in requests]

    def _classify_text(self, request: ClassificationInput) -> ClassificationResult:
        normalized_text = normalize(request.ingredients_text)
        ingredients_count = len(split_fragments(normalized_text))
        e_numbers = _merge_additives(extract_e_numbers(normalized_text), request.additives)
        has_e_numbers = bool(e_numbers)

        strong = match_rules(normalized_text, STRONG_RULES)
        weak = match_rules(normalized_text, WEAK_RULES)
        real_food = match_rules(normalized_text, REAL_FOOD_RULES)
        strong_hits, weak_hits, real_food_hits = len(strong), len(weak), len(real_food)

        high_risk = resolve_category(request.product_category) in WEAK_SIGNAL_HIGH_RISK
        e_bonus = 0.1 if has_e_numbers else 0.0

        if strong_hits >= 1:
            nova_group = 4
            confidence = 0.7 + min(strong_hits * 0.1, 0.25)
        elif ingredients_count >= 8 and (has_e_numbers or weak_hits >= 2):
            nova_group = 4
            confidence = 0.6 + e_bonus + min(weak_hits * 0.05, 0.15)
        elif high_risk and weak_hits >= 2:
            nova_group = 4
            confidence = 0.55 + min(weak_hits * 0.05, 0.2)
        elif weak_hits >= 1 or has_e_numbers:
            nova_group = 3
            confidence = 0.5 + min(weak_hits * 0.05, 0.2) + e_bonus
        elif ingredients_count <= 3 and real_food_hits >= 1:
            nova_group = 1
            confidence = 0.7 + min(real_food_hits * 0.1, 0.25)
        else:
            nova_group = 2
            confidence = 0.4 + min(real_food_hits * 0.05, 0.2)

        reasoning = self._reasoning(
            nova_group, strong, weak_hits, ingredients_count, has_e_numbers
        )
        self.log.debug(
            "NOVA %s (strong=%d weak=%d real=%d fragments=%d e=%s)",
            nova_group,
            strong_hits,
            weak_hits,
            real_food_hits,
            ingredients_count,
            ",".join(e_numbers) or "-",
        )

        return ClassificationResult(
            nova_group=nova_group,
            confidence=_clamp_confidence(confidence),
            reasoning=reasoning,
            signals=strong + weak + real_food,
            has_ingredients=True,
            is_estimated=False,
            debug=ClassificationDebug(
                ingredients_count=ingredients_count,
                has_e_numbers=has_e_numbers,
                e_numbers=e_numbers,
                strong_hits=strong_hits,
                weak_hits=weak_hits,
                real_food_hits=real_food_hits,
                normalized_text_sample=normalized_text[:100],
            ),
            version=RULESET_VERSION,
            timestamp=self._timestamp(),
        )

    def _estimate_without_ingredients(
        self, product_category: Optional[str]
    ) -> ClassificationResult:
        """
        No ingredient evidence: only a known high-risk category earns an
        estimate, and only with minimal confidence.
        """
        if is_estimate_high_risk(product_category):
            nova_group: Optional[int] = 4
            confidence = ESTIMATED_CONFIDENCE
            reasoning = (
                "Ingrediensliste mangler. Basert på produktkategori "
                f"({product_category}) anslås produktet som sterkt bearbeidet "
                "(NOVA 4), men dette er usikkert."
            )
        else:
            nova_group = None
            confidence = 0.0
            reasoning = (
                "Ingen ingrediensinformasjon tilgjengelig. Klassifisering ikke "
                "mulig uten ingrediensliste."
            )
        self.log.debug("No ingredients (category=%s) -> %s", product_category, nova_group)
        return ClassificationResult(
            nova_group=nova_group,
            confidence=confidence,
            reasoning=reasoning,
            signals=[],
            has_ingredients=False,
            is_estimated=True,
            debug=ClassificationDebug(),
            version=RULESET_VERSION,
            timestamp=self._timestamp(),
        )

    @staticmethod
    def _reasoning(
        nova_group: int,
        strong: List[Signal],
        weak_hits: int,
        ingredients_count: int,
        has_e_numbers: bool,
    ) -> str:
        if nova_group == 4 and strong:
            examples = ", ".join(signal.description.lower() for signal in strong[:2])
            return (
                f"Dette produktet er klassifisert som NOVA 4 fordi det inneholder "
                f"{len(strong)} sterkt bearbeidede ingredienser som {examples}. "
                "Disse ingrediensene er typiske for industrielt fremstilte matvarer."
            )
        if nova_group == 4:
            evidence = "E-nummer" if has_e_numbers else "svakt bearbeidede ingredienser"
            return (
                f"Dette produktet er klassifisert som NOVA 4 fordi det har mange "
                f"ingredienser ({ingredients_count}) og inneholder {evidence}. "
                "Dette er typisk for sterkt prosesserte produkter."
            )
        if nova_group == 3:
            extra = " og E-nummer" if has_e_numbers else ""
            return (
                f"Dette produktet er klassifisert som NOVA 3 fordi det inneholder "
                f"{weak_hits} moderat bearbeidede ingredienser{extra}. Det er noe "
                "bearbeidet, men ikke sterkt industrielt prosessert."
            )
        if nova_group == 2:
            return (
                "Dette produktet er klassifisert som NOVA 2 fordi det består "
                "hovedsakelig av kulinariske ingredienser som salt, olje eller "
                "sukker. Disse brukes typisk i matlaging."
            )
        return (
            f"Dette produktet er klassifisert som NOVA 1 fordi det består av få "
            f"({ingredients_count}) naturlige ingredienser uten tilsetninger. "
            "Dette er ubearbeidet eller minimalt bearbeidet mat."
        )

    @staticmethod
    def _cache_key(request: ClassificationInput) -> Tuple[str, Tuple[str, ...], str]:
        resolved = resolve_category(request.product_category)
        category = resolved.value if resolved else (request.product_category or "").lower()
        additives = tuple(sorted(a.replace(" ", "").upper() for a in request.additives))
        return normalize(request.ingredients_text), additives, category

    def _timestamp(self) -> str:
        return self.clock().isoformat()
