"""
Evaluates a product against a user's preference profile.

Produces allergy warnings (from the ingredient list only), diet warnings and
matches, organic / animal-welfare / local-food flags and a 0-100 match score.

The allergen check ignores the retailer's free-text allergen
field: it lists every allergen possible for the whole category (a plain
salmon fillet declaring gluten, milk and egg), so only the ingredient list is
trusted. With no ingredient list there is no evidence, and no warning.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .lexicon import (
    ANIMAL_PRODUCT_KEYWORDS,
    ANIMAL_WELFARE_BRANDS,
    ANIMAL_WELFARE_MEDIUM,
    DIET_RULES,
    LOCAL_FOOD_HIGH,
    LOCAL_FOOD_MEDIUM,
    ORGANIC_KEYWORDS,
    RENVARE_HARMFUL_TERMS,
    allergen_keywords,
    resolve_diet,
)
from .models import MatchInfo, ProductInfo, UserPreferenceProfile, WelfareLevel
from .text import contains_any, matching_keywords

NO_PROFILE_SCORE = 50

ALLERGY_PENALTY = 50
DIET_WARNING_PENALTY = 20
DIET_MATCH_BONUS = 10
ORGANIC_BONUS = 15
ORGANIC_PENALTY = 10
WELFARE_ADJUSTMENT = {
    WelfareLevel.HIGH: 20,
    WelfareLevel.MEDIUM: 10,
    WelfareLevel.LOW: -15,
    WelfareLevel.UNKNOWN: 0,
}
LOCAL_FOOD_BONUS = 15
LOCAL_FOOD_PENALTY = 5
RENVARE_TERM_PENALTY = 15
RENVARE_LABEL_BONUS = 20


def check_allergens(
    ingredients_text: str, allergies: Sequence[str]
) -> Tuple[List[str], Dict[str, List[str]]]:
    """
    Return (warnings, triggers): the user's allergies found in the ingredient
    list, and which keywords fired for each.
    """
    text = (ingredients_text or "").lower()
    if not text.strip():
        return [], {}

    warnings: List[str] = []
    triggers: Dict[str, List[str]] = {}
    for allergy in allergies:
        found = matching_keywords(text, allergen_keywords(allergy))
        if found:
            warnings.append(allergy)
            triggers[allergy] = found
    return warnings, triggers


def check_diets(
    allergen_text: str,
    ingredients_text: str,
    product_name: str,
    diets: Sequence[str],
) -> Tuple[List[str], List[str]]:
    """
    Return (warnings, matches). An explicit label (e.g. "vegansk") wins over
    anything inferred from ingredients; unknown diets are skipped.
    """
    combined = f"{allergen_text or ''} {ingredients_text or ''} {product_name or ''}".lower()
    warnings: List[str] = []
    matches: List[str] = []
    for diet in diets:
        key = resolve_diet(diet)
        if key is None:
            continue
        rules = DIET_RULES[key]
        if contains_any(combined, rules["positive"]):
            matches.append(diet)
        elif contains_any(combined, rules["forbidden"]):
            warnings.append(diet)
    return warnings, matches


def check_organic(product_name: str, brand: str) -> bool:
    return contains_any(f"{product_name or ''} {brand or ''}", ORGANIC_KEYWORDS)


def check_animal_welfare(
    product_name: str, brand: str, ingredients_text: str
) -> Tuple[WelfareLevel, Optional[str]]:
    combined = f"{product_name or ''} {brand or ''} {ingredients_text or ''}"
    for keywords, label in ANIMAL_WELFARE_BRANDS:
        if contains_any(combined, keywords):
            return WelfareLevel.HIGH, label
    for keywords, label in ANIMAL_WELFARE_MEDIUM:
        if contains_any(combined, keywords):
            return WelfareLevel.MEDIUM, label
    if contains_any(combined, ANIMAL_PRODUCT_KEYWORDS):
        return WelfareLevel.LOW, None
    return WelfareLevel.UNKNOWN, None


def check_local_food(product_name: str, brand: str) -> Tuple[bool, Optional[str]]:
    combined = f"{product_name or ''} {brand or ''}"
    for table in (LOCAL_FOOD_HIGH, LOCAL_FOOD_MEDIUM):
        for keywords, label in table:
            if contains_any(combined, keywords):
                return True, label
    return False, None


def calculate_match_score(
    info: MatchInfo, profile: Optional[UserPreferenceProfile]
) -> int:
    """
    Flat preference bonuses/penalties first, then a priority reinforcement of
    (len(priority_order) - index) * 2 for each satisfied preference, so
    rank and binary likes both count. Clamped to [0, 100].
    """
    if profile is None:
        return NO_PROFILE_SCORE

    prefs = profile.other_preferences
    score = 100
    score -= len(info.allergy_warnings) * ALLERGY_PENALTY
    score -= len(info.diet_warnings) * DIET_WARNING_PENALTY
    score += len(info.diet_matches) * DIET_MATCH_BONUS

    if prefs.organic:
        score += ORGANIC_BONUS if info.organic_match else -ORGANIC_PENALTY
    if prefs.animal_welfare:
        score += WELFARE_ADJUSTMENT[info.animal_welfare_level]
    if prefs.local_food:
        score += LOCAL_FOOD_BONUS if info.local_food_match else -LOCAL_FOOD_PENALTY

    order = profile.priority_order
    for index, preference in enumerate(order):
        weight = (len(order) - index) * 2
        if preference == "organic" and info.organic_match:
            score += weight
        elif preference == "animal_welfare" and info.animal_welfare_level == WelfareLevel.HIGH:
            score += weight
        elif preference == "local_food" and info.local_food_match:
            score += weight

    return max(0, min(100, score))


def calculate_renvare_score(ingredients_text: str, filters: str = "") -> int:
    """
    Clean-food score: 100 minus 15 per additive class present, plus 20 when
    the retailer labels the product "renvare".
    """
    text = (ingredients_text or "").lower()
    score = 100
    for term in RENVARE_HARMFUL_TERMS:
        if term in text:
            score -= RENVARE_TERM_PENALTY
    if "renvare" in (filters or "").lower():
        score += RENVARE_LABEL_BONUS
    return max(0, min(100, score))


def analyze_product_match(
    product: ProductInfo, profile: Optional[UserPreferenceProfile]
) -> MatchInfo:
    ingredients = product.ingredients_text or ""
    allergies = profile.allergies if profile else []
    diets = profile.diets if profile else []

    warnings, triggers = check_allergens(ingredients, allergies)
    diet_warnings, diet_matches = check_diets(
        product.allergen_text, ingredients, product.name, diets
    )
    welfare_level, welfare_reason = check_animal_welfare(
        product.name, product.brand, ingredients
    )
    local_match, local_reason = check_local_food(product.name, product.brand)

    info = MatchInfo(
        allergy_warnings=warnings,
        allergy_triggers=triggers,
        diet_warnings=diet_warnings,
        diet_matches=diet_matches,
        organic_match=check_organic(product.name, product.brand),
        animal_welfare_level=welfare_level,
        animal_welfare_reason=welfare_reason,
        local_food_match=local_match,
        local_food_reason=local_reason,
    )
    info.match_score = calculate_match_score(info, profile)
    return info


class PreferenceMatcher:
    """
    Injectable wrapper around analyze_product_match for the ranking pipeline.
    """

    def __init__(self):
        self.log = logging.getLogger(self.__class__.__name__)

    def match(
        self, product: ProductInfo, profile: Optional[UserPreferenceProfile]
    ) -> MatchInfo:
        info = analyze_product_match(product, profile)
        if info.allergy_warnings:
            self.log.debug(
                "Allergy warnings for %s: %s", product.name, info.allergy_triggers
            )
        return info
