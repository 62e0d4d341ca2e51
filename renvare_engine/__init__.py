"""
Renvare engine package: NOVA processing classification, preference matching
and ranking of Norwegian grocery products for a user's profile.

Expose the main classes so consumers can import directly from the package.
"""

from .models import (
    ClassificationInput,
    ClassificationResult,
    InvalidInputError,
    MatchInfo,
    OtherPreferences,
    ProductInfo,
    RankedProduct,
    Signal,
    SignalKind,
    UserPreferenceProfile,
    WelfareLevel,
)
from .cache import NullCache, TTLCache
from .config import Settings, configure_logging
from .db_repository import DatabasePreferenceSource
from .kassalapp_client import KassalappClient, ProductDataSource
from .lexicon import allergen_label, resolve_allergen_code
from .nova_classifier import NovaClassifier, ProductCategory
from .nova_rules import RULESET_DATE, RULESET_VERSION
from .preference_matcher import (
    PreferenceMatcher,
    analyze_product_match,
    calculate_renvare_score,
)
from .ranking import filter_renvare_only, rank_products, sort_by_preference
from .shopping_text import parse_shopping_list_text, remove_units_from_ingredient
from .store_layout import categorize_product, group_items_by_category

__all__ = [
    "ClassificationInput",
    "ClassificationResult",
    "DatabasePreferenceSource",
    "InvalidInputError",
    "KassalappClient",
    "MatchInfo",
    "NovaClassifier",
    "NullCache",
    "OtherPreferences",
    "PreferenceMatcher",
    "ProductCategory",
    "ProductDataSource",
    "ProductInfo",
    "RankedProduct",
    "RULESET_DATE",
    "RULESET_VERSION",
    "Settings",
    "Signal",
    "SignalKind",
    "TTLCache",
    "UserPreferenceProfile",
    "WelfareLevel",
    "allergen_label",
    "analyze_product_match",
    "calculate_renvare_score",
    "categorize_product",
    "configure_logging",
    "filter_renvare_only",
    "group_items_by_category",
    "parse_shopping_list_text",
    "rank_products",
    "remove_units_from_ingredient",
    "resolve_allergen_code",
    "sort_by_preference",
]
