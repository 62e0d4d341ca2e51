"""
Shared domain models used by the classifier, matcher and ranking policy.

- SignalKind: classifies a rule hit (strong / weak ultra-processing, real food).
- Rule / Signal: rule-table row and a single match of that rule.
- ClassificationInput / ClassificationResult: NOVA classifier request and output.
- UserPreferenceProfile: allergies, diets, quality preferences and priorities.
- ProductInfo: normalized product representation independent of source.
- MatchInfo / RankedProduct: per-user evaluation of a product and its ranking row.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional


class InvalidInputError(ValueError):
    """Raised when a caller passes input of the wrong shape (never for odd content)."""


class SignalKind(str, Enum):
    STRONG = "strong"
    WEAK = "weak"
    REAL_FOOD = "real_food"


class WelfareLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Rule:
    """
    One row of a classification rule table. Patterns are compiled
    case-insensitive and run against normalized ingredient text.
    """

    id: str
    pattern: "re.Pattern[str]"
    kind: SignalKind
    description: str


@dataclass
class Signal:
    kind: SignalKind
    rule_id: str
    match: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.kind.value,
            "rule_id": self.rule_id,
            "match": self.match,
            "description": self.description,
        }


@dataclass
class ClassificationInput:
    ingredients_text: str
    additives: List[str] = field(default_factory=list)
    product_category: Optional[str] = None
    language: str = "no"


@dataclass
class ClassificationDebug:
    ingredients_count: int = 0
    has_e_numbers: bool = False
    e_numbers: List[str] = field(default_factory=list)
    strong_hits: int = 0
    weak_hits: int = 0
    real_food_hits: int = 0
    normalized_text_sample: str = ""


@dataclass
class ClassificationResult:
    """
    Output of the NOVA classifier.

    nova_group is None only when there is no ingredient text and the category
    gives no grounds for an estimate. is_estimated marks results that relied on
    the category fallback instead of ingredient evidence.
    """

    nova_group: Optional[int]
    confidence: float
    reasoning: str
    signals: List[Signal] = field(default_factory=list)
    has_ingredients: bool = True
    is_estimated: bool = False
    debug: ClassificationDebug = field(default_factory=ClassificationDebug)
    version: str = ""
    timestamp: str = ""

    def signals_of(self, kind: SignalKind) -> List[Signal]:
        return [signal for signal in self.signals if signal.kind == kind]

    def to_dict(self) -> Dict:
        return {
            "nova_group": self.nova_group,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "signals": [signal.to_dict() for signal in self.signals],
            "has_ingredients": self.has_ingredients,
            "is_estimated": self.is_estimated,
            "debug": asdict(self.debug),
            "version": self.version,
            "timestamp": self.timestamp,
        }


@dataclass
class OtherPreferences:
    organic: bool = False
    lowest_price: bool = False
    animal_welfare: bool = False
    local_food: bool = False


# Priority identifiers as stored by the app (Norwegian UI ids) -> canonical ids.
PRIORITY_ALIASES: Dict[str, str] = {
    "renvare": "renvare",
    "organic": "organic",
    "økologisk": "organic",
    "okologisk": "organic",
    "animal_welfare": "animal_welfare",
    "dyrevelferd": "animal_welfare",
    "dyrevelfred": "animal_welfare",
    "lowest_price": "lowest_price",
    "lavest_pris": "lowest_price",
    "local_food": "local_food",
    "lokalmat": "local_food",
}

RENVARE_PRIORITY = "renvare"


def _string_list(blob: Dict, key: str) -> List[str]:
    value = blob.get(key)
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise InvalidInputError(f"'{key}' must be a list of strings")
    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise InvalidInputError(f"'{key}' must be a list of strings")
        if item.strip():
            items.append(item.strip())
    return items


def _flag(blob: Dict, key: str) -> bool:
    value = blob.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidInputError(f"'{key}' must be true or false")
    return value


def normalize_priority_order(raw: Iterable[str]) -> List[str]:
    """
    Resolve aliases, drop unknown/duplicate ids and pin 'renvare' first.
    Clean food is always the top priority and cannot be reordered by the user.
    """
    order: List[str] = [RENVARE_PRIORITY]
    for entry in raw:
        key = PRIORITY_ALIASES.get(entry.strip().lower())
        if key and key not in order:
            order.append(key)
    return order


@dataclass
class UserPreferenceProfile:
    """
    Captures what a user must avoid (allergies), follows (diets) and prefers.
    priority_order always starts with 'renvare'.
    """

    allergies: List[str] = field(default_factory=list)
    diets: List[str] = field(default_factory=list)
    other_preferences: OtherPreferences = field(default_factory=OtherPreferences)
    priority_order: List[str] = field(default_factory=lambda: [RENVARE_PRIORITY])
    renvare_only: bool = False

    def __post_init__(self) -> None:
        self.priority_order = normalize_priority_order(self.priority_order)

    @classmethod
    def from_dict(cls, blob: Optional[Dict]) -> "UserPreferenceProfile":
        """
        Validate a preferences JSON blob from the preference store once, at the
        boundary. Missing keys fall back to defaults; wrong types raise.
        """
        if blob is None:
            return cls()
        if not isinstance(blob, dict):
            raise InvalidInputError("preferences must be an object")

        other = blob.get("other_preferences") or {}
        if not isinstance(other, dict):
            raise InvalidInputError("'other_preferences' must be an object")

        return cls(
            allergies=_string_list(blob, "allergies"),
            diets=_string_list(blob, "diets"),
            other_preferences=OtherPreferences(
                organic=_flag(other, "organic"),
                lowest_price=_flag(other, "lowest_price"),
                animal_welfare=_flag(other, "animal_welfare"),
                local_food=_flag(other, "local_food"),
            ),
            priority_order=_string_list(blob, "priority_order"),
            renvare_only=_flag(blob, "renvare_only"),
        )

    def to_dict(self) -> Dict:
        return {
            "allergies": list(self.allergies),
            "diets": list(self.diets),
            "other_preferences": asdict(self.other_preferences),
            "priority_order": list(self.priority_order),
            "renvare_only": self.renvare_only,
        }


@dataclass
class ProductInfo:
    """
    Standardized product model independent of the retail data provider.
    """

    name: str
    brand: str = ""
    ean: Optional[str] = None
    price: Optional[float] = None
    ingredients_text: str = ""
    allergen_text: str = ""
    category: Optional[str] = None
    store: Optional[str] = None
    filters: str = ""
    raw_payload: Optional[dict] = None

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "brand": self.brand,
            "ean": self.ean,
            "price": self.price,
            "ingredients_text": self.ingredients_text,
            "allergen_text": self.allergen_text,
            "category": self.category,
            "store": self.store,
            "filters": self.filters,
        }


@dataclass
class MatchInfo:
    allergy_warnings: List[str] = field(default_factory=list)
    allergy_triggers: Dict[str, List[str]] = field(default_factory=dict)
    diet_warnings: List[str] = field(default_factory=list)
    diet_matches: List[str] = field(default_factory=list)
    organic_match: bool = False
    animal_welfare_level: WelfareLevel = WelfareLevel.UNKNOWN
    animal_welfare_reason: Optional[str] = None
    local_food_match: bool = False
    local_food_reason: Optional[str] = None
    match_score: int = 0

    def has_allergy_warning(self) -> bool:
        return bool(self.allergy_warnings)

    def to_dict(self) -> Dict:
        payload = asdict(self)
        payload["animal_welfare_level"] = self.animal_welfare_level.value
        return payload


@dataclass
class RankedProduct:
    product: ProductInfo
    match_info: MatchInfo
    nova_group: Optional[int] = None
    renvare_score: int = 100

    @property
    def price(self) -> Optional[float]:
        return self.product.price

    def to_dict(self) -> Dict:
        return {
            "product": self.product.to_dict(),
            "match_info": self.match_info.to_dict(),
            "nova_group": self.nova_group,
            "renvare_score": self.renvare_score,
        }


@dataclass(frozen=True)
class CategoryAssignment:
    category: str
    emoji: str
    sort_order: int


@dataclass
class ParsedItem:
    product_name: str
    quantity: int = 1
    notes: Optional[str] = None
