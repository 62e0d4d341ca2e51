"""
Rule tables for the NOVA processing classifier.

Three ordered tables of (id, regex, description) rows: strong ultra-processing
markers, weak markers, and real-food markers. Patterns run case-insensitively
against the whole normalized ingredient text (not per fragment). Table order
is part of the contract: signals are reported in table order and rationale
text cites the first strong signals found.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import Rule, Signal, SignalKind

RULESET_VERSION = "1.0.0"
RULESET_DATE = "2025-01-15"

_STRONG_ROWS: Tuple[Tuple[str, str, str], ...] = (
    ("UPF_STRONG_AROMA_GENERIC", r"\baroma(er)?\b", "Generisk aroma"),
    ("UPF_STRONG_AROMA_NATURAL", r"\bnaturlig(e)? aroma(er)?\b", "Naturlig aroma"),
    ("UPF_STRONG_AROMA_SMOKE", r"\brøkaroma\b", "Røkaroma"),
    ("UPF_STRONG_MSG", r"\b(mononatriumglutamat|E ?621)\b", "Mononatriumglutamat"),
    ("UPF_STRONG_YEAST_EXTRACT", r"\bgjærekstrakt\b", "Gjærekstrakt"),
    (
        "UPF_STRONG_SWEETENER",
        r"\b(aspartam|acesulfam ?k|sukralose|sakkarin|neotam|advantam|stevi(a|ol))\b",
        "Kunstig søtstoff",
    ),
    ("UPF_STRONG_SWEETENER_E", r"\bE ?9[56]\d\b", "E-nummer søtstoff (E950-E969)"),
    ("UPF_STRONG_EMULSIFIER", r"\bemulgator(er)?\b", "Emulgator"),
    ("UPF_STRONG_STABILIZER", r"\bstabilisator(er)?\b", "Stabilisator"),
    ("UPF_STRONG_THICKENER", r"\bfortykningsmiddel\b", "Fortykningsmiddel"),
    ("UPF_STRONG_E400", r"\bE ?4\d{2}\b", "E400-serie (emulgatorer/stabilisatorer)"),
    ("UPF_STRONG_XANTHAN", r"\b(xanthan|E ?415)\b", "Xanthan gum"),
    ("UPF_STRONG_CARRAGEENAN", r"\b(karragenan|E ?407)\b", "Karragenan"),
    (
        "UPF_STRONG_GLUCOSE_SYRUP",
        r"\b(glukose|fruktose|invertert)[-\s]?sirup\b",
        "Industriell sirup",
    ),
    ("UPF_STRONG_MALTODEXTRIN", r"\bmaltodekstrin\b", "Maltodekstrin"),
    ("UPF_STRONG_MODIFIED_STARCH", r"\bmodifisert(e)? stivelse\b", "Modifisert stivelse"),
    ("UPF_STRONG_MODIFIED_STARCH_E", r"\bE ?1(404|4[1-5]\d)\b", "E-nummer modifisert stivelse"),
    (
        "UPF_STRONG_HYDROGENATED_FAT",
        r"\b(hydrogenert|delvis herdet|interesterifisert)\b",
        "Industrielt bearbeidet fett",
    ),
    (
        "UPF_STRONG_WHEY_ISOLATE",
        r"\b(myseprotein(konsentrat|isolat)|whey protein( isolate)?)\b",
        "Myseproteinisolat",
    ),
    ("UPF_STRONG_SOY_ISOLATE", r"\bsoyaprotein( isolat)?\b", "Soyaproteinisolat"),
    ("UPF_STRONG_COLORANT", r"\bfargestoff\b", "Fargestoff"),
    ("UPF_STRONG_CARAMEL_COLOR", r"\b(karamellfarge|E ?150[a-d])\b", "Karamellfarge"),
    ("UPF_STRONG_CARMINE", r"\b(karmin|E ?120|annatto|E ?160b)\b", "Karmin/Annatto"),
)

_WEAK_ROWS: Tuple[Tuple[str, str, str], ...] = (
    ("UPF_WEAK_PRESERVATIVE", r"\bkonserveringsmiddel\b", "Konserveringsmiddel"),
    ("UPF_WEAK_E200", r"\bE ?2\d{2}\b", "E200-serie (konserveringsmidler)"),
    ("UPF_WEAK_ANTIOXIDANT", r"\bantioksidant(er)?\b", "Antioksidant"),
    ("UPF_WEAK_E300", r"\bE ?3\d{2}\b", "E300-serie (antioksidanter)"),
    ("UPF_WEAK_HUMECTANT", r"\bfuktighetsbevarende\b", "Fuktighetsbevarende middel"),
    ("UPF_WEAK_SORBITOL", r"\b(sorbitol|E ?420)\b", "Sorbitol"),
    ("UPF_WEAK_GLYCEROL", r"\b(glyserol|E ?422)\b", "Glyserol"),
    ("UPF_WEAK_PALM_OIL", r"\bpalmeolje\b", "Palmeolje"),
    (
        "UPF_WEAK_REFINED_OIL",
        r"\braffinert(e)? vegetabilsk(e)? olje(r)?\b",
        "Raffinert vegetabilsk olje",
    ),
)

_REAL_FOOD_ROWS: Tuple[Tuple[str, str, str], ...] = (
    ("REAL_FOOD_WHOLE_GRAIN", r"\bhel(e)? korn\b", "Hele korn"),
    ("REAL_FOOD_WHOLE_NUTS", r"\bhele nøtter\b", "Hele nøtter"),
    ("REAL_FOOD_LEGUMES", r"\bbelgfrukter\b", "Belgfrukter"),
    ("REAL_FOOD_FRUIT", r"\bfrukt(er)?\b", "Frukt"),
    ("REAL_FOOD_VEGETABLES", r"\bgrønnsaker\b", "Grønnsaker"),
    ("REAL_FOOD_RAW_MILK", r"\brå melk\b", "Rå melk"),
    ("REAL_FOOD_RAW_COCOA", r"\brå kakao\b", "Rå kakao"),
    ("REAL_FOOD_PASTEURIZED", r"\bpasteurisert\b", "Pasteurisert (tradisjonell prosess)"),
    ("REAL_FOOD_FERMENTED", r"\bfermentert\b", "Fermentert"),
    ("REAL_FOOD_DRIED", r"\btørket\b", "Tørket"),
    ("REAL_FOOD_SMOKED", r"\brøkt\b(?!\s*aroma)", "Røkt (ikke røkaroma)"),
)


def _build_rules(rows: Iterable[Tuple[str, str, str]], kind: SignalKind) -> Tuple[Rule, ...]:
    return tuple(
        Rule(
            id=rule_id,
            pattern=re.compile(pattern, re.IGNORECASE),
            kind=kind,
            description=description,
        )
        for rule_id, pattern, description in rows
    )


STRONG_RULES: Tuple[Rule, ...] = _build_rules(_STRONG_ROWS, SignalKind.STRONG)
WEAK_RULES: Tuple[Rule, ...] = _build_rules(_WEAK_ROWS, SignalKind.WEAK)
REAL_FOOD_RULES: Tuple[Rule, ...] = _build_rules(_REAL_FOOD_ROWS, SignalKind.REAL_FOOD)

ALL_RULES: Tuple[Rule, ...] = STRONG_RULES + WEAK_RULES + REAL_FOOD_RULES


def _index_rules(rules: Sequence[Rule]) -> Dict[str, Rule]:
    index: Dict[str, Rule] = {}
    for rule in rules:
        if rule.id in index:
            raise ValueError(f"Duplicate rule id: {rule.id}")
        index[rule.id] = rule
    return index


_RULES_BY_ID: Dict[str, Rule] = _index_rules(ALL_RULES)


def rule_by_id(rule_id: str) -> Rule:
    return _RULES_BY_ID[rule_id]


def match_rules(text: str, rules: Sequence[Rule]) -> List[Signal]:
    """
    Run each rule over the text and emit one signal per distinct matched
    substring, preserving rule order and first-seen match order.
    """
    signals: List[Signal] = []
    for rule in rules:
        seen: List[str] = []
        for match in rule.pattern.finditer(text):
            matched = match.group(0)
            if matched in seen:
                continue
            seen.append(matched)
            signals.append(
                Signal(
                    kind=rule.kind,
                    rule_id=rule.id,
                    match=matched.strip(),
                    description=rule.description,
                )
            )
    return signals
