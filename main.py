"""
CLI entrypoint for the renvare engine.

Subcommands:
- classify      : NOVA group for one ingredient list
- match         : evaluate one product against allergies, diets and preferences
- categorize    : store-layout category for a shopping-list item
- classify-csv  : classify every row of a CSV file (offline batch tool)

Output is a text dashboard (Norwegian by default, --lang en for English) or
JSON with --format json.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Dict, List, Optional

import pandas as pd

from renvare_engine import (
    NovaClassifier,
    OtherPreferences,
    PreferenceMatcher,
    ProductInfo,
    Settings,
    UserPreferenceProfile,
    categorize_product,
    configure_logging,
)
from renvare_engine.lexicon import allergen_label, resolve_allergen_code

logger = logging.getLogger("renvare_cli")

# Simple i18n table for CLI output (extendable with more locales).
TRANSLATIONS = {
    "en": {
        "nova_title": "=== Processing level (NOVA) ===",
        "match_title": "=== Product match ===",
        "category_title": "=== Store section ===",
        "nova_group": "NOVA group",
        "not_classified": "not classified",
        "estimated": "estimated from category",
        "confidence": "Confidence",
        "reasoning": "Reasoning",
        "signals": "Signals",
        "match_score": "Match score",
        "allergy_warnings": "Allergy warnings",
        "diet_warnings": "Diet conflicts",
        "diet_matches": "Diet matches",
        "organic": "Organic",
        "animal_welfare": "Animal welfare",
        "local_food": "Local food",
        "yes": "yes",
        "no": "no",
        "none": "none",
        "csv_done": "Classified {count} rows -> {path}",
        "csv_missing_column": "Column '{column}' not found in {path}.",
        "welfare_high": "high",
        "welfare_medium": "medium",
        "welfare_low": "low",
        "welfare_unknown": "unknown",
    },
    "no": {
        "nova_title": "=== Bearbeidingsgrad (NOVA) ===",
        "match_title": "=== Produktmatch ===",
        "category_title": "=== Butikkavdeling ===",
        "nova_group": "NOVA-gruppe",
        "not_classified": "ikke klassifisert",
        "estimated": "anslått fra kategori",
        "confidence": "Sikkerhet",
        "reasoning": "Begrunnelse",
        "signals": "Signaler",
        "match_score": "Matchscore",
        "allergy_warnings": "Allergiadvarsler",
        "diet_warnings": "Kostholdskonflikter",
        "diet_matches": "Passer kosthold",
        "organic": "Økologisk",
        "animal_welfare": "Dyrevelferd",
        "local_food": "Lokalmat",
        "yes": "ja",
        "no": "nei",
        "none": "ingen",
        "csv_done": "Klassifiserte {count} rader -> {path}",
        "csv_missing_column": "Fant ikke kolonnen '{column}' i {path}.",
        "welfare_high": "høy",
        "welfare_medium": "middels",
        "welfare_low": "lav",
        "welfare_unknown": "ukjent",
    },
}


def _t(key: str, lang: str = "no") -> str:
    """Translate a key to the requested language with English fallback."""
    bundle = TRANSLATIONS.get(lang, TRANSLATIONS["en"])
    return bundle.get(key) or TRANSLATIONS["en"].get(key, key)


def _csv_list(raw: Optional[str]) -> List[str]:
    return [token.strip() for token in (raw or "").split(",") if token.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Configure the CLI arguments and subcommands."""
    parser = argparse.ArgumentParser(
        description="Classify food processing level and match products to user preferences"
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--lang",
        default="no",
        help="Language for output labels (no or en). Defaults to no.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: RENVARE_LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    classify = sub.add_parser("classify", help="NOVA group for one ingredient list")
    classify.add_argument("--ingredients", required=True, help="Ingredient list text")
    classify.add_argument("--category", default=None, help="Product category (e.g. snacks, kjeks)")
    classify.add_argument(
        "--additives", default=None, help="Comma-separated declared E-numbers (e.g. E330,E471)"
    )

    match = sub.add_parser("match", help="Evaluate one product against a preference profile")
    match.add_argument("--name", required=True, help="Product name")
    match.add_argument("--brand", default="", help="Product brand")
    match.add_argument("--ingredients", default="", help="Ingredient list text")
    match.add_argument("--allergen-text", default="", help="Declared allergen text")
    match.add_argument(
        "--allergies", default=None, help="Comma-separated allergies (e.g. gluten,melk,nøtter)"
    )
    match.add_argument("--diets", default=None, help="Comma-separated diets (e.g. vegan,keto)")
    match.add_argument("--organic", action="store_true", default=False, help="Prefer organic")
    match.add_argument(
        "--animal-welfare", action="store_true", default=False, help="Prefer animal welfare"
    )
    match.add_argument(
        "--local-food", action="store_true", default=False, help="Prefer Norwegian local food"
    )

    categorize = sub.add_parser("categorize", help="Store section for a shopping-list item")
    categorize.add_argument("query", help="Shopping-list text (e.g. melk)")
    categorize.add_argument("--name", default=None, help="Chosen product name")
    categorize.add_argument("--brand", default=None, help="Chosen product brand")

    classify_csv = sub.add_parser("classify-csv", help="Classify every row of a CSV file")
    classify_csv.add_argument("input", help="Input CSV path")
    classify_csv.add_argument("output", help="Output CSV path")
    classify_csv.add_argument(
        "--text-column", default="ingredients_text", help="Column with ingredient text"
    )
    classify_csv.add_argument(
        "--category-column", default=None, help="Optional column with product category"
    )
    return parser


def render_bar(score: float, width: int = 30) -> str:
    """ASCII bar to visualize a 0-100 score."""
    score = min(max(score, 0.0), 100.0)
    filled = int((score / 100.0) * width)
    return f"[{'#' * filled}{'.' * (width - filled)}]"


def render_classification_text(result, lang: str = "no") -> str:
    lines = [_t("nova_title", lang)]
    if result.nova_group is None:
        group = _t("not_classified", lang)
    else:
        group = str(result.nova_group)
        if result.is_estimated:
            group += f" ({_t('estimated', lang)})"
    lines.append(f"{_t('nova_group', lang)}: {group}")
    lines.append(
        f"{_t('confidence', lang)}: {result.confidence:.2f} {render_bar(result.confidence * 100)}"
    )
    lines.append(f"{_t('reasoning', lang)}: {result.reasoning}")
    if result.signals:
        lines.append(f"\n{_t('signals', lang)}:")
        for signal in result.signals:
            lines.append(f"  - [{signal.kind.value}] {signal.description}: {signal.match}")
    return "\n".join(lines)


def _allergy_display(name: str, lang: str) -> str:
    code = resolve_allergen_code(name)
    if not code:
        return name
    label = allergen_label(code, lang=lang)
    if label and label.lower() != name.lower():
        return f"{name} ({label})"
    return name


def render_match_text(product: ProductInfo, info, lang: str = "no") -> str:
    yes, no = _t("yes", lang), _t("no", lang)
    headline = product.name + (f" · {product.brand}" if product.brand else "")
    lines = [_t("match_title", lang), headline]
    lines.append(f"{_t('match_score', lang)}: {info.match_score}/100 {render_bar(info.match_score)}")

    warnings = [_allergy_display(name, lang) for name in info.allergy_warnings]
    lines.append(f"{_t('allergy_warnings', lang)}: {', '.join(warnings) or _t('none', lang)}")
    for name, triggers in info.allergy_triggers.items():
        lines.append(f"  - {name}: {', '.join(triggers)}")
    lines.append(f"{_t('diet_warnings', lang)}: {', '.join(info.diet_warnings) or _t('none', lang)}")
    lines.append(f"{_t('diet_matches', lang)}: {', '.join(info.diet_matches) or _t('none', lang)}")
    lines.append(f"{_t('organic', lang)}: {yes if info.organic_match else no}")

    welfare = _t(f"welfare_{info.animal_welfare_level.value}", lang)
    if info.animal_welfare_reason:
        welfare += f" ({info.animal_welfare_reason})"
    lines.append(f"{_t('animal_welfare', lang)}: {welfare}")

    local = yes if info.local_food_match else no
    if info.local_food_reason:
        local += f" ({info.local_food_reason})"
    lines.append(f"{_t('local_food', lang)}: {local}")
    return "\n".join(lines)


def _emit(payload: Dict, text: str, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        print(text)


def run_classify(args: argparse.Namespace, classifier: NovaClassifier) -> int:
    result = classifier.classify_text(
        args.ingredients,
        product_category=args.category,
        additives=_csv_list(args.additives),
    )
    _emit(result.to_dict(), render_classification_text(result, args.lang), args.format)
    return 0


def run_match(args: argparse.Namespace) -> int:
    product = ProductInfo(
        name=args.name,
        brand=args.brand,
        ingredients_text=args.ingredients,
        allergen_text=args.allergen_text,
    )
    profile = UserPreferenceProfile(
        allergies=_csv_list(args.allergies),
        diets=_csv_list(args.diets),
        other_preferences=OtherPreferences(
            organic=args.organic,
            animal_welfare=args.animal_welfare,
            local_food=args.local_food,
        ),
    )
    info = PreferenceMatcher().match(product, profile)
    _emit(info.to_dict(), render_match_text(product, info, args.lang), args.format)
    return 0


def run_categorize(args: argparse.Namespace) -> int:
    assignment = categorize_product(args.query, args.name, args.brand)
    text = f"{_t('category_title', args.lang)}\n{assignment.emoji} {assignment.category}"
    _emit(asdict(assignment), text, args.format)
    return 0


def _cell(row, column: Optional[str]) -> Optional[str]:
    if not column:
        return None
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return str(value)


def run_classify_csv(args: argparse.Namespace, classifier: NovaClassifier) -> int:
    df = pd.read_csv(args.input)
    for column in (args.text_column, args.category_column):
        if column and column not in df.columns:
            print(
                _t("csv_missing_column", args.lang).format(column=column, path=args.input),
                file=sys.stderr,
            )
            return 2

    rows = []
    for _, row in df.iterrows():
        result = classifier.classify_text(
            _cell(row, args.text_column) or "",
            product_category=_cell(row, args.category_column),
        )
        rows.append(
            {
                "nova_group": result.nova_group,
                "confidence": result.confidence,
                "is_estimated": result.is_estimated,
                "strong_hits": result.debug.strong_hits,
                "weak_hits": result.debug.weak_hits,
                "reasoning": result.reasoning,
            }
        )

    results_df = pd.DataFrame(rows, index=df.index)
    output_df = pd.concat([df, results_df], axis=1)
    output_df.to_csv(args.output, index=False, encoding="utf-8")
    logger.info("Wrote %d classified rows to %s", len(output_df), args.output)

    summary = {"rows": len(output_df), "output": args.output}
    _emit(summary, _t("csv_done", args.lang).format(count=len(output_df), path=args.output), args.format)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint: parse arguments, configure logging, dispatch the subcommand."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(args.log_level or settings.log_level)
    classifier = NovaClassifier(max_batch_size=settings.max_batch_size)

    if args.command == "classify":
        return run_classify(args, classifier)
    if args.command == "match":
        return run_match(args)
    if args.command == "categorize":
        return run_categorize(args)
    return run_classify_csv(args, classifier)


if __name__ == "__main__":
    sys.exit(main())
