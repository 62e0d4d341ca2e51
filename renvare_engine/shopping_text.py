"""
Free-text shopping list helpers.

Turns "2 bananer, melk (lett), 3x epler" into ParsedItem rows and strips
recipe amounts such as "800g tomater" down to the ingredient name.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional

from .models import ParsedItem

_ITEM_SPLIT = re.compile(r"[,\n;]")
_NOTES = re.compile(r"\(([^)]+)\)")
_QUANTITY = re.compile(r"^(\d+(?:[.,]\d+)?)\s*(?:x\s*)?(.+)", re.IGNORECASE)
_LEFTOVER_QUANTITY = re.compile(r"^\d+\s*x?\s*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

_UNIT_PREFIX = re.compile(
    r"^\d+[.,]?\d*\s*(kg|g|mg|l|dl|ml|cl|ss|ts|stk|pk|boks|pose|fedd|stilk|stilker"
    r"|porsjon|porsjoner|bit|biter)\s+",
    re.IGNORECASE,
)
_NUMBER_PREFIX = re.compile(r"^\d+[.,]?\d*\s+")


def parse_shopping_list_text(text: str) -> List[ParsedItem]:
    if not text or not text.strip():
        return []
    items: List[ParsedItem] = []
    for raw in _ITEM_SPLIT.split(text):
        parsed = _parse_item(raw.strip())
        if parsed:
            items.append(parsed)
    return items


def _parse_item(item: str) -> Optional[ParsedItem]:
    if not item:
        return None

    notes = ""
    notes_match = _NOTES.search(item)
    if notes_match:
        notes = notes_match.group(1).strip()
        item = _NOTES.sub("", item, count=1).strip()

    quantity = 1
    quantity_match = _QUANTITY.match(item)
    if quantity_match:
        quantity = max(1, math.floor(float(quantity_match.group(1).replace(",", "."))))
        item = quantity_match.group(2).strip()

    name = _WHITESPACE.sub(" ", _LEFTOVER_QUANTITY.sub("", item)).strip()
    if not name:
        return None
    return ParsedItem(product_name=name, quantity=quantity, notes=notes or None)


def format_parsed_item(item: ParsedItem) -> str:
    text = f"{item.quantity} {item.product_name}" if item.quantity > 1 else item.product_name
    if item.notes:
        text += f" ({item.notes})"
    return text


def remove_units_from_ingredient(ingredient: str) -> str:
    """'2 ss olivenolje' -> 'olivenolje', '600g laksfilet' -> 'laksfilet'."""
    stripped = _UNIT_PREFIX.sub("", ingredient or "")
    return _NUMBER_PREFIX.sub("", stripped).strip()
