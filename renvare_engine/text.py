"""
Text helpers shared by the classifier, matcher and store-layout bucketing.

Keyword matching is plain substring search on lowercased text, without word
boundaries, so "ost" also fires inside "kostholdsfiber".
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

_WHITESPACE = re.compile(r"\s+")
_FRAGMENT_SPLIT = re.compile(r"[,;]")
_E_NUMBER = re.compile(r"\bE ?\d{3}[a-d]?\b", re.IGNORECASE)


def normalize(text: Optional[str]) -> str:
    """Lowercase, drop percent signs, collapse whitespace and trim."""
    lowered = (text or "").lower().replace("%", "")
    return _WHITESPACE.sub(" ", lowered).strip()


def normalize_query(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", (text or "").lower()).strip()


def matching_keywords(text: Optional[str], keywords: Iterable[str]) -> List[str]:
    haystack = (text or "").lower()
    return [keyword for keyword in keywords if keyword.lower().strip() in haystack]


def contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    haystack = (text or "").lower()
    return any(keyword.lower().strip() in haystack for keyword in keywords)


def split_fragments(text: str) -> List[str]:
    """Split an ingredient list into comma/semicolon delimited fragments."""
    fragments = (part.strip() for part in _FRAGMENT_SPLIT.split(text or ""))
    return [part for part in fragments if part]


def extract_e_numbers(text: str) -> List[str]:
    """Return distinct E-number codes (e.g. E471, E150D) in first-seen order."""
    seen: List[str] = []
    for match in _E_NUMBER.findall(text or ""):
        code = match.replace(" ", "").upper()
        if code not in seen:
            seen.append(code)
    return seen
