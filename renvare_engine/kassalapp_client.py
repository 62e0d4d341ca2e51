"""
Data source implementation for the Kassalapp product search API.
Fetches paginated search results, keeps only products sold by the selected
store chain, and maps each item into a ProductInfo for the matcher and ranker.
"""

from __future__ import annotations

import logging
import math
import re
import time
from typing import Callable, Dict, List, Optional

import requests

from .models import ProductInfo


class ProductDataSource:
    """
    Base interface for any product search source (API, DB, fixture).
    """

    def search(self, query: str, store_code: Optional[str] = None) -> List[ProductInfo]:
        raise NotImplementedError


# Store codes used by the app -> substrings matched against the API's
# store.code (preferred) and store.name. Coop chains often come back as plain
# "Coop", so they can only be narrowed to Coop as a whole.
STORE_FILTERS: Dict[str, Dict[str, List[str]]] = {
    "MENY_NO": {"names": ["meny"], "codes": ["meny"]},
    "KIWI": {"names": ["kiwi"], "codes": ["kiwi"]},
    "REMA_1000": {"names": ["rema 1000", "rema"], "codes": ["rema", "rema_1000"]},
    "COOP_MEGA": {"names": ["coop mega", "coop"], "codes": ["coop", "mega"]},
    "COOP_EXTRA": {"names": ["coop extra", "coop"], "codes": ["coop", "extra"]},
    "COOP_PRIX": {"names": ["coop prix", "coop"], "codes": ["coop", "prix"]},
    "COOP_OBS": {"names": ["coop obs", "obs", "coop"], "codes": ["coop", "obs"]},
    "SPAR_NO": {"names": ["spar", "eurospar"], "codes": ["spar"]},
    "JOKER_NO": {"names": ["joker"], "codes": ["joker"]},
    "ODA_NO": {"names": ["oda"], "codes": ["oda"]},
    "BUNNPRIS": {"names": ["bunnpris"], "codes": ["bunnpris"]},
}


def parse_price(raw) -> Optional[float]:
    """'39,90 kr' -> 39.9; returns None when no number can be read."""
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    cleaned = re.sub(r"[^\d,.-]", "", str(raw)).replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return None


def retry_delay(retry_after: Optional[str], attempt: int) -> float:
    """
    Seconds to wait after a 429. Only the delta-seconds form of Retry-After is
    honoured; an HTTP-date or garbage falls back to a linear backoff.
    """
    if retry_after:
        try:
            delay = float(retry_after)
        except ValueError:
            delay = None
        if delay is not None and math.isfinite(delay) and delay >= 0:
            return delay
    return 0.6 * attempt


def store_matches(item: Dict, store_code: str) -> bool:
    allowed = STORE_FILTERS.get(store_code)
    if allowed is None:
        return False
    store = item.get("store") or {}
    api_code = (store.get("code") or "").lower()
    api_name = (store.get("name") or "").lower()
    if api_code:
        if api_code == store_code.lower():
            return True
        if any(code in api_code for code in allowed.get("codes", [])):
            return True
    return any(name in api_name for name in allowed["names"])


class KassalappClient(ProductDataSource):
    """
    Thin wrapper around the Kassalapp public API to standardize product info.
    """

    BASE_URL = "https://kassal.app/api/v1/products"

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        max_pages: int = 5,
        page_size: int = 100,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_pages = max_pages
        self.page_size = page_size
        self.max_retries = max_retries
        self.sleep = sleep
        self.log = logging.getLogger(self.__class__.__name__)

    def search(self, query: str, store_code: Optional[str] = None) -> List[ProductInfo]:
        if not self.api_key:
            self.log.warning("No Kassalapp API key configured")
            return []
        if store_code and store_code not in STORE_FILTERS:
            # Never leak results from other chains for an unknown store.
            self.log.warning("Unknown store code %r, returning no products", store_code)
            return []

        items: List[Dict] = []
        for page in range(1, self.max_pages + 1):
            page_items = self._fetch_page(query, page)
            if not page_items:
                break
            items.extend(page_items)
            if len(page_items) < self.page_size:
                break

        if store_code:
            items = [item for item in items if store_matches(item, store_code)]
        self.log.info(
            "Kassalapp search %r%s: %d products",
            query,
            f" ({store_code})" if store_code else "",
            len(items),
        )
        return [self._to_product(item, store_code) for item in items]

    def _fetch_page(self, query: str, page: int) -> List[Dict]:
        params = {"search": query, "size": self.page_size, "page": page}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(
                    self.BASE_URL, params=params, headers=headers, timeout=self.timeout
                )
            except requests.RequestException as exc:
                self.log.warning("Kassalapp fetch failed for page %d: %s", page, exc)
                return []

            if response.status_code == 429:
                delay = retry_delay(response.headers.get("Retry-After"), attempt)
                self.log.warning(
                    "Kassalapp rate-limited on page %d (attempt %d), waiting %.1fs",
                    page,
                    attempt,
                    delay,
                )
                self.sleep(delay)
                continue

            if not response.ok:
                self.log.warning("Kassalapp error %s on page %d", response.status_code, page)
                return []

            try:
                data = response.json()
            except ValueError as exc:
                self.log.warning("Kassalapp returned an undecodable body on page %d: %s", page, exc)
                return []
            payload = data.get("data") if isinstance(data, dict) else None
            return payload if isinstance(payload, list) else []

        self.log.warning("Kassalapp still rate-limited after %d attempts", self.max_retries)
        return []

    @staticmethod
    def _to_product(item: Dict, store_code: Optional[str]) -> ProductInfo:
        current_price = item.get("current_price")
        if isinstance(current_price, dict):
            current_price = current_price.get("price")
        categories = item.get("category") or []
        store = item.get("store") or {}
        allergens = item.get("allergens") or []
        nutrition = item.get("nutrition") or []
        return ProductInfo(
            name=item.get("name") or "Unknown product",
            brand=item.get("brand") or "",
            ean=str(item["ean"]) if item.get("ean") else None,
            price=parse_price(current_price),
            ingredients_text=item.get("ingredients") or "",
            allergen_text=", ".join(
                a.get("display_name", "") for a in allergens if isinstance(a, dict)
            ),
            category=categories[-1].get("name") if categories and isinstance(categories[-1], dict) else None,
            store=store_code or store.get("code") or store.get("name"),
            filters=", ".join(
                n.get("display_name", "") for n in nutrition if isinstance(n, dict)
            ),
            raw_payload=item,
        )
