"""Shared fixtures for the renvare engine tests."""

import sys
from pathlib import Path

import pytest


def ensure_root_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


ensure_root_on_path()

from renvare_engine import (  # noqa: E402
    NovaClassifier,
    OtherPreferences,
    ProductInfo,
    UserPreferenceProfile,
)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def classifier():
    return NovaClassifier()


@pytest.fixture
def make_profile():
    def _make(
        allergies=None,
        diets=None,
        organic=False,
        animal_welfare=False,
        local_food=False,
        priority_order=None,
        renvare_only=False,
    ) -> UserPreferenceProfile:
        return UserPreferenceProfile(
            allergies=list(allergies or []),
            diets=list(diets or []),
            other_preferences=OtherPreferences(
                organic=organic,
                animal_welfare=animal_welfare,
                local_food=local_food,
            ),
            priority_order=list(priority_order or []),
            renvare_only=renvare_only,
        )

    return _make


@pytest.fixture
def make_product():
    def _make(name="Produkt", brand="", ingredients_text="", allergen_text="", price=None, **kw):
        return ProductInfo(
            name=name,
            brand=brand,
            ingredients_text=ingredients_text,
            allergen_text=allergen_text,
            price=price,
            **kw,
        )

    return _make
