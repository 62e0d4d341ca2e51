import pytest
from fastapi.testclient import TestClient

import api_server
from renvare_engine import KassalappClient, ProductInfo
from renvare_engine.nova_rules import RULESET_DATE, RULESET_VERSION


@pytest.fixture
def client():
    return TestClient(api_server.app)


def test_health_and_version(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/version").json() == {
        "version": RULESET_VERSION,
        "ruleset_date": RULESET_DATE,
    }


@pytest.mark.parametrize("path", ["/classify", "/classify-nova"])
def test_classify(client, path):
    response = client.post(path, json={"ingredients_text": "sukker, emulgator E471, aroma, fargestoff"})
    assert response.status_code == 200
    body = response.json()
    assert body["nova_group"] == 4
    assert body["confidence"] >= 0.8
    assert body["has_ingredients"] is True
    assert body["signals"]
    assert all(s["type"] == "strong" for s in body["signals"])


def test_classify_accepts_norwegian_category_alias(client):
    response = client.post(
        "/classify",
        json={"ingredients_text": "sukker, palmeolje, antioksidant", "product_category": "kjeks"},
    )
    assert response.status_code == 200
    assert response.json()["nova_group"] == 4


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"ingredients_text": ""},
        {"ingredients_text": "x" * 5001},
        {"ingredients_text": "vann", "product_category": "pizzaa"},
        {"ingredients_text": "vann", "additives": "E330"},
    ],
)
def test_classify_validation_errors(client, body):
    response = client.post("/classify", json=body)
    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Validation error"
    assert payload["details"]


def test_classify_batch(client):
    response = client.post(
        "/classify-batch",
        json=[
            {"ingredients_text": "vann, salt, hele grønnsaker"},
            {"ingredients_text": "sukker, emulgator"},
        ],
    )
    assert response.status_code == 200
    assert [r["nova_group"] for r in response.json()] == [1, 4]


def test_classify_batch_over_limit_is_rejected(client):
    response = client.post("/classify-batch", json=[{"ingredients_text": "vann"}] * 101)
    assert response.status_code == 400
    assert "exceeds" in response.json()["error"]


def test_match_trusts_ingredients_over_allergen_field(client):
    response = client.post(
        "/match",
        json={
            "product": {
                "name": "Laksefilet",
                "ingredients_text": "laks, salt, sitron",
                "allergen_text": "Gluten, Melk, Egg",
            },
            "preferences": {"allergies": ["melk"]},
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["allergy_warnings"] == []
    assert body["match_score"] == 100
    assert body["animal_welfare_level"] == "unknown"


def test_match_without_preferences_is_neutral(client):
    response = client.post("/match", json={"product": {"name": "Melk", "ingredients_text": "melk"}})
    assert response.json()["match_score"] == 50


def test_match_with_malformed_preferences_is_rejected(client):
    response = client.post(
        "/match",
        json={"product": {"name": "Melk"}, "preferences": {"allergies": "melk"}},
    )
    assert response.status_code == 400


def test_rank_orders_safe_products_first(client):
    response = client.post(
        "/rank",
        json={
            "products": [
                {"name": "Melkesjokolade", "ingredients_text": "sukker, helmelkpulver", "price": 10},
                {"name": "Havregryn", "ingredients_text": "havregryn", "price": 30},
            ],
            "preferences": {"allergies": ["melk"]},
        },
    )
    assert response.status_code == 200
    names = [item["product"]["name"] for item in response.json()]
    assert names == ["Havregryn", "Melkesjokolade"]


def test_categorize(client):
    response = client.post("/categorize", json={"query": "melk"})
    assert response.json() == {"category": "Meieriprodukter", "emoji": "🥛", "sort_order": 2}


class FakeSource:
    def __init__(self, products):
        self.products = products
        self.calls = []

    def search(self, query, store_code=None):
        self.calls.append((query, store_code))
        return list(self.products)


def test_search_requires_api_key(client, monkeypatch):
    monkeypatch.setattr(api_server.settings, "kassalapp_api_key", None)
    assert client.post("/search", json={"query": "melk"}).status_code == 503


def test_search_ranks_source_results(client, monkeypatch):
    source = FakeSource(
        [
            ProductInfo(name="Sjokomelk", ingredients_text="melk, sukker, aroma", price=25),
            ProductInfo(name="Havremelk", ingredients_text="vann, havre", price=30),
        ]
    )
    monkeypatch.setattr(api_server.settings, "kassalapp_api_key", "key")
    monkeypatch.setattr(api_server, "product_source", source)

    response = client.post(
        "/search",
        json={"query": "melk", "store_code": "KIWI", "preferences": {"allergies": ["melk"]}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [p["product"]["name"] for p in body["products"]] == ["Havremelk", "Sjokomelk"]
    assert source.calls == [("melk", "KIWI")]


class UndecodableResponse:
    status_code = 200
    ok = True
    headers = {}

    def json(self):
        raise ValueError("Expecting value: line 1 column 1 (char 0)")


class UndecodableSession:
    def get(self, url, params=None, headers=None, timeout=None):
        return UndecodableResponse()


def test_search_survives_undecodable_upstream_body(client, monkeypatch):
    monkeypatch.setattr(api_server.settings, "kassalapp_api_key", "key")
    monkeypatch.setattr(
        api_server, "product_source", KassalappClient("key", session=UndecodableSession())
    )

    response = client.post("/search", json={"query": "melk"})

    assert response.status_code == 200
    assert response.json()["count"] == 0


def test_match_rejects_string_flag_in_preferences(client):
    response = client.post(
        "/match",
        json={
            "product": {"name": "Melk"},
            "preferences": {"other_preferences": {"organic": "false"}},
        },
    )
    assert response.status_code == 400
    assert "organic" in response.json()["error"]
