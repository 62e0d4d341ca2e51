"""
FastAPI wrapper for the renvare engine.

Endpoints:
- GET /health           : readiness probe
- GET /version          : ruleset version and date
- POST /classify        : NOVA classification of one ingredient list (alias /classify-nova)
- POST /classify-batch  : up to 100 classifications, results in input order
- POST /match           : evaluate one product against a preference profile
- POST /rank            : classify, match and order a list of products
- POST /categorize      : store-layout category for a shopping-list item
- POST /search          : Kassalapp product search, ranked for a profile

Run locally:
    uvicorn api_server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from renvare_engine import (
    ClassificationInput,
    InvalidInputError,
    KassalappClient,
    NovaClassifier,
    PreferenceMatcher,
    ProductCategory,
    ProductInfo,
    RULESET_DATE,
    RULESET_VERSION,
    Settings,
    TTLCache,
    UserPreferenceProfile,
    categorize_product,
    configure_logging,
    rank_products,
)
from renvare_engine.nova_classifier import resolve_category

settings = Settings()
configure_logging(settings.log_level)

app = FastAPI(
    title="Renvare API",
    description="REST API for NOVA processing classification and preference-aware product ranking.",
    version=RULESET_VERSION,
)

# CORS for broad consumption; tighten in production by setting allowed origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ClassifyRequest(BaseModel):
    ingredients_text: str = Field(
        ..., min_length=1, max_length=5000, description="Free-text ingredient list"
    )
    additives: List[str] = Field(default_factory=list, description="Declared E-numbers")
    product_category: Optional[ProductCategory] = Field(
        None, description="Category id, English or Norwegian (e.g. snacks, kjeks)"
    )
    language: str = Field("no", description="Language of the ingredient text")

    @field_validator("product_category", mode="before")
    @classmethod
    def _resolve_category_alias(cls, v):
        if isinstance(v, str):
            resolved = resolve_category(v)
            if resolved is not None:
                return resolved
        return v

    def to_input(self) -> ClassificationInput:
        return ClassificationInput(
            ingredients_text=self.ingredients_text,
            additives=list(self.additives),
            product_category=self.product_category.value if self.product_category else None,
            language=self.language,
        )


class ProductPayload(BaseModel):
    name: str = Field(..., min_length=1)
    brand: str = ""
    ean: Optional[str] = None
    price: Optional[float] = None
    ingredients_text: str = ""
    allergen_text: str = ""
    category: Optional[str] = None
    store: Optional[str] = None
    filters: str = ""

    def to_product(self) -> ProductInfo:
        return ProductInfo(**self.model_dump())


class MatchRequest(BaseModel):
    product: ProductPayload
    preferences: Optional[Dict] = Field(None, description="Stored preference profile JSON")


class RankRequest(BaseModel):
    products: List[ProductPayload]
    preferences: Optional[Dict] = None


class CategorizeRequest(BaseModel):
    query: str = Field(..., min_length=1)
    product_name: Optional[str] = None
    brand: Optional[str] = None


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)
    store_code: Optional[str] = Field(None, description="e.g. KIWI, REMA_1000, COOP_MEGA")
    preferences: Optional[Dict] = None


# Shared singletons
cache = TTLCache(settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)
classifier = NovaClassifier(cache=cache, max_batch_size=settings.max_batch_size)
matcher = PreferenceMatcher()
product_source = KassalappClient(api_key=settings.kassalapp_api_key)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(InvalidInputError)
async def _invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


def _profile(preferences: Optional[Dict]) -> Optional[UserPreferenceProfile]:
    """No preferences means no profile (neutral scoring), not a default profile."""
    if preferences is None:
        return None
    return UserPreferenceProfile.from_dict(preferences)


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


@app.get("/version")
def version() -> Dict[str, str]:
    return {"version": RULESET_VERSION, "ruleset_date": RULESET_DATE}


@app.post("/classify")
@app.post("/classify-nova")
def classify(request: ClassifyRequest):
    return classifier.classify(request.to_input()).to_dict()


@app.post("/classify-batch")
def classify_batch(items: List[ClassifyRequest]):
    results = classifier.classify_batch([item.to_input() for item in items])
    return [result.to_dict() for result in results]


@app.post("/match")
def match(request: MatchRequest):
    profile = _profile(request.preferences)
    return matcher.match(request.product.to_product(), profile).to_dict()


@app.post("/rank")
def rank(request: RankRequest):
    profile = _profile(request.preferences)
    ranked = rank_products(
        [item.to_product() for item in request.products],
        profile,
        classifier=classifier,
        matcher=matcher,
    )
    return [item.to_dict() for item in ranked]


@app.post("/categorize")
def categorize(request: CategorizeRequest):
    return asdict(categorize_product(request.query, request.product_name, request.brand))


@app.post("/search")
def search(request: SearchRequest):
    if not settings.kassalapp_api_key:
        raise HTTPException(status_code=503, detail="Product search is not configured")
    profile = _profile(request.preferences)
    products = product_source.search(request.query, store_code=request.store_code)
    ranked = rank_products(products, profile, classifier=classifier, matcher=matcher)
    return {"query": request.query, "count": len(ranked), "products": [item.to_dict() for item in ranked]}


if __name__ == "__main__":
    uvicorn.run("api_server:app", host=settings.api_host, port=settings.api_port, reload=False)
