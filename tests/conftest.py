"""
pytest 공통 fixture
데이터베이스 대신 메모리 저장소를 의존성으로 주입합니다.
"""
from typing import Any, Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from foodfacts.database import get_datastore
from foodfacts.dependencies import get_product_store, get_view_counter
from foodfacts.main import app
from foodfacts.models.product import ENERGY_KEYS
from foodfacts.services.filters import SearchQuery
from foodfacts.services.product_store import DatastoreError, DuplicateProductError, SearchPage


def _has_energy(product: Dict[str, Any]) -> bool:
    nutriments = product.get("nutriments") or {}
    return any(nutriments.get(key) is not None for key in ENERGY_KEYS)


class FakeProductStore:
    """메모리 상품 저장소 (ProductStore와 같은 인터페이스)"""

    def __init__(self, products: List[Dict[str, Any]]) -> None:
        self.products = {product["code"]: product for product in products}
        self.fail = False
        self.last_query: Optional[SearchQuery] = None
        self.last_brand_call: Optional[tuple] = None

    def _check(self) -> None:
        if self.fail:
            raise DatastoreError("connection refused")

    async def get_product(self, code: str, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        self._check()
        product = self.products.get(code)
        if product is None or not _has_energy(product):
            return None
        return {name: product.get(name) for name in fields if name in product}

    async def search(self, query: SearchQuery) -> SearchPage:
        self._check()
        self.last_query = query
        matches = [p for p in self.products.values() if _has_energy(p)]
        window = matches[query.page_range.offset:query.page_range.end]
        return SearchPage(
            products=[{name: p.get(name) for name in query.fields if name in p} for p in window],
            count=len(matches),
            page_range=query.page_range,
        )

    async def list_by_brand(self, brand: str, exclude: Optional[str], limit: int):
        self._check()
        self.last_brand_call = (brand, exclude, limit)
        return [
            p
            for p in self.products.values()
            if brand.lower() in (p.get("brands") or "").lower()
            and p["code"] != exclude
            and _has_energy(p)
        ][:limit]

    async def top_products(self):
        self._check()
        ranked = sorted(self.products.values(), key=lambda p: p.get("view_count", 0), reverse=True)
        return [p for p in ranked if _has_energy(p)][:10]

    async def create_product(self, data: Dict[str, Any]) -> str:
        self._check()
        if data["code"] in self.products:
            raise DuplicateProductError(data["code"])
        self.products[data["code"]] = data
        return data["code"]


class FakeViewCounter:
    """조회수 증가 호출 기록"""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def increment(self, code: str) -> None:
        self.calls.append(code)


class FakeDatastore:
    def __init__(self, up: bool = True) -> None:
        self.up = up

    async def ping(self) -> bool:
        return self.up


@pytest.fixture
def sample_products():
    """샘플 상품"""
    return [
        {
            "code": "3017620422003",
            "product_name": "Nutella",
            "brands": "Ferrero",
            "categories_tags": ["en:spreads", "en:sweet-spreads"],
            "nutriments": {
                "energy-kcal_100g": 539,
                "carbohydrates_100g": 57.5,
                "proteins_100g": 6.3,
                "fat_100g": 30.9,
                "sugars_100g": 56.3,
            },
            "view_count": 42,
        },
        {
            "code": "5000112546415",
            "product_name": "Apple juice",
            "brands": "Ferrero Drinks",
            "nutriments": {"energy_100g": 836},
            "view_count": 7,
        },
        {
            "code": "0000000000001",
            "product_name": "Mystery water",
            "brands": "Ferrero",
            "nutriments": {"sugars_100g": 0},
            "view_count": 99,
        },
    ]


@pytest.fixture
def store(sample_products):
    return FakeProductStore(sample_products)


@pytest.fixture
def view_counter():
    return FakeViewCounter()


@pytest.fixture
def client(store, view_counter):
    """테스트 클라이언트"""
    app.dependency_overrides[get_product_store] = lambda: store
    app.dependency_overrides[get_view_counter] = lambda: view_counter
    app.dependency_overrides[get_datastore] = lambda: FakeDatastore()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api_prefix():
    return "/api/v2"
