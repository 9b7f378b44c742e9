"""
검색 API 통합 테스트
"""
import pytest

from foodfacts.services.filters import RangeFilter, TagFilter


@pytest.fixture
def many_products(store):
    """페이지네이션용 상품 60개 추가"""
    for i in range(60):
        code = f"20000000{i:05d}"
        store.products[code] = {
            "code": code,
            "product_name": f"Cracker {i}",
            "brands": "Acme",
            "nutriments": {"energy-kcal_100g": 400 + i},
            "view_count": i,
        }
    return store


class TestSearch:
    """GET /search"""

    def test_default_page(self, client, api_prefix, many_products):
        response = client.get(f"{api_prefix}/search")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == 1
        assert data["status_verbose"] == "search results found"
        assert data["page"] == 1
        assert data["page_size"] == 24
        assert len(data["products"]) == 24
        assert data["count"] >= len(data["products"])
        # 에너지 정보가 없는 상품은 결과에 없음
        assert "0000000000001" not in [p["code"] for p in data["products"]]

    def test_page_and_size_echoed(self, client, api_prefix, many_products):
        response = client.get(f"{api_prefix}/search?page=3&page_size=10")

        data = response.json()
        assert data["page"] == 3
        assert data["page_size"] == 10
        assert len(data["products"]) == 10
        assert many_products.last_query.page_range.offset == 20

    def test_page_size_capped(self, client, api_prefix, many_products):
        response = client.get(f"{api_prefix}/search?page_size=1000")

        data = response.json()
        assert data["page_size"] == 100
        assert len(data["products"]) == 62

    def test_invalid_paging_falls_back(self, client, api_prefix):
        data = client.get(f"{api_prefix}/search?page=abc&page_size=-5").json()
        assert data["page"] == 1
        assert data["page_size"] == 1

    def test_kj_products_normalized(self, client, api_prefix):
        data = client.get(f"{api_prefix}/search").json()

        juice = next(p for p in data["products"] if p["code"] == "5000112546415")
        assert juice["nutriments"]["energy-kcal_100g"] == pytest.approx(199.8, abs=0.05)

    def test_filters_compiled(self, client, api_prefix, store):
        response = client.get(
            f"{api_prefix}/search?categories_tags=en:spreads|en:snacks&sugars_100g_lt=10&sugars_100g_gt=oops"
        )

        assert response.status_code == 200
        predicates = store.last_query.predicates
        assert TagFilter("categories_tags", ("en:spreads", "en:snacks"), "any") in predicates
        assert RangeFilter("sugars_100g", "lt", 10.0) in predicates
        assert "sugars_100g_gt" in store.last_query.ignored

    def test_sort_ignored_with_search_terms(self, client, api_prefix, store):
        client.get(f"{api_prefix}/search?search_terms=nutella&sort_by=product_name")

        query = store.last_query
        assert query.text_search is not None
        assert query.text_search.terms == "nutella"
        assert query.sort is None

    def test_sort_applied_without_search_terms(self, client, api_prefix, store):
        client.get(f"{api_prefix}/search?sort_by=-view_count")

        sort = store.last_query.sort
        assert sort.field == "view_count"
        assert sort.descending is True

    def test_fields_projection(self, client, api_prefix):
        data = client.get(f"{api_prefix}/search?fields=code,product_name").json()

        assert data["products"]
        assert all(set(p) <= {"code", "product_name"} for p in data["products"])

    def test_page_past_end_keeps_total(self, client, api_prefix, many_products):
        data = client.get(f"{api_prefix}/search?page=50").json()

        assert data["products"] == []
        assert data["count"] == 62
        assert data["page"] == 50

    def test_huge_page_number(self, client, api_prefix, many_products):
        response = client.get(f"{api_prefix}/search?page=99999999999999999999")

        assert response.status_code == 200
        data = response.json()
        assert data["products"] == []
        assert data["count"] == 62
        assert data["page"] * data["page_size"] <= 2 ** 63 - 1

    def test_datastore_error(self, client, api_prefix, store):
        store.fail = True
        response = client.get(f"{api_prefix}/search")

        assert response.status_code == 500
        data = response.json()
        assert data["status"] == 0
        assert data["status_verbose"] == "failed to fetch products"
