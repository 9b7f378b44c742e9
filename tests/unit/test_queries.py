"""
SQL 문 생성 유닛 테스트 (PostgreSQL 방언으로 컴파일)
"""
from sqlalchemy.dialects import postgresql

from foodfacts.models.product import ENERGY_KEYS
from foodfacts.services.filters import compile_search_params
from foodfacts.services.queries import (
    PAGE_ROW_LABEL,
    TOTAL_COUNT_LABEL,
    build_brand_statement,
    build_product_statement,
    build_search_statement,
    build_top_products_statement,
    build_view_count_statement,
    escape_like,
)


def _render(stmt):
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), list(compiled.params.values())


class TestSearchStatement:
    """검색 문"""

    def test_energy_gate_always_applied(self):
        sql, params = _render(build_search_statement(compile_search_params({})))
        assert "->>" in sql
        # 총 건수와 페이지 양쪽에 적용
        assert sql.count("IS NOT NULL") == 2 * len(ENERGY_KEYS)
        for key in ENERGY_KEYS:
            assert key in params

    def test_total_count_joined_to_page(self):
        sql, _ = _render(build_search_statement(compile_search_params({"page": "50"})))
        assert f"count(*) AS {TOTAL_COUNT_LABEL}" in sql
        assert "LEFT OUTER JOIN" in sql
        assert "ON true" in sql
        assert f"ORDER BY page_rows.{PAGE_ROW_LABEL}" in sql

    def test_pagination_offsets(self):
        query = compile_search_params({"page": "3", "page_size": "24"})
        sql, params = _render(build_search_statement(query))
        assert "LIMIT" in sql and "OFFSET" in sql
        assert 24 in params
        assert 48 in params

    def test_tag_any_uses_overlap(self):
        sql, params = _render(build_search_statement(compile_search_params({"categories_tags": "a|b"})))
        assert "products.categories_tags &&" in sql
        assert ["a", "b"] in params

    def test_tag_all_uses_containment(self):
        sql, params = _render(build_search_statement(compile_search_params({"categories_tags": "a,b"})))
        assert "products.categories_tags @>" in sql
        assert ["a", "b"] in params

    def test_range_compares_json_numbers_only(self):
        sql, params = _render(build_search_statement(compile_search_params({"sugars_100g_gt": "5"})))
        assert "jsonb_typeof" in sql
        assert "AS FLOAT" in sql
        assert "END >" in sql
        assert "sugars_100g" in params
        assert 5.0 in params

    def test_less_than_and_equal(self):
        sql, _ = _render(
            build_search_statement(compile_search_params({"fat_100g_lt": "3", "salt_100g_eq": "1"}))
        )
        assert "END <" in sql
        assert "END =" in sql

    def test_text_search_ranked_by_relevance(self):
        query = compile_search_params({"search_terms": "apple juice", "sort_by": "product_name"})
        sql, params = _render(build_search_statement(query))
        assert "@@ websearch_to_tsquery" in sql
        assert "ORDER BY ts_rank(" in sql
        assert "DESC" in sql
        assert "apple juice" in params
        assert "simple" in params

    def test_explicit_sort(self):
        sql, _ = _render(build_search_statement(compile_search_params({"sort_by": "-view_count"})))
        assert "ORDER BY products.view_count DESC NULLS LAST, products.code ASC" in sql

    def test_nutrient_sort(self):
        sql, params = _render(build_search_statement(compile_search_params({"sort_by": "sugars_100g"})))
        assert "ORDER BY CASE WHEN" in sql
        assert "ASC NULLS LAST" in sql
        assert "sugars_100g" in params

    def test_no_order_without_sort_or_search(self):
        sql, _ = _render(build_search_statement(compile_search_params({})))
        assert "row_number() OVER ()" in sql
        assert "ORDER BY products" not in sql

    def test_projection(self):
        query = compile_search_params({"fields": "code,product_name"})
        sql, _ = _render(build_search_statement(query))
        select_list = sql.split("FROM")[0]
        assert "page_rows.code" in select_list
        assert "page_rows.product_name" in select_list
        assert "nutriments" not in select_list
        assert "search_vector" not in select_list


class TestOtherStatements:
    """단일 조회, 브랜드, 상위 목록, 조회수"""

    def test_product_by_code(self):
        sql, params = _render(build_product_statement("123", ("code", "nutriments")))
        assert "products.code = " in sql
        assert "123" in params
        assert sql.count("IS NOT NULL") == len(ENERGY_KEYS)

    def test_brand_listing(self):
        sql, params = _render(build_brand_statement("Ben_&_Jerry's 100%", "999", 5))
        assert "ILIKE" in sql
        assert "ESCAPE" in sql
        assert "products.code != " in sql
        assert "%Ben\\_&\\_Jerry's 100\\%%" in params
        assert 5 in params

    def test_brand_listing_without_exclude(self):
        sql, _ = _render(build_brand_statement("ferrero", None, 5))
        assert "products.code !=" not in sql

    def test_top_products_from_view(self):
        sql, _ = _render(build_top_products_statement())
        assert "FROM top_10_products" in sql
        assert "ORDER BY top_10_products.view_count DESC" in sql
        assert sql.count("IS NOT NULL") == len(ENERGY_KEYS)

    def test_view_count_increment(self):
        sql, params = _render(build_view_count_statement("123"))
        assert sql.startswith("UPDATE products SET view_count=")
        assert "products.view_count +" in sql
        assert "123" in params

    def test_escape_like(self):
        assert escape_like("a%b_c\\d") == "a\\%b\\_c\\\\d"
