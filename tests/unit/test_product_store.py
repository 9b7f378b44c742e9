"""
상품 저장소 유닛 테스트 (세션 대역 사용)
"""
import asyncio
from types import SimpleNamespace

from foodfacts.services.filters import compile_search_params
from foodfacts.services.product_store import ProductStore
from foodfacts.services.queries import PAGE_ROW_LABEL, TOTAL_COUNT_LABEL


class RowsSession:
    """execute 결과로 고정된 행을 돌려주는 세션"""

    def __init__(self, rows):
        self.rows = rows

    async def execute(self, stmt):
        return [SimpleNamespace(_mapping=row) for row in self.rows]


class TestSearch:
    """검색 결과 조립"""

    def test_page_rows_returned_without_meta_columns(self):
        session = RowsSession(
            [
                {TOTAL_COUNT_LABEL: 30, "code": "1", PAGE_ROW_LABEL: 1},
                {TOTAL_COUNT_LABEL: 30, "code": "2", PAGE_ROW_LABEL: 2},
            ]
        )
        page = asyncio.run(ProductStore(session).search(compile_search_params({})))

        assert page.count == 30
        assert page.products == [{"code": "1"}, {"code": "2"}]

    def test_total_kept_past_last_page(self):
        # 페이지가 비어도 총 건수 행은 하나 반환됨 (페이지 컬럼 NULL)
        session = RowsSession([{TOTAL_COUNT_LABEL: 62, "code": None, PAGE_ROW_LABEL: None}])
        page = asyncio.run(ProductStore(session).search(compile_search_params({"page": "50"})))

        assert page.count == 62
        assert page.products == []
        assert page.page_range.page == 50
