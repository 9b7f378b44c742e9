"""
상품 저장소
products 테이블 조회/등록. 데이터베이스 오류는 DatastoreError로 변환합니다.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from foodfacts.models.product import Product
from foodfacts.services.filters import SearchQuery
from foodfacts.services.pagination import PageRange
from foodfacts.services.queries import (
    PAGE_ROW_LABEL,
    TOTAL_COUNT_LABEL,
    build_brand_statement,
    build_product_statement,
    build_search_statement,
    build_top_products_statement,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

_SEARCH_META_LABELS = frozenset({TOTAL_COUNT_LABEL, PAGE_ROW_LABEL})


class DatastoreError(Exception):
    """데이터베이스 조회/연결 실패"""

    pass


class DuplicateProductError(Exception):
    """이미 등록된 바코드"""

    def __init__(self, code: str) -> None:
        super().__init__(f"product already exists: {code}")
        self.code = code


@dataclass
class SearchPage:
    """검색 결과 한 페이지"""

    products: List[Dict[str, Any]]
    count: int
    page_range: PageRange


def _is_unique_violation(error: IntegrityError) -> bool:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code is None or code == UNIQUE_VIOLATION


class ProductStore:
    """상품 저장소"""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _fetch_all(self, stmt) -> List[Dict[str, Any]]:
        try:
            result = await self._session.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"상품 조회 실패: {e}", exc_info=True)
            raise DatastoreError(str(e)) from e
        return [dict(row._mapping) for row in result]

    async def get_product(self, code: str, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        """바코드로 조회 (에너지 정보가 없으면 None)"""
        rows = await self._fetch_all(build_product_statement(code, fields))
        return rows[0] if rows else None

    async def search(self, query: SearchQuery) -> SearchPage:
        """검색 실행 (결과와 총 건수를 한 번에, 페이지가 비어도 총 건수 유지)"""
        rows = await self._fetch_all(build_search_statement(query))
        count = rows[0][TOTAL_COUNT_LABEL] if rows else 0
        products = [
            {key: value for key, value in row.items() if key not in _SEARCH_META_LABELS}
            for row in rows
            if row[PAGE_ROW_LABEL] is not None
        ]
        return SearchPage(products=products, count=count, page_range=query.page_range)

    async def list_by_brand(
        self, brand: str, exclude: Optional[str], limit: int
    ) -> List[Dict[str, Any]]:
        """같은 브랜드 상품 목록"""
        return await self._fetch_all(build_brand_statement(brand, exclude, limit))

    async def top_products(self) -> List[Dict[str, Any]]:
        """조회수 상위 상품"""
        return await self._fetch_all(build_top_products_statement())

    async def create_product(self, data: Dict[str, Any]) -> str:
        """
        상품 등록

        Raises:
            DuplicateProductError: 같은 바코드가 이미 있음 (기존 행은 변경되지 않음)
            DatastoreError: 그 외 데이터베이스 오류
        """
        product = Product(**data)
        code = product.code
        self._session.add(product)
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            if _is_unique_violation(e):
                raise DuplicateProductError(code) from e
            logger.error(f"상품 등록 실패: {e}", exc_info=True)
            raise DatastoreError(str(e)) from e
        except (SQLAlchemyError, OSError) as e:
            await self._session.rollback()
            logger.error(f"상품 등록 실패: {e}", exc_info=True)
            raise DatastoreError(str(e)) from e
        return code
