"""
검색 API 엔드포인트
전문 검색 + 태그/영양 성분 필터 + 정렬 + 페이지네이션
"""

from fastapi import APIRouter, Depends, Request, status

from foodfacts.api.responses import envelope, error_response
from foodfacts.config import get_settings
from foodfacts.dependencies import get_product_store
from foodfacts.models.response import SearchEnvelope
from foodfacts.services.filters import compile_search_params
from foodfacts.services.nutrients import normalize_many
from foodfacts.services.product_store import DatastoreError, ProductStore

router = APIRouter()


@router.get("/search", response_model=SearchEnvelope)
async def search_products(
    request: Request,
    store: ProductStore = Depends(get_product_store),
):
    """
    상품 검색

    - search_terms: 전문 검색 (관련도 순, sort_by 무시)
    - page, page_size: 페이지 (기본 1, 24)
    - sort_by: 정렬 필드 ('-' 접두사는 내림차순)
    - fields: 반환할 필드 (쉼표 구분)
    - <column>_tags: 태그 필터 ('a|b'는 하나라도, 'a,b'는 모두)
    - <nutrient>_gt / _lt / _eq: 영양 성분 비교 (예: sugars_100g_lt=5)
    """
    settings = get_settings()
    query = compile_search_params(
        dict(request.query_params),
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )

    try:
        page = await store.search(query)
    except DatastoreError as e:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "failed to fetch products",
            str(e),
        )

    return envelope(
        SearchEnvelope(
            count=page.count,
            page=page.page_range.page,
            page_size=page.page_range.page_size,
            products=normalize_many(page.products),
        )
    )
