"""
상품 API 엔드포인트
단일 상품 조회/등록, 브랜드별 목록, 조회수 상위 목록, 영양 요약
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from foodfacts.api.responses import envelope, error_response
from foodfacts.config import get_settings
from foodfacts.dependencies import get_product_store, get_view_counter
from foodfacts.models.response import CreatedEnvelope, NutritionSummary, ProductEnvelope
from foodfacts.services.filters import resolve_fields
from foodfacts.services.nutrients import (
    energy_kcal,
    exercise_equivalents,
    macro_breakdown,
    normalize_many,
    normalize_nutriments,
    round_half_up,
)
from foodfacts.services.product_form import InvalidProductError, form_to_product
from foodfacts.services.product_store import (
    DatastoreError,
    DuplicateProductError,
    ProductStore,
)
from foodfacts.services.view_counter import ViewCounter

logger = logging.getLogger(__name__)

router = APIRouter()

NUTRITION_FIELDS = ("code", "product_name", "serving_size", "nutriments")


def _not_found():
    return envelope(
        ProductEnvelope(status=0, status_verbose="product not found", product=None),
        status_code=status.HTTP_404_NOT_FOUND,
        exclude_unset=True,
    )


def _datastore_failure(e: DatastoreError):
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal server error",
        str(e),
    )


@router.get("/product/{barcode}", response_model=ProductEnvelope)
async def get_product(
    barcode: str,
    background_tasks: BackgroundTasks,
    fields: Optional[str] = None,
    store: ProductStore = Depends(get_product_store),
    view_counter: ViewCounter = Depends(get_view_counter),
):
    """
    바코드로 상품 조회

    에너지 정보가 없는 상품은 찾지 못한 것으로 처리합니다.
    조회 성공 시 조회수 증가는 응답과 분리되어 실행됩니다.
    """
    barcode = barcode.strip()
    if not barcode:
        return error_response(status.HTTP_400_BAD_REQUEST, "barcode is required")

    try:
        record = await store.get_product(barcode, resolve_fields(fields))
    except DatastoreError as e:
        return _datastore_failure(e)

    if record is None:
        return _not_found()

    background_tasks.add_task(view_counter.increment, barcode)

    return envelope(
        ProductEnvelope(
            status=1,
            status_verbose="product found",
            product=normalize_nutriments(record),
            code=barcode,
        )
    )


@router.post("/product", response_model=CreatedEnvelope, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: Request,
    store: ProductStore = Depends(get_product_store),
):
    """상품 등록 (form-encoded: code + nutriment_* + 상품 필드)"""
    form = await request.form()
    code = form.get("code")
    if not isinstance(code, str) or not code.strip():
        return error_response(status.HTTP_400_BAD_REQUEST, "barcode (code) is required")
    code = code.strip()

    try:
        product = form_to_product(code, form.multi_items())
    except InvalidProductError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, "invalid product", str(e))

    try:
        await store.create_product(product)
    except DuplicateProductError:
        return error_response(status.HTTP_409_CONFLICT, "product already exists")
    except DatastoreError as e:
        return _datastore_failure(e)

    logger.info(f"상품 등록: {code}")
    return envelope(CreatedEnvelope(code=code), status_code=status.HTTP_201_CREATED)


@router.get("/products/brand/{brand_name}")
async def get_brand_products(
    brand_name: str,
    exclude: Optional[str] = None,
    store: ProductStore = Depends(get_product_store),
):
    """같은 브랜드 상품 목록 (현재 상품 제외 가능)"""
    brand_name = brand_name.strip()
    if not brand_name:
        return error_response(status.HTTP_400_BAD_REQUEST, "brand name is required")

    settings = get_settings()
    try:
        products = await store.list_by_brand(brand_name, exclude, settings.brand_listing_limit)
    except DatastoreError as e:
        return _datastore_failure(e)

    return normalize_many(products)


@router.get("/top-10")
async def get_top_products(store: ProductStore = Depends(get_product_store)):
    """조회수 상위 상품 목록"""
    try:
        products = await store.top_products()
    except DatastoreError as e:
        return _datastore_failure(e)

    return normalize_many(products)


@router.get("/product/{barcode}/nutrition", response_model=NutritionSummary)
async def get_nutrition_summary(
    barcode: str,
    weight_kg: Optional[float] = Query(None, gt=0, le=500, description="운동 시간 계산 기준 체중"),
    store: ProductStore = Depends(get_product_store),
):
    """다량 영양소 비율과 칼로리 소모 운동 시간"""
    barcode = barcode.strip()
    if not barcode:
        return error_response(status.HTTP_400_BAD_REQUEST, "barcode is required")

    try:
        record = await store.get_product(barcode, NUTRITION_FIELDS)
    except DatastoreError as e:
        return _datastore_failure(e)

    if record is None:
        return _not_found()

    product = normalize_nutriments(record)
    nutriments = product.get("nutriments") or {}
    weight = weight_kg or get_settings().exercise_reference_weight_kg
    calories = energy_kcal(nutriments)

    return NutritionSummary(
        code=product["code"],
        product_name=product.get("product_name"),
        energy_kcal_100g=max(int(round_half_up(calories)), 0),
        macros=macro_breakdown(nutriments),
        exercise=exercise_equivalents(calories, weight),
        weight_kg=weight,
    )
