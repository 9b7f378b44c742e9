"""
SQL 문 생성
컴파일된 검색 조건을 SQLAlchemy 문으로 변환합니다.
"""
from typing import Optional, Sequence

from sqlalchemy import Float, Select, case, cast, func, or_, select, true, update
from sqlalchemy.sql.elements import ColumnElement

from foodfacts.models.product import ENERGY_KEYS, Product, top_products_view
from foodfacts.services.filters import (
    Predicate,
    RangeFilter,
    SearchQuery,
    TagFilter,
    TextSearch,
)
from foodfacts.services.pagination import SortSpec

TOTAL_COUNT_LABEL = "total_count"
# 페이지 행 순서 (결과가 없으면 NULL)
PAGE_ROW_LABEL = "page_row"

# 브랜드 목록에서 반환하는 컬럼
BRAND_LISTING_FIELDS = ("code", "product_name", "image_small_url", "brands", "nutriments")

_products = Product.__table__


def energy_gate(nutriments) -> ColumnElement[bool]:
    """에너지 값(kcal, kJ 중 하나)이 있는 상품만"""
    return or_(*(nutriments[key].astext.isnot(None) for key in ENERGY_KEYS))


def nutrient_number(nutriments, key: str) -> ColumnElement:
    """JSON 숫자인 경우에만 float, 그 외(문자열 등)는 NULL"""
    element = nutriments[key]
    return case(
        (func.jsonb_typeof(element) == "number", cast(element.astext, Float)),
        else_=None,
    )


def websearch_query(terms: str) -> ColumnElement:
    return func.websearch_to_tsquery("simple", terms)


def predicate_clause(predicate: Predicate) -> ColumnElement[bool]:
    """조건 하나를 WHERE 절로 변환"""
    if isinstance(predicate, TagFilter):
        column = _products.c[predicate.field]
        if predicate.mode == "any":
            return column.overlap(list(predicate.tags))
        return column.contains(list(predicate.tags))

    if isinstance(predicate, RangeFilter):
        value = nutrient_number(Product.nutriments, predicate.field)
        if predicate.operator == "gt":
            return value > predicate.value
        if predicate.operator == "lt":
            return value < predicate.value
        return value == predicate.value

    if isinstance(predicate, TextSearch):
        return Product.search_vector.op("@@")(websearch_query(predicate.terms))

    raise TypeError(f"지원하지 않는 조건: {predicate!r}")


def sort_clause(sort: SortSpec) -> ColumnElement:
    if sort.nutrient:
        expression = nutrient_number(Product.nutriments, sort.field)
    else:
        expression = _products.c[sort.field]
    ordered = expression.desc() if sort.descending else expression.asc()
    return ordered.nulls_last()


def _columns(fields: Sequence[str]):
    return [_products.c[name] for name in fields]


def build_search_statement(query: SearchQuery) -> Select:
    """
    검색 문 생성

    총 건수 서브쿼리에 현재 페이지를 LEFT JOIN 하므로 마지막 페이지를 넘어도
    총 건수 한 행은 항상 반환됩니다 (이때 페이지 컬럼은 NULL).
    """
    conditions = [energy_gate(Product.nutriments)]
    conditions.extend(predicate_clause(predicate) for predicate in query.predicates)

    order_by = []
    text_search = query.text_search
    if text_search is not None:
        rank = func.ts_rank(Product.search_vector, websearch_query(text_search.terms))
        order_by.append(rank.desc())
    elif query.sort is not None:
        order_by.extend([sort_clause(query.sort), Product.code.asc()])

    total = (
        select(func.count().label(TOTAL_COUNT_LABEL))
        .select_from(_products)
        .where(*conditions)
        .subquery("matches_total")
    )

    page = (
        select(
            *_columns(query.fields),
            func.row_number().over(order_by=order_by or None).label(PAGE_ROW_LABEL),
        )
        .where(*conditions)
        .order_by(*order_by)
        .offset(query.page_range.offset)
        .limit(query.page_range.limit)
        .subquery("page_rows")
    )

    return (
        select(total.c[TOTAL_COUNT_LABEL], *page.c)
        .select_from(total.outerjoin(page, true()))
        .order_by(page.c[PAGE_ROW_LABEL])
    )


def build_product_statement(code: str, fields: Sequence[str]) -> Select:
    """바코드로 단일 상품 조회"""
    return (
        select(*_columns(fields))
        .where(Product.code == code)
        .where(energy_gate(Product.nutriments))
        .limit(1)
    )


def escape_like(value: str) -> str:
    """LIKE 와일드카드 이스케이프"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_brand_statement(brand: str, exclude: Optional[str], limit: int) -> Select:
    """브랜드 부분 일치 (대소문자 무시)"""
    stmt = (
        select(*_columns(BRAND_LISTING_FIELDS))
        .where(Product.brands.ilike(f"%{escape_like(brand)}%", escape="\\"))
        .where(energy_gate(Product.nutriments))
    )
    if exclude:
        stmt = stmt.where(Product.code != exclude)
    return stmt.limit(limit)


def build_top_products_statement() -> Select:
    """조회수 상위 상품 (뷰)"""
    return (
        select(top_products_view)
        .where(energy_gate(top_products_view.c.nutriments))
        .order_by(top_products_view.c.view_count.desc())
    )


def build_view_count_statement(code: str):
    """조회수 1 증가"""
    return (
        update(Product)
        .where(Product.code == code)
        .values(view_count=Product.view_count + 1)
    )
