"""
검색 필터 컴파일러
쿼리 문자열 파라미터를 구조화된 조건 목록으로 변환합니다.

파라미터 종류는 키 이름으로 결정됩니다.
- search_terms: 전문 검색
- page, page_size: 페이지네이션
- sort_by: 정렬 ('-' 접두사는 내림차순)
- fields: 프로젝션 (쉼표 구분)
- <column>_tags: 태그 필터 ('|'는 하나라도, ','는 모두 포함)
- <nutrient>_gt / _lt / _eq: 영양 성분 숫자 비교
그 외 키는 필터로 해석하지 않고 ignored에 기록합니다.
"""
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Mapping, Optional, Tuple, Union

from foodfacts.models.product import PROJECTABLE_COLUMNS, TAG_COLUMNS
from foodfacts.services.pagination import PageRange, SortSpec, resolve_sort

logger = logging.getLogger(__name__)

RANGE_KEY = re.compile(r"^(?P<field>[a-z0-9_-]+?)_(?P<op>gt|lt|eq)$")

# 전문 검색 시 기본 프로젝션
SEARCH_DEFAULT_FIELDS: Tuple[str, ...] = ("code", "product_name", "brands", "nutriments")


class ParamKind(str, Enum):
    """쿼리 파라미터 종류"""

    SEARCH_TERMS = "search_terms"
    PAGE = "page"
    PAGE_SIZE = "page_size"
    SORT = "sort_by"
    FIELDS = "fields"
    TAG = "tag"
    RANGE = "range"
    UNKNOWN = "unknown"


_RESERVED_KINDS = {
    "search_terms": ParamKind.SEARCH_TERMS,
    "page": ParamKind.PAGE,
    "page_size": ParamKind.PAGE_SIZE,
    "sort_by": ParamKind.SORT,
    "fields": ParamKind.FIELDS,
}


def classify_param(key: str) -> ParamKind:
    """키 이름으로 파라미터 종류 판별"""
    if key in _RESERVED_KINDS:
        return _RESERVED_KINDS[key]
    if key.endswith("_tags"):
        return ParamKind.TAG
    if RANGE_KEY.match(key):
        return ParamKind.RANGE
    return ParamKind.UNKNOWN


# ==================== Predicates ====================
@dataclass(frozen=True)
class TagFilter:
    """태그 필터 (mode=all: 모두 포함, mode=any: 하나라도 포함)"""

    field: str
    tags: Tuple[str, ...]
    mode: Literal["all", "any"] = "all"


@dataclass(frozen=True)
class RangeFilter:
    """영양 성분 숫자 비교"""

    field: str
    operator: Literal["gt", "lt", "eq"]
    value: float


@dataclass(frozen=True)
class TextSearch:
    """전문 검색어"""

    terms: str


Predicate = Union[TagFilter, RangeFilter, TextSearch]


@dataclass
class SearchQuery:
    """컴파일된 검색 요청"""

    predicates: List[Predicate]
    page_range: PageRange
    fields: Tuple[str, ...]
    sort: Optional[SortSpec] = None
    ignored: List[str] = field(default_factory=list)

    @property
    def text_search(self) -> Optional[TextSearch]:
        for predicate in self.predicates:
            if isinstance(predicate, TextSearch):
                return predicate
        return None


# ==================== Parsers ====================
def parse_tag_filter(key: str, value: str) -> Optional[TagFilter]:
    """태그 필터 해석 ('|'가 있으면 OR, 없으면 ',' 기준 AND)"""
    if key not in TAG_COLUMNS:
        return None

    if "|" in value:
        mode = "any"
        parts = value.split("|")
    else:
        mode = "all"
        parts = value.split(",")

    tags = tuple(part.strip() for part in parts if part.strip())
    if not tags:
        return None
    return TagFilter(field=key, tags=tags, mode=mode)


def parse_range_filter(key: str, value: str) -> Optional[RangeFilter]:
    """숫자 비교 필터 해석 (피연산자가 유한한 숫자가 아니면 None)"""
    match = RANGE_KEY.match(key)
    if not match:
        return None

    try:
        operand = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(operand):
        return None

    return RangeFilter(field=match.group("field"), operator=match.group("op"), value=operand)


def parse_fields(raw: Optional[str]) -> Tuple[str, ...]:
    """fields 파라미터에서 알려진 컬럼만 추출 (순서 유지, 중복 제거)"""
    if not raw:
        return ()

    selected: List[str] = []
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        if name not in PROJECTABLE_COLUMNS:
            logger.warning(f"알 수 없는 필드 무시: {name}")
            continue
        if name not in selected:
            selected.append(name)
    return tuple(selected)


def resolve_fields(raw: Optional[str], default: Tuple[str, ...] = PROJECTABLE_COLUMNS) -> Tuple[str, ...]:
    """프로젝션 결정 (유효한 필드가 없으면 기본값)"""
    return parse_fields(raw) or default


def compile_search_params(
    params: Mapping[str, str],
    default_page_size: int = 24,
    max_page_size: Optional[int] = None,
) -> SearchQuery:
    """
    검색 파라미터 컴파일

    서로 다른 필터는 항상 AND로 결합됩니다. 잘못된 필터는 요청 전체를
    실패시키지 않고 버려지며 ignored에 기록됩니다.

    Args:
        params: 쿼리 파라미터 (키당 값 하나, 반복 키는 마지막 값)
        default_page_size: page_size 기본값
        max_page_size: page_size 상한

    Returns:
        SearchQuery: 조건 목록, 페이지 범위, 정렬, 프로젝션
    """
    predicates: List[Predicate] = []
    ignored: List[str] = []

    search_terms = (params.get("search_terms") or "").strip()
    if search_terms:
        predicates.append(TextSearch(terms=search_terms))

    for key, value in params.items():
        kind = classify_param(key)

        if kind == ParamKind.TAG:
            tag_filter = parse_tag_filter(key, value)
            if tag_filter is None:
                logger.warning(f"태그 필터 무시: {key}={value!r}")
                ignored.append(key)
            else:
                predicates.append(tag_filter)

        elif kind == ParamKind.RANGE:
            range_filter = parse_range_filter(key, value)
            if range_filter is None:
                logger.warning(f"숫자 필터 무시 (잘못된 값): {key}={value!r}")
                ignored.append(key)
            else:
                predicates.append(range_filter)

        elif kind == ParamKind.UNKNOWN:
            logger.debug(f"알 수 없는 파라미터 무시: {key}")
            ignored.append(key)

    page_range = PageRange.resolve(
        params.get("page"),
        params.get("page_size"),
        default_page_size=default_page_size,
        max_page_size=max_page_size,
    )

    sort_by = params.get("sort_by")
    sort = resolve_sort(sort_by, text_search_active=bool(search_terms))
    if sort_by and sort is None and not search_terms:
        logger.warning(f"정렬 기준 무시: {sort_by!r}")
        ignored.append("sort_by")

    default_fields = SEARCH_DEFAULT_FIELDS if search_terms else PROJECTABLE_COLUMNS
    fields = resolve_fields(params.get("fields"), default=default_fields)

    return SearchQuery(
        predicates=predicates,
        page_range=page_range,
        fields=fields,
        sort=sort,
        ignored=ignored,
    )
