"""
페이지네이션 및 정렬
"""
import re
from dataclasses import dataclass
from typing import Optional

from foodfacts.models.product import SORTABLE_COLUMNS

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 24

# OFFSET/LIMIT는 PostgreSQL bigint 범위 안이어야 함
MAX_ROW_INDEX = 2 ** 63 - 1

# 숫자형 영양 성분 정렬 키 (예: sugars_100g, energy-kcal_serving)
NUTRIENT_SORT_KEY = re.compile(r"^[a-z0-9-]+(?:_[a-z0-9-]+)*_(?:100g|serving|value)$")


def coerce_int(raw: Optional[str], default: int) -> int:
    """정수 변환 (실패 시 기본값)"""
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class PageRange:
    """반개구간 [offset, end) 행 범위"""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def end(self) -> int:
        return self.page * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    @classmethod
    def resolve(
        cls,
        page: Optional[str] = None,
        page_size: Optional[str] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: Optional[int] = None,
    ) -> "PageRange":
        """
        쿼리 문자열 값으로 범위 계산

        숫자가 아니면 기본값, 0 이하는 1로 보정합니다.
        max_page_size가 주어지면 페이지 크기 상한을 적용합니다.
        행 위치가 bigint 범위를 넘는 페이지는 마지막 표현 가능한 페이지로 제한합니다.
        """
        resolved_page = max(coerce_int(page, DEFAULT_PAGE), 1)
        resolved_size = max(coerce_int(page_size, default_page_size), 1)
        if max_page_size is not None:
            resolved_size = min(resolved_size, max_page_size)
        resolved_page = min(resolved_page, MAX_ROW_INDEX // resolved_size)
        return cls(page=resolved_page, page_size=resolved_size)


@dataclass(frozen=True)
class SortSpec:
    """정렬 기준"""

    field: str
    descending: bool = False
    nutrient: bool = False


def parse_sort(sort_by: Optional[str]) -> Optional[SortSpec]:
    """
    sort_by 값 해석

    '-' 접두사는 내림차순. 알 수 없는 필드는 None.
    """
    if not sort_by:
        return None

    raw = sort_by.strip()
    descending = raw.startswith("-")
    field = raw[1:] if descending else raw

    if field in SORTABLE_COLUMNS:
        return SortSpec(field=field, descending=descending)
    if NUTRIENT_SORT_KEY.match(field):
        return SortSpec(field=field, descending=descending, nutrient=True)
    return None


def resolve_sort(sort_by: Optional[str], text_search_active: bool) -> Optional[SortSpec]:
    """전문 검색 중이면 관련도 정렬을 쓰므로 명시적 정렬 없음"""
    if text_search_active:
        return None
    return parse_sort(sort_by)
