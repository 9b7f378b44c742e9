"""
상품 등록 폼 변환
form-encoded 필드를 products 컬럼 값으로 매핑합니다.
"""
import logging
import math
from typing import Any, Dict, Iterable, Tuple, Union

from sqlalchemy import Float, Integer
from sqlalchemy.dialects.postgresql import ARRAY

from foodfacts.models.product import Product

logger = logging.getLogger(__name__)

NUTRIMENT_PREFIX = "nutriment_"

# 폼으로 설정할 수 없는 컬럼
_PROTECTED_COLUMNS = frozenset({"code", "nutriments", "view_count", "search_vector"})


class InvalidProductError(ValueError):
    """등록 폼 값이 컬럼 제약을 벗어남"""

    pass


def _check_length(name: str, raw: str) -> None:
    length = getattr(Product.__table__.c[name].type, "length", None)
    if length is not None and len(raw) > length:
        raise InvalidProductError(f"{name} must be at most {length} characters")


def _parse_number(raw: str) -> Union[float, None]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _coerce_column(name: str, raw: str) -> Tuple[bool, Any]:
    column_type = Product.__table__.c[name].type

    if isinstance(column_type, ARRAY):
        return True, [tag.strip() for tag in raw.split(",") if tag.strip()]
    if isinstance(column_type, Integer):
        value = _parse_number(raw)
        if value is None or not value.is_integer():
            return False, None
        return True, int(value)
    if isinstance(column_type, Float):
        value = _parse_number(raw)
        return value is not None, value
    _check_length(name, raw)
    return True, raw


def form_to_product(code: str, items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    폼 항목을 상품 데이터로 변환

    - nutriment_<key>: nutriments[<key>] (숫자로 읽히면 숫자, 아니면 문자열)
    - 알려진 컬럼: 컬럼 타입에 맞게 변환 (변환 실패 시 무시)
    - 그 외: 무시

    Raises:
        InvalidProductError: 바코드나 문자열 값이 컬럼 길이를 넘음
    """
    _check_length("code", code)

    product: Dict[str, Any] = {}
    nutriments: Dict[str, Any] = {}

    for key, value in items:
        if not isinstance(value, str):
            continue

        if key.startswith(NUTRIMENT_PREFIX):
            nutriment_key = key[len(NUTRIMENT_PREFIX):]
            if not nutriment_key:
                continue
            number = _parse_number(value)
            nutriments[nutriment_key] = value if number is None else number
            continue

        if key in _PROTECTED_COLUMNS or key not in Product.__table__.c:
            if key != "code":
                logger.warning(f"등록 폼 필드 무시: {key}")
            continue

        accepted, coerced = _coerce_column(key, value)
        if accepted:
            product[key] = coerced
        else:
            logger.warning(f"등록 폼 값 변환 실패: {key}={value!r}")

    if nutriments:
        product["nutriments"] = nutriments

    product["code"] = code
    return product
