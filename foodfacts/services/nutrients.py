"""
영양 성분 정규화 및 요약
- kJ만 있는 상품의 kcal 값 계산
- 다량 영양소 비율 (파이 차트)
- 칼로리 소모 운동 시간
"""
import math
from typing import Any, Dict, List, Mapping, Optional

from foodfacts.models.response import ExerciseEquivalent, MacroShare

KJ_PER_KCAL = 4.184

KCAL_KEY = "energy-kcal_100g"
# kJ 값으로 간주하는 키 (우선순위 순)
KJ_KEYS = ("energy_100g", "energy-kj_100g")

MACRO_KEYS = (
    ("carbohydrates", "carbohydrates_100g"),
    ("proteins", "proteins_100g"),
    ("fat", "fat_100g"),
)

# 활동별 MET 값
EXERCISE_METS = {
    "walking": 3.0,
    "running": 9.8,
    "jump_rope": 11.0,
    "cycling": 7.5,
    "swimming": 5.8,
}


def is_number(value: Any) -> bool:
    """JSON 숫자 여부 (bool 제외)"""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def round_half_up(value: float, digits: int = 0) -> float:
    """반올림 (0.5는 올림)"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def normalize_nutriments(product: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    energy-kcal_100g 값을 채운 상품 사본 반환

    kcal 값이 이미 숫자면 그대로 두고, 없으면 energy_100g 또는
    energy-kj_100g(kJ)를 4.184로 나눠 채웁니다. 둘 다 없으면 kcal 키를
    만들지 않습니다. 입력은 변경하지 않습니다.

    Args:
        product: 상품 레코드 (nutriments가 없어도 됨)

    Returns:
        정규화된 사본. nutriments가 없으면 입력을 그대로 반환
    """
    if not product or not isinstance(product.get("nutriments"), Mapping):
        return product

    nutriments = dict(product["nutriments"])

    if not is_number(nutriments.get(KCAL_KEY)):
        for key in KJ_KEYS:
            energy_kj = nutriments.get(key)
            if is_number(energy_kj):
                nutriments[KCAL_KEY] = energy_kj / KJ_PER_KCAL
                break

    return {**product, "nutriments": nutriments}


def normalize_many(products: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """상품 목록 정규화"""
    return [normalize_nutriments(product) for product in products]


def _nutrient(nutriments: Mapping[str, Any], key: str) -> float:
    value = nutriments.get(key)
    return float(value) if is_number(value) else 0.0


def macro_breakdown(nutriments: Mapping[str, Any]) -> List[MacroShare]:
    """탄수화물/단백질/지방 비율 계산 (세 값의 합 기준, 음수는 0으로)"""
    grams = [(name, max(_nutrient(nutriments, key), 0.0)) for name, key in MACRO_KEYS]
    total = sum(value for _, value in grams)

    return [
        MacroShare(
            name=name,
            percent=int(round_half_up(value / total * 100)) if total > 0 else 0,
            grams=round_half_up(value, 1),
        )
        for name, value in grams
    ]


def exercise_minutes(calories: float, met: float, weight_kg: float) -> int:
    """칼로리를 소모하는 데 필요한 운동 시간 (분)"""
    if calories <= 0 or met <= 0 or weight_kg <= 0:
        return 0
    return int(round_half_up(calories / (met * weight_kg) * 60))


def exercise_equivalents(calories: float, weight_kg: float) -> List[ExerciseEquivalent]:
    """활동별 운동 시간 목록"""
    return [
        ExerciseEquivalent(
            activity=activity,
            met=met,
            minutes=exercise_minutes(calories, met, weight_kg),
        )
        for activity, met in EXERCISE_METS.items()
    ]


def energy_kcal(nutriments: Mapping[str, Any]) -> float:
    """정규화된 100g당 칼로리 (없으면 0)"""
    return _nutrient(nutriments, KCAL_KEY)
