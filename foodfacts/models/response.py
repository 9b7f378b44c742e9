"""
응답 모델 정의
공개 식품 데이터 API 형식(status / status_verbose)을 따르는 응답 봉투
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ProductRecord = Dict[str, Any]


class ProductEnvelope(BaseModel):
    """단일 상품 응답"""

    status: Literal[0, 1] = Field(..., description="1: 성공, 0: 실패")
    status_verbose: str = Field(..., description="상태 설명")
    product: Optional[ProductRecord] = Field(None, description="상품")
    code: Optional[str] = Field(None, description="바코드")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": 1,
                "status_verbose": "product found",
                "product": {
                    "code": "3017620422003",
                    "product_name": "Nutella",
                    "nutriments": {"energy-kcal_100g": 539},
                },
                "code": "3017620422003",
            }
        }
    }


class SearchEnvelope(BaseModel):
    """검색 결과 응답"""

    status: Literal[0, 1] = 1
    status_verbose: str = "search results found"
    count: int = Field(..., ge=0, description="총 검색 결과 수")
    page: int = Field(..., ge=1, description="현재 페이지")
    page_size: int = Field(..., ge=1, description="페이지 크기")
    products: List[ProductRecord] = Field(default_factory=list)


class CreatedEnvelope(BaseModel):
    """상품 등록 응답"""

    status: Literal[0, 1] = 1
    status_verbose: str = "product created successfully"
    code: str


class ErrorResponse(BaseModel):
    """에러 응답"""

    status: Literal[0] = 0
    status_verbose: str = Field(..., description="에러 메시지")
    error: Optional[str] = Field(None, description="상세 내용")


class MacroShare(BaseModel):
    """다량 영양소 비율 (파이 차트 한 조각)"""

    name: Literal["carbohydrates", "proteins", "fat"]
    percent: int = Field(..., ge=0, description="세 영양소 합 대비 비율 (%)")
    grams: float = Field(..., ge=0, description="100g당 함량 (g)")


class ExerciseEquivalent(BaseModel):
    """칼로리 소모에 필요한 운동 시간"""

    activity: str
    met: float
    minutes: int


class NutritionSummary(BaseModel):
    """상품 상세 영양 요약"""

    code: str
    product_name: Optional[str] = None
    energy_kcal_100g: int = Field(..., ge=0, description="100g당 칼로리 (반올림)")
    macros: List[MacroShare]
    exercise: List[ExerciseEquivalent]
    weight_kg: float
