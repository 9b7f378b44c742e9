"""
공통 JSON 응답 헬퍼
"""
from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from foodfacts.models.response import ErrorResponse


def envelope(model: BaseModel, status_code: int = 200, exclude_unset: bool = False) -> JSONResponse:
    """응답 모델을 JSONResponse로 변환"""
    return JSONResponse(
        status_code=status_code,
        content=model.model_dump(mode="json", exclude_unset=exclude_unset),
    )


def error_response(status_code: int, message: str, detail: Optional[str] = None) -> JSONResponse:
    """에러 응답 ({status: 0, status_verbose, error})"""
    body = ErrorResponse(status_verbose=message, error=detail)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )
