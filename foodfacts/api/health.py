"""
헬스체크 엔드포인트
서버 및 데이터베이스 상태 확인
"""
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from foodfacts.config import get_settings
from foodfacts.database import Datastore, get_datastore

router = APIRouter()


class HealthResponse(BaseModel):
    """헬스체크 응답"""

    status: Literal["healthy", "unhealthy"]
    database: Literal["up", "down"]
    api_prefix: str


@router.get("/health", response_model=HealthResponse)
async def health_check(datastore: Datastore = Depends(get_datastore)) -> HealthResponse:
    """
    서버 상태 확인

    Returns:
        HealthResponse: 서버 및 데이터베이스 상태
    """
    settings = get_settings()
    database_up = await datastore.ping()

    return HealthResponse(
        status="healthy" if database_up else "unhealthy",
        database="up" if database_up else "down",
        api_prefix=settings.api_prefix,
    )
