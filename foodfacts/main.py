"""
FastAPI 메인 애플리케이션
영양 정보 데이터베이스 상품 조회 API
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware

from foodfacts.api import health, products, search
from foodfacts.api.responses import error_response
from foodfacts.config import get_settings
from foodfacts.database import Datastore

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """루트 로거 설정"""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """애플리케이션 생명주기 관리"""
    settings = get_settings()

    # 접속 정보가 없으면 여기서 실패 (DatastoreConfigError)
    datastore = Datastore.from_settings(settings)
    app.state.datastore = datastore
    logger.info(
        f"서버 시작 (DB: {settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db})"
    )

    yield

    await datastore.close()
    logger.info("서버 종료")


async def unhandled_exception_handler(request: Request, exc: Exception):
    """처리되지 않은 예외를 JSON 500 응답으로 변환"""
    logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal server error",
        str(exc),
    )


def create_app() -> FastAPI:
    """FastAPI 앱 팩토리"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Food Facts API",
        description="영양 정보 상품 검색/조회 API (공개 식품 데이터 API 호환 응답)",
        version="2.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # 라우터 등록
    app.include_router(health.router, prefix=settings.api_prefix, tags=["Health"])
    app.include_router(products.router, prefix=settings.api_prefix, tags=["Products"])
    app.include_router(search.router, prefix=settings.api_prefix, tags=["Search"])

    # Docker healthcheck용 루트 레벨 헬스체크
    @app.get("/health")
    async def root_health():
        return {"status": "ok"}

    return app


# 앱 인스턴스
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "foodfacts.main:app",
        host=settings.api_host,
        port=settings.server_port,
        reload=settings.debug,
    )
