"""
데이터베이스 연결 및 세션 관리 모듈
SQLAlchemy 비동기 설정
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from foodfacts.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy 모델 베이스 클래스"""
    pass


class DatastoreConfigError(Exception):
    """데이터베이스 접속 정보 누락"""

    pass


class Datastore:
    """엔진과 세션 팩토리를 묶은 데이터 저장소 핸들"""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        # 비동기 엔진 생성
        self.engine = create_async_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )

        # 비동기 세션 팩토리
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Datastore":
        """
        설정으로부터 저장소 생성
        접속 정보가 없으면 첫 요청이 아니라 시작 시점에 실패합니다.
        """
        if not settings.database_configured:
            raise DatastoreConfigError(
                "POSTGRES_USER, POSTGRES_HOST, POSTGRES_DB 환경변수가 필요합니다"
            )
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    async def ping(self) -> bool:
        """연결 확인 (SELECT 1)"""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"데이터베이스 연결 확인 실패: {e}")
            return False

    async def close(self) -> None:
        """데이터베이스 연결 종료"""
        await self.engine.dispose()


def get_datastore(request: Request) -> Datastore:
    """lifespan에서 생성한 저장소 반환"""
    return request.app.state.datastore


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    데이터베이스 세션 의존성
    FastAPI Depends에서 사용
    """
    datastore = get_datastore(request)
    async with datastore.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
