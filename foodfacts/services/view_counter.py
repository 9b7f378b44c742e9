"""
상품 조회수 증가
응답 경로와 분리되어 백그라운드에서 실행됩니다.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from foodfacts.services.queries import build_view_count_statement

logger = logging.getLogger(__name__)


class ViewCounter:
    """조회수 카운터"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def increment(self, code: str) -> None:
        """조회수 1 증가 (실패해도 예외를 전파하지 않음)"""
        try:
            async with self._session_factory() as session:
                await session.execute(build_view_count_statement(code))
                await session.commit()
        except Exception as e:
            logger.warning(f"조회수 증가 실패 ({code}): {e}")
