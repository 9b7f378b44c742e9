"""
저장소 의존성
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodfacts.database import Datastore, get_datastore, get_db
from foodfacts.services.product_store import ProductStore
from foodfacts.services.view_counter import ViewCounter


async def get_product_store(db: AsyncSession = Depends(get_db)) -> ProductStore:
    """요청 단위 세션을 사용하는 상품 저장소"""
    return ProductStore(db)


async def get_view_counter(datastore: Datastore = Depends(get_datastore)) -> ViewCounter:
    """
    조회수 카운터
    요청 세션이 닫힌 뒤에도 실행되므로 자체 세션을 엽니다.
    """
    return ViewCounter(datastore.session_factory)
