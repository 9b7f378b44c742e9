"""
FastAPI 의존성 모듈
"""

from foodfacts.dependencies.store import get_product_store, get_view_counter

__all__ = ["get_product_store", "get_view_counter"]
