"""
상품 모델
영양 정보 데이터베이스의 products 테이블과 top_10_products 뷰
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import (
    BigInteger,
    Column,
    Computed,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TSVECTOR

from foodfacts.database import Base

# 검색 벡터 (상품명 + 브랜드, simple 사전)
SEARCH_VECTOR_EXPRESSION = (
    "to_tsvector('simple', coalesce(product_name, '') || ' ' || coalesce(brands, ''))"
)

# 에너지 정보 키 (하나 이상 존재해야 조회 대상)
ENERGY_KEYS = ("energy-kcal_100g", "energy_100g", "energy-kj_100g")


class Product(Base):
    """상품 모델"""

    __tablename__ = "products"

    # Primary Key (바코드)
    code: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="바코드",
    )

    # 상품 정보
    product_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    brands: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quantity: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    packaging: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    categories: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    labels: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stores: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    countries: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ingredients_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    traces: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serving_size: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    serving_quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_small_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # 태그 (배열)
    brands_tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    categories_tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    labels_tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    countries_tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    allergens_tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)

    # 등급 (수집 단계에서 계산됨, 읽기 전용)
    nutriscore_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    nutriscore_grade: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    ecoscore_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ecoscore_grade: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    nova_group: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # 영양 성분 (키가 고정되지 않은 JSON)
    nutriments: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=True,
        comment="영양 성분 (예: energy-kcal_100g, sugars_100g)",
    )

    # 메타데이터
    created_t: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    last_modified_t: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    view_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="상세 조회수",
    )

    # 전문 검색용 (DB에서 생성)
    search_vector = mapped_column(
        TSVECTOR,
        Computed(SEARCH_VECTOR_EXPRESSION, persisted=True),
    )

    __table_args__ = (
        {"comment": "상품 테이블"},
    )

    def __repr__(self) -> str:
        return f"<Product(code={self.code}, product_name={self.product_name})>"


# 응답에 노출하지 않는 내부 컬럼
INTERNAL_COLUMNS = frozenset({"search_vector"})

# 태그 필터가 가능한 컬럼
TAG_COLUMNS = frozenset(
    name for name in Product.__table__.columns.keys() if name.endswith("_tags")
)

# 프로젝션 가능한 컬럼 (테이블 정의 순서)
PROJECTABLE_COLUMNS = tuple(
    name for name in Product.__table__.columns.keys() if name not in INTERNAL_COLUMNS
)

# 정렬 가능한 스칼라 컬럼
SORTABLE_COLUMNS = frozenset(
    name
    for name in PROJECTABLE_COLUMNS
    if name not in TAG_COLUMNS and name != "nutriments"
)


# 조회수 상위 10개 상품 뷰 (마이그레이션에서 생성, create_all 대상 아님)
view_metadata = MetaData()

top_products_view = Table(
    "top_10_products",
    view_metadata,
    Column("code", String(64), primary_key=True),
    Column("product_name", Text),
    Column("brands", Text),
    Column("image_url", Text),
    Column("image_small_url", Text),
    Column("nutriscore_grade", String(8)),
    Column("nutriments", JSONB),
    Column("view_count", Integer),
)
