"""Create products table and top_10_products view

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAG_COLUMNS = (
    "brands_tags",
    "categories_tags",
    "labels_tags",
    "countries_tags",
    "allergens_tags",
)


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("code", sa.String(64), primary_key=True, comment="바코드"),
        # 상품 정보
        sa.Column("product_name", sa.Text(), nullable=True),
        sa.Column("brands", sa.Text(), nullable=True),
        sa.Column("quantity", sa.String(255), nullable=True),
        sa.Column("packaging", sa.Text(), nullable=True),
        sa.Column("categories", sa.Text(), nullable=True),
        sa.Column("labels", sa.Text(), nullable=True),
        sa.Column("stores", sa.Text(), nullable=True),
        sa.Column("countries", sa.Text(), nullable=True),
        sa.Column("ingredients_text", sa.Text(), nullable=True),
        sa.Column("traces", sa.Text(), nullable=True),
        sa.Column("serving_size", sa.String(255), nullable=True),
        sa.Column("serving_quantity", sa.Float(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_small_url", sa.Text(), nullable=True),
        # 태그
        *[sa.Column(name, postgresql.ARRAY(sa.Text()), nullable=True) for name in TAG_COLUMNS],
        # 등급
        sa.Column("nutriscore_score", sa.Integer(), nullable=True),
        sa.Column("nutriscore_grade", sa.String(8), nullable=True),
        sa.Column("ecoscore_score", sa.Integer(), nullable=True),
        sa.Column("ecoscore_grade", sa.String(8), nullable=True),
        sa.Column("nova_group", sa.Integer(), nullable=True),
        # 영양 성분
        sa.Column(
            "nutriments",
            postgresql.JSONB(),
            nullable=True,
            comment="영양 성분 (예: energy-kcal_100g, sugars_100g)",
        ),
        # 메타데이터
        sa.Column("created_t", sa.BigInteger(), nullable=True),
        sa.Column("last_modified_t", sa.BigInteger(), nullable=True),
        sa.Column(
            "view_count",
            sa.Integer(),
            nullable=False,
            server_default="0",
            comment="상세 조회수",
        ),
        sa.Column(
            "search_vector",
            postgresql.TSVECTOR(),
            sa.Computed(
                "to_tsvector('simple', coalesce(product_name, '') || ' ' || coalesce(brands, ''))",
                persisted=True,
            ),
        ),
        comment="상품 테이블",
    )

    # 인덱스 생성
    op.create_index(
        "ix_products_search_vector", "products", ["search_vector"], postgresql_using="gin"
    )
    for name in TAG_COLUMNS:
        op.create_index(f"ix_products_{name}", "products", [name], postgresql_using="gin")
    op.create_index(
        "ix_products_nutriments", "products", ["nutriments"], postgresql_using="gin"
    )
    op.create_index("ix_products_view_count", "products", ["view_count"])

    # 조회수 상위 10개 상품 뷰 (에너지 조건은 조회 시 적용)
    op.execute(
        """
        CREATE VIEW top_10_products AS
        SELECT code, product_name, brands, image_url, image_small_url,
               nutriscore_grade, nutriments, view_count
        FROM products
        ORDER BY view_count DESC
        LIMIT 10
        """
    )


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS top_10_products")
    op.drop_index("ix_products_view_count", table_name="products")
    op.drop_index("ix_products_nutriments", table_name="products")
    for name in TAG_COLUMNS:
        op.drop_index(f"ix_products_{name}", table_name="products")
    op.drop_index("ix_products_search_vector", table_name="products")
    op.drop_table("products")
