"""
환경변수 설정 모듈
Pydantic Settings를 사용하여 환경변수를 관리합니다.
모든 설정은 .env 파일에서 가져옵니다.
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """애플리케이션 설정"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== 서버 설정 ==========
    api_host: str = "0.0.0.0"
    port: int = 8000
    api_prefix: str = "/api/v2"
    debug: bool = False
    log_level: str = "INFO"

    @property
    def server_port(self) -> int:
        """PORT 환경변수 우선 사용"""
        return self.port

    # ========== CORS 설정 ==========
    cors_origins: str = ""

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins를 리스트로 변환"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ========== 데이터베이스 설정 ==========
    postgres_user: str = ""
    postgres_password: str = ""
    postgres_host: str = ""
    postgres_port: int = 5432
    postgres_db: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 10

    @property
    def database_configured(self) -> bool:
        """접속 정보가 모두 설정되었는지 여부"""
        return bool(self.postgres_user and self.postgres_host and self.postgres_db)

    @property
    def database_url(self) -> str:
        """PostgreSQL 비동기 연결 URL"""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url_sync(self) -> str:
        """PostgreSQL 동기 연결 URL (Alembic용)"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # ========== 검색/목록 설정 ==========
    default_page_size: int = 24
    max_page_size: int = 100
    brand_listing_limit: int = 5

    # ========== 영양 정보 설정 ==========
    exercise_reference_weight_kg: float = 60.0


@lru_cache()
def get_settings() -> Settings:
    """캐싱된 설정 인스턴스 반환"""
    return Settings()
