"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Literal

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 카탈로그 피드 (http(s) URL 또는 로컬 경로)
    catalog_feed_url: str = "data/products.json"
    catalog_fetch_timeout_s: float = 10.0
    catalog_cache_key: str = "storefront:catalog"
    catalog_cache_ttl: int = 86400  # 24시간
    items_per_page: int = 12

    # 저장소
    # - redis: Redis 서버 사용
    # - memory: 프로세스 메모리 (로컬 개발/테스트용)
    storage_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"

    # 장바구니
    cart_storage_key: str = "storefront:cart"
    cart_max_age_days: int = 30
    cart_max_quantity: int = 10
    tax_rate: float = 0.08
    shipping_threshold: float = 50.0  # 이 금액 이상이면 무료배송
    shipping_cost: float = 9.99

    # API
    api_title: str = "Storefront Engine"
    api_version: str = "1.0.0"
    api_description: str = "정적 상품 카탈로그 검색과 영속 장바구니를 제공합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("catalog_cache_ttl", "items_per_page", "cart_max_age_days", "cart_max_quantity")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator("catalog_fetch_timeout_s")
    @classmethod
    def validate_fetch_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("catalog_fetch_timeout_s must be positive")
        return v

    @field_validator("tax_rate", "shipping_threshold", "shipping_cost")
    @classmethod
    def validate_money(cls, v: float) -> float:
        if v < 0:
            raise ValueError("monetary settings must be >= 0")
        return v

    @field_validator("catalog_feed_url", "catalog_cache_key", "cart_storage_key")
    @classmethod
    def validate_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("feed url and storage keys must not be empty")
        return v.strip()

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
