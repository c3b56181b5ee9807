"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake(피드/시계) 주입
- 메모리 저장소 기반 카탈로그/장바구니 조립

금지:
- 실제 네트워크/Redis 접속
- 대량 테스트 데이터 (tests/fixtures 에 둠)
"""

from __future__ import annotations

import asyncio
import copy
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import pytest


# 프로젝트 루트 / 테스트 자산 경로 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from fixtures import FEED  # noqa: E402
from storefront.core.config import Settings  # noqa: E402
from storefront.engine import Cart, CatalogStore, EventNotifier, StorageAdapter  # noqa: E402
from storefront.services import MemoryStorageService  # noqa: E402


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


class FixedClock:
    """주입용 시계 (advance로 시간 이동)"""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeFeedClient:
    """FeedClient 대역

    - payload를 그대로 반환 (매 호출마다 deepcopy)
    - error가 있으면 raise
    - calls로 요청 횟수 확인
    """

    def __init__(self, payload: Any = None, error: Optional[Exception] = None) -> None:
        self.payload = copy.deepcopy(FEED) if payload is None else payload
        self.error = error
        self.calls = 0

    async def fetch_json(self) -> Any:
        self.calls += 1
        # 동시 호출 시 다른 코루틴이 끼어들 수 있도록 한 번 양보
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.payload)

    async def close(self) -> None:
        return None


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, storage_backend="memory")


@pytest.fixture
def memory_backend() -> MemoryStorageService:
    return MemoryStorageService()


@pytest.fixture
def storage(memory_backend: MemoryStorageService) -> StorageAdapter:
    return StorageAdapter(memory_backend)


@pytest.fixture
def feed_client() -> FakeFeedClient:
    return FakeFeedClient()


@pytest.fixture
def catalog(storage: StorageAdapter, feed_client: FakeFeedClient, settings: Settings, clock: FixedClock) -> CatalogStore:
    """로드 전 상태의 카탈로그 (테스트에서 await catalog.load_products())"""
    return CatalogStore(storage, feed_client, settings, clock=clock)


@pytest.fixture
def notifier() -> EventNotifier:
    return EventNotifier()


@pytest.fixture
def cart(
    catalog: CatalogStore,
    storage: StorageAdapter,
    settings: Settings,
    notifier: EventNotifier,
    clock: FixedClock,
) -> Cart:
    return Cart(catalog, storage, settings, notifier=notifier, clock=clock)


@pytest.fixture
def feed_path() -> Path:
    """샘플 피드 파일 (앱 기본 설정과 동일)"""
    return project_root / "data" / "products.json"
