"""시간 유틸리티 (항상 timezone-aware UTC)"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """현재 UTC 시각"""
    return datetime.now(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """datetime -> epoch 밀리초"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    """epoch 밀리초 -> datetime (UTC)"""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
