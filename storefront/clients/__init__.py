"""외부 데이터 클라이언트."""

from .feed_client import FeedClient

__all__ = ["FeedClient"]
