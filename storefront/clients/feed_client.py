"""카탈로그 피드 클라이언트 (httpx)

- http(s) URL이면 AsyncClient로 요청하고, 그 외에는 로컬 파일 경로로 취급합니다.
- 클라이언트는 인스턴스 단위로 재사용하며 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from storefront.core.exceptions import DataFormatError, FetchError
from storefront.core.logging import logger


class FeedClient:
    def __init__(self, feed_url: str, *, timeout_s: float = 10.0) -> None:
        self.feed_url = feed_url
        self.timeout_s = timeout_s
        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def is_remote(self) -> bool:
        return urlparse(self.feed_url).scheme in ("http", "https")

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            self._client = httpx.AsyncClient(
                timeout=self.timeout_s,
                follow_redirects=True,
                headers={"Accept": "application/json"},
            )
            return self._client

    async def fetch_json(self) -> Any:
        """피드 문서를 JSON으로 읽어 반환

        Raises:
            FetchError: 네트워크/HTTP/파일 읽기 실패
            DataFormatError: JSON 파싱 실패 또는 UTF-8 디코딩 실패
        """
        if self.is_remote:
            text = await self._fetch_remote()
        else:
            text = await self._read_local()

        try:
            return json.loads(text)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise DataFormatError(f"feed is not valid JSON ({e})")

    async def _fetch_remote(self) -> str:
        client = await self._ensure_client()
        try:
            resp = await client.get(self.feed_url)
        except httpx.HTTPError as e:
            logger.info(f"[FEED_CLIENT] GET failed: {type(e).__name__}: {e!r}")
            raise FetchError(self.feed_url, type(e).__name__)

        if resp.status_code != 200:
            raise FetchError(
                self.feed_url,
                f"HTTP error! status: {resp.status_code}",
                details={"source": self.feed_url, "status_code": resp.status_code},
            )
        return resp.text

    async def _read_local(self) -> str:
        path = Path(urlparse(self.feed_url).path if self.feed_url.startswith("file://") else self.feed_url)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DataFormatError(f"feed is not valid UTF-8 ({e.reason} at byte {e.start})")
        except OSError as e:
            logger.info(f"[FEED_CLIENT] read failed: {type(e).__name__}: {e}")
            raise FetchError(str(path), type(e).__name__)

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            await self._client.aclose()
            self._client = None
