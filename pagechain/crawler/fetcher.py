# pagechain/crawler/fetcher.py
"""
Fetcher module: downloads a Request into a Page with rate limiting, retry/backoff and timeout.

Failures do not raise: the returned Page carries ``exception`` so the handler
chain (e.g. ``RedialWhenExceptionThrowHandler``) can react to them.
"""
from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, Dict, Sequence

from aiohttp import ClientError, ClientSession

from pagechain.config import CrawlConfig
from pagechain.errors import DownloadError
from pagechain.logger import get_logger
from pagechain.models import Page, Request, Site


class Fetcher:
    """Handles HTTP fetching with rate limit, retries/backoff, and timeout."""

    def __init__(
        self,
        session: ClientSession,
        config: CrawlConfig,
        site: Site,
        retry_status: Sequence[int],
    ) -> None:
        self.session = session
        self.config = config
        self.site = site
        self._retry_status = retry_status
        self._req_times: Deque[float] = deque()
        self._rate_lock = asyncio.Lock()
        self.logger = get_logger("fetcher")

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.site.user_agent, **self.site.headers}
        if self.site.cookies:
            headers["Cookie"] = self.site.cookie_header()
        return headers

    async def _wait_for_rate_limit(self) -> None:
        async with self._rate_lock:
            now = time.monotonic()
            self._req_times.append(now)
            # remove timestamps older than 1 second
            while self._req_times and now - self._req_times[0] > 1.0:
                self._req_times.popleft()
            if len(self._req_times) > self.config.rate_limit:
                sleep_for = 1.0 - (now - self._req_times[0])
                if sleep_for > 0:
                    await asyncio.sleep(sleep_for)

    async def fetch(self, request: Request) -> Page:
        """
        Fetch the request URL.

        Returns a Page in every case; on failure ``page.exception`` is a DownloadError.
        """
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(request.url, headers=self._headers(), raise_for_status=False) as resp:
                    if resp.status in self._retry_status:
                        raise ClientError(f"Retryable status {resp.status}")
                    text = await resp.text(errors="replace")
                    page = Page(request=request, content=text, status=resp.status)
                    if resp.status >= 400:
                        page.exception = DownloadError(f"HTTP {resp.status} for {request.url}")
                    return page
            except asyncio.TimeoutError:
                # no retry on timeout
                self.logger.warning("Timeout: %s", request.url)
                return Page(request=request, exception=DownloadError(f"Timeout for {request.url}"))
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    self.logger.warning("Failed %s: %s", request.url, exc)
                    return Page(request=request, exception=DownloadError(f"{exc} ({request.url})"))
                # exponential backoff, cap at 60s
                backoff = min(2**attempts * 0.1, 60)
                self.logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, request.url, backoff)
                await asyncio.sleep(backoff)
