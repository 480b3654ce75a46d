from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from pagechain.chain import HandlerChain
from pagechain.config import CrawlConfig
from pagechain.cookies import CookieInjector
from pagechain.crawler.fetcher import Fetcher
from pagechain.crawler.link_extractor import extract_links, normalize_url
from pagechain.engine import Services, build_chain, build_services, build_spider
from pagechain.errors import PageChainError
from pagechain.logger import get_logger
from pagechain.models import Page, Request
from pagechain.redial import NetworkExecutor
from pagechain.spider import Spider

__all__ = ("AsyncCrawler",)


class AsyncCrawler:
    """Асинхронный краулер: загрузка страниц, цепочка хендлеров в пуле потоков, циклические повторы.

    Цепочка выполняется целиком в отдельном потоке (``asyncio.to_thread``),
    поэтому общее состояние хендлеров (координатор редиала, счётчики)
    действительно разделяется между потоками.
    """
    _RETRY_STATUS = tuple(range(500, 600)) + (429,)

    def __init__(
        self,
        config: CrawlConfig,
        *,
        chain: Optional[HandlerChain] = None,
        spider: Optional[Spider] = None,
        services: Optional[Services] = None,
        executor: Optional[NetworkExecutor] = None,
        cookie_injector: Optional[CookieInjector] = None,
    ) -> None:
        self.config = config
        self.spider = spider if spider is not None else build_spider(config)
        self.services = services if services is not None else build_services(
            config, executor=executor, cookie_injector=cookie_injector
        )
        self.chain = chain if chain is not None else build_chain(config.handlers, self.services)
        self.visited: Set[str] = set()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self.logger = get_logger("crawler")

    async def __aenter__(self) -> AsyncCrawler:
        self.session = ClientSession(timeout=ClientTimeout(total=self.config.timeout), raise_for_status=False)
        self.fetcher = Fetcher(self.session, self.config, self.spider.site, self._RETRY_STATUS)
        if self.services.cookie_injector is not None:
            await asyncio.to_thread(self.services.cookie_injector.inject, self.spider)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> List[Page]:
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        self.logger.info("Старт обхода: %s (%d хендлеров)", self.config.base_url, len(self.chain))
        start = time.monotonic()
        queue: asyncio.Queue[Request] = asyncio.Queue()
        root = normalize_url(str(self.config.base_url))
        self.visited.add(root)
        await queue.put(Request(url=root))
        results: List[Page] = []
        workers = [asyncio.create_task(self._worker(queue, results)) for _ in range(self.config.concurrency)]
        await queue.join()
        for w in workers:
            w.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        duration = time.monotonic() - start
        self.logger.info("Завершено: %d страниц за %.2f с", len(results), duration)
        if self.spider.exited:
            self.logger.error("Обход прерван пауком %s: %s", self.spider.identity, self.spider.exit_reason)
        return results

    async def _worker(self, queue: asyncio.Queue[Request], results: List[Page]) -> None:
        while True:
            try:
                request = await queue.get()
                try:
                    await self._process(request, queue, results)
                except Exception:
                    self.logger.exception("Unexpected error while processing %s", request.url)
                finally:
                    queue.task_done()
            except asyncio.CancelledError:
                break

    async def _process(self, request: Request, queue: asyncio.Queue[Request], results: List[Page]) -> None:
        if self.spider.exited:
            return
        if request.depth > self.config.max_depth or len(results) >= self.config.max_pages:
            return
        assert self.fetcher is not None
        page = await self.fetcher.fetch(request)
        try:
            try:
                page = await asyncio.to_thread(self.chain.run, page, self.spider)
            except PageChainError as exc:
                self.logger.warning("Handler chain aborted for %s: %s", request.url, exc)
                return
            self._collect(request, page, results)
            if not page.cycle_retry and page.exception is None and not page.skip_target_urls:
                await self._schedule_targets(request, page, queue)
        finally:
            await self._schedule_retries(queue)

    def _collect(self, request: Request, page: Page, results: List[Page]) -> None:
        if page.cycle_retry or page.exception is not None:
            self.logger.info("Not accepted %s: %s", request.url, page.exception or "cycle retry")
            return
        if page.skip:
            self.logger.debug("Skipped %s", request.url)
            return
        if len(results) < self.config.max_pages:
            results.append(page)

    async def _schedule_targets(self, request: Request, page: Page, queue: asyncio.Queue[Request]) -> None:
        targets = list(page.target_requests)
        if not page.skip_extract_target_urls and request.depth < self.config.max_depth:
            targets.extend(
                Request(url=link, depth=request.depth + 1, referer=request.url)
                for link in extract_links(page)
            )
        own_url = normalize_url(request.url)
        for target in targets:
            url = normalize_url(target.url)
            if url == own_url:
                # A page re-adding its own request asks for a refetch; dedup would drop it.
                self.services.retry_queue.add_to_cycle_retry(target, self.spider.site)
            elif url not in self.visited:
                self.visited.add(url)
                await queue.put(target)

    async def _schedule_retries(self, queue: asyncio.Queue[Request]) -> None:
        for retry in self.services.retry_queue.drain():
            if self.spider.exited:
                return
            await queue.put(retry)
