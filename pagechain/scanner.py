"""
Модуль-обёртка для функции запуска обхода.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from pagechain.config import CrawlConfig
from pagechain.crawler.crawler import AsyncCrawler
from pagechain.models import Page
from pagechain.spider import Spider


@dataclass(slots=True)
class CrawlResult:
    """Принятые страницы и паук, с которым шёл обход."""

    pages: List[Page]
    spider: Spider

    @property
    def terminated(self) -> bool:
        """True, если обход был остановлен через ``spider.exit()``."""
        return self.spider.exited


async def start_crawl(cfg: CrawlConfig, **kwargs: Any) -> CrawlResult:
    """
    Запускает асинхронный краулер в контексте и возвращает CrawlResult.

    Parameters
    ----------
    cfg : CrawlConfig
        Конфигурация обхода.
    **kwargs
        Передаются в AsyncCrawler (executor, cookie_injector, chain, ...).
    """
    async with AsyncCrawler(cfg, **kwargs) as crawler:
        pages = await crawler.crawl()
    return CrawlResult(pages=pages, spider=crawler.spider)


__all__ = ["CrawlResult", "start_crawl"]
